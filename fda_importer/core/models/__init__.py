"""
Core data models for the device decision importer.

All models use Pydantic for runtime validation and type safety.
"""

from .device import (
    DEVICE_COLUMNS,
    Device,
    DeviceBase,
    K510Device,
    PmaDevice,
    device_from_row,
)
from .step_results import (
    CategorySummary,
    ExportResult,
    FetchResult,
    ImportSummary,
    StoreResult,
)
from .submission_category import SubmissionCategory

__all__ = [
    "DEVICE_COLUMNS",
    "Device",
    "DeviceBase",
    "PmaDevice",
    "K510Device",
    "device_from_row",
    "SubmissionCategory",
    "FetchResult",
    "StoreResult",
    "ExportResult",
    "CategorySummary",
    "ImportSummary",
]
