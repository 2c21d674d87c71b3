"""
Flat-file exports of stored devices.
"""

from .csv_exporter import CsvExporter, timestamped_export_path

__all__ = [
    "CsvExporter",
    "timestamped_export_path",
]
