"""
Device models representing normalized regulatory decisions stored in the warehouse.
"""

from datetime import date
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

# Column order of the devices table and of CSV exports
DEVICE_COLUMNS = (
    "submission_number",
    "device_name",
    "submission_type",
    "decision",
    "decision_date",
    "applicant",
    "product_code",
    "regulation_number",
)


class DeviceBase(BaseModel):
    """
    Fields shared by every device decision.

    Attributes:
        submission_number: PMA number or 510(k) K-number (PK)
        device_name: Trade or generic device name
        decision: Normalized decision status
        decision_date: Date of the regulatory decision
        applicant: Company that submitted the application
        product_code: FDA product classification code
    """

    model_config = ConfigDict(frozen=True)

    submission_number: str = Field(..., min_length=1)
    device_name: str | None = None
    decision: str = "Unknown"
    decision_date: date | None = None
    applicant: str | None = None
    product_code: str | None = None

    def to_row(self) -> dict[str, Any]:
        """Flatten into a devices-table row, filling absent columns with None."""
        data = self.model_dump()
        return {column: data.get(column) for column in DEVICE_COLUMNS}


class PmaDevice(DeviceBase):
    """Premarket approval decision."""

    submission_type: Literal["PMA"] = "PMA"


class K510Device(DeviceBase):
    """510(k) premarket notification clearance decision."""

    submission_type: Literal["510k"] = "510k"
    regulation_number: str | None = None


Device = Annotated[Union[PmaDevice, K510Device], Field(discriminator="submission_type")]

_device_adapter: TypeAdapter = TypeAdapter(Device)


def device_from_row(row: dict[str, Any]) -> PmaDevice | K510Device:
    """
    Rebuild a device model from a devices-table row.

    Args:
        row: Mapping with the DEVICE_COLUMNS keys

    Returns:
        PmaDevice or K510Device depending on submission_type
    """
    return _device_adapter.validate_python(dict(row))
