"""
Mapping of raw openFDA records into normalized device models.

Each category has its own field mapping. Records that lack a submission
number or fail to parse are logged and dropped; the batch always continues.
"""

from typing import Any, Callable, Iterable

from pydantic import ValidationError

from fda_importer.core.decision_codes import normalize_decision
from fda_importer.core.models import K510Device, PmaDevice, SubmissionCategory
from fda_importer.observability.logger import get_logger
from fda_importer.observability.metrics import increment_counter, records_transformed_total


logger = get_logger(__name__)


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


def _common_fields(record: dict[str, Any]) -> dict[str, Any]:
    return {
        "device_name": record.get("device_name"),
        "decision": normalize_decision(record.get("decision_code")),
        "decision_date": _blank_to_none(record.get("decision_date")),
        "applicant": record.get("applicant"),
        "product_code": record.get("product_code"),
    }


def _map_pma(record: dict[str, Any]) -> PmaDevice:
    return PmaDevice(
        submission_number=record.get("pma_number"),
        **_common_fields(record),
    )


def _map_510k(record: dict[str, Any]) -> K510Device:
    return K510Device(
        submission_number=record.get("k_number"),
        regulation_number=record.get("regulation_number"),
        **_common_fields(record),
    )


_MAPPERS: dict[SubmissionCategory, Callable[[dict[str, Any]], PmaDevice | K510Device]] = {
    SubmissionCategory.PMA: _map_pma,
    SubmissionCategory.K510: _map_510k,
}


class RecordTransformer:
    """
    Converts raw API records of one category into device models.
    """

    def __init__(self, category: SubmissionCategory | str):
        """
        Initialize transformer.

        Args:
            category: SubmissionCategory or its name ("pma"/"510k", any case)

        Raises:
            ValueError: If the category is unknown
        """
        self.category = SubmissionCategory.parse(category)
        self._mapper = _MAPPERS[self.category]

    def transform_one(self, record: Any) -> PmaDevice | K510Device | None:
        """
        Map a single raw record.

        Args:
            record: Raw record dictionary from the API

        Returns:
            Device model, or None if the record was dropped
        """
        if not isinstance(record, dict):
            logger.warning(
                "Skipping a record due to a parsing error",
                extra={"category": self.category.value, "error": "record is not an object"},
            )
            return None

        number = record.get(self.category.number_field)
        if not number:
            logger.warning(
                "Skipping record without submission number",
                extra={"category": self.category.value},
            )
            return None

        try:
            return self._mapper(record)
        except (ValidationError, TypeError, ValueError) as e:
            logger.warning(
                "Skipping a record due to a parsing error",
                extra={
                    "category": self.category.value,
                    "submission_number": str(number),
                    "error": str(e),
                },
            )
            return None

    def transform(self, records: Iterable[Any]) -> list[PmaDevice | K510Device]:
        """
        Map a batch of raw records, keeping input order.

        Args:
            records: Raw records from the API

        Returns:
            Devices for every record that could be mapped
        """
        devices = []
        dropped = 0
        for record in records:
            device = self.transform_one(record)
            if device is None:
                dropped += 1
            else:
                devices.append(device)

        increment_counter(records_transformed_total, len(devices), category=self.category.value, status="mapped")
        increment_counter(records_transformed_total, dropped, category=self.category.value, status="dropped")

        if dropped:
            logger.info(
                f"Dropped {dropped} of {dropped + len(devices)} {self.category.value} records",
                extra={"category": self.category.value, "dropped": dropped},
            )
        return devices


def transform_records(
    records: Iterable[Any],
    category: SubmissionCategory | str,
) -> list[PmaDevice | K510Device]:
    """
    Map raw API records of one category into device models.

    Args:
        records: Raw records from the API
        category: SubmissionCategory or its name ("pma"/"510k", any case)

    Returns:
        Devices in input order, without records lacking a submission number
    """
    return RecordTransformer(category).transform(records)
