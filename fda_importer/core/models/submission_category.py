"""
SubmissionCategory enum identifying the two openFDA device record types.
"""

from enum import Enum


class SubmissionCategory(str, Enum):
    """
    Regulatory submission category of a device decision.

    Each member knows the openFDA endpoint file it is served from and the raw
    field that carries its submission number.
    """

    PMA = "PMA"
    K510 = "510k"

    @property
    def endpoint(self) -> str:
        return _ENDPOINTS[self]

    @property
    def number_field(self) -> str:
        return _NUMBER_FIELDS[self]

    @classmethod
    def parse(cls, value: "str | SubmissionCategory") -> "SubmissionCategory":
        """
        Resolve a category from its name, case-insensitively.

        Args:
            value: "pma", "510k" (any case) or a SubmissionCategory

        Returns:
            The matching category

        Raises:
            ValueError: If the value names no known category
        """
        if isinstance(value, cls):
            return value
        lowered = str(value).strip().lower()
        for member in cls:
            if member.value.lower() == lowered:
                return member
        raise ValueError(f"Unknown submission category: {value!r}")


_ENDPOINTS = {
    SubmissionCategory.PMA: "pma.json",
    SubmissionCategory.K510: "510k.json",
}

_NUMBER_FIELDS = {
    SubmissionCategory.PMA: "pma_number",
    SubmissionCategory.K510: "k_number",
}
