"""
Normalization of openFDA decision codes into readable statuses.
"""

UNKNOWN_DECISION = "Unknown"

DECISION_STATUS_MAP: dict[str, str] = {
    "SE": "Cleared",
    "NSE": "Rejected",
    "SGC": "Cleared",
    "AP": "Approved",
    "APPR": "Approved",
    "DE": "Denied",
    "WD": "Withdrawn",
    "CD": "Conditional Approval",
}


def normalize_decision(code: str | None) -> str:
    """
    Map a decision code to its status.

    Lookup is exact and case-sensitive. Unmapped or missing codes
    yield "Unknown" instead of raising.

    Args:
        code: Raw decision_code from the API

    Returns:
        Normalized decision status
    """
    if not isinstance(code, str):
        return UNKNOWN_DECISION
    return DECISION_STATUS_MAP.get(code, UNKNOWN_DECISION)
