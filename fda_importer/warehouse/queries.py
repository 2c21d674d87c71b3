"""
Read access to the devices table.
"""

from typing import Any

from fda_importer.core.models import DEVICE_COLUMNS, K510Device, PmaDevice, device_from_row
from fda_importer.observability.logger import get_logger

from .connection import DatabaseConnectionPool


logger = get_logger(__name__)

SELECT_DEVICES = f"SELECT {', '.join(DEVICE_COLUMNS)} FROM devices"


def _escape_like(value: str) -> str:
    """Escape LIKE wildcards so user input only matches literally."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class DeviceQuery:
    """
    Filtered reads over stored devices.
    """

    def __init__(self, pool: DatabaseConnectionPool):
        """
        Initialize device query.

        Args:
            pool: Database connection pool
        """
        self.pool = pool

    def find_rows(
        self,
        decision: str | None = None,
        applicant: str | None = None,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        """
        Query raw device rows.

        Args:
            decision: Exact, case-sensitive decision status
            applicant: Case-insensitive substring of the applicant name
            limit: Optional cap on returned rows

        Returns:
            Rows as dictionaries ordered by submission number
        """
        conditions = []
        params: dict[str, Any] = {}

        if decision:
            conditions.append("decision = %(decision)s")
            params["decision"] = decision
        if applicant:
            conditions.append("applicant ILIKE %(applicant)s")
            params["applicant"] = f"%{_escape_like(applicant)}%"

        query = SELECT_DEVICES
        if conditions:
            query += " WHERE " + " AND ".join(conditions)
        query += " ORDER BY submission_number"
        if limit is not None:
            query += " LIMIT %(limit)s"
            params["limit"] = limit

        return self.pool.execute_query(query, params)

    def find(
        self,
        decision: str | None = None,
        applicant: str | None = None,
        limit: int | None = None,
    ) -> list[PmaDevice | K510Device]:
        """
        Find devices matching all given filters.

        With no filters every stored device is returned.

        Args:
            decision: Exact, case-sensitive decision status
            applicant: Case-insensitive substring of the applicant name
            limit: Optional cap on returned devices

        Returns:
            Device models ordered by submission number
        """
        rows = self.find_rows(decision=decision, applicant=applicant, limit=limit)
        logger.debug(
            f"Found {len(rows)} devices",
            extra={"decision": decision, "applicant": applicant},
        )
        return [device_from_row(row) for row in rows]

    def fetch_all_rows(self) -> list[dict[str, Any]]:
        """All stored devices as plain rows, for exports."""
        return self.find_rows()

    def count(self) -> int:
        result = self.pool.execute_query("SELECT COUNT(*) AS total FROM devices")
        return int(result[0]["total"]) if result else 0
