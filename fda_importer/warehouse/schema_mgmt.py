"""
Schema management for the devices table.

Creates the table idempotently and reports simple table statistics.
"""

from typing import Any

from fda_importer.observability.logger import get_logger

from .connection import DatabaseConnectionPool


logger = get_logger(__name__)

DEVICES_TABLE = "devices"

CREATE_DEVICES_TABLE = """
    CREATE TABLE IF NOT EXISTS devices (
        submission_number TEXT PRIMARY KEY,
        device_name TEXT,
        submission_type TEXT NOT NULL CHECK (submission_type IN ('PMA', '510k')),
        decision TEXT NOT NULL,
        decision_date DATE,
        applicant TEXT,
        product_code TEXT,
        regulation_number TEXT
    )
"""


class SchemaManager:
    """
    Manages the devices table DDL.
    """

    def __init__(self, pool: DatabaseConnectionPool):
        """
        Initialize schema manager.

        Args:
            pool: Database connection pool
        """
        self.pool = pool
        self._ensured = False

    def ensure_schema(self) -> None:
        """
        Create the devices table if it does not exist.

        Safe to call repeatedly; the DDL runs once per manager.
        """
        if self._ensured:
            return
        logger.info(f"Ensuring table {DEVICES_TABLE} exists", extra={"database": self.pool.database})
        self.pool.execute_command(CREATE_DEVICES_TABLE)
        self._ensured = True
        logger.info("Database schema synchronized successfully.")

    def table_exists(self) -> bool:
        result = self.pool.execute_query(
            "SELECT to_regclass(%s) IS NOT NULL AS present",
            (DEVICES_TABLE,),
        )
        return bool(result and result[0]["present"])

    def get_table_stats(self) -> dict[str, Any]:
        """
        Get row counts of the devices table.

        Returns:
            Dictionary with total rows and rows per submission type and decision
        """
        totals = self.pool.execute_query(
            """
                SELECT
                    COUNT(*) AS total_devices,
                    COUNT(*) FILTER (WHERE submission_type = 'PMA') AS pma_devices,
                    COUNT(*) FILTER (WHERE submission_type = '510k') AS k510_devices,
                    MIN(decision_date) AS earliest_decision,
                    MAX(decision_date) AS latest_decision
                FROM devices
            """
        )
        by_decision = self.pool.execute_query(
            """
                SELECT decision, COUNT(*) AS count
                FROM devices
                GROUP BY decision
                ORDER BY count DESC, decision
            """
        )
        stats = dict(totals[0]) if totals else {}
        stats["by_decision"] = {row["decision"]: row["count"] for row in by_decision}
        return stats
