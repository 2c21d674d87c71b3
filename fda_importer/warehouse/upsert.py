"""
Insert-only writes of device records.

Implements INSERT ... ON CONFLICT DO NOTHING so a submission number, once
stored, is never overwritten. Re-importing the same decision is a skip.
"""

from typing import Sequence

import psycopg

from fda_importer.core.models import DEVICE_COLUMNS, DeviceBase, StoreResult
from fda_importer.observability.logger import get_logger
from fda_importer.observability.metrics import (
    increment_counter,
    record_store_outcome,
    track_duration,
    warehouse_errors_total,
    warehouse_write_duration_seconds,
)

from .connection import DatabaseConnectionPool


logger = get_logger(__name__)

INSERT_DEVICE = f"""
    INSERT INTO devices ({", ".join(DEVICE_COLUMNS)})
    VALUES ({", ".join(f"%({column})s" for column in DEVICE_COLUMNS)})
    ON CONFLICT (submission_number) DO NOTHING
"""


class DeviceWriter:
    """
    Bulk-inserts device records, ignoring rows whose key already exists.
    """

    def __init__(self, pool: DatabaseConnectionPool):
        """
        Initialize device writer.

        Args:
            pool: Database connection pool
        """
        self.pool = pool

    def store(self, devices: Sequence[DeviceBase]) -> StoreResult:
        """
        Insert a batch of devices in one transaction.

        Args:
            devices: Device models to insert

        Returns:
            StoreResult with added/skipped counts. A database failure is
            logged and reported in StoreResult.error with zero counts.
        """
        if not devices:
            logger.info("No new records to save.")
            return StoreResult()

        rows = [device.to_row() for device in devices]

        try:
            with track_duration(warehouse_write_duration_seconds):
                with self.pool.get_connection() as conn:
                    with conn.cursor() as cur:
                        cur.executemany(INSERT_DEVICE, rows)
                        # psycopg sums rowcount over executemany; conflicts add 0
                        added = max(cur.rowcount, 0)
                    conn.commit()
        except psycopg.Error as e:
            increment_counter(warehouse_errors_total)
            logger.error(
                f"Failed during bulk database insert: {e}",
                extra={"batch_size": len(rows)},
                exc_info=True,
            )
            return StoreResult(error=str(e))

        skipped = len(rows) - added
        record_store_outcome(added, skipped)
        logger.info(
            f"Database store complete. Added: {added}, Skipped (duplicates): {skipped}",
            extra={"added": added, "skipped": skipped},
        )
        return StoreResult(added=added, skipped=skipped)
