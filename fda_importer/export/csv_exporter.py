"""
CSV export of the devices table using pandas.
"""

from datetime import datetime
from pathlib import Path
from typing import Any, Protocol
from uuid import uuid4

import pandas as pd
import psycopg

from fda_importer.core.models import DEVICE_COLUMNS, ExportResult
from fda_importer.observability.logger import get_logger
from fda_importer.observability.metrics import exported_records, set_gauge


logger = get_logger(__name__)

EXPORT_FILE_PREFIX = "fda_device_export"


class DeviceRowSource(Protocol):
    def fetch_all_rows(self) -> list[dict[str, Any]]: ...


def timestamped_export_path(directory: str | Path, now: datetime | None = None) -> Path:
    """
    Build a unique timestamped export file path.

    Args:
        directory: Target directory
        now: Timestamp to embed (defaults to current local time)

    Returns:
        Path like <directory>/fda_device_export_20240131T120000_000000_1a2b3c4d.csv
    """
    now = now or datetime.now()
    return Path(directory) / f"{EXPORT_FILE_PREFIX}_{now.strftime('%Y%m%dT%H%M%S_%f')}_{uuid4().hex[:8]}.csv"


class CsvExporter:
    """
    Writes every stored device to a CSV file with a header row.
    """

    def __init__(self, rows: DeviceRowSource):
        """
        Initialize exporter.

        Args:
            rows: Anything exposing fetch_all_rows(), normally a DeviceQuery
        """
        self.rows = rows

    def export(self, path: str | Path) -> ExportResult:
        """
        Export all devices to path, overwriting any existing file.

        Nothing is written when the store is empty. Read and write failures
        are logged and reported in ExportResult.error.

        Args:
            path: Destination CSV file

        Returns:
            ExportResult with the number of data rows written
        """
        path = Path(path)
        logger.info(f"Exporting all device data to {path}...")

        try:
            rows = self.rows.fetch_all_rows()
        except psycopg.Error as e:
            logger.error(f"Could not read devices for export: {e}", exc_info=True)
            return ExportResult(path=path, error=str(e))

        if not rows:
            logger.info("Database is empty. Nothing to export.")
            set_gauge(exported_records, 0)
            return ExportResult(path=path)

        frame = pd.DataFrame.from_records(rows, columns=list(DEVICE_COLUMNS))

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            frame.to_csv(path, index=False)
        except OSError as e:
            logger.error(f"Could not write CSV file: {e}", extra={"path": str(path)})
            return ExportResult(path=path, error=str(e))

        set_gauge(exported_records, len(frame))
        logger.info(f"Successfully exported {len(frame)} records.", extra={"path": str(path)})
        return ExportResult(path=path, records_written=len(frame))
