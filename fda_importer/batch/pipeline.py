"""
Import pipeline orchestration.

Coordinates the flow: ensure schema → fetch → transform → store (per
category) → report approved devices → export
"""

from datetime import date, datetime, timedelta, timezone
from pathlib import Path

from fda_importer.config import PipelineSettings
from fda_importer.core.models import (
    CategorySummary,
    ExportResult,
    ImportSummary,
    SubmissionCategory,
)
from fda_importer.core.transformer import transform_records
from fda_importer.export import CsvExporter
from fda_importer.observability.logger import get_logger, log_operation
from fda_importer.sources import OpenFDASource
from fda_importer.warehouse import DatabaseConnectionPool, DeviceQuery, DeviceWriter, SchemaManager


logger = get_logger(__name__)

APPROVED_DECISION = "Approved"
APPROVED_PREVIEW_SIZE = 5


def build_date_range_query(end: date, days: int = 90, field: str = "decision_date") -> str:
    """
    Build an openFDA range filter covering the trailing window ending at end.

    Both bounds are inclusive.

    Args:
        end: Last day of the window
        days: Number of days before end where the window starts
        field: Date field to filter on

    Returns:
        Expression like decision_date:[2024-01-01+TO+2024-03-31]
    """
    start = end - timedelta(days=days)
    return f"{field}:[{start.isoformat()}+TO+{end.isoformat()}]"


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


class ImportPipeline:
    """
    Orchestrates one import run against an explicitly provided store.

    Flow:
    1. Ensure the devices table exists
    2. Fetch, transform and store recent PMA decisions
    3. Fetch, transform and store 510(k) decisions of the trailing window
    4. Log a preview of approved devices (run-once variant)
    5. Export every stored device to CSV

    Best-effort steps report failures through their result models and the
    run continues. Anything unexpected propagates to the caller.
    """

    def __init__(
        self,
        pool: DatabaseConnectionPool,
        source: OpenFDASource,
        settings: PipelineSettings | None = None,
    ):
        """
        Initialize import pipeline.

        Args:
            pool: Open database connection pool
            source: openFDA source used for fetching
            settings: Record limits, window length and export path
        """
        self.pool = pool
        self.source = source
        self.settings = settings or PipelineSettings()

        self.schema_manager = SchemaManager(pool)
        self.writer = DeviceWriter(pool)
        self.query = DeviceQuery(pool)
        self.exporter = CsvExporter(self.query)

    def import_category(
        self,
        category: SubmissionCategory,
        search: str | None,
        max_records: int,
    ) -> CategorySummary:
        """
        Fetch, transform and store one category.

        Args:
            category: Category to import
            search: Optional openFDA search expression
            max_records: Maximum number of records to fetch

        Returns:
            CategorySummary with the counts of each step
        """
        with log_operation(f"Importing {category.value} decisions", logger=logger, category=category.value):
            fetched = self.source.fetch(category, search=search, max_records=max_records)
            devices = transform_records(fetched.records, category)
            stored = self.writer.store(devices)

        return CategorySummary(
            category=category,
            fetched=len(fetched.records),
            transformed=len(devices),
            added=stored.added,
            skipped=stored.skipped,
            fetch_error=fetched.error,
            store_error=stored.error,
        )

    def report_approved(self, limit: int = APPROVED_PREVIEW_SIZE) -> int:
        """
        Log the first approved devices.

        Args:
            limit: Number of devices to show

        Returns:
            Total number of approved devices in the store
        """
        approved = self.query.find(decision=APPROVED_DECISION)
        logger.info(f"Found {len(approved)} approved devices.", extra={"approved": len(approved)})
        for device in approved[:limit]:
            logger.info(f"  > {device.submission_number} | {device.device_name} | {device.applicant}")
        return len(approved)

    def run(
        self,
        export_path: str | Path | None = None,
        report_approved: bool = True,
        today: date | None = None,
    ) -> ImportSummary:
        """
        Execute the full import sequence.

        Args:
            export_path: CSV destination (defaults to settings.export_path)
            report_approved: Whether to log the approved-device preview
            today: Last day of the 510(k) window (defaults to today in UTC)

        Returns:
            ImportSummary of the run
        """
        summary = ImportSummary()

        self.schema_manager.ensure_schema()

        logger.info("[Step 1] Fetching recent PMA decisions...")
        summary.categories.append(
            self.import_category(
                SubmissionCategory.PMA,
                search=None,
                max_records=self.settings.pma_max_records,
            )
        )

        window_days = self.settings.k510_window_days
        logger.info(f"[Step 2] Fetching 510(k) clearances from the last {window_days} days...")
        date_range_query = build_date_range_query(today or utc_today(), days=window_days)
        summary.categories.append(
            self.import_category(
                SubmissionCategory.K510,
                search=date_range_query,
                max_records=self.settings.k510_max_records,
            )
        )

        if report_approved:
            logger.info(f"[Step 3] Querying local database for '{APPROVED_DECISION}' devices...")
            summary.approved_count = self.report_approved()

        logger.info("[Step 4] Exporting all data to a CSV file...")
        summary.export = self.export(export_path or self.settings.export_path)

        logger.info(
            "FDA import process finished.",
            extra={"added": summary.total_added, "skipped": summary.total_skipped},
        )
        return summary

    def export(self, path: str | Path) -> ExportResult:
        return self.exporter.export(path)
