"""
Command-line interface for a one-shot import run.

Usage:
    python -m fda_importer.cli.import_cli [--export-path <file>] [--env-file <path>]
"""

import argparse
import sys

from fda_importer.batch import ImportPipeline
from fda_importer.config import load_settings
from fda_importer.observability.logger import get_logger
from fda_importer.observability.metrics import (
    increment_counter,
    pipeline_duration_seconds,
    pipeline_runs_total,
    track_duration,
)
from fda_importer.sources import OpenFDASource
from fda_importer.warehouse import DatabaseConnectionPool


logger = get_logger(__name__)


def run_import(args) -> int:
    """
    Execute the import sequence once.

    Args:
        args: Command-line arguments

    Returns:
        Process exit code
    """
    settings = load_settings(args.env_file)
    export_path = args.export_path or settings.pipeline.export_path

    try:
        pool = DatabaseConnectionPool()
        logger.info(f"Connecting to database: {pool.database}")
        pool.open()
    except Exception as e:
        logger.error(f"A critical error occurred during the import process: {e}", exc_info=True)
        increment_counter(pipeline_runs_total, trigger="cli", status="failure")
        return 1

    try:
        with OpenFDASource(
            base_url=settings.api.base_url,
            batch_size=settings.api.batch_size,
            api_key=settings.api.api_key,
            timeout=settings.api.timeout,
        ) as source:
            pipeline = ImportPipeline(pool, source, settings.pipeline)
            with track_duration(pipeline_duration_seconds, trigger="cli"):
                summary = pipeline.run(export_path=export_path, report_approved=True)

        logger.info("=" * 60)
        logger.info("IMPORT COMPLETE")
        logger.info("=" * 60)
        for category in summary.categories:
            logger.info(
                f"{category.category.value}: fetched {category.fetched}, "
                f"mapped {category.transformed}, added {category.added}, "
                f"skipped {category.skipped}"
            )
        if summary.export is not None and summary.export.written:
            logger.info(f"Exported {summary.export.records_written} records to {summary.export.path}")
        logger.info("=" * 60)

    except Exception as e:
        logger.error(f"A critical error occurred during the import process: {e}", exc_info=True)
        increment_counter(pipeline_runs_total, trigger="cli", status="failure")
        return 1
    finally:
        pool.close()

    increment_counter(pipeline_runs_total, trigger="cli", status="success")
    return 0


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Import FDA device decisions into the local database and export them to CSV",
    )
    parser.add_argument(
        "--export-path",
        default=None,
        help="CSV destination (default: EXPORT_PATH or fda_device_export.csv)"
    )
    parser.add_argument(
        "--env-file",
        default=None,
        help="Path to a .env file with configuration"
    )
    args = parser.parse_args(argv)

    sys.exit(run_import(args))


if __name__ == "__main__":
    main()
