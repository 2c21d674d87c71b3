"""
Admin CLI for inspecting the local device store.

Usage:
    python -m fda_importer.cli.admin_cli init-db
    python -m fda_importer.cli.admin_cli query [--decision <status>] [--applicant <text>] [--limit N]
    python -m fda_importer.cli.admin_cli export [--output <file>]
    python -m fda_importer.cli.admin_cli stats
"""

import argparse
import json
import sys

from fda_importer.config import load_settings
from fda_importer.export import CsvExporter
from fda_importer.observability.logger import get_logger
from fda_importer.warehouse import DatabaseConnectionPool, DeviceQuery, SchemaManager


logger = get_logger(__name__)


def _create_pool(args) -> DatabaseConnectionPool:
    return DatabaseConnectionPool(
        host=args.db_host,
        port=args.db_port,
        database=args.db_name,
        user=args.db_user,
        password=args.db_password,
    )


def init_db_command(args, pool: DatabaseConnectionPool) -> int:
    """Create the devices table if needed."""
    SchemaManager(pool).ensure_schema()
    print("Devices table is ready.")
    return 0


def query_command(args, pool: DatabaseConnectionPool) -> int:
    """
    Print stored devices matching the filters.

    Args:
        args: Command line arguments
        pool: Open database pool
    """
    devices = DeviceQuery(pool).find(
        decision=args.decision,
        applicant=args.applicant,
        limit=args.limit,
    )

    if args.json:
        print(json.dumps([device.model_dump(mode="json") for device in devices], indent=2))
        return 0

    if not devices:
        print("\nNo devices match the given filters.")
        return 0

    print(f"\n{'Submission':<14} {'Type':<5} {'Decision':<22} {'Date':<11} {'Applicant'}")
    print(f"{'-' * 80}")
    for device in devices:
        decision_date = device.decision_date.isoformat() if device.decision_date else "N/A"
        print(
            f"{device.submission_number:<14} {device.submission_type:<5} "
            f"{device.decision:<22} {decision_date:<11} {device.applicant or '-'}"
        )
    print(f"\n{len(devices)} device(s)")
    return 0


def export_command(args, pool: DatabaseConnectionPool) -> int:
    """Export the whole store to CSV."""
    output = args.output or load_settings(args.env_file).pipeline.export_path
    result = CsvExporter(DeviceQuery(pool)).export(output)
    if result.error:
        print(f"Export failed: {result.error}", file=sys.stderr)
        return 1
    if not result.written:
        print("Database is empty. Nothing to export.")
        return 0
    print(f"Exported {result.records_written} records to {result.path}")
    return 0


def stats_command(args, pool: DatabaseConnectionPool) -> int:
    """Print table statistics."""
    stats = SchemaManager(pool).get_table_stats()

    print(f"\n{'=' * 60}")
    print("DEVICE STORE STATISTICS")
    print(f"{'=' * 60}\n")
    print(f"Total devices:     {stats.get('total_devices', 0)}")
    print(f"  PMA:             {stats.get('pma_devices', 0)}")
    print(f"  510(k):          {stats.get('k510_devices', 0)}")
    print(f"Earliest decision: {stats.get('earliest_decision') or 'N/A'}")
    print(f"Latest decision:   {stats.get('latest_decision') or 'N/A'}")

    by_decision = stats.get("by_decision") or {}
    if by_decision:
        print("\nBy decision:")
        for decision, count in by_decision.items():
            print(f"  - {decision}: {count}")
    return 0


COMMANDS = {
    "init-db": init_db_command,
    "query": query_command,
    "export": export_command,
    "stats": stats_command,
}


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Device store administration",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Show approved devices
  python -m fda_importer.cli.admin_cli query --decision Approved

  # Search by applicant
  python -m fda_importer.cli.admin_cli query --applicant medtronic --limit 20

  # Export the store
  python -m fda_importer.cli.admin_cli export --output devices.csv
        """
    )
    parser.add_argument("--env-file", default=None, help="Path to a .env file with configuration")
    parser.add_argument("--db-host", default=None, help="Database host (default: DB_HOST or localhost)")
    parser.add_argument("--db-port", type=int, default=None, help="Database port (default: DB_PORT or 5432)")
    parser.add_argument("--db-name", default=None, help="Database name (default: DB_NAME)")
    parser.add_argument("--db-user", default=None, help="Database user (default: DB_USER)")
    parser.add_argument("--db-password", default=None, help="Database password (default: DB_PASSWORD)")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("init-db", help="Create the devices table")

    query_parser = subparsers.add_parser("query", help="List stored devices")
    query_parser.add_argument("--decision", help="Exact decision status, e.g. Approved")
    query_parser.add_argument("--applicant", help="Case-insensitive applicant substring")
    query_parser.add_argument("--limit", type=int, default=None, help="Maximum devices to show")
    query_parser.add_argument("--json", action="store_true", help="Print JSON instead of a table")

    export_parser = subparsers.add_parser("export", help="Export all devices to CSV")
    export_parser.add_argument("--output", default=None, help="CSV destination")

    subparsers.add_parser("stats", help="Show store statistics")

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    load_settings(args.env_file)
    pool = None

    try:
        pool = _create_pool(args)
        pool.open()
        exit_code = COMMANDS[args.command](args, pool)
    except Exception as e:
        logger.error(f"Error during {args.command}: {e}", exc_info=True)
        exit_code = 1
    finally:
        if pool is not None:
            pool.close()

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
