#!/usr/bin/env python3
"""
Seed or back up the annual history table.

Usage: from project root:
  ./venv/bin/python scripts/import_history.py import data/sp500_annual.csv
  ./venv/bin/python scripts/import_history.py export backup.csv
  ./venv/bin/python scripts/import_history.py refresh
  ./venv/bin/python scripts/import_history.py refresh --now "2025-01-02 09:00-06:00"
"""

import argparse
import sys
from pathlib import Path

# Add src to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root / "src"))

from macro_dashboard.app_context import get_app_context
from macro_dashboard.config.logging_config import setup_logging
from macro_dashboard.core.timezone import parse_datetime_utc


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    subparsers = parser.add_subparsers(dest="command", required=True)

    import_parser = subparsers.add_parser("import", help="Import annual records from CSV")
    import_parser.add_argument("path")

    export_parser = subparsers.add_parser("export", help="Export annual records to CSV")
    export_parser.add_argument("path")
    export_parser.add_argument("--start-year", type=int)
    export_parser.add_argument("--end-year", type=int)

    refresh_parser = subparsers.add_parser("refresh", help="Run one refresh cycle")
    refresh_parser.add_argument(
        "--now",
        type=parse_datetime_utc,
        help="Run the cycle as of this instant (naive times are UTC)",
    )

    args = parser.parse_args()

    setup_logging()
    context = get_app_context()
    context.initialize()

    try:
        if args.command == "import":
            summary = context.csv_importer.import_csv(args.path)
            print(f"✓ Imported {summary.imported_count} records ({summary.error_count} errors)")
            for error in summary.errors:
                print(f"  {error}")
            return 1 if summary.error_count else 0

        if args.command == "export":
            count = context.csv_exporter.export_csv(args.path, args.start_year, args.end_year)
            print(f"✓ Exported {count} records to {args.path}")
            return 0

        snapshot = context.scheduler.run_once(lambda: context.run_refresh_cycle(args.now))
        print(f"✓ Refreshed: {', '.join(s.value for s in snapshot.refreshed) or 'nothing due'}")
        if snapshot.unavailable:
            print(f"  Unavailable: {', '.join(s.value for s in snapshot.unavailable)}")
        return 0
    finally:
        context.close()


if __name__ == "__main__":
    sys.exit(main())
