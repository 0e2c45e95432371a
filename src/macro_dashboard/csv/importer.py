"""Annual history CSV import."""

import csv
import logging
from pathlib import Path
from typing import Optional

from macro_dashboard.core.exceptions import ValidationError
from macro_dashboard.domain.models import AnnualRecord
from macro_dashboard.domain.views import ImportSummary
from macro_dashboard.repositories.protocols import CacheStore

logger = logging.getLogger(__name__)

# Expected CSV columns
CSV_COLUMNS = [
    "year",
    "price",
    "dividend",
    "dividend_yield",
    "eps",
    "cape",
    "inflation",
    "total_return",
    "cumulative_return",
]


class AnnualCsvImporter:
    """
    CSV importer for seeding the annual historical series.

    Expected format: year, price, dividend, dividend_yield, eps, cape,
    inflation, total_return, cumulative_return. Empty numeric cells load as 0.
    Rows upsert by year, so re-importing a file is idempotent.
    """

    def __init__(self, store: CacheStore):
        self._store = store

    def import_csv(self, path: str) -> ImportSummary:
        """
        Import annual records from a CSV file.

        Returns summary with imported/error counts; bad rows are reported,
        not fatal.
        """
        file_path = Path(path)
        if not file_path.exists():
            raise ValidationError(f"File not found: {path}")

        summary = ImportSummary()

        with open(file_path, newline="", encoding="utf-8") as csvfile:
            reader = csv.DictReader(csvfile)

            # Validate columns
            if reader.fieldnames:
                missing = set(CSV_COLUMNS) - set(reader.fieldnames)
                if missing:
                    raise ValidationError(f"Missing required columns: {sorted(missing)}")

            for row_num, row in enumerate(reader, start=2):  # Start at 2 (header is row 1)
                try:
                    self._store.upsert_annual_record(self._parse_row(row))
                    summary.imported_count += 1
                except ValidationError as e:
                    summary.error_count += 1
                    summary.errors.append(f"Row {row_num}: {e.message}")

        logger.info(
            f"Imported {summary.imported_count} annual records from {file_path} "
            f"({summary.error_count} errors)"
        )
        return summary

    def _parse_row(self, row: dict[str, str]) -> AnnualRecord:
        """Parse a single CSV row into an AnnualRecord."""
        year_str = (row.get("year") or "").strip()
        if not year_str:
            raise ValidationError("Missing year")
        try:
            year = int(year_str)
        except ValueError:
            raise ValidationError(f"Invalid year: {year_str}")

        values = {
            column: self._parse_float(row.get(column), column) or 0.0
            for column in CSV_COLUMNS[1:]
        }
        return AnnualRecord(year=year, **values)

    @staticmethod
    def _parse_float(value: Optional[str], column: str) -> Optional[float]:
        """Parse a float from string, returning None for empty strings."""
        value = value.strip() if value else ""
        if not value:
            return None
        try:
            return float(value)
        except ValueError:
            raise ValidationError(f"Invalid {column} value: {value}")
