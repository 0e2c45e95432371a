"""Annual history CSV export."""

import csv
from pathlib import Path
from typing import Optional

from macro_dashboard.csv.importer import CSV_COLUMNS
from macro_dashboard.services.history_service import HistoryService


class AnnualCsvExporter:
    """
    CSV exporter for the annual historical series.

    Writes the same columns the importer reads, so an export can be
    re-imported as a backup.
    """

    def __init__(self, history_service: HistoryService):
        self._history = history_service

    def export_csv(
        self,
        path: str,
        start_year: Optional[int] = None,
        end_year: Optional[int] = None,
    ) -> int:
        """
        Export annual records to a CSV file.

        Args:
            path: Output file path
            start_year: Optional first year to export (inclusive)
            end_year: Optional last year to export (inclusive)

        Returns the number of rows written.
        """
        records = self._history.get_annual_series(start_year, end_year)

        file_path = Path(path)
        file_path.parent.mkdir(parents=True, exist_ok=True)

        with open(file_path, "w", newline="", encoding="utf-8") as csvfile:
            writer = csv.DictWriter(csvfile, fieldnames=CSV_COLUMNS)
            writer.writeheader()

            for record in records:
                writer.writerow({
                    "year": record.year,
                    "price": repr(record.price),
                    "dividend": repr(record.dividend),
                    "dividend_yield": repr(record.dividend_yield),
                    "eps": repr(record.eps),
                    "cape": repr(record.cape),
                    "inflation": repr(record.inflation),
                    "total_return": repr(record.total_return),
                    "cumulative_return": repr(record.cumulative_return),
                })

        return len(records)
