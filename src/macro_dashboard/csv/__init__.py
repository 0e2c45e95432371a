"""CSV import/export utilities."""

from macro_dashboard.csv.importer import AnnualCsvImporter, CSV_COLUMNS
from macro_dashboard.csv.exporter import AnnualCsvExporter

__all__ = [
    "AnnualCsvImporter",
    "AnnualCsvExporter",
    "CSV_COLUMNS",
]
