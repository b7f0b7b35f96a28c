"""Output sinks for exporting ledger data."""

from loan_ledger.sinks.csv_file import CsvFileSink, export_loans_csv

__all__ = ["CsvFileSink", "export_loans_csv"]
