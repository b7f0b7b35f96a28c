"""CSV loan report export."""

import csv
import io
import logging
from pathlib import Path
from typing import Iterator

from loan_ledger.sinks.serialization import format_cell
from loan_ledger.store import LoanLedgerStore
from loan_ledger.store.importer import (
    BORROWER_EMAIL,
    BORROWER_ID,
    BORROWER_NAME,
    BORROWER_PHONE,
    DUE_DATE,
    FREQUENCY,
    INSTALLMENT_AMOUNT,
    INSTALLMENTS,
    INTEREST_RATE,
    ISSUE_DATE,
    LOAN_ID,
    NEXT_PAYMENT_DATE,
    NOTES,
    PRINCIPAL,
    STATUS,
)

logger = logging.getLogger(__name__)

PAYMENT_COUNT = "Payment Count"

# Same headers as the import schema, so a report can be imported back
EXPORT_COLUMNS = (
    LOAN_ID,
    BORROWER_ID,
    BORROWER_NAME,
    BORROWER_EMAIL,
    BORROWER_PHONE,
    PRINCIPAL,
    INTEREST_RATE,
    ISSUE_DATE,
    DUE_DATE,
    STATUS,
    FREQUENCY,
    INSTALLMENTS,
    INSTALLMENT_AMOUNT,
    NEXT_PAYMENT_DATE,
    NOTES,
    PAYMENT_COUNT,
)


def loan_rows(store: LoanLedgerStore) -> Iterator[dict[str, str]]:
    """Yield one flat row per loan, in insertion order."""
    for loan in store.loans.values():
        borrower = store.get_borrower(loan.borrower_id)
        schedule = loan.payment_schedule

        row = {
            LOAN_ID: loan.loan_id,
            BORROWER_ID: loan.borrower_id,
            BORROWER_NAME: loan.borrower_name,
            BORROWER_EMAIL: borrower.email if borrower else None,
            BORROWER_PHONE: borrower.phone if borrower else None,
            PRINCIPAL: loan.principal,
            INTEREST_RATE: loan.interest_rate,
            ISSUE_DATE: loan.issue_date,
            DUE_DATE: loan.due_date,
            STATUS: loan.status,
            FREQUENCY: schedule.frequency if schedule else None,
            INSTALLMENTS: schedule.installments if schedule else None,
            INSTALLMENT_AMOUNT: schedule.installment_amount if schedule else None,
            NEXT_PAYMENT_DATE: schedule.next_payment_date if schedule else None,
            NOTES: loan.notes,
            PAYMENT_COUNT: len(store.get_loan_payments(loan.loan_id)),
        }
        yield {column: format_cell(value) for column, value in row.items()}


def export_loans_csv(store: LoanLedgerStore) -> str:
    """Render the loan report as CSV text."""
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=EXPORT_COLUMNS, lineterminator="\n")
    writer.writeheader()
    writer.writerows(loan_rows(store))
    return buffer.getvalue()


class CsvFileSink:
    """Write loan reports to CSV files."""

    def __init__(self, output_dir: str | Path) -> None:
        """Initialize CSV file sink.

        Parameters
        ----------
        output_dir : str | Path
            Directory to write CSV files.
        """
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self._counts: dict[str, int] = {}

    def write_loans(self, store: LoanLedgerStore, filename: str | None = None) -> Path:
        """Write the loan report for ``store`` and return the file path."""
        if filename is None:
            filename = f"loan_report_{store.clock():%d-%m-%Y}.csv"
        file_path = self.output_dir / filename

        with open(file_path, "w", encoding="utf-8", newline="") as f:
            f.write(export_loans_csv(store))

        self._counts[filename] = len(store.loans)
        return file_path

    def close(self) -> None:
        """Log a summary of the files written."""
        logger.info("CSV files written to: %s", self.output_dir)
        for filename, count in self._counts.items():
            logger.info("  %s: %d loans", filename, count)
