"""Tabular loan import: column schema, row parsing and batch results.

Rows are header-keyed mappings, as produced by ``csv.DictReader``. A row is
turned into an ``ImportRecord`` or rejected with a ``ValidationError`` whose
message becomes the skip reason reported back to the caller.
"""

from __future__ import annotations

import csv
import io
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from decimal import Decimal, InvalidOperation
from typing import Mapping

from loan_ledger.config import LedgerConfig
from loan_ledger.exceptions import ValidationError
from loan_ledger.models import LoanStatus, PaymentFrequency, PaymentSchedule

# Column headers
LOAN_ID = "Loan Id"
BORROWER_ID = "Borrower Id"
BORROWER_NAME = "Borrower Name"
BORROWER_EMAIL = "Borrower Email"
BORROWER_PHONE = "Borrower Phone"
PRINCIPAL = "Principal Amount"
INTEREST_RATE = "Interest Rate"
ISSUE_DATE = "Issue Date"
DUE_DATE = "Due Date"
STATUS = "Status"
NOTES = "Notes"
FREQUENCY = "Payment Frequency"
INSTALLMENTS = "Installments"
INSTALLMENT_AMOUNT = "Installment Amount"
NEXT_PAYMENT_DATE = "Next Payment Date"

REQUIRED_COLUMNS = (LOAN_ID, BORROWER_ID, BORROWER_NAME, PRINCIPAL, INTEREST_RATE)
OPTIONAL_COLUMNS = (
    BORROWER_EMAIL,
    BORROWER_PHONE,
    ISSUE_DATE,
    DUE_DATE,
    STATUS,
    NOTES,
    FREQUENCY,
    INSTALLMENTS,
    INSTALLMENT_AMOUNT,
    NEXT_PAYMENT_DATE,
)

DATE_FORMATS = ("%Y-%m-%d", "%d/%m/%Y")


@dataclass
class ImportRecord:
    """One validated import row."""

    loan_id: str
    borrower_id: str
    borrower_name: str | None
    principal: Decimal
    interest_rate: Decimal
    issue_date: date
    due_date: date
    status: LoanStatus = LoanStatus.ACTIVE
    borrower_email: str | None = None
    borrower_phone: str | None = None
    payment_schedule: PaymentSchedule | None = None
    notes: str | None = None


@dataclass(frozen=True)
class RecordOutcome:
    """What happened to a single row of an import batch."""

    row_number: int  # 1-based, header excluded
    loan_id: str | None
    imported: bool
    reason: str | None = None


@dataclass
class ImportResult:
    """Outcome of a whole import batch."""

    success: bool
    imported: int
    skipped: int
    message: str
    outcomes: list[RecordOutcome] = field(default_factory=list)

    @classmethod
    def failure(
        cls, message: str, outcomes: list[RecordOutcome] | None = None
    ) -> "ImportResult":
        """Build a failed result; nothing from the batch was applied."""
        outcomes = outcomes or []
        return cls(
            success=False,
            imported=0,
            skipped=sum(1 for o in outcomes if not o.imported),
            message=message,
            outcomes=outcomes,
        )


def read_csv_rows(text: str) -> list[dict[str, str]]:
    """Read CSV text into header-keyed rows.

    Raises
    ------
    ValidationError
        If the text is not valid CSV, has no header or lacks a required
        column.
    """
    reader = csv.DictReader(io.StringIO(text))
    try:
        fieldnames = reader.fieldnames
    except csv.Error as exc:
        raise ValidationError(f"Malformed CSV: {exc}") from exc
    if not fieldnames:
        raise ValidationError("Import file is empty or has no header row")

    headers = {name.strip() for name in fieldnames if name}
    missing = [col for col in REQUIRED_COLUMNS if col not in headers]
    if missing:
        raise ValidationError(f"Missing required columns: {', '.join(missing)}")

    rows = []
    try:
        for raw in reader:
            # DictReader stores overflow cells under a None key
            rows.append({k.strip(): v for k, v in raw.items() if k is not None})
    except csv.Error as exc:
        raise ValidationError(f"Malformed CSV: {exc}") from exc
    return rows


def parse_record(
    row: Mapping[str, str | None],
    today: date,
    config: LedgerConfig,
) -> ImportRecord:
    """Validate a raw row and convert it to an ``ImportRecord``.

    Parameters
    ----------
    row : Mapping[str, str | None]
        Header-keyed cell values.
    today : date
        Issue date used when the row has none.
    config : LedgerConfig
        Supplies the default term and schedule defaults.

    Raises
    ------
    ValidationError
        If a required value is missing or a value cannot be parsed.
    """
    loan_id = _text(row, LOAN_ID)
    if loan_id is None:
        raise ValidationError(f"Missing {LOAN_ID}")

    principal_raw = _text(row, PRINCIPAL)
    if principal_raw is None:
        raise ValidationError(f"Missing {PRINCIPAL}")

    rate_raw = _text(row, INTEREST_RATE)
    if rate_raw is None:
        raise ValidationError(f"Missing {INTEREST_RATE}")

    borrower_id = _text(row, BORROWER_ID)
    if borrower_id is None:
        raise ValidationError(f"Missing {BORROWER_ID}")

    principal = _parse_decimal(principal_raw, PRINCIPAL)
    if principal <= 0:
        raise ValidationError(f"{PRINCIPAL} must be positive")

    interest_rate = _parse_decimal(rate_raw, INTEREST_RATE)
    if interest_rate < 0:
        raise ValidationError(f"{INTEREST_RATE} must not be negative")

    issue_raw = _text(row, ISSUE_DATE)
    issue_date = _parse_date(issue_raw, ISSUE_DATE) if issue_raw else today

    due_raw = _text(row, DUE_DATE)
    if due_raw:
        due_date = _parse_date(due_raw, DUE_DATE)
    else:
        try:
            due_date = issue_date + timedelta(days=config.default_term_days)
        except OverflowError as exc:
            raise ValidationError(f"{DUE_DATE} out of range") from exc

    if due_date < issue_date:
        raise ValidationError(f"{DUE_DATE} precedes {ISSUE_DATE}")

    return ImportRecord(
        loan_id=loan_id,
        borrower_id=borrower_id,
        borrower_name=_text(row, BORROWER_NAME),
        principal=principal,
        interest_rate=interest_rate,
        issue_date=issue_date,
        due_date=due_date,
        status=_parse_status(_text(row, STATUS)),
        borrower_email=_text(row, BORROWER_EMAIL),
        borrower_phone=_text(row, BORROWER_PHONE),
        payment_schedule=_parse_schedule(row, principal, issue_date, config),
        notes=_text(row, NOTES),
    )


def _text(row: Mapping[str, str | None], column: str) -> str | None:
    value = row.get(column)
    if value is None:
        return None
    value = value.strip()
    return value or None


def _parse_decimal(value: str, column: str) -> Decimal:
    try:
        number = Decimal(value.rstrip("%").strip())
    except InvalidOperation as exc:
        raise ValidationError(f"{column} is not a number: {value!r}") from exc
    if not number.is_finite():
        raise ValidationError(f"{column} is not a number: {value!r}")
    return number


def _parse_date(value: str, column: str) -> date:
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(value, fmt).date()
        except ValueError:
            continue
    raise ValidationError(f"{column} is not a date: {value!r}")


def _parse_status(value: str | None) -> LoanStatus:
    try:
        return LoanStatus(value.lower()) if value else LoanStatus.ACTIVE
    except ValueError:
        return LoanStatus.ACTIVE


def _parse_schedule(
    row: Mapping[str, str | None],
    principal: Decimal,
    issue_date: date,
    config: LedgerConfig,
) -> PaymentSchedule | None:
    """Build the schedule when any schedule column is filled in."""
    frequency_raw = _text(row, FREQUENCY)
    installments_raw = _text(row, INSTALLMENTS)
    amount_raw = _text(row, INSTALLMENT_AMOUNT)
    next_raw = _text(row, NEXT_PAYMENT_DATE)

    if not any((frequency_raw, installments_raw, amount_raw, next_raw)):
        return None

    if frequency_raw:
        try:
            frequency = PaymentFrequency(frequency_raw.lower())
        except ValueError as exc:
            raise ValidationError(f"Unknown {FREQUENCY}: {frequency_raw!r}") from exc
    else:
        frequency = config.default_payment_frequency

    if installments_raw:
        installments = _parse_decimal(installments_raw, INSTALLMENTS)
        if installments <= 0 or installments != installments.to_integral_value():
            raise ValidationError(f"{INSTALLMENTS} must be a positive whole number")
        installments = int(installments)
    else:
        installments = config.default_installments

    if amount_raw:
        installment_amount = _parse_decimal(amount_raw, INSTALLMENT_AMOUNT)
    else:
        installment_amount = (principal / installments).quantize(Decimal("0.01"))

    next_payment_date = _parse_date(next_raw, NEXT_PAYMENT_DATE) if next_raw else issue_date

    return PaymentSchedule(
        frequency=frequency,
        next_payment_date=next_payment_date,
        installments=installments,
        installment_amount=installment_amount,
    )
