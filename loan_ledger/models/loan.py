"""Loan models."""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from loan_ledger.models.enums import LoanStatus, PaymentFrequency


@dataclass
class PaymentSchedule:
    """Agreed repayment cadence.

    Informational only: accrual and status never read it.
    """

    frequency: PaymentFrequency
    next_payment_date: date
    installments: int
    installment_amount: Decimal


@dataclass
class Loan:
    """Personal loan contract."""

    loan_id: str
    borrower_id: str
    borrower_name: str  # Denormalized from Borrower.name
    principal: Decimal
    interest_rate: Decimal  # Monthly percentage (e.g., 2.5 for 2.5% a month)
    issue_date: date
    due_date: date
    status: LoanStatus = LoanStatus.ACTIVE
    payment_schedule: PaymentSchedule | None = None
    notes: str | None = None
