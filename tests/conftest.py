"""Pytest configuration and fixtures."""

from datetime import date, timedelta
from decimal import Decimal

import pytest

from loan_ledger.models import Borrower, Loan, LoanStatus, Payment
from loan_ledger.store import LoanLedgerStore

TODAY = date(2024, 6, 15)


def make_loan(
    principal: str = "5000",
    interest_rate: str = "12",
    issued_days_ago: int = 60,
    due_in_days: int = 240,
    status: LoanStatus = LoanStatus.ACTIVE,
    loan_id: str = "loan-test-001",
) -> Loan:
    """Build a loan relative to ``TODAY``."""
    return Loan(
        loan_id=loan_id,
        borrower_id="borrower-test-001",
        borrower_name="João Silva",
        principal=Decimal(principal),
        interest_rate=Decimal(interest_rate),
        issue_date=TODAY - timedelta(days=issued_days_ago),
        due_date=TODAY + timedelta(days=due_in_days),
        status=status,
    )


def make_payment(
    amount: str,
    loan_id: str = "loan-test-001",
    on: date = TODAY,
    payment_id: str = "pay-test-001",
) -> Payment:
    """Build a payment booked entirely to principal."""
    return Payment(
        payment_id=payment_id,
        loan_id=loan_id,
        date=on,
        amount=Decimal(amount),
        principal=Decimal(amount),
        interest=Decimal("0"),
    )


@pytest.fixture
def seed() -> int:
    """Fixed seed for reproducible tests."""
    return 42


@pytest.fixture
def today() -> date:
    """Fixed "today" for store clocks."""
    return TODAY


@pytest.fixture
def store() -> LoanLedgerStore:
    """Create a fresh store whose clock is pinned to ``TODAY``."""
    return LoanLedgerStore(clock=lambda: TODAY)


@pytest.fixture
def borrower(store: LoanLedgerStore) -> Borrower:
    """Register a sample borrower."""
    return store.add_borrower("João Silva", "joao.silva@email.com", "(11) 98765-4321")


@pytest.fixture
def loan(store: LoanLedgerStore, borrower: Borrower) -> Loan:
    """Issue 5000 at 12% a month, 60 days ago, due in 240 days."""
    return store.add_loan(
        borrower.borrower_id,
        Decimal("5000"),
        Decimal("12"),
        TODAY - timedelta(days=60),
        TODAY + timedelta(days=240),
    )
