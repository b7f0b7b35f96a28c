"""Simple-interest loan accounting.

Every function here is pure: it reads a loan, its payments and a reference
date and returns a value. Nothing is validated or mutated; callers reject
bad input (non-positive amounts, inverted dates) before getting here.

Interest accrues linearly from ``issue_date`` until ``due_date`` at
``interest_rate`` percent per 30-day month. Nothing accrues past the due
date, and nothing is compounded.
"""

from datetime import date
from decimal import MAX_PREC, Decimal, localcontext
from typing import Iterable

from loan_ledger.models import Loan, LoanStatus, Payment, PaymentAllocation

DAYS_PER_MONTH = 30
DEFAULT_AFTER_DAYS = 90  # Days past due before a loan counts as defaulted

ZERO = Decimal("0")


def days_between(start: date, end: date) -> int:
    """Whole calendar days from ``start`` to ``end`` (negative if reversed)."""
    return (end - start).days


def compute_total_due(loan: Loan, as_of: date) -> Decimal:
    """Principal plus simple interest accrued up to ``as_of``.

    Parameters
    ----------
    loan : Loan
        Loan to evaluate.
    as_of : date
        Reference date. Accrual stops at ``loan.due_date``.

    Returns
    -------
    Decimal
        Amount owed ignoring payments, or zero for a paid loan.
    """
    if loan.status == LoanStatus.PAID:
        return ZERO

    end = min(as_of, loan.due_date)
    elapsed_days = max(0, days_between(loan.issue_date, end))

    # principal * (rate / 100) * (days / 30), divided once to keep exact cases exact
    interest = loan.principal * loan.interest_rate * elapsed_days / (100 * DAYS_PER_MONTH)
    return loan.principal + interest


def compute_accrued_interest(loan: Loan, as_of: date) -> Decimal:
    """Interest accrued since issue as of ``as_of`` (zero for a paid loan)."""
    if loan.status == LoanStatus.PAID:
        return ZERO
    return compute_total_due(loan, as_of) - loan.principal


def total_paid(loan: Loan, payments: Iterable[Payment]) -> Decimal:
    """Sum of payment amounts that belong to ``loan``.

    ``payments`` may hold payments of other loans; they are ignored.
    """
    return sum((p.amount for p in payments if p.loan_id == loan.loan_id), ZERO)


def compute_remaining_balance(loan: Loan, payments: Iterable[Payment], as_of: date) -> Decimal:
    """Amount still owed on ``loan`` as of ``as_of``, never negative."""
    return max(ZERO, compute_total_due(loan, as_of) - total_paid(loan, payments))


def is_overdue(loan: Loan, as_of: date) -> bool:
    """Whether ``as_of`` is past the due date of an unpaid loan."""
    if loan.status == LoanStatus.PAID:
        return False
    return as_of > loan.due_date


def days_overdue(loan: Loan, as_of: date) -> int:
    """Days elapsed since the due date, or 0 when the loan is not overdue."""
    if not is_overdue(loan, as_of):
        return 0
    return days_between(loan.due_date, as_of)


def allocate_payment(loan: Loan, amount: Decimal, payment_date: date) -> PaymentAllocation:
    """Split a payment between accrued interest and principal.

    Interest is settled first. If the payment does not exceed the interest
    accrued as of ``payment_date`` it is all interest; otherwise the accrued
    interest is covered and the rest reduces principal.

    Parameters
    ----------
    loan : Loan
        Loan the payment is made against.
    amount : Decimal
        Payment amount; must already be validated as positive.
    payment_date : date
        Date the payment was received.

    Returns
    -------
    PaymentAllocation
        ``principal + interest == amount`` exactly.
    """
    accrued = compute_accrued_interest(loan, payment_date)

    if amount <= accrued:
        return PaymentAllocation(principal=ZERO, interest=amount)

    # Accrued interest can carry a full context of digits; subtract exactly
    with localcontext() as ctx:
        ctx.prec = MAX_PREC
        principal = amount - accrued
    return PaymentAllocation(principal=principal, interest=accrued)


def determine_status(
    loan: Loan,
    payments: Iterable[Payment],
    as_of: date,
    default_after_days: int = DEFAULT_AFTER_DAYS,
) -> LoanStatus:
    """Derive a loan's lifecycle status from its balance and due date.

    A loan with nothing left to pay is ``PAID`` even when past due. Otherwise
    a loan past its due date is ``OVERDUE``, becoming ``DEFAULTED`` once more
    than ``default_after_days`` days have gone by. Anything else is
    ``ACTIVE``.
    """
    if compute_remaining_balance(loan, payments, as_of) <= 0:
        return LoanStatus.PAID

    if as_of > loan.due_date:
        if days_overdue(loan, as_of) > default_after_days:
            return LoanStatus.DEFAULTED
        return LoanStatus.OVERDUE

    return LoanStatus.ACTIVE
