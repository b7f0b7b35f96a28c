"""Loan terms and payment generator."""

from __future__ import annotations

import random
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import ROUND_HALF_UP, ROUND_UP, Decimal
from enum import Enum

from loan_ledger.accounting import DAYS_PER_MONTH, DEFAULT_AFTER_DAYS, compute_total_due
from loan_ledger.generators.base import BaseGenerator
from loan_ledger.models import Loan, PaymentFrequency, PaymentSchedule

CENTS = Decimal("0.01")


class RepaymentProfile(str, Enum):
    """How a generated loan behaves relative to its due date."""

    CURRENT = "CURRENT"  # Due date still ahead
    OVERDUE = "OVERDUE"  # Up to 90 days past due
    DEFAULTED = "DEFAULTED"  # More than 90 days past due
    PAID_OFF = "PAID_OFF"  # Settled in full


@dataclass
class LoanTerms:
    """Terms for a loan not yet issued in a store."""

    principal: Decimal
    interest_rate: Decimal  # Monthly percentage
    issue_date: date
    due_date: date
    payment_schedule: PaymentSchedule | None
    notes: str | None = None


@dataclass
class PaymentDraft:
    """A payment to be recorded against a generated loan."""

    date: date
    amount: Decimal


class LoanGenerator(BaseGenerator):
    """Generate synthetic personal loan terms and payments."""

    PROFILES = list(RepaymentProfile)
    PROFILE_WEIGHTS = [0.55, 0.20, 0.10, 0.15]

    TERM_MONTHS = [3, 6, 10, 12, 18, 24]
    RATE_RANGE = (1.0, 5.0)  # Monthly percentage

    def __init__(
        self,
        seed: int | None = None,
        locale: str = "pt_BR",
        frequency: PaymentFrequency = PaymentFrequency.MONTHLY,
    ) -> None:
        super().__init__(seed, locale)
        self.frequency = frequency

    def choose_profile(self) -> RepaymentProfile:
        """Pick a repayment profile using the portfolio weights."""
        return random.choices(self.PROFILES, weights=self.PROFILE_WEIGHTS, k=1)[0]

    def generate_terms(self, as_of: date, profile: RepaymentProfile) -> LoanTerms:
        """Generate loan terms consistent with ``profile`` as of ``as_of``.

        Parameters
        ----------
        as_of : date
            The portfolio's "today".
        profile : RepaymentProfile
            Where the due date falls relative to ``as_of``.

        Returns
        -------
        LoanTerms
            Generated terms.
        """
        term_months = random.choice(self.TERM_MONTHS)
        term_days = term_months * DAYS_PER_MONTH

        if profile == RepaymentProfile.OVERDUE:
            due_date = as_of - timedelta(days=random.randint(1, DEFAULT_AFTER_DAYS))
        elif profile == RepaymentProfile.DEFAULTED:
            due_date = as_of - timedelta(days=random.randint(DEFAULT_AFTER_DAYS + 1, 365))
        else:
            elapsed = random.randint(15, term_days - 1)
            due_date = as_of + timedelta(days=term_days - elapsed)
        issue_date = due_date - timedelta(days=term_days)

        principal = Decimal(random.randint(2, 100) * 500)
        interest_rate = Decimal(str(round(random.uniform(*self.RATE_RANGE), 1)))

        total = principal + principal * interest_rate * term_months / 100
        installment_amount = (total / term_months).quantize(CENTS, rounding=ROUND_HALF_UP)
        next_payment = due_date
        for i in range(1, term_months + 1):
            installment_date = issue_date + timedelta(days=DAYS_PER_MONTH * i)
            if installment_date >= as_of:
                next_payment = installment_date
                break

        return LoanTerms(
            principal=principal,
            interest_rate=interest_rate,
            issue_date=issue_date,
            due_date=due_date,
            payment_schedule=PaymentSchedule(
                frequency=self.frequency,
                next_payment_date=next_payment,
                installments=term_months,
                installment_amount=installment_amount,
            ),
            notes=self.fake.sentence(nb_words=6) if random.random() < 0.3 else None,
        )

    def generate_payments(self, terms: LoanTerms, count: int, as_of: date) -> list[PaymentDraft]:
        """Generate up to ``count`` partial payments made before ``as_of``.

        Payments are spread evenly between issue and the earlier of the due
        date and ``as_of``. Each is at most one installment and there is at
        most one per elapsed month, short of the full term, so together they
        never settle the loan.
        """
        end = min(as_of, terms.due_date)
        span = (end - terms.issue_date).days
        installments = terms.payment_schedule.installments if terms.payment_schedule else 1
        count = min(count, span // DAYS_PER_MONTH, installments - 1)
        if count <= 0:
            return []

        installment = terms.payment_schedule.installment_amount
        step = span // (count + 1)

        payments = []
        for i in range(1, count + 1):
            payment_date = terms.issue_date + timedelta(days=step * i)
            if payment_date > end:
                break
            factor = Decimal(str(round(random.uniform(0.5, 1.0), 2)))
            payments.append(
                PaymentDraft(
                    date=payment_date,
                    amount=(installment * factor).quantize(CENTS, rounding=ROUND_HALF_UP),
                )
            )
        return payments

    @staticmethod
    def settlement_amount(loan: Loan, paid: Decimal, as_of: date) -> Decimal:
        """Amount, rounded up to the cent, that settles ``loan`` on ``as_of``."""
        owed = compute_total_due(loan, as_of) - paid
        return max(CENTS, owed.quantize(CENTS, rounding=ROUND_UP))
