"""Tests for sample data generators."""

from datetime import date, timedelta
from decimal import Decimal

import pytest

from loan_ledger.accounting import compute_total_due
from loan_ledger.generators import (
    BorrowerGenerator,
    LoanGenerator,
    LoanTerms,
    RepaymentProfile,
)
from loan_ledger.models import Loan, PaymentFrequency

AS_OF = date(2024, 6, 15)


def _loan_from(terms: LoanTerms) -> Loan:
    return Loan(
        loan_id="l-gen",
        borrower_id="b-gen",
        borrower_name="Gen",
        principal=terms.principal,
        interest_rate=terms.interest_rate,
        issue_date=terms.issue_date,
        due_date=terms.due_date,
        payment_schedule=terms.payment_schedule,
    )


class TestBorrowerGenerator:
    """Tests for BorrowerGenerator."""

    def test_generate_borrower(self, seed: int) -> None:
        """Test borrower generation."""
        borrower = BorrowerGenerator(seed=seed).generate()

        assert borrower.name
        assert borrower.email is None or "@" in borrower.email

    def test_generate_batch(self, seed: int) -> None:
        """Test generating multiple borrowers."""
        borrowers = list(BorrowerGenerator(seed=seed).generate_batch(5))

        assert len(borrowers) == 5
        assert all(b.name for b in borrowers)

    def test_reproducible(self, seed: int) -> None:
        """Test that the same seed yields the same borrowers."""
        first = list(BorrowerGenerator(seed=seed).generate_batch(3))
        second = list(BorrowerGenerator(seed=seed).generate_batch(3))

        assert first == second


class TestLoanGenerator:
    """Tests for LoanGenerator."""

    @pytest.mark.parametrize("profile", list(RepaymentProfile))
    def test_terms_are_valid(self, seed: int, profile: RepaymentProfile) -> None:
        """Test that generated terms are well formed for every profile."""
        gen = LoanGenerator(seed=seed)

        for _ in range(20):
            terms = gen.generate_terms(AS_OF, profile)

            assert terms.principal > 0
            assert Decimal("1.0") <= terms.interest_rate <= Decimal("5.0")
            assert terms.issue_date < terms.due_date
            assert terms.issue_date < AS_OF
            assert terms.payment_schedule.installments in LoanGenerator.TERM_MONTHS
            assert terms.payment_schedule.installment_amount > 0

    def test_due_date_matches_profile(self, seed: int) -> None:
        """Test where the due date falls for each profile."""
        gen = LoanGenerator(seed=seed)

        for _ in range(20):
            assert gen.generate_terms(AS_OF, RepaymentProfile.CURRENT).due_date > AS_OF

            overdue = gen.generate_terms(AS_OF, RepaymentProfile.OVERDUE)
            assert AS_OF - timedelta(days=90) <= overdue.due_date < AS_OF

            defaulted = gen.generate_terms(AS_OF, RepaymentProfile.DEFAULTED)
            assert defaulted.due_date < AS_OF - timedelta(days=90)

    def test_schedule_frequency(self, seed: int) -> None:
        """Test that the configured frequency is used."""
        gen = LoanGenerator(seed=seed, frequency=PaymentFrequency.BIWEEKLY)

        terms = gen.generate_terms(AS_OF, RepaymentProfile.CURRENT)

        assert terms.payment_schedule.frequency == PaymentFrequency.BIWEEKLY

    @pytest.mark.parametrize("profile", list(RepaymentProfile))
    def test_payments_never_settle(self, seed: int, profile: RepaymentProfile) -> None:
        """Test that partial payments stay within the term and below the amount due."""
        gen = LoanGenerator(seed=seed)

        for _ in range(20):
            terms = gen.generate_terms(AS_OF, profile)
            payments = gen.generate_payments(terms, 10, AS_OF)

            assert len(payments) < terms.payment_schedule.installments
            for payment in payments:
                assert terms.issue_date < payment.date <= min(AS_OF, terms.due_date)
                assert 0 < payment.amount <= terms.payment_schedule.installment_amount
            paid = sum((p.amount for p in payments), Decimal("0"))
            assert paid < compute_total_due(_loan_from(terms), AS_OF)

    def test_no_payments_requested(self, seed: int) -> None:
        """Test that a zero count yields no payments."""
        gen = LoanGenerator(seed=seed)
        terms = gen.generate_terms(AS_OF, RepaymentProfile.CURRENT)

        assert gen.generate_payments(terms, 0, AS_OF) == []

    def test_settlement_amount(self) -> None:
        """Test that the settlement covers the balance, rounded up to the cent."""
        loan = Loan(
            loan_id="l-1",
            borrower_id="b-1",
            borrower_name="Ana",
            principal=Decimal("1000"),
            interest_rate=Decimal("1"),
            issue_date=AS_OF - timedelta(days=10),
            due_date=AS_OF + timedelta(days=80),
        )

        # 1000 * 1 * 10 / 3000 = 3.333...
        amount = LoanGenerator.settlement_amount(loan, Decimal("500"), AS_OF)

        assert amount == Decimal("503.34")

    def test_settlement_amount_minimum(self) -> None:
        """Test that an already covered loan still gets a one-cent settlement."""
        loan = Loan(
            loan_id="l-1",
            borrower_id="b-1",
            borrower_name="Ana",
            principal=Decimal("100"),
            interest_rate=Decimal("0"),
            issue_date=AS_OF,
            due_date=AS_OF + timedelta(days=30),
        )

        assert LoanGenerator.settlement_amount(loan, Decimal("100"), AS_OF) == Decimal("0.01")
