"""Sample portfolio scenario for seeding a ledger session with demo data."""

from __future__ import annotations

import logging
import random
from datetime import date

from loan_ledger.accounting import total_paid
from loan_ledger.config import LedgerConfig, ScenarioConfig
from loan_ledger.generators import BorrowerGenerator, LoanGenerator, RepaymentProfile
from loan_ledger.store import LoanLedgerStore

logger = logging.getLogger(__name__)


class SamplePortfolioScenario:
    """Generate a small, realistic personal-loan portfolio.

    This scenario creates:
    - Borrowers with optional contact details
    - Loans that are current, overdue, defaulted or paid off
    - Partial payments on most loans, and a settling payment on paid-off ones

    Everything goes through the store's public commands, so payment splits
    and loan statuses come from the accounting engine exactly as they would
    for user-entered data.
    """

    def __init__(
        self,
        num_borrowers: int = 5,
        loans_per_borrower: int = 2,
        payments_per_loan: int = 3,
        seed: int | None = None,
        as_of: date | None = None,
        *,
        config: ScenarioConfig | None = None,
        ledger_config: LedgerConfig | None = None,
    ) -> None:
        """Initialize sample portfolio scenario.

        Parameters
        ----------
        num_borrowers : int
            Number of borrowers to generate.
        loans_per_borrower : int
            Maximum loans per borrower (each gets at least one).
        payments_per_loan : int
            Maximum partial payments per loan.
        seed : int | None
            Random seed for reproducibility.
        as_of : date | None
            The portfolio's "today" (default: the current date).
        config : ScenarioConfig | None
            Optional scenario configuration. If provided, overrides the
            count and date arguments.
        ledger_config : LedgerConfig | None
            Configuration for the generated store.
        """
        locale = "pt_BR"
        if config is not None:
            num_borrowers = config.num_borrowers
            loans_per_borrower = config.loans_per_borrower
            payments_per_loan = config.payments_per_loan
            as_of = config.as_of or as_of
            locale = config.locale

        self.num_borrowers = num_borrowers
        self.loans_per_borrower = loans_per_borrower
        self.payments_per_loan = payments_per_loan
        self.seed = seed
        self.config = config
        self.as_of = as_of or date.today()
        self.ledger_config = ledger_config or LedgerConfig()

        if seed is not None:
            random.seed(seed)

        today = self.as_of
        self.store = LoanLedgerStore(config=self.ledger_config, clock=lambda: today)
        self._borrower_gen = BorrowerGenerator(seed=seed, locale=locale)
        self._loan_gen = LoanGenerator(
            seed=seed,
            locale=locale,
            frequency=self.ledger_config.default_payment_frequency,
        )
        self._profiles: dict[str, RepaymentProfile] = {}

    def generate(self) -> LoanLedgerStore:
        """Generate all data for the sample portfolio.

        Returns
        -------
        LoanLedgerStore
            Store containing the generated portfolio.
        """
        logger.info(
            "Starting sample portfolio scenario: %d borrowers as of %s",
            self.num_borrowers,
            self.as_of.isoformat(),
        )

        for profile in self._borrower_gen.generate_batch(self.num_borrowers):
            borrower = self.store.add_borrower(profile.name, profile.email, profile.phone)
            for _ in range(random.randint(1, max(1, self.loans_per_borrower))):
                self._generate_loan(borrower.borrower_id)

        changed = self.store.refresh_statuses()
        logger.info(
            "Generated %d loans and %d payments (%d statuses updated)",
            len(self.store.loans),
            len(self.store.payments),
            changed,
        )
        return self.store

    def get_profiles(self) -> dict[str, RepaymentProfile]:
        """Get the repayment profile each generated loan was built with."""
        return dict(self._profiles)

    def _generate_loan(self, borrower_id: str) -> None:
        profile = self._loan_gen.choose_profile()
        terms = self._loan_gen.generate_terms(self.as_of, profile)
        loan = self.store.add_loan(
            borrower_id,
            terms.principal,
            terms.interest_rate,
            terms.issue_date,
            terms.due_date,
            payment_schedule=terms.payment_schedule,
            notes=terms.notes,
        )
        self._profiles[loan.loan_id] = profile

        for draft in self._loan_gen.generate_payments(terms, self.payments_per_loan, self.as_of):
            self.store.add_payment(loan.loan_id, draft.amount, draft.date)

        if profile == RepaymentProfile.PAID_OFF:
            paid = total_paid(loan, self.store.get_loan_payments(loan.loan_id))
            amount = self._loan_gen.settlement_amount(loan, paid, self.as_of)
            self.store.add_payment(loan.loan_id, amount, self.as_of, notes="Settlement")
