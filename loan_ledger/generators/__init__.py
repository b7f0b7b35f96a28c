"""Sample data generators for seeding a ledger session."""

from loan_ledger.generators.borrower import BorrowerGenerator, BorrowerProfile
from loan_ledger.generators.loan import LoanGenerator, LoanTerms, PaymentDraft, RepaymentProfile

__all__ = [
    "BorrowerGenerator",
    "BorrowerProfile",
    "LoanGenerator",
    "LoanTerms",
    "PaymentDraft",
    "RepaymentProfile",
]
