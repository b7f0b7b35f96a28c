"""Domain models for loan tracking."""

from loan_ledger.models.borrower import Borrower
from loan_ledger.models.enums import ImportPolicy, LoanStatus, PaymentFrequency
from loan_ledger.models.loan import Loan, PaymentSchedule
from loan_ledger.models.metrics import DashboardMetrics
from loan_ledger.models.payment import Payment, PaymentAllocation

__all__ = [
    "Borrower",
    "DashboardMetrics",
    "ImportPolicy",
    "Loan",
    "LoanStatus",
    "Payment",
    "PaymentAllocation",
    "PaymentFrequency",
    "PaymentSchedule",
]
