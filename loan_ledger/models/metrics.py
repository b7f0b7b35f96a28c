"""Portfolio metrics shown on the dashboard."""

from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class DashboardMetrics:
    """Aggregate figures over the whole ledger as of one date."""

    total_outstanding: Decimal  # Remaining balance across non-paid loans
    total_interest_paid: Decimal  # Interest already received on non-paid loans
    total_overdue: Decimal  # Remaining balance on overdue and defaulted loans
    monthly_income: Decimal  # Payments dated in the current calendar month
