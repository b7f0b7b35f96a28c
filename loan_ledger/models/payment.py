"""Payment models."""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal


@dataclass(frozen=True)
class PaymentAllocation:
    """Split of a payment amount between interest and principal."""

    principal: Decimal
    interest: Decimal

    @property
    def amount(self) -> Decimal:
        return self.principal + self.interest


@dataclass
class Payment:
    """Money received against a loan."""

    payment_id: str
    loan_id: str
    date: date
    amount: Decimal
    principal: Decimal  # principal + interest == amount
    interest: Decimal
    notes: str | None = None
