"""Enumeration types for loan-ledger entities."""

from enum import Enum


class LoanStatus(str, Enum):
    ACTIVE = "active"
    PAID = "paid"
    OVERDUE = "overdue"
    DEFAULTED = "defaulted"


class PaymentFrequency(str, Enum):
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"
    CUSTOM = "custom"


class ImportPolicy(str, Enum):
    SKIP_INVALID = "skip_invalid"  # drop bad rows, import the rest
    ALL_OR_NOTHING = "all_or_nothing"
