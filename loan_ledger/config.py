"""Configuration management for loan-ledger."""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any

from loan_ledger.exceptions import ConfigurationError
from loan_ledger.models.enums import PaymentFrequency


@dataclass
class LedgerConfig:
    """Session-wide lending defaults.

    ``default_interest_rate`` is a monthly percentage, the same convention the
    accounting engine uses for ``Loan.interest_rate``.
    """

    default_interest_rate: Decimal = Decimal("2.5")
    default_payment_frequency: PaymentFrequency = PaymentFrequency.MONTHLY
    default_installments: int = 12
    default_term_days: int = 360
    currency: str = "BRL"
    default_after_days: int = 90
    upcoming_due_days: int = 30
    seed: int | None = None
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        if self.default_interest_rate < 0:
            raise ConfigurationError("default_interest_rate must not be negative")
        if self.default_installments <= 0:
            raise ConfigurationError("default_installments must be positive")
        if self.default_term_days < 0:
            raise ConfigurationError("default_term_days must not be negative")
        if self.default_after_days < 0:
            raise ConfigurationError("default_after_days must not be negative")
        if self.upcoming_due_days < 0:
            raise ConfigurationError("upcoming_due_days must not be negative")

    @classmethod
    def from_env(cls) -> "LedgerConfig":
        """Create config from environment variables."""
        import os

        try:
            frequency = PaymentFrequency(
                os.getenv("LEDGER_DEFAULT_FREQUENCY", PaymentFrequency.MONTHLY.value).lower()
            )
        except ValueError as exc:
            raise ConfigurationError(f"Unknown payment frequency: {exc}") from exc

        try:
            return cls(
                default_interest_rate=Decimal(os.getenv("LEDGER_DEFAULT_INTEREST_RATE", "2.5")),
                default_payment_frequency=frequency,
                default_installments=int(os.getenv("LEDGER_DEFAULT_INSTALLMENTS", "12")),
                default_term_days=int(os.getenv("LEDGER_DEFAULT_TERM_DAYS", "360")),
                currency=os.getenv("LEDGER_CURRENCY", "BRL"),
                default_after_days=int(os.getenv("LEDGER_DEFAULT_AFTER_DAYS", "90")),
                upcoming_due_days=int(os.getenv("LEDGER_UPCOMING_DUE_DAYS", "30")),
                seed=int(os.getenv("SEED")) if os.getenv("SEED") else None,
                log_level=os.getenv("LOG_LEVEL", "INFO"),
            )
        except (ValueError, InvalidOperation) as exc:
            raise ConfigurationError(f"Invalid ledger configuration: {exc}") from exc

    def to_dict(self) -> dict[str, Any]:
        """Convert to a plain dict for display in a settings screen."""
        return {
            "default_interest_rate": str(self.default_interest_rate),
            "default_payment_frequency": self.default_payment_frequency.value,
            "default_installments": self.default_installments,
            "default_term_days": self.default_term_days,
            "currency": self.currency,
            "default_after_days": self.default_after_days,
            "upcoming_due_days": self.upcoming_due_days,
        }


@dataclass
class ScenarioConfig:
    """Configuration for the sample portfolio scenario."""

    num_borrowers: int = 5
    loans_per_borrower: int = 2
    payments_per_loan: int = 3
    as_of: date | None = None
    locale: str = "pt_BR"
