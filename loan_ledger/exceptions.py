"""Custom exception hierarchy for loan-ledger."""


class LoanLedgerError(Exception):
    """Base exception for all loan-ledger errors."""


class EntityNotFoundError(LoanLedgerError):
    """Raised when a referenced entity does not exist."""


class ReferentialIntegrityError(EntityNotFoundError):
    """Raised when a foreign key reference is violated or dependents block a delete."""


class ValidationError(LoanLedgerError):
    """Raised when command input is rejected before any state change."""


class ConfigurationError(LoanLedgerError):
    """Raised when configuration is invalid or missing."""
