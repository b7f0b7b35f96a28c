"""Tests for custom exception hierarchy."""

from loan_ledger.exceptions import (
    ConfigurationError,
    EntityNotFoundError,
    LoanLedgerError,
    ReferentialIntegrityError,
    ValidationError,
)


class TestExceptionHierarchy:
    """Test exception inheritance chain."""

    def test_loan_ledger_error_is_exception(self) -> None:
        assert isinstance(LoanLedgerError("test"), Exception)

    def test_entity_not_found_is_loan_ledger_error(self) -> None:
        assert isinstance(EntityNotFoundError("test"), LoanLedgerError)

    def test_referential_integrity_is_entity_not_found(self) -> None:
        err = ReferentialIntegrityError("test")
        assert isinstance(err, EntityNotFoundError)
        assert isinstance(err, LoanLedgerError)

    def test_validation_error_is_loan_ledger_error(self) -> None:
        err = ValidationError("test")
        assert isinstance(err, LoanLedgerError)
        assert not isinstance(err, EntityNotFoundError)

    def test_configuration_error_is_loan_ledger_error(self) -> None:
        assert isinstance(ConfigurationError("test"), LoanLedgerError)

    def test_exception_message(self) -> None:
        err = ReferentialIntegrityError("Borrower b-001 not found")
        assert str(err) == "Borrower b-001 not found"
