"""In-memory loan ledger with referential integrity and derived loan status."""

import logging
import uuid
from dataclasses import dataclass, field, replace
from datetime import date, timedelta
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Iterable, Mapping

from loan_ledger.accounting import (
    ZERO,
    allocate_payment,
    compute_remaining_balance,
    determine_status,
)
from loan_ledger.config import LedgerConfig
from loan_ledger.exceptions import (
    EntityNotFoundError,
    ReferentialIntegrityError,
    ValidationError,
)
from loan_ledger.models import (
    Borrower,
    DashboardMetrics,
    ImportPolicy,
    Loan,
    LoanStatus,
    Payment,
    PaymentSchedule,
)
from loan_ledger.store.importer import (
    LOAN_ID,
    ImportRecord,
    ImportResult,
    RecordOutcome,
    parse_record,
    read_csv_rows,
)

logger = logging.getLogger(__name__)

OVERDUE_STATUSES = (LoanStatus.OVERDUE, LoanStatus.DEFAULTED)


def new_id() -> str:
    """Generate a unique entity identifier."""
    return uuid.uuid4().hex


@dataclass(frozen=True)
class LoanDeletion:
    """Result of a loan delete request.

    When the loan still has payments and the caller did not confirm the
    cascade, nothing is deleted and ``requires_confirmation`` is set so the
    caller can ask the user and retry with ``confirm_cascade=True``.
    """

    loan_id: str
    deleted: bool
    requires_confirmation: bool = False
    payments_deleted: int = 0


@dataclass
class LoanLedgerStore:
    """In-memory store for borrowers, loans and payments.

    One store backs one session. Every payment mutation re-derives the
    owning loan's status through the accounting engine, so a loan's stored
    status always matches its balance and due date right after the change.
    ``clock`` supplies "today" and is read once per operation.
    """

    config: LedgerConfig = field(default_factory=LedgerConfig)
    clock: Callable[[], date] = date.today

    # Primary entities
    borrowers: dict[str, Borrower] = field(default_factory=dict)
    loans: dict[str, Loan] = field(default_factory=dict)
    payments: dict[str, Payment] = field(default_factory=dict)

    # Relationship indexes
    _borrower_loans: dict[str, list[str]] = field(default_factory=dict)
    _loan_payments: dict[str, list[str]] = field(default_factory=dict)

    # Borrowers
    def add_borrower(
        self,
        name: str,
        email: str | None = None,
        phone: str | None = None,
    ) -> Borrower:
        """Register a new borrower."""
        borrower = Borrower(
            borrower_id=new_id(),
            name=_require_name(name),
            email=email or None,
            phone=phone or None,
        )
        self._insert_borrower(borrower)
        logger.debug("Added borrower %s", borrower.borrower_id)
        return borrower

    def update_borrower(self, borrower: Borrower) -> None:
        """Replace a borrower and carry a rename over to their loans."""
        if borrower.borrower_id not in self.borrowers:
            raise EntityNotFoundError(f"Borrower {borrower.borrower_id} not found")
        borrower.name = _require_name(borrower.name)

        self.borrowers[borrower.borrower_id] = borrower
        for loan in self.get_borrower_loans(borrower.borrower_id):
            loan.borrower_name = borrower.name
        logger.debug("Updated borrower %s", borrower.borrower_id)

    def delete_borrower(self, borrower_id: str) -> None:
        """Remove a borrower who has no loans."""
        if borrower_id not in self.borrowers:
            raise EntityNotFoundError(f"Borrower {borrower_id} not found")
        if self._borrower_loans.get(borrower_id):
            raise ReferentialIntegrityError(
                f"Borrower {borrower_id} still has loans and cannot be deleted"
            )

        del self.borrowers[borrower_id]
        self._borrower_loans.pop(borrower_id, None)
        logger.debug("Deleted borrower %s", borrower_id)

    # Loans
    def add_loan(
        self,
        borrower_id: str,
        principal: Any,
        interest_rate: Any,
        issue_date: date,
        due_date: date,
        payment_schedule: PaymentSchedule | None = None,
        notes: str | None = None,
    ) -> Loan:
        """Issue a new loan. Its status always starts as ``ACTIVE``.

        ``interest_rate`` falls back to ``config.default_interest_rate`` when
        it is ``None``.
        """
        borrower = self._require_borrower(borrower_id)
        if interest_rate is None:
            interest_rate = self.config.default_interest_rate
        loan = Loan(
            loan_id=new_id(),
            borrower_id=borrower_id,
            borrower_name=borrower.name,
            principal=_as_decimal(principal, "principal"),
            interest_rate=_as_decimal(interest_rate, "interest_rate"),
            issue_date=issue_date,
            due_date=due_date,
            status=LoanStatus.ACTIVE,
            payment_schedule=payment_schedule,
            notes=notes or None,
        )
        _validate_loan_terms(loan)

        self._insert_loan(loan)
        logger.debug("Issued loan %s to borrower %s", loan.loan_id, borrower_id)
        return loan

    def update_loan(self, loan: Loan) -> None:
        """Replace a loan record as given, including its status.

        Existing payment allocations are left as they were.
        """
        if loan.loan_id not in self.loans:
            raise EntityNotFoundError(f"Loan {loan.loan_id} not found")
        borrower = self._require_borrower(loan.borrower_id)
        loan.principal = _as_decimal(loan.principal, "principal")
        loan.interest_rate = _as_decimal(loan.interest_rate, "interest_rate")
        _validate_loan_terms(loan)

        _move_child(self._borrower_loans, loan.loan_id, loan.borrower_id)
        loan.borrower_name = borrower.name
        self.loans[loan.loan_id] = loan
        logger.debug("Updated loan %s", loan.loan_id)

    def delete_loan(self, loan_id: str, confirm_cascade: bool = False) -> LoanDeletion:
        """Delete a loan, and its payments once the cascade is confirmed."""
        loan = self.loans.get(loan_id)
        if loan is None:
            raise EntityNotFoundError(f"Loan {loan_id} not found")

        payment_ids = list(self._loan_payments.get(loan_id, []))
        if payment_ids and not confirm_cascade:
            return LoanDeletion(loan_id=loan_id, deleted=False, requires_confirmation=True)

        for payment_id in payment_ids:
            del self.payments[payment_id]
        self._loan_payments.pop(loan_id, None)
        self._borrower_loans[loan.borrower_id].remove(loan_id)
        del self.loans[loan_id]

        logger.info("Deleted loan %s with %d payment(s)", loan_id, len(payment_ids))
        return LoanDeletion(loan_id=loan_id, deleted=True, payments_deleted=len(payment_ids))

    # Payments
    def add_payment(
        self,
        loan_id: str,
        amount: Any,
        payment_date: date,
        notes: str | None = None,
    ) -> Payment:
        """Record a payment, splitting it between interest and principal."""
        amount = _require_positive(amount, "amount")
        loan = self.loans.get(loan_id)
        if loan is None:
            raise ReferentialIntegrityError(f"Loan {loan_id} not found")
        today = self.clock()

        allocation = allocate_payment(_unpaid_view(loan), amount, payment_date)
        payment = Payment(
            payment_id=new_id(),
            loan_id=loan_id,
            date=payment_date,
            amount=amount,
            principal=allocation.principal,
            interest=allocation.interest,
            notes=notes or None,
        )

        self.payments[payment.payment_id] = payment
        self._loan_payments[loan_id].append(payment.payment_id)
        logger.debug("Recorded payment %s of %s on loan %s", payment.payment_id, amount, loan_id)

        self._refresh_status(loan_id, today)
        return payment

    def update_payment(self, payment: Payment) -> None:
        """Replace a payment record; its split must still add up to its amount."""
        if payment.payment_id not in self.payments:
            raise EntityNotFoundError(f"Payment {payment.payment_id} not found")
        if payment.loan_id not in self.loans:
            raise ReferentialIntegrityError(f"Loan {payment.loan_id} not found")

        payment.amount = _require_positive(payment.amount, "amount")
        payment.principal = _as_decimal(payment.principal, "principal")
        payment.interest = _as_decimal(payment.interest, "interest")
        if payment.principal < 0 or payment.interest < 0:
            raise ValidationError("Payment principal and interest must not be negative")
        if payment.principal + payment.interest != payment.amount:
            raise ValidationError(
                f"Payment split {payment.principal} + {payment.interest} "
                f"does not add up to {payment.amount}"
            )
        today = self.clock()

        previous_loan_id = _move_child(self._loan_payments, payment.payment_id, payment.loan_id)
        self.payments[payment.payment_id] = payment
        logger.debug("Updated payment %s", payment.payment_id)

        self._refresh_status(payment.loan_id, today)
        if previous_loan_id != payment.loan_id:
            self._refresh_status(previous_loan_id, today)

    def delete_payment(self, payment_id: str) -> None:
        """Remove a payment and re-derive its loan's status."""
        payment = self.payments.get(payment_id)
        if payment is None:
            raise EntityNotFoundError(f"Payment {payment_id} not found")
        today = self.clock()

        del self.payments[payment_id]
        self._loan_payments[payment.loan_id].remove(payment_id)
        logger.debug("Deleted payment %s", payment_id)

        self._refresh_status(payment.loan_id, today)

    def refresh_statuses(self) -> int:
        """Re-derive every loan's status as of today.

        Statuses only change on payment mutations, so they go stale as days
        pass. Returns the number of loans whose status changed.
        """
        today = self.clock()
        changed = sum(1 for loan_id in list(self.loans) if self._refresh_status(loan_id, today))
        logger.info("Refreshed loan statuses: %d changed", changed)
        return changed

    # Query methods
    def get_borrower(self, borrower_id: str) -> Borrower | None:
        """Get a borrower by id."""
        return self.borrowers.get(borrower_id)

    def get_loan(self, loan_id: str) -> Loan | None:
        """Get a loan by id."""
        return self.loans.get(loan_id)

    def get_payment(self, payment_id: str) -> Payment | None:
        """Get a payment by id."""
        return self.payments.get(payment_id)

    def get_borrower_loans(self, borrower_id: str) -> list[Loan]:
        """Get all loans for a borrower."""
        loan_ids = self._borrower_loans.get(borrower_id, [])
        return [self.loans[lid] for lid in loan_ids]

    def get_loan_payments(self, loan_id: str) -> list[Payment]:
        """Get all payments for a loan."""
        payment_ids = self._loan_payments.get(loan_id, [])
        return [self.payments[pid] for pid in payment_ids]

    def get_overdue_loans(self) -> list[Loan]:
        """Get loans whose stored status is overdue or defaulted."""
        return [loan for loan in self.loans.values() if loan.status in OVERDUE_STATUSES]

    def get_upcoming_due_loans(self, days: int | None = None) -> list[Loan]:
        """Get unpaid loans falling due between today and ``days`` from now, inclusive."""
        if days is None:
            days = self.config.upcoming_due_days
        if days < 0:
            raise ValidationError("days must not be negative")
        today = self.clock()
        horizon = today + timedelta(days=days)
        return [
            loan
            for loan in self.loans.values()
            if loan.status != LoanStatus.PAID and today <= loan.due_date <= horizon
        ]

    def calculate_metrics(self) -> DashboardMetrics:
        """Aggregate dashboard figures as of today."""
        today = self.clock()

        outstanding = ZERO
        interest_paid = ZERO
        overdue = ZERO
        for loan in self.loans.values():
            if loan.status == LoanStatus.PAID:
                continue
            loan_payments = self.get_loan_payments(loan.loan_id)
            remaining = compute_remaining_balance(loan, loan_payments, today)

            outstanding += remaining
            interest_paid += sum((p.interest for p in loan_payments), ZERO)
            if loan.status in OVERDUE_STATUSES:
                overdue += remaining

        monthly_income = sum(
            (
                p.amount
                for p in self.payments.values()
                if p.date.year == today.year and p.date.month == today.month
            ),
            ZERO,
        )

        return DashboardMetrics(
            total_outstanding=outstanding,
            total_interest_paid=interest_paid,
            total_overdue=overdue,
            monthly_income=monthly_income,
        )

    def summary(self) -> dict[str, int]:
        """Return summary counts of all entities."""
        return {
            "borrowers": len(self.borrowers),
            "loans": len(self.loans),
            "payments": len(self.payments),
        }

    # Bulk import
    def import_csv(
        self, text: str, policy: ImportPolicy = ImportPolicy.SKIP_INVALID
    ) -> ImportResult:
        """Import loans from CSV text. See ``import_records``."""
        try:
            rows = read_csv_rows(text)
        except ValidationError as exc:
            logger.warning("Rejected import file: %s", exc)
            return ImportResult.failure(str(exc))
        return self.import_records(rows, policy)

    def import_records(
        self,
        rows: Iterable[Mapping[str, str | None]],
        policy: ImportPolicy = ImportPolicy.SKIP_INVALID,
    ) -> ImportResult:
        """Upsert borrowers and loans from header-keyed rows.

        Each valid row creates its borrower when the id is new and inserts or
        replaces its loan by id. Payments are never touched. Invalid rows are
        skipped with a reason, or fail the batch under
        ``ImportPolicy.ALL_OR_NOTHING``. The batch is applied as a whole: on
        failure the store is left exactly as it was.
        """
        today = self.clock()
        snapshot = self._snapshot()
        outcomes: list[RecordOutcome] = []

        try:
            for row_number, row in enumerate(rows, start=1):
                try:
                    record = parse_record(row, today, self.config)
                    self._upsert_record(record)
                except ValidationError as exc:
                    loan_id = (row.get(LOAN_ID) or "").strip() or None
                    logger.warning("Skipping import row %d: %s", row_number, exc)
                    outcomes.append(RecordOutcome(row_number, loan_id, imported=False, reason=str(exc)))
                    continue
                outcomes.append(RecordOutcome(row_number, record.loan_id, imported=True))
        except Exception as exc:
            self._restore(snapshot)
            logger.exception("Import failed, no records applied")
            return ImportResult.failure(f"Import failed: {exc}", outcomes)

        imported = sum(1 for o in outcomes if o.imported)
        skipped = len(outcomes) - imported

        if skipped and policy == ImportPolicy.ALL_OR_NOTHING:
            self._restore(snapshot)
            logger.info("Import rejected: %d invalid row(s)", skipped)
            return ImportResult.failure(
                f"Import rejected: {skipped} invalid row(s), nothing imported", outcomes
            )

        logger.info(
            "Imported %d loan(s), skipped %d row(s)",
            imported,
            skipped,
            extra={"extra": {"imported": imported, "skipped": skipped, "policy": policy.value}},
        )
        return ImportResult(
            success=True,
            imported=imported,
            skipped=skipped,
            message=f"Imported {imported} loan(s), skipped {skipped} row(s)",
            outcomes=outcomes,
        )

    def _upsert_record(self, record: ImportRecord) -> None:
        borrower = self.borrowers.get(record.borrower_id)
        if borrower is None:
            if record.borrower_name is None:
                raise ValidationError(f"Borrower {record.borrower_id} is new and has no name")
            borrower = Borrower(
                borrower_id=record.borrower_id,
                name=record.borrower_name,
                email=record.borrower_email,
                phone=record.borrower_phone,
            )
            self._insert_borrower(borrower)

        loan = Loan(
            loan_id=record.loan_id,
            borrower_id=borrower.borrower_id,
            borrower_name=borrower.name,
            principal=record.principal,
            interest_rate=record.interest_rate,
            issue_date=record.issue_date,
            due_date=record.due_date,
            status=record.status,
            payment_schedule=record.payment_schedule,
            notes=record.notes,
        )

        if loan.loan_id not in self.loans:
            self._insert_loan(loan)
            return

        _move_child(self._borrower_loans, loan.loan_id, loan.borrower_id)
        self.loans[loan.loan_id] = loan

    # Internals
    def _insert_borrower(self, borrower: Borrower) -> None:
        self.borrowers[borrower.borrower_id] = borrower
        self._borrower_loans[borrower.borrower_id] = []

    def _insert_loan(self, loan: Loan) -> None:
        self.loans[loan.loan_id] = loan
        self._borrower_loans[loan.borrower_id].append(loan.loan_id)
        self._loan_payments[loan.loan_id] = []

    def _require_borrower(self, borrower_id: str) -> Borrower:
        borrower = self.borrowers.get(borrower_id)
        if borrower is None:
            raise ReferentialIntegrityError(f"Borrower {borrower_id} not found")
        return borrower

    def _refresh_status(self, loan_id: str, today: date) -> bool:
        """Re-derive one loan's status; returns whether it changed."""
        loan = self.loans.get(loan_id)
        if loan is None:
            return False

        new_status = determine_status(
            _unpaid_view(loan),
            self.get_loan_payments(loan_id),
            today,
            self.config.default_after_days,
        )
        if new_status == loan.status:
            return False

        logger.info("Loan %s status %s -> %s", loan_id, loan.status.value, new_status.value)
        loan.status = new_status
        return True

    def _snapshot(self) -> dict[str, Any]:
        return {
            "borrowers": dict(self.borrowers),
            "loans": dict(self.loans),
            "payments": dict(self.payments),
            "_borrower_loans": {k: list(v) for k, v in self._borrower_loans.items()},
            "_loan_payments": {k: list(v) for k, v in self._loan_payments.items()},
        }

    def _restore(self, snapshot: dict[str, Any]) -> None:
        for name, value in snapshot.items():
            setattr(self, name, value)


def _unpaid_view(loan: Loan) -> Loan:
    """Copy of ``loan`` with its status cleared, so terms are evaluated afresh.

    A stored ``PAID`` status zeroes the amount due, which would pin a loan at
    paid even after its payments are removed.
    """
    if loan.status != LoanStatus.PAID:
        return loan
    return replace(loan, status=LoanStatus.ACTIVE)


def _move_child(index: dict[str, list[str]], child_id: str, parent_id: str) -> str:
    """Re-file ``child_id`` under ``parent_id``; returns the previous parent."""
    previous = next(pid for pid, children in index.items() if child_id in children)
    if previous != parent_id:
        index[previous].remove(child_id)
        index[parent_id].append(child_id)
    return previous


def _require_name(name: str | None) -> str:
    if name is None or not name.strip():
        raise ValidationError("Borrower name is required")
    return name.strip()


def _as_decimal(value: Any, field_name: str) -> Decimal:
    if isinstance(value, Decimal):
        number = value
    else:
        try:
            number = Decimal(str(value))
        except InvalidOperation as exc:
            raise ValidationError(f"{field_name} is not a number: {value!r}") from exc
    if not number.is_finite():
        raise ValidationError(f"{field_name} is not a number: {value!r}")
    return number


def _require_positive(value: Any, field_name: str) -> Decimal:
    number = _as_decimal(value, field_name)
    if number <= 0:
        raise ValidationError(f"{field_name} must be positive")
    return number


def _validate_loan_terms(loan: Loan) -> None:
    if loan.principal <= 0:
        raise ValidationError("principal must be positive")
    if loan.interest_rate < 0:
        raise ValidationError("interest_rate must not be negative")
    if loan.due_date < loan.issue_date:
        raise ValidationError("due_date must not precede issue_date")
