"""In-memory ledger store and bulk import."""

from loan_ledger.store.importer import ImportRecord, ImportResult, RecordOutcome
from loan_ledger.store.ledger import LoanDeletion, LoanLedgerStore

__all__ = [
    "ImportRecord",
    "ImportResult",
    "LoanDeletion",
    "LoanLedgerStore",
    "RecordOutcome",
]
