"""Borrower model."""

from dataclasses import dataclass


@dataclass
class Borrower:
    """Person who owes money on one or more loans."""

    borrower_id: str
    name: str
    email: str | None = None
    phone: str | None = None
