"""Borrower generator."""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Iterator

from loan_ledger.generators.base import BaseGenerator


@dataclass
class BorrowerProfile:
    """Contact details for a borrower not yet registered in a store."""

    name: str
    email: str | None
    phone: str | None


class BorrowerGenerator(BaseGenerator):
    """Generate synthetic borrower contact details."""

    EMAIL_RATE = 0.85
    PHONE_RATE = 0.90

    def generate(self) -> BorrowerProfile:
        """Generate a single borrower.

        Returns
        -------
        BorrowerProfile
            Generated borrower details. Email and phone are sometimes
            left out, as they are optional.
        """
        return BorrowerProfile(
            name=self.fake.name(),
            email=self.fake.email() if random.random() < self.EMAIL_RATE else None,
            phone=self.fake.phone_number() if random.random() < self.PHONE_RATE else None,
        )

    def generate_batch(self, count: int) -> Iterator[BorrowerProfile]:
        """Generate multiple borrowers.

        Parameters
        ----------
        count : int
            Number of borrowers to generate.

        Yields
        ------
        BorrowerProfile
            Generated borrowers.
        """
        for _ in range(count):
            yield self.generate()
