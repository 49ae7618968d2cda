"""Transaction list filtering for the transactions view."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from typing import Literal

from finledger.models.ledger import Transaction

Direction = Literal["income", "expense"]


@dataclass(frozen=True)
class TransactionFilters:
    """
    Optional filter criteria; ``None`` disables a criterion.

    Attributes:
        account_id: Only transactions of this account.
        date_from: Inclusive lower bound on the transaction date.
        date_to: Inclusive upper bound on the transaction date.
        direction: "income" (amount > 0) or "expense" (amount < 0).
        min_amount: Lower bound on the absolute amount.
        max_amount: Upper bound on the absolute amount.
        search: Case-insensitive substring of description or counterparty.
    """

    account_id: str | None = None
    date_from: date | None = None
    date_to: date | None = None
    direction: Direction | None = None
    min_amount: float | None = None
    max_amount: float | None = None
    search: str | None = None

    def matches(self, txn: Transaction) -> bool:
        if self.account_id is not None and txn.account_id != self.account_id:
            return False
        if self.date_from is not None and txn.date < self.date_from:
            return False
        if self.date_to is not None and txn.date > self.date_to:
            return False
        if self.direction == "income" and txn.amount <= 0:
            return False
        if self.direction == "expense" and txn.amount >= 0:
            return False

        magnitude = abs(txn.amount)
        if self.min_amount is not None and magnitude < self.min_amount:
            return False
        if self.max_amount is not None and magnitude > self.max_amount:
            return False

        if self.search:
            haystack = f"{txn.description} {txn.counterparty}".casefold()
            if self.search.strip().casefold() not in haystack:
                return False
        return True


def filter_transactions(
    transactions: Iterable[Transaction], filters: TransactionFilters | None = None
) -> list[Transaction]:
    """Apply ``filters`` and return matches newest first."""
    criteria = filters or TransactionFilters()
    matched = [t for t in transactions if criteria.matches(t)]
    # Stable sort keeps insertion order among same-day transactions
    matched.sort(key=lambda t: t.date, reverse=True)
    return matched
