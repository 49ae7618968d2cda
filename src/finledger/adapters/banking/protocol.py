"""Bank adapter protocol for remote transaction sources."""

from __future__ import annotations

from datetime import date
from typing import Protocol, runtime_checkable

from finledger.adapters.banking.credentials import BankCredentials
from finledger.models.ledger import BankAccount, CanonicalFields


@runtime_checkable
class BankAdapter(Protocol):
    """
    Fetches accounts and transactions from one institution's session API.

    Failures (expired session, network error, unexpected response shape) are
    raised as ``AdapterError``; an empty list always means "nothing there".
    Adapters never assign transaction ids.
    """

    @property
    def institution_id(self) -> str:
        """Registry key (e.g. 'dkb')."""
        ...

    @property
    def institution_name(self) -> str:
        ...

    def fetch_accounts(self, credentials: BankCredentials) -> list[BankAccount]:
        ...

    def fetch_transactions(
        self,
        credentials: BankCredentials,
        account_id: str,
        *,
        since: date | None = None,
    ) -> list[CanonicalFields]:
        """Fetch booked transactions, optionally only those on or after ``since``."""
        ...
