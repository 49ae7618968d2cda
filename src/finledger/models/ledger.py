"""Ledger record types persisted in a mode's snapshot file."""

from __future__ import annotations

import datetime as dt
from enum import Enum
from typing import Any, Literal, Self

from pydantic import BaseModel, ConfigDict, Field

TransactionSource = Literal["csv", "sync", "demo"]


class StoreMode(str, Enum):
    """Isolated storage namespace selector."""

    REAL = "real"
    DEMO = "demo"


class LedgerBaseModel(BaseModel):
    """Shared base for ledger records with a short parse alias."""

    model_config = ConfigDict(frozen=True)

    @classmethod
    def parse(cls, data: Any) -> Self:
        return cls.model_validate(data)


class User(LedgerBaseModel):
    id: str
    name: str


class Balances(LedgerBaseModel):
    current: float
    available: float | None = None
    currency: str = "EUR"


class BankAccount(LedgerBaseModel):
    account_id: str
    name: str
    institution_id: str
    balances: Balances
    iban: str | None = None
    account_type: str | None = None
    last_synced_at: dt.datetime | None = None


class CanonicalFields(LedgerBaseModel):
    """
    Source-agnostic representation of a transaction event before id assignment.

    Amounts are signed: negative is an expense, positive is income.
    ``raw_source`` keeps the original CSV row or API payload and never
    participates in identity.
    """

    account_id: str
    date: dt.date
    amount: float
    description: str
    counterparty: str = ""
    currency: str = "EUR"
    external_reference: str | None = None
    raw_source: dict[str, Any] = Field(default_factory=dict)


class Transaction(CanonicalFields):
    transaction_id: str
    source: TransactionSource


class SyncRecord(LedgerBaseModel):
    institution_id: str
    synced_at: dt.datetime
    accounts_updated: int
    transactions_fetched: int
    transactions_added: int


class LedgerSnapshot(LedgerBaseModel):
    """Full document graph of one store mode."""

    model_config = ConfigDict(frozen=False)

    version: int = 1
    user: User | None = None
    bank_accounts: list[BankAccount] = Field(default_factory=list)
    transactions: list[Transaction] = Field(default_factory=list)
    sync_history: list[SyncRecord] = Field(default_factory=list)

    def is_empty(self) -> bool:
        return not self.bank_accounts and not self.transactions
