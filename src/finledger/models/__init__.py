"""Ledger data model."""

from finledger.models.ledger import (
    Balances,
    BankAccount,
    CanonicalFields,
    LedgerSnapshot,
    StoreMode,
    SyncRecord,
    Transaction,
    TransactionSource,
    User,
)

__all__ = [
    "Balances",
    "BankAccount",
    "CanonicalFields",
    "LedgerSnapshot",
    "StoreMode",
    "SyncRecord",
    "Transaction",
    "TransactionSource",
    "User",
]
