"""File-backed ledger storage."""

from __future__ import annotations

from finledger.adapters.store.ledger_store import (
    BankAccountCollection,
    CacheEntry,
    LedgerStore,
    StoreLogger,
    SyncHistoryCollection,
    TransactionCollection,
    UserCollection,
)
from finledger.adapters.store.modes import LedgerModes
from finledger.adapters.store.snapshot_file import SnapshotFile

__all__ = [
    "BankAccountCollection",
    "CacheEntry",
    "LedgerModes",
    "LedgerStore",
    "SnapshotFile",
    "StoreLogger",
    "SyncHistoryCollection",
    "TransactionCollection",
    "UserCollection",
]
