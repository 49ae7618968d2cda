"""Mode-scoped, file-backed document store for users, accounts and transactions."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
import os
from pathlib import Path
import threading
from typing import TypeVar
import uuid

import loguru
from loguru import logger

from finledger.adapters.store.snapshot_file import SnapshotFile
from finledger.errors import StoreCorruptionError
from finledger.models.ledger import (
    BankAccount,
    LedgerSnapshot,
    StoreMode,
    SyncRecord,
    Transaction,
    User,
)

T = TypeVar("T")

FileStamp = tuple[int, int, int]

_PATH_LOCKS: dict[Path, threading.RLock] = {}
_PATH_LOCKS_GUARD = threading.Lock()


def _lock_for(path: Path) -> threading.RLock:
    """Process-wide writer lock shared by every store bound to ``path``."""
    with _PATH_LOCKS_GUARD:
        lock = _PATH_LOCKS.get(path)
        if lock is None:
            lock = threading.RLock()
            _PATH_LOCKS[path] = lock
        return lock


def _detached(snapshot: LedgerSnapshot) -> LedgerSnapshot:
    """Copy whose lists can be changed without touching ``snapshot``."""
    return snapshot.model_copy(
        update={
            "bank_accounts": list(snapshot.bank_accounts),
            "transactions": list(snapshot.transactions),
            "sync_history": list(snapshot.sync_history),
        }
    )


@dataclass(frozen=True)
class CacheEntry:
    """Deserialized snapshot plus the write version it is valid for."""

    snapshot: LedgerSnapshot
    valid_since_write_version: int
    file_stamp: FileStamp | None


class StoreLogger:
    """Handles all logging for LedgerStore with business logic separated."""

    def __init__(self, logger_instance: loguru.Logger = logger) -> None:
        self._logger = logger_instance

    def snapshot_loaded(
        self, mode: StoreMode, path: Path, snapshot: LedgerSnapshot
    ) -> None:
        """Log a snapshot read from disk."""
        self._logger.bind(
            mode=mode.value,
            path=str(path),
            accounts=len(snapshot.bank_accounts),
            transactions=len(snapshot.transactions),
        ).debug(
            "Loaded {} ledger from {} ({} accounts, {} transactions)",
            mode.value,
            path,
            len(snapshot.bank_accounts),
            len(snapshot.transactions),
        )

    def snapshot_written(self, mode: StoreMode, path: Path, write_version: int) -> None:
        """Log a completed atomic write."""
        self._logger.bind(
            mode=mode.value, path=str(path), write_version=write_version
        ).debug("Wrote {} ledger to {} (version {})", mode.value, path, write_version)

    def cache_invalidated(self, mode: StoreMode, write_version: int) -> None:
        """Log explicit cache invalidation."""
        self._logger.bind(mode=mode.value, write_version=write_version).debug(
            "Invalidated {} ledger cache (version {})", mode.value, write_version
        )

    def corruption_detected(self, mode: StoreMode, error: StoreCorruptionError) -> None:
        """Log an unreadable backing file."""
        self._logger.bind(mode=mode.value, path=str(error.path)).error(
            "Ledger file for {} mode is corrupt: {}", mode.value, error
        )

    def bulk_inserted(
        self, mode: StoreMode, collection: str, inserted: int, skipped: int
    ) -> None:
        """Log result of an idempotent bulk insert."""
        self._logger.bind(
            mode=mode.value, collection=collection, inserted=inserted, skipped=skipped
        ).info(
            "Inserted {} {} into {} ledger ({} already present)",
            inserted,
            collection,
            mode.value,
            skipped,
        )

    def seeded(self, mode: StoreMode, transaction_count: int) -> None:
        """Log wholesale seeding of an empty store."""
        self._logger.bind(mode=mode.value, transactions=transaction_count).info(
            "Seeded {} ledger with {} transactions", mode.value, transaction_count
        )

    def backup_written(self, mode: StoreMode, target: Path) -> None:
        """Log a backup snapshot written."""
        self._logger.bind(mode=mode.value, target=str(target)).info(
            "Backed up {} ledger to {}", mode.value, target
        )


class LedgerStore:
    """
    Document store over one mode's snapshot file.

    Reads are served from an in-memory cache entry while the store's write
    counter and the backing file's stamp (inode, mtime, size) still match
    it; every mutation and every explicit ``invalidate()`` bumps the counter.
    Callers get a detached copy, so changing it never alters the cache.
    Mutations are serialized per backing file and run
    read -> apply -> atomic write -> cache refresh inside one critical section.
    """

    def __init__(
        self,
        path: Path,
        mode: StoreMode = StoreMode.REAL,
        *,
        store_logger: StoreLogger | None = None,
    ) -> None:
        self._file = SnapshotFile(path)
        self._mode = mode
        self._logger = store_logger or StoreLogger()
        self._write_lock = _lock_for(self._file.path)
        self._cache_lock = threading.Lock()
        self._write_version = 0
        self._cache: CacheEntry | None = None

        self.users = UserCollection(self)
        self.bank_accounts = BankAccountCollection(self)
        self.transactions = TransactionCollection(self)
        self.sync_history = SyncHistoryCollection(self)

    @property
    def mode(self) -> StoreMode:
        return self._mode

    @property
    def path(self) -> Path:
        return self._file.path

    @property
    def write_version(self) -> int:
        return self._write_version

    @property
    def store_logger(self) -> StoreLogger:
        return self._logger

    # -------- Reads --------

    def snapshot(self) -> LedgerSnapshot:
        """Return a copy of the current snapshot, reloading it when stale.

        Raises:
            StoreCorruptionError: If the backing file changed and is unreadable
        """
        with self._cache_lock:
            entry = self._cache
            version = self._write_version
        stamp = self._file_stamp()
        if (
            entry is not None
            and entry.valid_since_write_version == version
            and entry.file_stamp == stamp
        ):
            return _detached(entry.snapshot)

        snapshot = self._load()
        with self._cache_lock:
            if self._write_version == version:
                self._cache = CacheEntry(snapshot, version, stamp)
        return _detached(snapshot)

    def invalidate(self) -> None:
        """Drop the cached snapshot; the next read goes back to disk."""
        with self._cache_lock:
            self._write_version += 1
            self._cache = None
            version = self._write_version
        self._logger.cache_invalidated(self._mode, version)

    # -------- Mutations --------

    def seed_if_empty(self, factory: Callable[[], LedgerSnapshot]) -> bool:
        """Replace the whole store with ``factory()`` when it holds no data."""

        def apply(current: LedgerSnapshot) -> tuple[LedgerSnapshot | None, bool]:
            if not current.is_empty():
                return None, False
            return factory(), True

        seeded = self.mutate(apply)
        if seeded:
            self._logger.seeded(self._mode, self.transactions.count())
        return seeded

    def backup(self, target: Path) -> None:
        """Write the current snapshot to ``target``, overwriting it."""
        with self._write_lock:
            snapshot = self._current_for_write()
            SnapshotFile(target).write(snapshot)
        self._logger.backup_written(self._mode, target)

    def mutate(
        self, apply: Callable[[LedgerSnapshot], tuple[LedgerSnapshot | None, T]]
    ) -> T:
        """Apply a change under the writer lock.

        ``apply`` receives a working copy whose lists may be mutated freely and
        returns the snapshot to persist (``None`` when nothing changed) plus a
        result for the caller.
        """
        with self._write_lock:
            working = _detached(self._current_for_write())
            updated, result = apply(working)
            if updated is None:
                return result

            self._file.write(updated)
            stamp = self._file_stamp()
            with self._cache_lock:
                self._write_version += 1
                self._cache = CacheEntry(
                    _detached(updated), self._write_version, stamp
                )
                version = self._write_version
            self._logger.snapshot_written(self._mode, self.path, version)
            return result

    # -------- Internal helpers --------

    def _current_for_write(self) -> LedgerSnapshot:
        # Writers re-check the file so another store bound to the same path
        # can never be overwritten from a stale cache.
        with self._cache_lock:
            entry = self._cache
            version = self._write_version
        stamp = self._file_stamp()
        if (
            entry is not None
            and entry.valid_since_write_version == version
            and entry.file_stamp == stamp
        ):
            return entry.snapshot

        snapshot = self._load()
        with self._cache_lock:
            self._write_version += 1
            self._cache = CacheEntry(snapshot, self._write_version, stamp)
        return snapshot

    def _load(self) -> LedgerSnapshot:
        try:
            snapshot = self._file.read()
        except StoreCorruptionError as exc:
            self._logger.corruption_detected(self._mode, exc)
            raise
        if snapshot is None:
            return LedgerSnapshot()
        self._logger.snapshot_loaded(self._mode, self.path, snapshot)
        return snapshot

    def _file_stamp(self) -> FileStamp | None:
        try:
            st = os.stat(self.path)
        except FileNotFoundError:
            return None
        return (st.st_ino, st.st_mtime_ns, st.st_size)


class UserCollection:
    """Singleton user record."""

    def __init__(self, store: LedgerStore) -> None:
        self._store = store

    def get(self) -> User | None:
        return self._store.snapshot().user

    def set(self, user: User) -> None:
        def apply(working: LedgerSnapshot) -> tuple[LedgerSnapshot | None, None]:
            working.user = user
            return working, None

        self._store.mutate(apply)

    def ensure(self, name: str) -> User:
        """Create the user with a fresh UUID, or rename it keeping the id."""

        def apply(working: LedgerSnapshot) -> tuple[LedgerSnapshot | None, User]:
            current = working.user
            if current is not None and current.name == name:
                return None, current
            if current is None:
                user = User(id=str(uuid.uuid4()), name=name)
            else:
                user = current.model_copy(update={"name": name})
            working.user = user
            return working, user

        return self._store.mutate(apply)


class BankAccountCollection:
    """Bank accounts keyed by ``account_id``."""

    def __init__(self, store: LedgerStore) -> None:
        self._store = store

    def get(self) -> list[BankAccount]:
        return self._store.snapshot().bank_accounts

    def get_by_id(self, account_id: str) -> BankAccount | None:
        for account in self._store.snapshot().bank_accounts:
            if account.account_id == account_id:
                return account
        return None

    def count(self) -> int:
        return len(self._store.snapshot().bank_accounts)

    def insert_bulk(self, accounts: Iterable[BankAccount]) -> int:
        """Append accounts whose id is not yet known; return how many were added."""
        incoming = list(accounts)

        def apply(working: LedgerSnapshot) -> tuple[LedgerSnapshot | None, int]:
            known = {a.account_id for a in working.bank_accounts}
            added = 0
            for account in incoming:
                if account.account_id in known:
                    continue
                working.bank_accounts.append(account)
                known.add(account.account_id)
                added += 1
            return (working if added else None), added

        added = self._store.mutate(apply)
        self._store.store_logger.bulk_inserted(
            self._store.mode, "bank accounts", added, len(incoming) - added
        )
        return added

    def upsert(self, account: BankAccount) -> bool:
        """Insert or replace one account; return True when it was new."""
        return self.upsert_bulk([account]) == 1

    def upsert_bulk(self, accounts: Iterable[BankAccount]) -> int:
        """Insert or replace accounts in place; return how many were new."""
        incoming = list(accounts)

        def apply(working: LedgerSnapshot) -> tuple[LedgerSnapshot | None, int]:
            positions = {a.account_id: i for i, a in enumerate(working.bank_accounts)}
            created = 0
            for account in incoming:
                index = positions.get(account.account_id)
                if index is None:
                    positions[account.account_id] = len(working.bank_accounts)
                    working.bank_accounts.append(account)
                    created += 1
                else:
                    working.bank_accounts[index] = account
            return (working if incoming else None), created

        return self._store.mutate(apply)


class TransactionCollection:
    """Immutable transactions keyed by their content-derived id."""

    def __init__(self, store: LedgerStore) -> None:
        self._store = store

    def get(self) -> list[Transaction]:
        return self._store.snapshot().transactions

    def get_by_id(self, transaction_id: str) -> Transaction | None:
        for txn in self._store.snapshot().transactions:
            if txn.transaction_id == transaction_id:
                return txn
        return None

    def get_by_account_id(self, account_id: str) -> list[Transaction]:
        return [
            t for t in self._store.snapshot().transactions if t.account_id == account_id
        ]

    def count(self) -> int:
        return len(self._store.snapshot().transactions)

    def insert_bulk(self, transactions: Sequence[Transaction]) -> int:
        """
        Append transactions whose id is not yet stored.

        Ids already present, and repeats within ``transactions``, are skipped.
        The membership check runs inside the store's critical section, so the
        returned count is exact even when ingestions race.

        Returns:
            Number of transactions actually appended
        """

        def apply(working: LedgerSnapshot) -> tuple[LedgerSnapshot | None, int]:
            known = {t.transaction_id for t in working.transactions}
            added = 0
            for txn in transactions:
                if txn.transaction_id in known:
                    continue
                working.transactions.append(txn)
                known.add(txn.transaction_id)
                added += 1
            return (working if added else None), added

        added = self._store.mutate(apply)
        self._store.store_logger.bulk_inserted(
            self._store.mode, "transactions", added, len(transactions) - added
        )
        return added


class SyncHistoryCollection:
    """Append-only log of successful bank syncs."""

    def __init__(self, store: LedgerStore) -> None:
        self._store = store

    def get(self) -> list[SyncRecord]:
        return self._store.snapshot().sync_history

    def append(self, record: SyncRecord) -> None:
        def apply(working: LedgerSnapshot) -> tuple[LedgerSnapshot | None, None]:
            working.sync_history.append(record)
            return working, None

        self._store.mutate(apply)

    def last_for(self, institution_id: str) -> SyncRecord | None:
        records = [r for r in self.get() if r.institution_id == institution_id]
        if not records:
            return None
        return max(records, key=lambda r: r.synced_at)
