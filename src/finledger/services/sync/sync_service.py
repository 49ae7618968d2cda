from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, date, datetime, timedelta
from typing import Literal

import loguru
from loguru import logger

from finledger.adapters.banking.credentials import BankingConfig
from finledger.adapters.banking.registry import AdapterRegistry
from finledger.adapters.store import LedgerStore
from finledger.core.calendar import to_canonical_date
from finledger.errors import AdapterError, ConfigMissing
from finledger.models.ledger import BankAccount, CanonicalFields, SyncRecord
from finledger.services.ingest.pipeline import IngestionPipeline, IngestLogger

# Entries booked after the previous sync can carry an earlier value date
SYNC_LOOKBACK = timedelta(days=14)

SyncErrorKind = Literal["config_missing", "adapter_missing", "adapter_error"]
SyncStatus = Literal["success", "error"]


@dataclass(frozen=True)
class SyncError:
    kind: SyncErrorKind
    institution_id: str
    message: str


@dataclass(frozen=True)
class SyncMetadata:
    """Outcome of one sync cycle, returned to the caller instead of raising."""

    institution_id: str
    status: SyncStatus
    accounts_updated: int
    transactions_fetched: int
    transactions_added: int
    timestamp: datetime
    error: SyncError | None = None


@dataclass
class FetchedAccount:
    """Account plus the transactions fetched for it, before any write."""

    account: BankAccount
    fields: list[CanonicalFields]


class SyncLogger:
    """Handles all logging for SyncService with business logic separated."""

    def __init__(self, logger_instance: loguru.Logger = logger) -> None:
        self._logger = logger_instance

    def sync_start(self, institution_id: str, since: date | None) -> None:
        since_label = since.isoformat() if since else "beginning"
        self._logger.bind(institution_id=institution_id, since=since_label).info(
            "Starting sync for {} (since {})", institution_id, since_label
        )

    def accounts_fetched(self, institution_id: str, count: int) -> None:
        self._logger.bind(institution_id=institution_id, accounts=count).info(
            "Fetched {} accounts from {}", count, institution_id
        )

    def transactions_fetched(self, account_id: str, count: int) -> None:
        self._logger.bind(account_id=account_id, transactions=count).debug(
            "Fetched {} transactions for {}", count, account_id
        )

    def sync_failed(self, error: SyncError) -> None:
        self._logger.bind(
            institution_id=error.institution_id, kind=error.kind
        ).error(
            "Sync for {} failed ({}): {}",
            error.institution_id,
            error.kind,
            error.message,
        )

    def sync_complete(self, metadata: SyncMetadata) -> None:
        self._logger.bind(
            institution_id=metadata.institution_id,
            accounts=metadata.accounts_updated,
            fetched=metadata.transactions_fetched,
            added=metadata.transactions_added,
        ).info(
            "Sync for {} complete: {} accounts, {} fetched, {} new",
            metadata.institution_id,
            metadata.accounts_updated,
            metadata.transactions_fetched,
            metadata.transactions_added,
        )


def _utcnow() -> datetime:
    return datetime.now(UTC)


class SyncService:
    """
    Pulls accounts and transactions from a bank adapter into the store.

    Everything is fetched before the first write, so an adapter failure
    leaves the store untouched. Incremental fetches reach back
    ``SYNC_LOOKBACK`` before the last sync; ingest dedup absorbs the overlap.
    Config and adapter failures come back as
    ``SyncMetadata(status="error")``; store corruption propagates.
    """

    def __init__(
        self,
        store: LedgerStore,
        adapters: AdapterRegistry,
        credentials_loader: Callable[[], BankingConfig],
        *,
        clock: Callable[[], datetime] = _utcnow,
        sync_logger: SyncLogger | None = None,
        ingest_logger: IngestLogger | None = None,
    ) -> None:
        self._store = store
        self._adapters = adapters
        self._credentials_loader = credentials_loader
        self._clock = clock
        self._logger = sync_logger or SyncLogger()
        self._pipeline = IngestionPipeline(store, ingest_logger=ingest_logger)

    def sync(self, institution_id: str) -> SyncMetadata:
        """
        Run one sync cycle for an institution.

        Returns:
            SyncMetadata describing what was written, or the typed error
        """
        adapter = self._adapters.get(institution_id)
        if adapter is None:
            return self._failed(
                SyncError(
                    kind="adapter_missing",
                    institution_id=institution_id,
                    message=f"No adapter registered for {institution_id!r}",
                )
            )

        try:
            credentials = self._credentials_loader().credentials_for(institution_id)
        except ConfigMissing as exc:
            return self._failed(
                SyncError(
                    kind="config_missing",
                    institution_id=institution_id,
                    message=str(exc),
                )
            )

        since = self._since(institution_id)
        self._logger.sync_start(institution_id, since)

        # Fetch phase: no store writes until every call has succeeded
        try:
            accounts = adapter.fetch_accounts(credentials)
            self._logger.accounts_fetched(institution_id, len(accounts))
            fetched: list[FetchedAccount] = []
            for account in accounts:
                fields = adapter.fetch_transactions(
                    credentials, account.account_id, since=since
                )
                self._logger.transactions_fetched(account.account_id, len(fields))
                stray = [f for f in fields if f.account_id != account.account_id]
                if stray:
                    raise AdapterError(
                        institution_id,
                        f"Adapter returned transactions for {stray[0].account_id!r} "
                        f"while fetching {account.account_id!r}",
                    )
                fetched.append(FetchedAccount(account=account, fields=fields))
        except AdapterError as exc:
            return self._failed(
                SyncError(
                    kind="adapter_error",
                    institution_id=institution_id,
                    message=exc.message,
                )
            )

        # Write phase
        now = self._clock()
        self._store.bank_accounts.upsert_bulk(
            item.account.model_copy(update={"last_synced_at": now}) for item in fetched
        )
        transactions_fetched = 0
        transactions_added = 0
        for item in fetched:
            result = self._pipeline.ingest(
                item.account.account_id, item.fields, source="sync"
            )
            transactions_fetched += len(item.fields)
            transactions_added += result.accepted_count

        self._store.sync_history.append(
            SyncRecord(
                institution_id=institution_id,
                synced_at=now,
                accounts_updated=len(fetched),
                transactions_fetched=transactions_fetched,
                transactions_added=transactions_added,
            )
        )

        metadata = SyncMetadata(
            institution_id=institution_id,
            status="success",
            accounts_updated=len(fetched),
            transactions_fetched=transactions_fetched,
            transactions_added=transactions_added,
            timestamp=now,
        )
        self._logger.sync_complete(metadata)
        return metadata

    def _since(self, institution_id: str) -> date | None:
        last = self._store.sync_history.last_for(institution_id)
        if last is None:
            return None
        return to_canonical_date(last.synced_at) - SYNC_LOOKBACK

    def _failed(self, error: SyncError) -> SyncMetadata:
        self._logger.sync_failed(error)
        return SyncMetadata(
            institution_id=error.institution_id,
            status="error",
            accounts_updated=0,
            transactions_fetched=0,
            transactions_added=0,
            timestamp=self._clock(),
            error=error,
        )
