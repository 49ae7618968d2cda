"""Dedup-on-insert pipeline shared by CSV upload and bank sync."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

import loguru
from loguru import logger

from finledger.adapters.store import LedgerStore
from finledger.core.identity import assign_identity
from finledger.errors import ValidationError
from finledger.models.ledger import CanonicalFields, TransactionSource


@dataclass(frozen=True)
class IngestResult:
    """Outcome of one ingestion call."""

    accepted_count: int
    duplicate_count: int


class IngestLogger:
    """Handles all logging for IngestionPipeline with business logic separated."""

    def __init__(self, logger_instance: loguru.Logger = logger) -> None:
        self._logger = logger_instance

    def unknown_account(self, account_id: str, count: int) -> None:
        """Log ingestion into an account the store does not know yet."""
        self._logger.bind(account_id=account_id, transactions=count).warning(
            "Ingesting {} transactions for unknown account {}", count, account_id
        )

    def ingest_complete(
        self, account_id: str, source: TransactionSource, result: IngestResult
    ) -> None:
        self._logger.bind(
            account_id=account_id,
            source=source,
            accepted=result.accepted_count,
            duplicates=result.duplicate_count,
        ).info(
            "Ingested {} transactions for {} from {} ({} duplicates)",
            result.accepted_count,
            account_id,
            source,
            result.duplicate_count,
        )


class IngestionPipeline:
    """
    Single write path for transactions.

    Assigns content-addressed ids and hands the batch to the store, which
    skips ids already present inside its critical section. Re-ingesting the
    same input is a no-op.
    """

    def __init__(
        self, store: LedgerStore, *, ingest_logger: IngestLogger | None = None
    ) -> None:
        self._store = store
        self._logger = ingest_logger or IngestLogger()

    def ingest(
        self,
        account_id: str,
        fields_list: Sequence[CanonicalFields],
        *,
        source: TransactionSource,
    ) -> IngestResult:
        """
        Persist new transactions for one account.

        Args:
            account_id: Target account; every field-set must carry it
            fields_list: Canonical fields from a normalizer or adapter
            source: Provenance tag stored on each transaction

        Returns:
            IngestResult with the number appended and the number skipped

        Raises:
            ValidationError: If any field-set names a different account.
                Nothing is written in that case.
        """
        mismatched = [f for f in fields_list if f.account_id != account_id]
        if mismatched:
            raise ValidationError(
                f"{len(mismatched)} transactions do not belong to account "
                f"{account_id!r} (found {mismatched[0].account_id!r})"
            )

        transactions = [assign_identity(fields, source) for fields in fields_list]

        if transactions and self._store.bank_accounts.get_by_id(account_id) is None:
            self._logger.unknown_account(account_id, len(transactions))

        accepted = self._store.transactions.insert_bulk(transactions)
        result = IngestResult(
            accepted_count=accepted,
            duplicate_count=len(transactions) - accepted,
        )
        self._logger.ingest_complete(account_id, source, result)
        return result
