from __future__ import annotations

import pytest

from finledger.adapters.store import LedgerStore
from finledger.errors import ValidationError
from finledger.services.ingest import IngestionPipeline, IngestResult
from tests.fixtures.ledger_records import create_account, create_fields


class MockIngestLogger:
    """Records logger calls instead of writing them."""

    def __init__(self) -> None:
        self.unknown_accounts: list[str] = []
        self.results: list[IngestResult] = []

    def unknown_account(self, account_id: str, count: int) -> None:
        self.unknown_accounts.append(account_id)

    def ingest_complete(self, account_id: str, source: str, result: IngestResult) -> None:
        self.results.append(result)


def test_ingest_twice_is_idempotent(store: LedgerStore) -> None:
    # input
    fields = [create_fields(amount=-20.0), create_fields(amount=-30.0)]
    pipeline = IngestionPipeline(store)

    # act
    first = pipeline.ingest("acc_1", fields, source="csv")
    second = pipeline.ingest("acc_1", fields, source="csv")

    # assert
    assert first == IngestResult(accepted_count=2, duplicate_count=0)
    assert second == IngestResult(accepted_count=0, duplicate_count=2)
    assert store.transactions.count() == 2
    assert {t.source for t in store.transactions.get()} == {"csv"}


def test_ingest_counts_repeats_inside_one_batch(store: LedgerStore) -> None:
    fields = create_fields()

    result = IngestionPipeline(store).ingest("acc_1", [fields, fields], source="sync")

    assert result == IngestResult(accepted_count=1, duplicate_count=1)


def test_ingest_rejects_foreign_account_without_writing(store: LedgerStore) -> None:
    # input
    fields = [create_fields(), create_fields(account_id="acc_2", amount=-1.0)]

    # act / assert
    with pytest.raises(ValidationError, match="acc_2"):
        IngestionPipeline(store).ingest("acc_1", fields, source="csv")
    assert store.transactions.count() == 0


def test_ingest_into_unknown_account_warns_but_writes(store: LedgerStore) -> None:
    # input
    ingest_logger = MockIngestLogger()
    pipeline = IngestionPipeline(store, ingest_logger=ingest_logger)  # type: ignore[arg-type]

    # act
    result = pipeline.ingest("acc_1", [create_fields()], source="csv")

    # assert
    assert result.accepted_count == 1
    assert ingest_logger.unknown_accounts == ["acc_1"]
    assert store.bank_accounts.count() == 0


def test_ingest_into_known_account_does_not_warn(store: LedgerStore) -> None:
    # input
    store.bank_accounts.upsert(create_account("acc_1"))
    ingest_logger = MockIngestLogger()
    pipeline = IngestionPipeline(store, ingest_logger=ingest_logger)  # type: ignore[arg-type]

    # act
    pipeline.ingest("acc_1", [create_fields()], source="csv")

    # assert
    assert ingest_logger.unknown_accounts == []
    assert len(ingest_logger.results) == 1
