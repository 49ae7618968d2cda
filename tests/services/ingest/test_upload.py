from __future__ import annotations

from datetime import date

import pytest

from finledger.adapters.normalizers import default_normalizers
from finledger.adapters.store import LedgerStore
from finledger.errors import ValidationError
from finledger.services.ingest import IngestionPipeline, UploadImporter
from tests.fixtures.ledger_records import create_fields

UNIFIED_CSV = (
    "date,amount,description,counterparty\n"
    "2024-01-05,-20.00,Einkauf REWE,REWE Markt\n"
    "2024-01-05,-30.00,Einkauf EDEKA,EDEKA Center\n"
    "not-a-date,-1.00,Broken,\n"
)

DKB_CSV = (
    '"Girokonto";"DE12 1203 0000 1234 5678 90"\n'
    '""\n'
    '"Buchungsdatum";"Wertstellung";"Status";"Zahlungspflichtige*r";'
    '"Zahlungsempfänger*in";"Verwendungszweck";"Umsatztyp";"IBAN";"Betrag (€)"\n'
    '"06.01.24";"05.01.24";"Gebucht";"Alex Example";"REWE Markt";'
    '"Einkauf REWE";"Ausgang";"DE02";"-20,00"\n'
)


def test_import_upload_reports_counts_and_rejections(store: LedgerStore) -> None:
    # input
    importer = UploadImporter(store, default_normalizers())

    # act
    first = importer.import_upload(UNIFIED_CSV.encode("utf-8"), "acc_1")
    second = importer.import_upload(UNIFIED_CSV.encode("utf-8"), "acc_1")

    # assert
    assert first.new_transactions_count == 2
    assert first.duplicate_count == 0
    assert [r.line_number for r in first.rejected_rows] == [4]
    assert second.new_transactions_count == 0
    assert second.duplicate_count == 2
    assert store.transactions.count() == 2


def test_import_upload_strips_byte_order_mark(store: LedgerStore) -> None:
    importer = UploadImporter(store, default_normalizers())

    result = importer.import_upload(b"\xef\xbb\xbf" + UNIFIED_CSV.encode("utf-8"), "acc_1")

    assert result.new_transactions_count == 2


def test_import_upload_rejects_undecodable_bytes(store: LedgerStore) -> None:
    importer = UploadImporter(store, default_normalizers())

    with pytest.raises(ValidationError, match="UTF-8"):
        importer.import_upload(b"date,amount\n\xff\xfe", "acc_1")
    assert store.transactions.count() == 0


def test_import_upload_rejects_unknown_format(store: LedgerStore) -> None:
    importer = UploadImporter(store, default_normalizers())

    with pytest.raises(ValidationError, match="ofx"):
        importer.import_upload(b"", "acc_1", institution_id="ofx")


def test_csv_and_sync_of_same_event_collapse(store: LedgerStore) -> None:
    # input: what the bank API reports for the same booking
    synced = create_fields(
        account_id="acc_1",
        day=date(2024, 1, 5),
        amount=-20.0,
        description="Einkauf REWE",
        counterparty="REWE Markt",
    )
    IngestionPipeline(store).ingest("acc_1", [synced], source="sync")

    # act
    result = UploadImporter(store, default_normalizers()).import_upload(
        DKB_CSV.encode("utf-8"), "acc_1", institution_id="dkb"
    )

    # assert
    assert result.new_transactions_count == 0
    assert result.duplicate_count == 1
    assert store.transactions.count() == 1
    assert store.transactions.get()[0].source == "sync"
