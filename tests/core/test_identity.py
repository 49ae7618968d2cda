from __future__ import annotations

from datetime import date
import math

import pytest

from finledger.core.identity import (
    assign_identity,
    canonical_amount,
    compute_transaction_id,
)
from tests.fixtures.ledger_records import create_fields


def test_compute_transaction_id_is_deterministic() -> None:
    # input
    fields_a = create_fields()
    fields_b = create_fields()

    # act
    id_a = compute_transaction_id(fields_a)
    id_b = compute_transaction_id(fields_b)

    # assert
    assert id_a == id_b
    assert len(id_a) == 64
    assert all(c in "0123456789abcdef" for c in id_a)


def test_compute_transaction_id_ignores_raw_source_and_currency() -> None:
    # input
    plain = create_fields()
    decorated = plain.model_copy(
        update={"raw_source": {"Status": "Gebucht"}, "currency": "USD"}
    )

    # act / assert
    assert compute_transaction_id(plain) == compute_transaction_id(decorated)


def test_compute_transaction_id_changes_with_any_identity_field() -> None:
    # input
    base = create_fields()
    variants = [
        create_fields(account_id="acc_2"),
        create_fields(day=date(2024, 1, 6)),
        create_fields(amount=-20.01),
        create_fields(description="Einkauf EDEKA"),
        create_fields(counterparty="EDEKA"),
        create_fields(external_reference="E2E-1"),
    ]

    # act
    base_id = compute_transaction_id(base)
    variant_ids = {compute_transaction_id(v) for v in variants}

    # assert
    assert base_id not in variant_ids
    assert len(variant_ids) == len(variants)


def test_compute_transaction_id_normalizes_whitespace_and_unicode() -> None:
    # input
    composed = create_fields(description="Überweisung", counterparty="Müller")
    decomposed = create_fields(
        description="  U\u0308berweisung ", counterparty="Mu\u0308ller"
    )

    # act / assert
    assert compute_transaction_id(composed) == compute_transaction_id(decomposed)


def test_canonical_amount_formats_two_decimals() -> None:
    assert canonical_amount(-20) == "-20.00"
    assert canonical_amount(1234.5) == "1234.50"
    assert canonical_amount(0.0) == "0.00"
    assert canonical_amount(-0.0) == "0.00"


def test_canonical_amount_rejects_non_finite() -> None:
    with pytest.raises(ValueError):
        canonical_amount(math.nan)
    with pytest.raises(ValueError):
        canonical_amount(math.inf)


def test_compute_transaction_id_rejects_empty_account() -> None:
    # input
    fields = create_fields(account_id="   ")

    # act / assert
    with pytest.raises(ValueError, match="account_id"):
        compute_transaction_id(fields)


def test_assign_identity_builds_transaction() -> None:
    # input
    fields = create_fields()

    # act
    txn = assign_identity(fields, "csv")

    # assert
    assert txn.transaction_id == compute_transaction_id(fields)
    assert txn.source == "csv"
    assert txn.amount == fields.amount
    assert txn.account_id == fields.account_id
