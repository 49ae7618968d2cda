"""Builders for ledger records used across tests."""

from __future__ import annotations

from datetime import date
from typing import Any

from finledger.core.identity import assign_identity
from finledger.models.ledger import (
    Balances,
    BankAccount,
    CanonicalFields,
    Transaction,
    TransactionSource,
)


def create_fields(
    *,
    account_id: str = "acc_1",
    day: date = date(2024, 1, 5),
    amount: float = -20.0,
    description: str = "Einkauf REWE",
    counterparty: str = "REWE Markt",
    external_reference: str | None = None,
    raw_source: dict[str, Any] | None = None,
) -> CanonicalFields:
    return CanonicalFields(
        account_id=account_id,
        date=day,
        amount=amount,
        description=description,
        counterparty=counterparty,
        external_reference=external_reference,
        raw_source=raw_source or {},
    )


def create_account(
    account_id: str = "acc_1",
    *,
    balance: float = 100.0,
    institution_id: str = "dkb",
    name: str = "Girokonto",
    iban: str | None = None,
) -> BankAccount:
    return BankAccount(
        account_id=account_id,
        name=name,
        institution_id=institution_id,
        balances=Balances(current=balance),
        iban=iban,
    )


def create_transaction(
    *,
    account_id: str = "acc_1",
    day: date = date(2024, 1, 5),
    amount: float = -20.0,
    description: str = "Einkauf REWE",
    counterparty: str = "REWE Markt",
    source: TransactionSource = "csv",
    raw_source: dict[str, Any] | None = None,
) -> Transaction:
    fields = create_fields(
        account_id=account_id,
        day=day,
        amount=amount,
        description=description,
        counterparty=counterparty,
        raw_source=raw_source,
    )
    return assign_identity(fields, source)
