"""Deterministic demo ledger: six months of plausible household transactions."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, date, datetime, time, timedelta
import random
from typing import Literal

from finledger.core.identity import assign_identity
from finledger.models.ledger import (
    Balances,
    BankAccount,
    CanonicalFields,
    LedgerSnapshot,
    SyncRecord,
    Transaction,
    User,
)

DEMO_INSTITUTION_ID = "demo"
CHECKING_ACCOUNT_ID = "demo_checking"
SAVINGS_ACCOUNT_ID = "demo_savings"
DEMO_SEED = 42
DEMO_MONTHS = 6

CHECKING_OPENING_BALANCE = 5200.0
SAVINGS_BALANCE = 12500.0


@dataclass(frozen=True)
class TransactionTemplate:
    description: str
    counterparty: str
    amount_range: tuple[float, float]
    direction: Literal["debit", "credit"]
    probability: float = 1.0


# Booked on the first of every month
RECURRING_TEMPLATES: tuple[TransactionTemplate, ...] = (
    TransactionTemplate("Gehaltszahlung", "TechCorp GmbH", (3800, 4200), "credit"),
    TransactionTemplate("Miete Wohnung", "Hausverwaltung Mueller", (950, 950), "debit"),
    TransactionTemplate("Strom/Gas Abschlag", "Vattenfall Europe", (85, 95), "debit"),
    TransactionTemplate("Internet DSL", "Deutsche Telekom AG", (45, 45), "debit"),
    TransactionTemplate(
        "Krankenversicherung", "TK Techniker Krankenkasse", (220, 220), "debit"
    ),
    TransactionTemplate("Spotify Premium", "Spotify AB", (10.99, 10.99), "debit"),
    TransactionTemplate("Netflix Abo", "Netflix International", (12.99, 12.99), "debit"),
    TransactionTemplate("BVG Monatskarte", "BVG Abo", (86, 86), "debit"),
    TransactionTemplate("Fitnessstudio", "McFit GmbH", (29.99, 29.99), "debit"),
)

# Rolled once per day against ``probability``
VARIABLE_TEMPLATES: tuple[TransactionTemplate, ...] = (
    TransactionTemplate("Einkauf REWE", "REWE Markt", (15, 85), "debit", 0.4),
    TransactionTemplate("Einkauf EDEKA", "EDEKA Center", (10, 60), "debit", 0.25),
    TransactionTemplate("Einkauf dm-drogerie", "dm-drogerie markt", (8, 35), "debit", 0.1),
    TransactionTemplate("Restaurant", "Restaurant Bella Italia", (25, 75), "debit", 0.15),
    TransactionTemplate("Lieferando Bestellung", "Lieferando", (15, 40), "debit", 0.12),
    TransactionTemplate("Amazon Marketplace", "Amazon EU S.a.r.l.", (10, 150), "debit", 0.08),
    TransactionTemplate("Bargeldabhebung", "Geldautomat", (50, 200), "debit", 0.06),
    TransactionTemplate("Cafe Bestellung", "Starbucks Coffee", (4, 8), "debit", 0.2),
    TransactionTemplate("Tankstelle", "Shell Station", (45, 80), "debit", 0.05),
    TransactionTemplate("Überweisung", "Max Mustermann", (20, 100), "credit", 0.04),
)


def _months_before(day: date, months: int) -> date:
    month_index = day.year * 12 + (day.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    # Clamp to the last day of the target month
    for candidate in (day.day, 30, 29, 28):
        try:
            return date(year, month, min(day.day, candidate))
        except ValueError:
            continue
    raise ValueError(f"cannot shift {day} by {months} months")


def _draw_amount(rng: random.Random, template: TransactionTemplate) -> float:
    low, high = template.amount_range
    return round(rng.uniform(low, high), 2)


def _build(
    template: TransactionTemplate, amount: float, day: date
) -> Transaction:
    signed = amount if template.direction == "credit" else -amount
    fields = CanonicalFields(
        account_id=CHECKING_ACCOUNT_ID,
        date=day,
        amount=signed,
        description=template.description,
        counterparty=template.counterparty,
    )
    return assign_identity(fields, "demo")


def generate_demo_snapshot(today: date) -> LedgerSnapshot:
    """
    Build the demo ledger ending on ``today``.

    The output depends only on ``today``: the random generator is seeded
    with a fixed value, so repeated calls produce identical snapshots.
    """
    rng = random.Random(DEMO_SEED)  # noqa: S311
    transactions: dict[str, Transaction] = {}
    checking_balance = CHECKING_OPENING_BALANCE

    day = _months_before(today, DEMO_MONTHS)
    while day <= today:
        drafted: list[tuple[TransactionTemplate, float]] = []
        if day.day == 1:
            drafted.extend((t, _draw_amount(rng, t)) for t in RECURRING_TEMPLATES)
        for template in VARIABLE_TEMPLATES:
            if rng.random() < template.probability:
                drafted.append((template, _draw_amount(rng, template)))

        for template, amount in drafted:
            txn = _build(template, amount, day)
            if txn.transaction_id in transactions:
                continue
            transactions[txn.transaction_id] = txn
            checking_balance += txn.amount
        day += timedelta(days=1)

    synced_at = datetime.combine(today, time(12, 0), tzinfo=UTC)
    accounts = [
        BankAccount(
            account_id=CHECKING_ACCOUNT_ID,
            name="Girokonto",
            institution_id=DEMO_INSTITUTION_ID,
            balances=Balances(current=round(checking_balance, 2)),
            iban="DE89 3704 0044 0532 0130 00",
            account_type="checking",
            last_synced_at=synced_at,
        ),
        BankAccount(
            account_id=SAVINGS_ACCOUNT_ID,
            name="Tagesgeldkonto",
            institution_id=DEMO_INSTITUTION_ID,
            balances=Balances(current=SAVINGS_BALANCE),
            iban="DE27 1007 0024 0066 4440 00",
            account_type="savings",
            last_synced_at=synced_at,
        ),
    ]

    return LedgerSnapshot(
        user=User(id="demo_user", name="Demo User"),
        bank_accounts=accounts,
        transactions=list(transactions.values()),
        sync_history=[
            SyncRecord(
                institution_id=DEMO_INSTITUTION_ID,
                synced_at=synced_at,
                accounts_updated=len(accounts),
                transactions_fetched=len(transactions),
                transactions_added=len(transactions),
            )
        ],
    )
