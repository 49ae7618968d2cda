from __future__ import annotations

from datetime import date
import json

from finledger.adapters.store import LedgerModes
from finledger.models.ledger import StoreMode
from finledger.services.demo import DemoMode, generate_demo_snapshot
from tests.fixtures.ledger_records import create_transaction

TODAY = date(2024, 6, 15)


def test_generate_demo_snapshot_is_deterministic() -> None:
    # act
    first = generate_demo_snapshot(TODAY)
    second = generate_demo_snapshot(TODAY)

    # assert
    assert first == second
    assert len(first.transactions) > 50
    assert {a.account_id for a in first.bank_accounts} == {
        "demo_checking",
        "demo_savings",
    }
    assert {t.source for t in first.transactions} == {"demo"}
    assert min(t.date for t in first.transactions) >= date(2023, 12, 15)
    assert max(t.date for t in first.transactions) <= TODAY
    ids = [t.transaction_id for t in first.transactions]
    assert len(ids) == len(set(ids))


def test_generate_demo_snapshot_books_salary_monthly() -> None:
    snapshot = generate_demo_snapshot(TODAY)

    salaries = [t for t in snapshot.transactions if t.description == "Gehaltszahlung"]

    assert [t.date for t in salaries] == [date(2024, m, 1) for m in range(1, 7)]
    assert all(3800 <= t.amount <= 4200 for t in salaries)


def test_enable_backs_up_real_seeds_demo_and_switches(modes: LedgerModes) -> None:
    # input
    real = modes.store(StoreMode.REAL)
    real.transactions.insert_bulk([create_transaction()])
    demo_mode = DemoMode(modes, today=lambda: TODAY)

    # act
    count = demo_mode.enable()

    # assert
    assert demo_mode.is_demo() is True
    assert modes.active_store() is modes.store(StoreMode.DEMO)
    assert count == modes.store(StoreMode.DEMO).transactions.count()
    assert count > 0
    assert real.transactions.count() == 1
    backup = json.loads(modes.config.backup_path.read_text(encoding="utf-8"))
    assert len(backup["transactions"]) == 1


def test_enable_twice_does_not_reseed(modes: LedgerModes) -> None:
    # input
    demo_mode = DemoMode(modes, today=lambda: TODAY)
    demo_mode.enable()
    demo_store = modes.store(StoreMode.DEMO)
    extra = create_transaction(account_id="demo_checking", amount=-1.23)
    demo_store.transactions.insert_bulk([extra])
    before = demo_store.transactions.count()

    # act
    demo_mode.disable()
    after = DemoMode(modes, today=lambda: date(2025, 1, 1)).enable()

    # assert
    assert after == before
    assert demo_store.transactions.get_by_id(extra.transaction_id) == extra


def test_disable_returns_to_real_data(modes: LedgerModes) -> None:
    demo_mode = DemoMode(modes, today=lambda: TODAY)
    demo_mode.enable()

    demo_mode.disable()

    assert demo_mode.is_demo() is False
    assert modes.active_store().transactions.count() == 0
