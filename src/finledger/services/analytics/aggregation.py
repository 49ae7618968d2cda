"""Read-side aggregation over stored transactions and accounts.

All functions are pure: they take records read from a store and never
write back. Sums are rounded to cents.
"""

from __future__ import annotations

from collections.abc import Collection, Iterable
from dataclasses import dataclass, field
from datetime import date
import math

from finledger.core.calendar import Granularity, period_key, period_start
from finledger.models.ledger import BankAccount, Transaction
from finledger.services.analytics.categories import categorize, own_ibans


@dataclass(frozen=True)
class TransactionGroup:
    """Transactions sharing a period, with net spend as a positive-for-expense sum."""

    period_key: str
    period_start: date
    transactions: list[Transaction] = field(default_factory=list)
    sum: float = 0.0


@dataclass(frozen=True)
class MonthlyFlow:
    month: str
    income: float
    expenses: float
    net: float


@dataclass(frozen=True)
class CategoryShare:
    """Spend in one category as a positive amount and share of all spend."""

    category: str
    amount: float
    percentage: float
    count: int


@dataclass(frozen=True)
class DashboardSummary:
    total_balance: float
    income: float
    expenses: float
    savings_rate: float
    transaction_count: int
    monthly_cash_flow: list[MonthlyFlow] = field(default_factory=list)
    category_breakdown: list[CategoryShare] = field(default_factory=list)
    daily_average_spend: float = 0.0
    largest_expense: Transaction | None = None
    emergency_fund_months: float = 0.0


def _cents(value: float) -> float:
    rounded = round(value, 2)
    # Avoid "-0.0" in output
    return rounded + 0.0


def group_transactions(
    transactions: Iterable[Transaction], granularity: Granularity = "day"
) -> list[TransactionGroup]:
    """
    Group transactions by calendar day or month.

    Groups are ordered chronologically; within a group the input order is
    kept. ``sum`` is the negated total, so a period of pure spending has a
    positive sum.

    Example:
        -20 and -30 on 2024-01-05 plus +100 on 2024-02-01 group by month to
        ``2024-01`` (sum 50.0) and ``2024-02`` (sum -100.0).

    Raises:
        ValueError: If ``granularity`` is not "day" or "month"
    """
    if granularity not in ("day", "month"):
        raise ValueError(f"Unsupported granularity: {granularity!r}")

    buckets: dict[str, tuple[date, list[Transaction]]] = {}
    for txn in transactions:
        key = period_key(txn.date, granularity)
        if key not in buckets:
            buckets[key] = (period_start(txn.date, granularity), [])
        buckets[key][1].append(txn)

    return [
        TransactionGroup(
            period_key=key,
            period_start=start,
            transactions=members,
            sum=_cents(-math.fsum(t.amount for t in members)),
        )
        for key, (start, members) in sorted(buckets.items(), key=lambda kv: kv[1][0])
    ]


def income(transactions: Iterable[Transaction]) -> float:
    """Sum of positive amounts."""
    return _cents(math.fsum(t.amount for t in transactions if t.amount > 0))


def expenses(transactions: Iterable[Transaction]) -> float:
    """Sum of negative amounts (a negative number, or 0.0)."""
    return _cents(math.fsum(t.amount for t in transactions if t.amount < 0))


def total_balance(accounts: Iterable[BankAccount]) -> float:
    return _cents(math.fsum(a.balances.current for a in accounts))


def monthly_cash_flow(transactions: Iterable[Transaction]) -> list[MonthlyFlow]:
    """Income, expenses (as a positive magnitude) and net per month."""
    flows: list[MonthlyFlow] = []
    for group in group_transactions(transactions, "month"):
        month_income = income(group.transactions)
        month_expenses = -expenses(group.transactions)
        flows.append(
            MonthlyFlow(
                month=group.period_key,
                income=month_income,
                expenses=_cents(month_expenses),
                net=_cents(month_income - month_expenses),
            )
        )
    return flows


def savings_rate(transactions: Iterable[Transaction]) -> float:
    """Share of income not spent, in percent; 0.0 without income."""
    items = list(transactions)
    total_income = income(items)
    if total_income <= 0:
        return 0.0
    total_expenses = -expenses(items)
    return round((total_income - total_expenses) / total_income * 100, 2)


def category_breakdown(
    transactions: Iterable[Transaction],
    *,
    owned: Collection[str] = frozenset(),
    limit: int | None = None,
) -> list[CategoryShare]:
    """
    Spend per category, largest first.

    Only expenses count. ``percentage`` is each category's share of total
    spend; ties in amount are ordered by category name.

    Args:
        transactions: Transactions to classify
        owned: Normalized IBANs of own accounts, see ``categorize``
        limit: Keep only the top ``limit`` categories
    """
    amounts: dict[str, list[float]] = {}
    for txn in transactions:
        if txn.amount >= 0:
            continue
        amounts.setdefault(categorize(txn, owned=owned), []).append(-txn.amount)

    total = math.fsum(math.fsum(values) for values in amounts.values())
    shares = [
        CategoryShare(
            category=category,
            amount=_cents(math.fsum(values)),
            percentage=round(math.fsum(values) / total * 100, 2) if total else 0.0,
            count=len(values),
        )
        for category, values in amounts.items()
    ]
    shares.sort(key=lambda s: (-s.amount, s.category))
    return shares if limit is None else shares[:limit]


def largest_expense(transactions: Iterable[Transaction]) -> Transaction | None:
    """The most negative transaction; the earliest listed wins a tie."""
    spent = [t for t in transactions if t.amount < 0]
    if not spent:
        return None
    return min(spent, key=lambda t: t.amount)


def daily_average_spend(
    transactions: Iterable[Transaction],
    *,
    date_from: date | None = None,
    date_to: date | None = None,
) -> float:
    """
    Spend per calendar day, as a positive amount.

    With both bounds the range is inclusive and transactions outside it are
    ignored. Otherwise the range runs from the earliest to the latest
    transaction date. An empty range averages to 0.0.
    """
    items = list(transactions)
    if date_from is not None and date_to is not None:
        items = [t for t in items if date_from <= t.date <= date_to]
        days = (date_to - date_from).days + 1
    elif items:
        dates = [t.date for t in items]
        days = (max(dates) - min(dates)).days + 1
    else:
        return 0.0

    if days <= 0:
        return 0.0
    return _cents(-expenses(items) / days)


def emergency_fund_months(balance: float, transactions: Iterable[Transaction]) -> float:
    """Months of average monthly spend that ``balance`` covers; 0.0 without spend."""
    flows = monthly_cash_flow(transactions)
    if not flows:
        return 0.0
    average = math.fsum(f.expenses for f in flows) / len(flows)
    if average <= 0:
        return 0.0
    return round(balance / average, 2)


def build_dashboard_summary(
    transactions: Iterable[Transaction], accounts: Iterable[BankAccount]
) -> DashboardSummary:
    items = list(transactions)
    account_list = list(accounts)
    balance = total_balance(account_list)
    return DashboardSummary(
        total_balance=balance,
        income=income(items),
        expenses=expenses(items),
        savings_rate=savings_rate(items),
        transaction_count=len(items),
        monthly_cash_flow=monthly_cash_flow(items),
        category_breakdown=category_breakdown(items, owned=own_ibans(account_list)),
        daily_average_spend=daily_average_spend(items),
        largest_expense=largest_expense(items),
        emergency_fund_months=emergency_fund_months(balance, items),
    )
