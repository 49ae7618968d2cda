"""Read-side analytics."""

from finledger.services.analytics.aggregation import (
    CategoryShare,
    DashboardSummary,
    MonthlyFlow,
    TransactionGroup,
    build_dashboard_summary,
    category_breakdown,
    daily_average_spend,
    emergency_fund_months,
    expenses,
    group_transactions,
    income,
    largest_expense,
    monthly_cash_flow,
    savings_rate,
    total_balance,
)
from finledger.services.analytics.categories import (
    CATEGORIES,
    categorize,
    is_internal_transfer,
    own_ibans,
)
from finledger.services.analytics.filters import TransactionFilters, filter_transactions

__all__ = [
    "CATEGORIES",
    "CategoryShare",
    "DashboardSummary",
    "MonthlyFlow",
    "TransactionFilters",
    "TransactionGroup",
    "build_dashboard_summary",
    "categorize",
    "category_breakdown",
    "daily_average_spend",
    "emergency_fund_months",
    "expenses",
    "filter_transactions",
    "group_transactions",
    "income",
    "is_internal_transfer",
    "largest_expense",
    "monthly_cash_flow",
    "own_ibans",
    "savings_rate",
    "total_balance",
]
