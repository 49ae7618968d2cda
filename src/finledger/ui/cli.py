from __future__ import annotations

from datetime import datetime
from pathlib import Path
import sys
from typing import NoReturn

from dotenv import load_dotenv
from loguru import logger
from rich.console import Console
from rich.markup import escape
from rich.table import Table
import typer

from finledger.adapters.banking import default_adapters, load_banking_config
from finledger.adapters.normalizers import default_normalizers
from finledger.adapters.store import LedgerModes
from finledger.core.calendar import Granularity
from finledger.core.config import LedgerConfig, load_ledger_config_from_env
from finledger.errors import LedgerError
from finledger.models.ledger import StoreMode
from finledger.services.analytics import (
    TransactionFilters,
    build_dashboard_summary,
    filter_transactions,
    group_transactions,
)
from finledger.services.demo import DemoMode
from finledger.services.ingest import UploadImporter
from finledger.services.sync import SyncService

# Load environment variables from .env
load_dotenv()

app = typer.Typer(
    help="finledger: personal bank transaction ledger.",
    no_args_is_help=True,
)

demo_app = typer.Typer(help="Switch between real and demo data.")
app.add_typer(demo_app, name="demo")

console = Console()


def _configure_logging(config: LedgerConfig) -> None:
    logger.remove()
    logger.add(
        sys.stderr,
        format="{time:YYYY-MM-DD HH:mm:ss} [{level}] {name}: {message}",
        level=config.log_level,
    )


def _open_ledger() -> LedgerModes:
    try:
        config = load_ledger_config_from_env()
    except ValueError as e:
        console.print(f"[red]Invalid configuration:[/red] {e}")
        raise typer.Exit(code=2) from e
    _configure_logging(config)
    try:
        return LedgerModes(config)
    except LedgerError as e:
        _fail(e)


def _fail(error: Exception) -> NoReturn:
    console.print(f"[red]Error:[/red] {error}")
    raise typer.Exit(code=1) from error


def _format_amount(amount: float) -> str:
    color = "green" if amount > 0 else "red" if amount < 0 else "white"
    return f"[{color}]{amount:,.2f}[/{color}]"


@app.command("import-csv")
def import_csv(
    path: Path = typer.Argument(  # noqa: B008
        ..., exists=True, dir_okay=False, readable=True
    ),
    account: str = typer.Option(..., "--account", "-a", help="Target account id"),
    institution: str = typer.Option(
        "unified", "--institution", "-i", help="Statement format (dkb, unified)"
    ),
) -> None:
    """Import a bank statement CSV into the active ledger."""
    modes = _open_ledger()
    importer = UploadImporter(modes.active_store(), default_normalizers())
    try:
        result = importer.import_upload(path.read_bytes(), account, institution)
    except LedgerError as e:
        _fail(e)

    console.print(
        f"Imported [bold]{result.new_transactions_count}[/bold] new transactions "
        f"({result.duplicate_count} duplicates, {len(result.rejected_rows)} rejected)"
    )
    for row in result.rejected_rows:
        console.print(f"  line {row.line_number}: {escape(row.reason)}")


@app.command("sync")
def sync(
    institution: str = typer.Argument("dkb", help="Institution id to sync"),
) -> None:
    """Fetch accounts and transactions from a bank session."""
    modes = _open_ledger()
    credentials_path = modes.config.credentials_path
    service = SyncService(
        modes.active_store(),
        default_adapters(),
        lambda: load_banking_config(credentials_path),
    )
    try:
        metadata = service.sync(institution)
    except LedgerError as e:
        _fail(e)

    if metadata.error is not None:
        console.print(
            f"[red]Sync failed ({metadata.error.kind}):[/red] {metadata.error.message}"
        )
        raise typer.Exit(code=1)
    console.print(
        f"Synced {metadata.accounts_updated} accounts: "
        f"{metadata.transactions_fetched} fetched, "
        f"[bold]{metadata.transactions_added}[/bold] new"
    )


@demo_app.command("enable")
def demo_enable() -> None:
    """Back up real data and switch to the demo ledger."""
    modes = _open_ledger()
    try:
        count = DemoMode(modes).enable()
    except LedgerError as e:
        _fail(e)
    console.print(f"Demo mode enabled ({count} transactions)")


@demo_app.command("disable")
def demo_disable() -> None:
    """Switch back to real data."""
    modes = _open_ledger()
    DemoMode(modes).disable()
    console.print("Demo mode disabled")


@demo_app.command("status")
def demo_status() -> None:
    modes = _open_ledger()
    console.print(f"Active mode: {modes.active_mode.value}")


@app.command("transactions")
def transactions(
    account: str | None = typer.Option(None, "--account", "-a"),
    date_from: datetime | None = typer.Option(  # noqa: B008
        None, "--from", formats=["%Y-%m-%d"], help="Earliest date (inclusive)"
    ),
    date_to: datetime | None = typer.Option(  # noqa: B008
        None, "--to", formats=["%Y-%m-%d"], help="Latest date (inclusive)"
    ),
    search: str | None = typer.Option(None, "--search", "-s"),
    limit: int = typer.Option(50, help="Maximum rows to show"),
) -> None:
    """List transactions, newest first."""
    modes = _open_ledger()
    filters = TransactionFilters(
        account_id=account,
        date_from=date_from.date() if date_from else None,
        date_to=date_to.date() if date_to else None,
        search=search,
    )
    try:
        matched = filter_transactions(modes.active_store().transactions.get(), filters)
    except LedgerError as e:
        _fail(e)

    table = Table(title=f"Transactions ({modes.active_mode.value})")
    table.add_column("Date")
    table.add_column("Account")
    table.add_column("Description")
    table.add_column("Counterparty")
    table.add_column("Amount", justify="right")
    for txn in matched[:limit]:
        table.add_row(
            txn.date.isoformat(),
            escape(txn.account_id),
            escape(txn.description),
            escape(txn.counterparty),
            _format_amount(txn.amount),
        )
    console.print(table)
    console.print(f"{len(matched)} matching transactions")


@app.command("summary")
def summary(
    granularity: str = typer.Option("month", help="Group by 'day' or 'month'"),
) -> None:
    """Show balances, income, expenses and spend per period."""
    if granularity not in ("day", "month"):
        console.print(f"[red]Unsupported granularity:[/red] {granularity}")
        raise typer.Exit(code=2)
    period: Granularity = "day" if granularity == "day" else "month"

    modes = _open_ledger()
    store = modes.active_store()
    try:
        txns = store.transactions.get()
        accounts = store.bank_accounts.get()
    except LedgerError as e:
        _fail(e)

    dashboard = build_dashboard_summary(txns, accounts)
    console.print(f"Total balance: {dashboard.total_balance:,.2f}")
    console.print(f"Income: {dashboard.income:,.2f}")
    console.print(f"Expenses: {dashboard.expenses:,.2f}")
    console.print(f"Savings rate: {dashboard.savings_rate:.1f}%")
    console.print(f"Daily average spend: {dashboard.daily_average_spend:,.2f}")
    console.print(
        f"Emergency fund: {dashboard.emergency_fund_months:.1f} months of spend"
    )
    if dashboard.largest_expense is not None:
        largest = dashboard.largest_expense
        console.print(
            f"Largest expense: {largest.amount:,.2f} on {largest.date.isoformat()} "
            f"({escape(largest.description)})"
        )

    table = Table(title=f"Spend per {period}")
    table.add_column("Period")
    table.add_column("Transactions", justify="right")
    table.add_column("Spend", justify="right")
    for group in group_transactions(txns, period):
        table.add_row(
            group.period_key, str(len(group.transactions)), f"{group.sum:,.2f}"
        )
    console.print(table)

    if dashboard.category_breakdown:
        categories = Table(title="Spend by category")
        categories.add_column("Category")
        categories.add_column("Transactions", justify="right")
        categories.add_column("Spend", justify="right")
        categories.add_column("Share", justify="right")
        for share in dashboard.category_breakdown:
            categories.add_row(
                escape(share.category),
                str(share.count),
                f"{share.amount:,.2f}",
                f"{share.percentage:.1f}%",
            )
        console.print(categories)


@app.command("backup")
def backup() -> None:
    """Copy the real ledger to the backup file."""
    modes = _open_ledger()
    target = modes.config.backup_path
    try:
        modes.store(StoreMode.REAL).backup(target)
    except LedgerError as e:
        _fail(e)
    console.print(f"Backed up real ledger to {target}")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
