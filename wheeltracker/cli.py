"""
Click CLI for the wheel tracker.

Operates directly on the SQLite ledger: create accounts, record trades
and cash movements, resolve reinvest signals, and inspect the wealth
wheel.
"""

import functools
import logging
import sys
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Optional

import click
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from wheeltracker import __version__
from wheeltracker.market_data.config import FinnhubConfig
from wheeltracker.market_data.finnhub_client import FinnhubQuoteProvider
from wheeltracker.server.config import settings
from wheeltracker.server.database.session import configure_engine, create_tables
from wheeltracker.server.models.account import AccountCreate
from wheeltracker.server.models.trade import (
    DepositRequest,
    OptionEntry,
    StockEntry,
    WithdrawalRequest,
)
from wheeltracker.server.models.wheel import WheelCalculationResponse
from wheeltracker.server.repositories.unit_of_work import UnitOfWork
from wheeltracker.server.services.accounts import AccountService
from wheeltracker.server.services.price_refresh import PriceRefreshService
from wheeltracker.server.services.rebalancer import WealthWheelRebalancer
from wheeltracker.server.services.reinvest import ReinvestSignalEngine
from wheeltracker.server.services.trade_entry import TradeEntryService
from wheeltracker.wheel.exceptions import WheelTrackerError
from wheeltracker.wheel.money import format_money
from wheeltracker.wheel.state import (
    CallPut,
    OptionAction,
    PremiumPolicy,
    ReinvestAction,
    StockAction,
    WheelCategory,
)

logger = logging.getLogger(__name__)


@dataclass
class CLIContext:
    """Context object passed to all CLI commands.

    Attributes:
        uow: Unit of work over the CLI's database session
        verbose: Verbose output enabled
    """

    uow: UnitOfWork
    verbose: bool


def print_error(message: str) -> None:
    """Print error message to stderr."""
    click.secho(f"Error: {message}", fg="red", err=True)


def print_success(message: str) -> None:
    """Print success message."""
    click.secho(message, fg="green")


def print_warning(message: str) -> None:
    """Print warning message."""
    click.secho(f"Warning: {message}", fg="yellow")


def handle_errors(func):
    """Report domain and input errors and exit with status 1."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except WheelTrackerError as e:
            print_error(f"{e} [{e.code}]")
            sys.exit(1)
        except (ValueError, InvalidOperation) as e:
            print_error(str(e) or "Invalid number")
            sys.exit(1)

    return wrapper


def _uow(ctx: click.Context) -> UnitOfWork:
    return ctx.obj.uow


def _parse_when(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


@click.group()
@click.option(
    "--db",
    default=settings.database_path,
    help="Database file path",
    envvar="WHEELTRACKER_DATABASE_PATH",
)
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
@click.version_option(__version__)
@click.pass_context
def cli(ctx: click.Context, db: str, verbose: bool) -> None:
    """
    Wheel Tracker - bookkeeping for the options wheel.

    Records trades into a cash ledger and share lots, tracks wheel cycles
    to completion, and proposes reinvestment of freed cash.
    """
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    db_path = Path(db).expanduser()
    db_path.parent.mkdir(parents=True, exist_ok=True)
    engine = configure_engine(
        create_engine(
            f"sqlite:///{db_path}",
            connect_args={"check_same_thread": False, "timeout": 30},
        )
    )
    create_tables(engine)
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()

    def _close() -> None:
        session.close()
        engine.dispose()

    ctx.call_on_close(_close)
    ctx.obj = CLIContext(uow=UnitOfWork(session), verbose=verbose)
    if verbose:
        click.echo(f"+ Using database {db_path}", err=True)


@cli.command("init-db")
@click.pass_context
def init_db(ctx: click.Context) -> None:
    """Create the database schema (idempotent)."""
    print_success("Database ready")


# ----------------------------------------------------------------------
# Accounts
# ----------------------------------------------------------------------


@cli.command("create-account")
@click.argument("name")
@click.option("--reserve", default="0", help="Cashflow reserve ($)")
@click.option(
    "--policy",
    type=click.Choice([p.value for p in PremiumPolicy], case_sensitive=False),
    default=PremiumPolicy.REINVEST_ON_CLOSE.value,
    help="Default premium policy",
)
@click.pass_context
@handle_errors
def create_account(ctx: click.Context, name: str, reserve: str, policy: str) -> None:
    """Create an account."""
    account = AccountService(_uow(ctx)).create_account(
        AccountCreate(
            name=name,
            cashflow_reserve=Decimal(reserve),
            default_policy=PremiumPolicy(policy.upper()),
        )
    )
    print_success(f"Created account {account.name}")
    click.echo(account.id)


@cli.command("accounts")
@click.pass_context
@handle_errors
def list_accounts(ctx: click.Context) -> None:
    """List accounts with their cash balance."""
    accounts = AccountService(_uow(ctx)).list_accounts()
    if not accounts:
        click.echo("No accounts")
        return
    for account in accounts:
        click.echo(
            f"{account.id}  {account.name:<20} cash ${format_money(account.cash_balance)}  "
            f"reserve ${format_money(account.cashflow_reserve)}"
        )


@cli.command("reconcile")
@click.argument("account_id")
@click.pass_context
@handle_errors
def reconcile(ctx: click.Context, account_id: str) -> None:
    """Check the cash balance against the ledger."""
    result = AccountService(_uow(ctx)).reconcile(account_id)
    if result["reconciled"]:
        print_success(f"Reconciled: ${format_money(result['cash_balance'])}")
    else:
        print_error(
            f"Mismatch: balance ${format_money(result['cash_balance'])}, "
            f"ledger ${format_money(result['ledger_total'])}"
        )
        sys.exit(1)


# ----------------------------------------------------------------------
# Cash and trades
# ----------------------------------------------------------------------


@cli.command("deposit")
@click.argument("account_id")
@click.argument("amount")
@click.option("--notes", help="Optional notes")
@click.pass_context
@handle_errors
def deposit(ctx: click.Context, account_id: str, amount: str, notes: Optional[str]) -> None:
    """Deposit cash into an account."""
    entry = TradeEntryService(_uow(ctx)).deposit(
        account_id, DepositRequest(amount=Decimal(amount), notes=notes)
    )
    print_success(f"Deposited ${format_money(entry.amount)}")


@cli.command("withdraw")
@click.argument("account_id")
@click.argument("amount")
@click.option("--notes", help="Optional notes")
@click.pass_context
@handle_errors
def withdraw(ctx: click.Context, account_id: str, amount: str, notes: Optional[str]) -> None:
    """Withdraw cash from an account."""
    entry = TradeEntryService(_uow(ctx)).withdraw(
        account_id, WithdrawalRequest(amount=Decimal(amount), notes=notes)
    )
    print_success(f"Withdrew ${format_money(-entry.amount)}")


@cli.command("stock")
@click.argument("account_id")
@click.argument("symbol")
@click.argument("action", type=click.Choice(["buy", "sell"], case_sensitive=False))
@click.option("--quantity", required=True, help="Shares")
@click.option("--price", required=True, help="Price per share ($)")
@click.option("--fees", default="0", help="Fees ($)")
@click.option("--at", "occurred_at", help="Execution time (ISO 8601)")
@click.option(
    "--category",
    type=click.Choice([c.value for c in WheelCategory], case_sensitive=False),
    help="Wealth wheel category for the symbol",
)
@click.pass_context
@handle_errors
def stock(
    ctx: click.Context,
    account_id: str,
    symbol: str,
    action: str,
    quantity: str,
    price: str,
    fees: str,
    occurred_at: Optional[str],
    category: Optional[str],
) -> None:
    """
    Record a stock trade.

    Example: wheeltracker stock <account> XYZ buy --quantity 100 --price 50
    """
    result = TradeEntryService(_uow(ctx)).record_stock_entry(
        account_id,
        StockEntry(
            symbol=symbol,
            action=StockAction(action.upper()),
            quantity=Decimal(quantity),
            price=Decimal(price),
            fees=Decimal(fees),
            occurred_at=_parse_when(occurred_at),
            wheel_category=WheelCategory(category.upper()) if category else None,
        ),
    )
    print_success(
        f"Recorded: {action.upper()} {quantity} {result.underlying.symbol} @ ${price}"
    )
    click.echo(f"Cash: ${format_money(result.cash_balance)}")
    if result.consumption is not None:
        click.echo(f"Realized gain: ${format_money(result.consumption.realized_gain)}")
    if result.cycle_event is not None and result.cycle_event.finalized:
        click.echo(f"Wheel cycle {result.cycle_event.instance.id} finalized")


@cli.command("option")
@click.argument("account_id")
@click.argument("symbol")
@click.argument("action", type=click.Choice([a.value for a in OptionAction], case_sensitive=False))
@click.argument("call_put", type=click.Choice(["put", "call"], case_sensitive=False))
@click.option("--strike", required=True, help="Strike price ($)")
@click.option("--expiration", required=True, help="Expiration date (YYYY-MM-DD)")
@click.option("--contracts", default=1, type=int, help="Number of contracts")
@click.option("--price", default="0", help="Premium per share ($), for STO and BTC")
@click.option("--fees", default="0", help="Fees ($)")
@click.option("--at", "occurred_at", help="Event time (ISO 8601)")
@click.option(
    "--policy",
    type=click.Choice([p.value for p in PremiumPolicy], case_sensitive=False),
    help="Premium policy for a cycle this entry opens",
)
@click.pass_context
@handle_errors
def option(
    ctx: click.Context,
    account_id: str,
    symbol: str,
    action: str,
    call_put: str,
    strike: str,
    expiration: str,
    contracts: int,
    price: str,
    fees: str,
    occurred_at: Optional[str],
    policy: Optional[str],
) -> None:
    """
    Record an option event (STO, BTC, EXPIRE, ASSIGN).

    Example: wheeltracker option <account> XYZ sto put --strike 50
    --expiration 2026-12-18 --price 2.00 --fees 0.65
    """
    result = TradeEntryService(_uow(ctx)).record_option_entry(
        account_id,
        OptionEntry(
            symbol=symbol,
            action=OptionAction(action.upper()),
            call_put=CallPut(call_put.upper()),
            strike=Decimal(strike),
            expiration=date.fromisoformat(expiration),
            quantity=contracts,
            price=Decimal(price),
            fees=Decimal(fees),
            occurred_at=_parse_when(occurred_at),
            premium_policy_override=PremiumPolicy(policy.upper()) if policy else None,
        ),
    )
    event = result.event
    print_success(
        f"Recorded: {action.upper()} {contracts}x {result.underlying.symbol} "
        f"${strike} {call_put.upper()} (cycle {event.instance.id})"
    )
    for entry in event.entries:
        click.echo(f"  {entry.type.value}: ${format_money(entry.amount)}")
    click.echo(f"Cash: ${format_money(result.cash_balance)}")
    if event.finalized:
        click.echo(
            f"Wheel cycle finalized ({event.instance.finalization_reason.value}), "
            f"realized P&L ${format_money(event.instance.realized_pnl)}"
        )
    if event.signal is not None:
        click.echo(
            f"Reinvest signal {event.signal.id} pending: ${format_money(event.signal.amount)}"
        )


# ----------------------------------------------------------------------
# Reinvestment
# ----------------------------------------------------------------------


@cli.command("signals")
@click.argument("account_id")
@click.pass_context
@handle_errors
def signals(ctx: click.Context, account_id: str) -> None:
    """List pending reinvest signals and the cash ready to reinvest."""
    engine = ReinvestSignalEngine(_uow(ctx))
    pending = engine.get_pending_signals(account_id)
    ready = engine.get_reinvest_ready_amount(account_id)
    click.echo(f"Ready to reinvest: ${format_money(ready)}")
    if not pending:
        click.echo("No pending signals")
        return
    for signal in pending:
        click.echo(
            f"  #{signal.id}  ${format_money(signal.amount)}  "
            f"cycle {signal.instance_id}  {signal.created_at:%Y-%m-%d %H:%M}"
        )


@cli.command("reinvest")
@click.argument("account_id")
@click.argument("signal_id", type=int)
@click.argument(
    "action", type=click.Choice([a.value for a in ReinvestAction], case_sensitive=False)
)
@click.option("--amount", help="Partial amount ($), required for PARTIAL")
@click.option("--notes", help="Optional notes")
@click.pass_context
@handle_errors
def reinvest(
    ctx: click.Context,
    account_id: str,
    signal_id: int,
    action: str,
    amount: Optional[str],
    notes: Optional[str],
) -> None:
    """Resolve a reinvest signal."""
    result = ReinvestSignalEngine(_uow(ctx)).process_reinvest_action(
        account_id,
        signal_id,
        ReinvestAction(action.upper()),
        partial_amount=Decimal(amount) if amount else None,
        notes=notes,
    )
    print_success(
        f"Signal {signal_id} {result.signal.status.value}, "
        f"committed ${format_money(result.committed_amount)}"
    )


# ----------------------------------------------------------------------
# Wealth wheel and prices
# ----------------------------------------------------------------------


@cli.command("wheel")
@click.argument("account_id")
@click.pass_context
@handle_errors
def wheel(ctx: click.Context, account_id: str) -> None:
    """Show current vs. target allocation."""
    calculation = WealthWheelRebalancer(_uow(ctx)).calculate_wheel(account_id)
    formatted = WheelCalculationResponse.from_calculation(calculation)

    click.echo()
    click.secho("=== Wealth Wheel ===", bold=True)
    click.echo(f"Total value: ${formatted.total_value}")
    click.echo(f"Cash:        ${formatted.cash_balance}")
    click.echo(f"Reserve:     ${formatted.cashflow_reserve}")
    if not formatted.slices:
        print_warning("No targets configured")
        return
    click.echo()
    click.echo(f"{'Category':<14}{'Value':>14}{'Target%':>10}{'Actual%':>10}{'Delta':>10}")
    for s in formatted.slices:
        click.echo(
            f"{s.category.value:<14}{s.current_value:>14}{s.target_pct:>10}"
            f"{s.actual_pct:>10}{s.delta:>10}"
        )


@cli.command("refresh-prices")
@click.argument("account_id")
@click.pass_context
@handle_errors
def refresh_prices(ctx: click.Context, account_id: str) -> None:
    """Refresh quotes for held symbols from Finnhub."""
    provider = FinnhubQuoteProvider(FinnhubConfig.from_settings(settings))
    try:
        report = PriceRefreshService(_uow(ctx), provider).refresh_prices(account_id)
    finally:
        provider.close()

    for result in report.results:
        if result.success:
            click.echo(f"  {result.symbol:<8} ${result.price}")
        else:
            print_warning(f"{result.symbol}: {result.error}")
    click.echo(f"{report.updated} updated, {report.failed} failed")


def main() -> None:
    """Console script entry point."""
    cli(obj=None)


if __name__ == "__main__":
    main()
