"""Summary commands."""

import click
from pocketledger.cli.account_resolution import get_ledger
from pocketledger.cli.date_filters import resolve_cli_date_range
from pocketledger.domain.alerts import describe
from pocketledger.domain.category import category_label
from pocketledger.domain.currency import format_currency
from pocketledger.domain.summary import build_overview, expenses_by_category
from pocketledger.utils.date_parser import get_date_range


@click.group()
def summary_group():
    """Show balances and spending reports."""
    pass


@summary_group.command("overview")
@click.pass_context
def overview(ctx):
    """Show total balance, debts, goals, this month's pace and budgets."""
    ledger = get_ledger(ctx)
    now = ledger.clock()
    report = build_overview(ledger.snapshot(), now)
    currency = report.currency

    name = ledger.settings.name
    click.echo(f"\nOverview{f' for {name}' if name else ''} ({now:%Y-%m-%d})")
    click.echo("=" * 60)
    click.echo(f"Total balance:  {format_currency(report.total_balance, currency)}")
    click.echo(f"I owe:          {format_currency(report.debts.i_owe, currency)}")
    click.echo(f"Owed to me:     {format_currency(report.debts.owes_me, currency)}")
    click.echo(f"Net worth:      {format_currency(report.net_worth, currency)}")
    click.echo(f"Saved in goals: {format_currency(report.goals_saved, currency)}")

    click.echo("\nThis month:")
    click.echo(f"  Income:   {format_currency(report.pace.income, currency)}")
    click.echo(f"  Expenses: {format_currency(report.pace.expenses, currency)}")

    if report.budgets:
        click.echo("\nBudgets:")
        for budget, status in report.budgets:
            click.echo(
                f"  {category_label(budget.category):15s} {status.percentage:>4.0f}% "
                f"({format_currency(status.remaining, budget.currency)} left)"
            )

    if report.recent:
        click.echo("\nRecent transactions:")
        for txn in report.recent:
            click.echo(f"  {txn.date:%Y-%m-%d} | {format_currency(txn.amount, txn.currency)} | {txn.title}")

    if ledger.alerts:
        click.echo("\nAlerts:")
        for alert in ledger.alerts:
            click.echo(f"  ! {describe(alert)}")


@summary_group.command("categories")
@click.option("--start-date", help="Start date (YYYY-MM-DD or relative like 'last month', 'this year')")
@click.option("--end-date", help="End date (YYYY-MM-DD or relative like 'today', 'this month')")
@click.option("--this-month", is_flag=True, help="Filter to current month")
@click.option("--this-year", is_flag=True, help="Filter to current year")
@click.option("--this-week", is_flag=True, help="Filter to current week")
@click.option("--last-month", is_flag=True, help="Filter to previous month")
@click.option("--last-year", is_flag=True, help="Filter to previous year")
@click.option("--last-week", is_flag=True, help="Filter to previous week")
@click.pass_context
def categories(
    ctx,
    start_date: str | None,
    end_date: str | None,
    this_month: bool,
    this_year: bool,
    this_week: bool,
    last_month: bool,
    last_year: bool,
    last_week: bool,
):
    """Show expenses per category, largest first.

    Defaults to the current month when no dates are given. Amounts are
    converted to the settings currency.
    """
    ledger = get_ledger(ctx)
    start, end = resolve_cli_date_range(
        ctx,
        start_date=start_date,
        end_date=end_date,
        period_flags={
            "this-month": this_month,
            "this-year": this_year,
            "this-week": this_week,
            "last-month": last_month,
            "last-year": last_year,
            "last-week": last_week,
        },
        default_range=get_date_range("this-month", ledger.clock().date()),
        today=ledger.clock().date(),
    )

    currency = ledger.settings.currency
    totals = expenses_by_category(ledger.transactions, currency, ledger.rates, start=start, end=end)
    if not totals:
        click.echo("No expenses found.")
        return

    grand_total = sum(total for _, total in totals)
    click.echo(f"\nExpenses by category ({start or 'beginning'} to {end or 'today'}):")
    click.echo("-" * 60)
    for category, total in totals:
        share = total / grand_total * 100 if grand_total else 0
        click.echo(f"{category_label(category):15s} {format_currency(total, currency):>20s} {share:>5.1f}%")
    click.echo("-" * 60)
    click.echo(f"{'Total':15s} {format_currency(grand_total, currency):>20s}")


def register_commands(cli):
    """Register summary commands with main CLI."""
    cli.add_command(summary_group, name="summary")
