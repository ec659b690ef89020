"""User settings and exchange rate commands."""

from dataclasses import replace

import click
from pocketledger.cli.account_resolution import get_ledger, parse_number_or_exit
from pocketledger.cli.error_handling import handle_domain_error
from pocketledger.domain.currency import FALLBACK_RATES
from pocketledger.domain.errors import DomainError
from pocketledger.domain.recurrence import SUPPORTED_LOCALES


@click.group()
def settings_group():
    """View and change user settings."""
    pass


@settings_group.command("show")
@click.pass_context
def show_settings(ctx):
    """Show the current settings."""
    settings = get_ledger(ctx).settings
    notifications = settings.notifications
    click.echo(f"Name: {settings.name or '(not set)'}")
    click.echo(f"Currency: {settings.currency}")
    click.echo(f"Language: {settings.language}")
    click.echo(f"Undo window: {settings.undo_window_seconds}s")
    click.echo("Notifications:")
    click.echo(f"  Low balance: {'on' if notifications.low_balance else 'off'} (below {notifications.low_balance_threshold})")
    click.echo(f"  Debt reminders: {'on' if notifications.debt_reminders else 'off'}")
    click.echo(f"  Goal milestones: {'on' if notifications.goal_milestones else 'off'}")


@settings_group.command("set")
@click.option("--name", help="Your name")
@click.option("--currency", help="Reporting currency code")
@click.option("--language", type=click.Choice(SUPPORTED_LOCALES), help="Language for schedule descriptions")
@click.option("--low-balance/--no-low-balance", default=None, help="Toggle low balance alerts")
@click.option("--debt-reminders/--no-debt-reminders", default=None, help="Toggle debt due reminders")
@click.option("--goal-milestones/--no-goal-milestones", default=None, help="Toggle goal milestone alerts")
@click.option("--threshold", help="Low balance threshold, in the reporting currency")
@click.option("--undo-window", type=int, help="Seconds a deleted transaction can be restored")
@click.pass_context
def set_settings(
    ctx,
    name: str | None,
    currency: str | None,
    language: str | None,
    low_balance: bool | None,
    debt_reminders: bool | None,
    goal_milestones: bool | None,
    threshold: str | None,
    undo_window: int | None,
):
    """Change settings. Only the options given are changed.

    Examples:
        pocketledger settings set --currency EUR --language de
        pocketledger settings set --threshold 250 --no-debt-reminders
    """
    ledger = get_ledger(ctx)
    settings = ledger.settings

    notification_changes = {}
    if low_balance is not None:
        notification_changes["low_balance"] = low_balance
    if debt_reminders is not None:
        notification_changes["debt_reminders"] = debt_reminders
    if goal_milestones is not None:
        notification_changes["goal_milestones"] = goal_milestones
    if threshold is not None:
        notification_changes["low_balance_threshold"] = parse_number_or_exit(ctx, threshold)

    changes = {}
    if name is not None:
        changes["name"] = name
    if currency is not None:
        changes["currency"] = currency.upper()
    if language is not None:
        changes["language"] = language
    if undo_window is not None:
        changes["undo_window_seconds"] = undo_window
    if notification_changes:
        changes["notifications"] = replace(settings.notifications, **notification_changes)

    if not changes:
        click.echo("Nothing to change.")
        return

    try:
        ledger.update_settings(replace(settings, **changes))
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo("Settings updated.")


@click.group()
def rates_group():
    """View and change exchange rates (units per 1 USD)."""
    pass


@rates_group.command("show")
@click.pass_context
def show_rates(ctx):
    """Show the exchange rate table."""
    for code, rate in sorted(get_ledger(ctx).rates.items()):
        click.echo(f"{code}: {rate}")


@rates_group.command("set")
@click.argument("pairs", metavar="CODE=RATE...", nargs=-1)
@click.option("--reset", is_flag=True, help="Start from the built-in rates")
@click.pass_context
def set_rates(ctx, pairs: tuple[str, ...], reset: bool):
    """Set exchange rates.

    Existing transactions keep the rates they were recorded with.

    Examples:
        pocketledger rates set EUR=0.91 GBP=0.78
        pocketledger rates set --reset
    """
    ledger = get_ledger(ctx)
    rates = dict(FALLBACK_RATES if reset else ledger.rates)
    for pair in pairs:
        code, sep, value = pair.partition("=")
        if not sep or not code.strip():
            click.echo(f"Error: Expected CODE=RATE, got '{pair}'", err=True)
            ctx.exit(1)
        rates[code.strip().upper()] = parse_number_or_exit(ctx, value)

    if not pairs and not reset:
        click.echo("Nothing to change.")
        return

    try:
        ledger.set_rates(rates)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Rate table updated ({len(ledger.rates)} currencies).")


def register_commands(cli):
    """Register settings and rates commands with main CLI."""
    cli.add_command(settings_group, name="settings")
    cli.add_command(rates_group, name="rates")
