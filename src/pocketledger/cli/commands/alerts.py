"""Alert commands."""

import click
from pocketledger.cli.account_resolution import get_ledger
from pocketledger.cli.error_handling import handle_domain_error
from pocketledger.domain.alerts import describe
from pocketledger.domain.errors import DomainError


@click.group()
def alerts_group():
    """View and dismiss alerts."""
    pass


@alerts_group.command("list")
@click.pass_context
def list_alerts(ctx):
    """List active alerts."""
    alerts = get_ledger(ctx).alerts
    if not alerts:
        click.echo("No alerts.")
        return
    for alert in alerts:
        click.echo(f"{alert.id} | {alert.type.value:19s} | {describe(alert)}")


@alerts_group.command("dismiss")
@click.argument("alert_id", metavar="ALERT_ID")
@click.pass_context
def dismiss_alert(ctx, alert_id: str):
    """Dismiss an alert.

    A dismissed low balance or debt reminder stays quiet until the condition
    clears and comes back.
    """
    ledger = get_ledger(ctx)
    try:
        ledger.dismiss_alert(alert_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Dismissed alert {alert_id}")


def register_commands(cli):
    """Register alert commands with main CLI."""
    cli.add_command(alerts_group, name="alerts")
