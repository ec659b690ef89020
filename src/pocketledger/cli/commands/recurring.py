"""Recurring rule commands."""

import click
from pocketledger.cli.account_resolution import get_ledger, resolve_or_exit
from pocketledger.cli.error_handling import handle_domain_error
from pocketledger.domain.currency import format_currency
from pocketledger.domain.errors import DomainError
from pocketledger.domain.recurrence import describe_frequency
from pocketledger.domain.recurring import RecurringRuleRunner
from pocketledger.utils.account_resolver import resolve_rule


@click.group()
def recurring_group():
    """Manage recurring transactions."""
    pass


@recurring_group.command("list")
@click.pass_context
def list_rules(ctx):
    """List recurring rules and when they next run."""
    ledger = get_ledger(ctx)
    rules = ledger.recurring_rules
    if not rules:
        click.echo("No recurring rules found.")
        return

    click.echo("\nRecurring rules:")
    click.echo("-" * 100)
    for rule in rules:
        template = rule.template
        status = "active" if rule.active else "paused"
        click.echo(
            f"{rule.id[:8]} | {template.title:20s} | {format_currency(template.amount, template.currency)} | "
            f"{describe_frequency(rule.frequency, rule.next_due_date, ledger.settings.language)} | "
            f"next {rule.next_due_date:%Y-%m-%d} | {status}"
        )


@recurring_group.command("run")
@click.pass_context
def run_rules(ctx):
    """Generate every recurring transaction that is due."""
    ledger = get_ledger(ctx)
    result = RecurringRuleRunner(ledger).run()
    if not result.generated:
        click.echo("No recurring transactions due.")
        return
    click.echo(f"Generated {len(result.generated)} transaction(s):")
    for txn in result.generated:
        click.echo(f"  {txn.date:%Y-%m-%d} | {format_currency(txn.amount, txn.currency)} | {txn.title}")


def _set_active(ctx, rule: str, active: bool) -> None:
    ledger = get_ledger(ctx)
    existing = resolve_or_exit(ctx, resolve_rule, rule)
    try:
        ledger.set_rule_active(existing.id, active)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"{'Resumed' if active else 'Paused'} recurring rule '{existing.template.title}'")


@recurring_group.command("pause")
@click.argument("rule", metavar="RULE")
@click.pass_context
def pause_rule(ctx, rule: str):
    """Stop a rule from generating transactions. RULE is an ID or title."""
    _set_active(ctx, rule, False)


@recurring_group.command("resume")
@click.argument("rule", metavar="RULE")
@click.pass_context
def resume_rule(ctx, rule: str):
    """Resume a paused rule. Missed periods are caught up on the next run."""
    _set_active(ctx, rule, True)


@recurring_group.command("delete")
@click.argument("rule", metavar="RULE")
@click.pass_context
def delete_rule(ctx, rule: str):
    """Delete a rule. Transactions it already generated are kept."""
    ledger = get_ledger(ctx)
    existing = resolve_or_exit(ctx, resolve_rule, rule)
    try:
        ledger.delete_recurring_rule(existing.id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted recurring rule '{existing.template.title}'")


def register_commands(cli):
    """Register recurring commands with main CLI."""
    cli.add_command(recurring_group, name="recurring")
