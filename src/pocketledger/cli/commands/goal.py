"""Savings goal commands."""

from dataclasses import replace
from decimal import Decimal

import click
from pocketledger.cli.account_resolution import (
    get_ledger,
    parse_amount_or_exit,
    parse_datetime_or_exit,
    resolve_or_exit,
)
from pocketledger.cli.error_handling import handle_domain_error
from pocketledger.domain.currency import format_currency
from pocketledger.domain.entities import Goal, new_id
from pocketledger.domain.errors import DomainError
from pocketledger.utils.account_resolver import resolve_goal


@click.group()
def goal_group():
    """Manage savings goals."""
    pass


@goal_group.command("create")
@click.argument("name", metavar="GOAL_NAME")
@click.option("--target", required=True, help="Target amount")
@click.option("--saved", default="0", help="Amount already saved")
@click.option("--currency", help="Currency code (defaults to the settings currency)")
@click.option("--deadline", help="Deadline (YYYY-MM-DD)")
@click.pass_context
def create_goal(ctx, name: str, target: str, saved: str, currency: str | None, deadline: str | None):
    """Create a savings goal.

    Income recorded against a goal adds to it; expenses withdraw from it.

    Examples:
        pocketledger goal create "Vacation" --target 2000
        pocketledger goal create "Laptop" --target 1500 --deadline 2025-06-01
    """
    ledger = get_ledger(ctx)
    goal = Goal(
        id=new_id(),
        name=name,
        target_amount=parse_amount_or_exit(ctx, target),
        current_amount=parse_amount_or_exit(ctx, saved),
        currency=(currency or ledger.settings.currency).upper(),
        deadline=parse_datetime_or_exit(ctx, deadline).date() if deadline else None,
    )

    try:
        goal = ledger.add_goal(goal)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created goal '{name}' (ID: {goal.id})")


@goal_group.command("list")
@click.pass_context
def list_goals(ctx):
    """List goals with their progress."""
    goals = get_ledger(ctx).goals
    if not goals:
        click.echo("No goals found.")
        return

    click.echo("\nGoals:")
    click.echo("-" * 80)
    for goal in goals:
        percent = goal.current_amount / goal.target_amount * 100 if goal.target_amount else Decimal(0)
        status = "done" if goal.is_completed else f"{percent:.0f}%"
        line = (
            f"{goal.id[:8]} | {goal.name:20s} | {format_currency(goal.current_amount, goal.currency)}"
            f" of {format_currency(goal.target_amount, goal.currency)} | {status}"
        )
        if goal.deadline:
            line += f" | due {goal.deadline}"
        click.echo(line)


@goal_group.command("edit")
@click.argument("goal", metavar="GOAL")
@click.option("--name", help="New name")
@click.option("--target", help="New target amount")
@click.option("--saved", help="New saved amount")
@click.option("--deadline", help="New deadline, or an empty string to clear it")
@click.pass_context
def edit_goal(ctx, goal: str, name: str | None, target: str | None, saved: str | None, deadline: str | None):
    """Edit a goal. GOAL can be a goal name or ID."""
    ledger = get_ledger(ctx)
    existing = resolve_or_exit(ctx, resolve_goal, goal)

    changes = {}
    if name is not None:
        changes["name"] = name
    if target is not None:
        changes["target_amount"] = parse_amount_or_exit(ctx, target)
    if saved is not None:
        changes["current_amount"] = parse_amount_or_exit(ctx, saved)
    if deadline is not None:
        changes["deadline"] = parse_datetime_or_exit(ctx, deadline).date() if deadline else None

    if not changes:
        click.echo("Nothing to change.")
        return

    try:
        updated = ledger.update_goal(replace(existing, **changes))
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Updated goal '{updated.name}'")


@goal_group.command("delete")
@click.argument("goal", metavar="GOAL")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_goal(ctx, goal: str, yes: bool):
    """Delete a goal. Transactions recorded against it are kept."""
    ledger = get_ledger(ctx)
    existing = resolve_or_exit(ctx, resolve_goal, goal)

    if not yes and not click.confirm(f"Are you sure you want to delete goal '{existing.name}'?"):
        click.echo("Deletion cancelled.")
        return

    try:
        ledger.delete_goal(existing.id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted goal '{existing.name}'")


def register_commands(cli):
    """Register goal commands with main CLI."""
    cli.add_command(goal_group, name="goal")
