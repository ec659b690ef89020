"""Debt tracking commands."""

from dataclasses import replace

import click
from pocketledger.cli.account_resolution import (
    get_ledger,
    parse_amount_or_exit,
    parse_datetime_or_exit,
    resolve_or_exit,
)
from pocketledger.cli.error_handling import handle_domain_error
from pocketledger.domain.currency import format_currency
from pocketledger.domain.entities import Debt, DebtType, Frequency, InterestConfig, new_id
from pocketledger.domain.errors import DomainError
from pocketledger.domain.interest import debt_details
from pocketledger.utils.account_resolver import resolve_debt

DEBT_TYPES = [t.value for t in DebtType]
FREQUENCIES = [f.value for f in Frequency]


@click.group()
def debt_group():
    """Track money you owe and money owed to you."""
    pass


@debt_group.command("create")
@click.argument("person", metavar="PERSON")
@click.option("--amount", required=True, help="Amount owed")
@click.option("--type", "debt_type", type=click.Choice(DEBT_TYPES), default="i_owe", show_default=True)
@click.option("--currency", help="Currency code (defaults to the settings currency)")
@click.option("--due", help="Due date (YYYY-MM-DD)")
@click.option("--description", help="Description")
@click.option("--interest-rate", help="Interest rate per period, in percent")
@click.option("--interest-frequency", type=click.Choice(FREQUENCIES), default="monthly", show_default=True)
@click.pass_context
def create_debt(
    ctx,
    person: str,
    amount: str,
    debt_type: str,
    currency: str | None,
    due: str | None,
    description: str | None,
    interest_rate: str | None,
    interest_frequency: str,
):
    """Record a debt.

    Debts are informational: they never change account balances.

    Examples:
        pocketledger debt create "Alice" --amount 50 --due 2025-03-01
        pocketledger debt create "Bob" --amount 120 --type owes_me
    """
    ledger = get_ledger(ctx)

    interest = None
    if interest_rate is not None:
        interest = InterestConfig(
            rate_percent=parse_amount_or_exit(ctx, interest_rate),
            frequency=Frequency(interest_frequency),
            start_date=parse_datetime_or_exit(ctx, "today").date(),
        )

    debt = Debt(
        id=new_id(),
        person_name=person,
        amount=parse_amount_or_exit(ctx, amount),
        currency=(currency or ledger.settings.currency).upper(),
        type=DebtType(debt_type),
        due_date=parse_datetime_or_exit(ctx, due) if due else None,
        description=description,
        interest=interest,
    )

    try:
        ledger.add_debt(debt)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Recorded debt with '{person}' (ID: {debt.id})")


@debt_group.command("list")
@click.pass_context
def list_debts(ctx):
    """List debts, with interest accrued to date."""
    debts = get_ledger(ctx).debts
    if not debts:
        click.echo("No debts found.")
        return

    click.echo("\nDebts:")
    click.echo("-" * 80)
    for debt in debts:
        direction = "I owe" if debt.type == DebtType.I_OWE else "Owes me"
        total = debt_details(debt).total
        line = f"{debt.id[:8]} | {debt.person_name:20s} | {direction:7s} | {format_currency(total, debt.currency)}"
        if debt.due_date:
            line += f" | due {debt.due_date:%Y-%m-%d}"
        click.echo(line)


@debt_group.command("edit")
@click.argument("debt", metavar="DEBT")
@click.option("--person", help="New person name")
@click.option("--amount", help="New amount")
@click.option("--due", help="New due date, or an empty string to clear it")
@click.option("--description", help="New description")
@click.pass_context
def edit_debt(ctx, debt: str, person: str | None, amount: str | None, due: str | None, description: str | None):
    """Edit a debt. DEBT can be the person's name or the debt ID."""
    ledger = get_ledger(ctx)
    existing = resolve_or_exit(ctx, resolve_debt, debt)

    changes = {}
    if person is not None:
        changes["person_name"] = person
    if amount is not None:
        changes["amount"] = parse_amount_or_exit(ctx, amount)
    if due is not None:
        changes["due_date"] = parse_datetime_or_exit(ctx, due) if due else None
    if description is not None:
        changes["description"] = description or None

    if not changes:
        click.echo("Nothing to change.")
        return

    try:
        updated = ledger.update_debt(replace(existing, **changes))
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Updated debt with '{updated.person_name}'")


@debt_group.command("delete")
@click.argument("debt", metavar="DEBT")
@click.pass_context
def delete_debt(ctx, debt: str):
    """Delete a debt, for example once it is settled."""
    ledger = get_ledger(ctx)
    existing = resolve_or_exit(ctx, resolve_debt, debt)
    try:
        ledger.delete_debt(existing.id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted debt with '{existing.person_name}'")


def register_commands(cli):
    """Register debt commands with main CLI."""
    cli.add_command(debt_group, name="debt")
