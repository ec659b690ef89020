"""Monthly budget commands."""

import click
from pocketledger.cli.account_resolution import get_ledger, parse_amount_or_exit, resolve_or_exit
from pocketledger.cli.error_handling import handle_domain_error
from pocketledger.domain.category import category_label, resolve_category
from pocketledger.domain.currency import format_currency
from pocketledger.domain.entities import Budget, new_id
from pocketledger.domain.errors import DomainError
from pocketledger.domain.summary import budget_status
from pocketledger.utils.account_resolver import resolve_budget


@click.group()
def budget_group():
    """Manage monthly category budgets."""
    pass


@budget_group.command("create")
@click.argument("category", metavar="CATEGORY")
@click.option("--limit", "limit_text", required=True, help="Monthly spending limit")
@click.option("--currency", help="Currency code (defaults to the settings currency)")
@click.pass_context
def create_budget(ctx, category: str, limit_text: str, currency: str | None):
    """Create a monthly budget for a category.

    Examples:
        pocketledger budget create food --limit 400
    """
    ledger = get_ledger(ctx)
    try:
        category_key = resolve_category(category)
        budget = ledger.add_budget(
            Budget(
                id=new_id(),
                category=category_key,
                limit=parse_amount_or_exit(ctx, limit_text),
                currency=(currency or ledger.settings.currency).upper(),
            )
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created budget for {category_label(budget.category)}: {format_currency(budget.limit, budget.currency)}")


@budget_group.command("list")
@click.pass_context
def list_budgets(ctx):
    """List budgets with this month's spending."""
    ledger = get_ledger(ctx)
    budgets = ledger.budgets
    if not budgets:
        click.echo("No budgets found.")
        return

    click.echo("\nBudgets:")
    click.echo("-" * 80)
    for budget in budgets:
        status = budget_status(budget, ledger.transactions, ledger.rates, ledger.clock())
        click.echo(
            f"{category_label(budget.category):15s} | spent {format_currency(status.spent, budget.currency)} "
            f"of {format_currency(budget.limit, budget.currency)} | {status.percentage:.0f}% | "
            f"{format_currency(status.remaining, budget.currency)} left"
        )


@budget_group.command("delete")
@click.argument("budget", metavar="BUDGET")
@click.pass_context
def delete_budget(ctx, budget: str):
    """Delete a budget. BUDGET is a category name or budget ID."""
    ledger = get_ledger(ctx)
    existing = resolve_or_exit(ctx, resolve_budget, budget)
    try:
        ledger.delete_budget(existing.id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted budget for {category_label(existing.category)}")


def register_commands(cli):
    """Register budget commands with main CLI."""
    cli.add_command(budget_group, name="budget")
