"""Transaction management commands."""

from dataclasses import replace

import click
from pocketledger.cli.account_resolution import (
    get_ledger,
    parse_amount_or_exit,
    parse_datetime_or_exit,
    resolve_or_exit,
)
from pocketledger.cli.date_filters import resolve_cli_date_range
from pocketledger.cli.error_handling import handle_domain_error
from pocketledger.domain.category import category_label, resolve_category
from pocketledger.domain.currency import format_currency
from pocketledger.domain.entities import TransactionType
from pocketledger.domain.errors import DomainError
from pocketledger.domain.summary import filter_transactions
from pocketledger.utils.account_resolver import resolve_account, resolve_target, resolve_transaction

TRANSACTION_TYPES = [t.value for t in TransactionType]


@click.group()
def transaction_group():
    """Manage transactions."""
    pass


@transaction_group.command("list")
@click.option("--start-date", help="Start date (YYYY-MM-DD or relative like 'last month', 'this year')")
@click.option("--end-date", help="End date (YYYY-MM-DD or relative like 'today', 'this month')")
@click.option("--this-month", is_flag=True, help="Show this month")
@click.option("--last-month", is_flag=True, help="Show last month")
@click.option("--category", help="Category key or name")
@click.option("--account", help="Account name or ID")
@click.option("--type", "txn_type", type=click.Choice(TRANSACTION_TYPES), help="Transaction type")
@click.option("--limit", type=int, help="Show at most this many transactions")
@click.option("--verbose", "-v", is_flag=True, help="Show ids, descriptions and recurring origin")
@click.pass_context
def list_transactions(
    ctx,
    start_date: str | None,
    end_date: str | None,
    this_month: bool,
    last_month: bool,
    category: str | None,
    account: str | None,
    txn_type: str | None,
    limit: int | None,
    verbose: bool,
):
    """View transactions with optional filters, newest first.

    Account can be specified by name or ID.
    """
    ledger = get_ledger(ctx)
    start, end = resolve_cli_date_range(
        ctx,
        start_date=start_date,
        end_date=end_date,
        period_flags={"this-month": this_month, "last-month": last_month},
        today=ledger.clock().date(),
    )

    category_key = None
    if category:
        try:
            category_key = resolve_category(category)
        except DomainError as e:
            handle_domain_error(ctx, e)

    account_id = resolve_or_exit(ctx, resolve_account, account).id if account else None

    transactions = filter_transactions(
        ledger.transactions,
        start=start,
        end=end,
        category=category_key,
        account_id=account_id,
        type=TransactionType(txn_type) if txn_type else None,
    )
    transactions.sort(key=lambda t: t.date, reverse=True)
    if limit is not None:
        transactions = transactions[:limit]

    if not transactions:
        click.echo("No transactions found.")
        return

    click.echo(f"\nFound {len(transactions)} transaction(s):")
    click.echo("-" * 100)
    for txn in transactions:
        where = ledger.display_name(txn.account_id)
        if txn.to_account_id:
            where = f"{where} -> {ledger.display_name(txn.to_account_id)}"
        sign = "-" if txn.type == TransactionType.EXPENSE else "+" if txn.type == TransactionType.INCOME else " "
        click.echo(
            f"{txn.id[:8]} | {txn.date:%Y-%m-%d} | {sign}{format_currency(txn.amount, txn.currency):>18s} | "
            f"{category_label(txn.category):13s} | {where:25s} | {txn.title}"
        )
        if verbose:
            click.echo(f"    ID: {txn.id}")
            if txn.description:
                click.echo(f"    Description: {txn.description}")
            if txn.generated_from_rule_id:
                click.echo(f"    Generated by rule: {txn.generated_from_rule_id}")


@transaction_group.command("edit")
@click.argument("transaction", metavar="TRANSACTION")
@click.option("--account", help="Account or goal name or ID")
@click.option("--to", "to_account", help="Destination account (transfers)")
@click.option("--amount", help="New amount or expression")
@click.option("--currency", help="New currency code")
@click.option("--category", help="New category key or name")
@click.option("--title", help="New title")
@click.option("--description", help="New description")
@click.option("--date", help="New date")
@click.pass_context
def edit_transaction(
    ctx,
    transaction: str,
    account: str | None,
    to_account: str | None,
    amount: str | None,
    currency: str | None,
    category: str | None,
    title: str | None,
    description: str | None,
    date: str | None,
) -> None:
    """Edit a transaction.

    TRANSACTION is an ID or a unique ID prefix. Balances are adjusted as if the
    old version had been deleted and the new one added.

    Examples:
        pocketledger transaction edit 3f2a --amount 15
        pocketledger transaction edit 3f2a --category transport --title "Taxi"
    """
    ledger = get_ledger(ctx)
    existing = resolve_or_exit(ctx, resolve_transaction, transaction)

    changes = {}
    if account is not None:
        if existing.type == TransactionType.TRANSFER:
            changes["account_id"] = resolve_or_exit(ctx, resolve_account, account).id
        else:
            changes["account_id"] = resolve_or_exit(ctx, resolve_target, account).ref.id
    if to_account is not None:
        changes["to_account_id"] = resolve_or_exit(ctx, resolve_account, to_account).id
    if amount is not None:
        changes["amount"] = parse_amount_or_exit(ctx, amount)
    if currency is not None:
        changes["currency"] = currency.upper()
    if category is not None:
        try:
            changes["category"] = resolve_category(category)
        except DomainError as e:
            handle_domain_error(ctx, e)
    if title is not None:
        changes["title"] = title
    if description is not None:
        changes["description"] = description or None
    if date is not None:
        changes["date"] = parse_datetime_or_exit(ctx, date)

    if not changes:
        click.echo("Nothing to change.")
        return

    try:
        updated = ledger.update_transaction(replace(existing, **changes))
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Updated transaction {updated.id}")


@transaction_group.command("delete")
@click.argument("transaction", metavar="TRANSACTION")
@click.pass_context
def delete_transaction(ctx, transaction: str) -> None:
    """Delete a transaction and revert its effect on balances.

    The deletion can be undone with 'transaction undo' for a short time.
    """
    ledger = get_ledger(ctx)
    existing = resolve_or_exit(ctx, resolve_transaction, transaction)

    try:
        ledger.delete_transaction(existing.id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted transaction {existing.id} ({existing.title})")
    click.echo(f"Run 'transaction undo' within {ledger.settings.undo_window_seconds} seconds to restore it.")


@transaction_group.command("undo")
@click.pass_context
def undo_delete(ctx) -> None:
    """Restore the most recently deleted transaction."""
    ledger = get_ledger(ctx)
    try:
        restored = ledger.undo_delete()
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Restored transaction {restored.id} ({restored.title})")


def register_commands(cli):
    """Register transaction commands with main CLI."""
    cli.add_command(transaction_group, name="transaction")
