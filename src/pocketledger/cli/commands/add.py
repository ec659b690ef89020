"""Add transaction command."""

import click
from pocketledger.cli.account_resolution import (
    get_ledger,
    parse_amount_or_exit,
    parse_datetime_or_exit,
    resolve_or_exit,
)
from pocketledger.cli.error_handling import handle_domain_error
from pocketledger.domain.category import DEFAULT_CATEGORY, TRANSFER_CATEGORY, category_label, resolve_category
from pocketledger.domain.currency import format_currency
from pocketledger.domain.entities import (
    Frequency,
    RecurringOptions,
    Transaction,
    TransactionType,
    new_id,
)
from pocketledger.domain.errors import DomainError
from pocketledger.domain.recurrence import describe_frequency
from pocketledger.utils.account_resolver import resolve_account, resolve_target

TRANSACTION_TYPES = [t.value for t in TransactionType]
FREQUENCIES = [f.value for f in Frequency]


@click.command("add")
@click.option("--account", required=True, help="Account or goal name or ID (the source account for transfers)")
@click.option("--to", "to_account", help="Destination account for a transfer")
@click.option("--amount", required=True, help="Amount, or an expression like 12.50+3*2")
@click.option(
    "--type",
    "txn_type",
    type=click.Choice(TRANSACTION_TYPES),
    help="Transaction type (default: transfer when --to is given, otherwise expense)",
)
@click.option("--currency", help="Currency code (defaults to the account's currency)")
@click.option("--category", help="Category key or name (e.g. food, salary)")
@click.option("--title", help="Title (defaults to the category name)")
@click.option("--description", help="Longer description")
@click.option(
    "--date",
    default="now",
    help="Transaction date (YYYY-MM-DD [HH:MM] or relative like 'today', 'yesterday')",
)
@click.option("--recurring", type=click.Choice(FREQUENCIES), help="Repeat this transaction every period")
@click.option("--notify", is_flag=True, help="Raise an alert each time the recurring transaction is generated")
@click.pass_context
def add_transaction(
    ctx,
    account: str,
    to_account: str | None,
    amount: str,
    txn_type: str | None,
    currency: str | None,
    category: str | None,
    title: str | None,
    description: str | None,
    date: str,
    recurring: str | None,
    notify: bool,
):
    """Add a transaction.

    Examples:
        pocketledger add --account Wallet --amount 12.50 --category food --title "Lunch"
        pocketledger add --account Checking --amount 2500 --type income --category salary --recurring monthly
        pocketledger add --account Checking --to Savings --amount 200
        pocketledger add --account Vacation --amount 100 --type income --title "Deposit"
    """
    ledger = get_ledger(ctx)

    if txn_type is None:
        txn_type = TransactionType.TRANSFER.value if to_account else TransactionType.EXPENSE.value
    kind = TransactionType(txn_type)

    if kind == TransactionType.TRANSFER:
        source = resolve_or_exit(ctx, resolve_account, account)
        if not to_account:
            click.echo("Error: Transfers require --to", err=True)
            ctx.exit(1)
        destination = resolve_or_exit(ctx, resolve_account, to_account)
        source_id, source_currency, destination_id = source.id, source.currency, destination.id
    else:
        if to_account:
            click.echo("Error: --to can only be used with transfers", err=True)
            ctx.exit(1)
        target = resolve_or_exit(ctx, resolve_target, account)
        source_id, source_currency, destination_id = target.ref.id, target.ref.currency, None

    if category is None:
        category_key = TRANSFER_CATEGORY if kind == TransactionType.TRANSFER else DEFAULT_CATEGORY
    else:
        try:
            category_key = resolve_category(category)
        except DomainError as e:
            handle_domain_error(ctx, e)

    txn = Transaction(
        id=new_id(),
        amount=parse_amount_or_exit(ctx, amount),
        currency=(currency or source_currency).upper(),
        type=kind,
        category=category_key,
        account_id=source_id,
        date=parse_datetime_or_exit(ctx, date),
        title=title if title is not None else category_label(category_key).capitalize(),
        to_account_id=destination_id,
        description=description,
    )
    options = RecurringOptions(frequency=Frequency(recurring), notify=notify) if recurring else None

    try:
        recorded = ledger.add_transaction(txn, recurring=options)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Created transaction {recorded.id}")
    click.echo(f"  Account: {ledger.display_name(recorded.account_id)}")
    if recorded.to_account_id:
        click.echo(f"  To: {ledger.display_name(recorded.to_account_id)}")
    click.echo(f"  Date: {recorded.date:%Y-%m-%d %H:%M}")
    click.echo(f"  Amount: {format_currency(recorded.amount, recorded.currency)}")
    click.echo(f"  Title: {recorded.title}")
    if options is not None:
        click.echo(f"  Repeats: {describe_frequency(options.frequency, recorded.date, ledger.settings.language)}")


def register_commands(cli):
    """Register add command with main CLI."""
    cli.add_command(add_transaction)
