"""Account management commands."""

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
from pocketledger.domain.entities import Account, AccountType, Frequency, InterestConfig, new_id
from pocketledger.domain.errors import DomainError, cascade_summary
from pocketledger.domain.interest import account_details
from pocketledger.domain.summary import filter_transactions
from pocketledger.utils.account_resolver import resolve_account

ACCOUNT_TYPES = [t.value for t in AccountType]
FREQUENCIES = [f.value for f in Frequency]


@click.group()
def account_group():
    """Manage accounts."""
    pass


@account_group.command("create")
@click.argument("name", metavar="ACCOUNT_NAME")
@click.option("--type", "account_type", type=click.Choice(ACCOUNT_TYPES), default="checking", show_default=True)
@click.option("--balance", default="0", help="Opening balance (expressions like 100+20 are allowed)")
@click.option("--currency", help="Currency code (defaults to the settings currency)")
@click.option("--interest-rate", help="Interest rate per period, in percent")
@click.option("--interest-frequency", type=click.Choice(FREQUENCIES), default="monthly", show_default=True)
@click.option("--interest-start", help="Date interest starts accruing (defaults to today)")
@click.option("--icon", help="Icon name")
@click.pass_context
def create_account(
    ctx,
    name: str,
    account_type: str,
    balance: str,
    currency: str | None,
    interest_rate: str | None,
    interest_frequency: str,
    interest_start: str | None,
    icon: str | None,
):
    """Create a new account.

    Examples:
        pocketledger account create "Wallet" --type cash --balance 40
        pocketledger account create "Savings" --type savings --currency EUR --interest-rate 0.3
    """
    ledger = get_ledger(ctx)

    interest = None
    if interest_rate is not None:
        start = parse_datetime_or_exit(ctx, interest_start or "today")
        interest = InterestConfig(
            rate_percent=parse_amount_or_exit(ctx, interest_rate),
            frequency=Frequency(interest_frequency),
            start_date=start.date(),
        )

    account = Account(
        id=new_id(),
        name=name,
        type=AccountType(account_type),
        balance=parse_amount_or_exit(ctx, balance),
        currency=(currency or ledger.settings.currency).upper(),
        interest=interest,
        icon=icon,
    )

    try:
        ledger.add_account(account)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created account '{name}' (ID: {account.id})")


@account_group.command("list")
@click.pass_context
def list_accounts(ctx):
    """List all accounts."""
    ledger = get_ledger(ctx)

    accounts = ledger.accounts
    if not accounts:
        click.echo("No accounts found.")
        return

    click.echo("\nAccounts:")
    click.echo("-" * 80)
    for acc in accounts:
        details = account_details(acc)
        line = f"{acc.id[:8]} | {acc.name:20s} | {acc.type.value:12s} | {format_currency(acc.balance, acc.currency)}"
        if details.interest:
            line += f" (+{format_currency(details.interest, acc.currency)} interest)"
        click.echo(line)


@account_group.command("show")
@click.argument("account", metavar="ACCOUNT")
@click.pass_context
def show_account(ctx, account: str):
    """Show an account with its interest projection and recent transactions.

    ACCOUNT can be an account name or ID.
    """
    ledger = get_ledger(ctx)
    acc = resolve_or_exit(ctx, resolve_account, account)
    details = account_details(acc)

    click.echo(f"Account: {acc.name}")
    click.echo(f"  ID: {acc.id}")
    click.echo(f"  Type: {acc.type.value}")
    click.echo(f"  Balance: {format_currency(acc.balance, acc.currency)}")
    if acc.interest is not None and acc.interest.enabled:
        click.echo(
            f"  Interest: {acc.interest.rate_percent}% {acc.interest.frequency.value} "
            f"since {acc.interest.start_date or 'unset'}"
        )
        click.echo(f"  Accrued interest: {format_currency(details.interest, acc.currency)}")
        click.echo(f"  Total with interest: {format_currency(details.total, acc.currency)}")

    transactions = filter_transactions(ledger.transactions, account_id=acc.id)
    click.echo(f"  Transactions: {len(transactions)}")
    for txn in transactions[:10]:
        click.echo(
            f"    {txn.date:%Y-%m-%d} | {txn.type.value:8s} | "
            f"{format_currency(txn.amount, txn.currency)} | {txn.title}"
        )


@account_group.command("edit")
@click.argument("account", metavar="ACCOUNT")
@click.option("--name", help="New account name")
@click.option("--type", "account_type", type=click.Choice(ACCOUNT_TYPES), help="New account type")
@click.option("--balance", help="New balance")
@click.option("--currency", help="New currency code (the balance is not converted)")
@click.option("--interest-rate", help="Interest rate per period, in percent")
@click.option("--interest-frequency", type=click.Choice(FREQUENCIES), help="Compounding period")
@click.option("--no-interest", is_flag=True, help="Disable interest")
@click.pass_context
def edit_account(
    ctx,
    account: str,
    name: str | None,
    account_type: str | None,
    balance: str | None,
    currency: str | None,
    interest_rate: str | None,
    interest_frequency: str | None,
    no_interest: bool,
) -> None:
    """Edit an account.

    ACCOUNT can be an account name or ID. Only the options given are changed.

    Examples:
        pocketledger account edit "Wallet" --name "Cash"
        pocketledger account edit Savings --interest-rate 0.5 --interest-frequency monthly
    """
    ledger = get_ledger(ctx)
    acc = resolve_or_exit(ctx, resolve_account, account)

    changes = {}
    if name is not None:
        changes["name"] = name
    if account_type is not None:
        changes["type"] = AccountType(account_type)
    if balance is not None:
        changes["balance"] = parse_amount_or_exit(ctx, balance)
    if currency is not None:
        changes["currency"] = currency.upper()

    if no_interest:
        changes["interest"] = None
    elif interest_rate is not None or interest_frequency is not None:
        current = acc.interest or InterestConfig(
            rate_percent=Decimal(0), start_date=parse_datetime_or_exit(ctx, "today").date()
        )
        if interest_rate is not None:
            current = replace(current, rate_percent=parse_amount_or_exit(ctx, interest_rate))
        if interest_frequency is not None:
            current = replace(current, frequency=Frequency(interest_frequency))
        changes["interest"] = replace(current, enabled=True)

    if not changes:
        click.echo("Nothing to change.")
        return

    try:
        updated = ledger.update_account(replace(acc, **changes))
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Updated account '{updated.name}'")


@account_group.command("delete")
@click.argument("account", metavar="ACCOUNT")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_account(ctx, account: str, yes: bool) -> None:
    """Delete an account.

    ACCOUNT can be an account name or ID.

    Every transaction that involves the account, and every recurring rule that
    would generate one, is deleted with it.

    Examples:
        pocketledger account delete "Wallet"
        pocketledger account delete 3f2a --yes
    """
    ledger = get_ledger(ctx)
    acc = resolve_or_exit(ctx, resolve_account, account)

    transaction_count = len(filter_transactions(ledger.transactions, account_id=acc.id))
    rule_count = sum(1 for rule in ledger.recurring_rules if rule.references(acc.id))

    if not yes:
        prompt = f"Are you sure you want to delete account '{acc.name}'?"
        if transaction_count or rule_count:
            prompt += f" This also deletes {transaction_count} transaction(s) and {rule_count} recurring rule(s)."
        if not click.confirm(prompt):
            click.echo("Deletion cancelled.")
            return

    try:
        result = ledger.delete_account(acc.id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(cascade_summary(result.account.name, len(result.transactions), len(result.rules)))


def register_commands(cli):
    """Register account commands with main CLI."""
    cli.add_command(account_group, name="account")
