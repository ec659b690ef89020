"""Main CLI entry point."""

import logging

import click
from pocketledger import __version__
from pocketledger.database.factories import create_sqlite_database
from pocketledger.domain.ledger import Ledger
from pocketledger.domain.recurring import RecurringRuleRunner
from pocketledger.logging_config import configure_logging

# Import and register all commands at module level
from pocketledger.cli.commands import (
    account,
    goal,
    debt,
    add,
    transaction,
    recurring,
    alerts,
    budget,
    summary,
    backup,
    settings,
)

logger = logging.getLogger(__name__)


@click.group()
@click.version_option(version=__version__, prog_name="pocketledger")
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides POCKETLEDGER_DB_PATH environment variable)",
    envvar="POCKETLEDGER_DB_PATH",
)
@click.option("--verbose", is_flag=True, help="Log debug output to stderr")
@click.option(
    "--no-recurring",
    is_flag=True,
    help="Do not generate due recurring transactions at startup",
)
@click.pass_context
def cli(ctx, db_path: str | None, verbose: bool, no_recurring: bool):
    """Pocketledger - Personal finance ledger.

    Track accounts, savings goals, debts and budgets, with recurring
    transactions and multi-currency balances.
    """
    ctx.ensure_object(dict)
    configure_logging(logging.DEBUG if verbose else logging.WARNING)

    # Open the ledger only when actually running a command (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_sqlite_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.call_on_close(db.disconnect)
        ledger = Ledger(db)
        ctx.obj["db"] = db
        ctx.obj["ledger"] = ledger

        if not no_recurring:
            result = RecurringRuleRunner(ledger).run()
            if result.generated:
                logger.info("Generated %d recurring transactions", len(result.generated))
        ledger.refresh_alerts()


# Register all commands
account.register_commands(cli)
goal.register_commands(cli)
debt.register_commands(cli)
add.register_commands(cli)
transaction.register_commands(cli)
recurring.register_commands(cli)
alerts.register_commands(cli)
budget.register_commands(cli)
summary.register_commands(cli)
backup.register_commands(cli)
settings.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
