"""Shared pytest fixtures for pocketledger tests."""

import tempfile
import os
from datetime import datetime, timedelta
from decimal import Decimal
import pytest

from pocketledger.database.factories import create_memory_database, create_sqlite_database
from pocketledger.domain.entities import (
    Account,
    AccountType,
    Goal,
    Transaction,
    TransactionType,
)
from pocketledger.domain.ledger import Ledger
from pocketledger.logging_config import reset_logging

# Rates that divide evenly, so cross-currency tests compare exact Decimals
TEST_RATES = {"USD": Decimal("1"), "EUR": Decimal("0.5"), "GBP": Decimal("0.8")}


class FixedClock:
    """Clock that only moves when told to."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


@pytest.fixture(autouse=True)
def _reset_logging():
    """Undo the handler the CLI installs so caplog keeps seeing records."""
    yield
    reset_logging()


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def memory_db():
    """Create an in-memory database."""
    db = create_memory_database()
    db.connect()
    db.initialize_schema()
    yield db
    db.disconnect()


@pytest.fixture
def clock():
    """Adjustable clock starting at 2024-03-15 10:00."""
    return FixedClock(datetime(2024, 3, 15, 10, 0))


@pytest.fixture
def ledger(memory_db, clock):
    """Create a Ledger with an in-memory database and predictable rates."""
    ledger = Ledger(memory_db, clock=clock)
    ledger.set_rates(TEST_RATES)
    return ledger


@pytest.fixture
def make_account(ledger):
    """Factory adding an account to the ledger."""

    def _make(name="Checking", balance="1000", currency="USD", account_type=AccountType.CHECKING, **kwargs):
        account = Account(
            id=kwargs.pop("id", f"acc_{name.lower()}"),
            name=name,
            type=account_type,
            balance=Decimal(balance),
            currency=currency,
            **kwargs,
        )
        return ledger.add_account(account)

    return _make


@pytest.fixture
def make_goal(ledger):
    """Factory adding a goal to the ledger."""

    def _make(name="Vacation", target="1000", current="0", currency="USD", **kwargs):
        goal = Goal(
            id=kwargs.pop("id", f"goal_{name.lower()}"),
            name=name,
            target_amount=Decimal(target),
            current_amount=Decimal(current),
            currency=currency,
            **kwargs,
        )
        return ledger.add_goal(goal)

    return _make


@pytest.fixture
def make_transaction(clock):
    """Factory building (not recording) a transaction."""
    counter = iter(range(1, 10_000))

    def _make(account_id, amount, type=TransactionType.EXPENSE, currency="USD", **kwargs):
        return Transaction(
            id=kwargs.pop("id", f"tx_{next(counter)}"),
            amount=Decimal(amount),
            currency=currency,
            type=type,
            category=kwargs.pop("category", "cat_other"),
            account_id=account_id,
            date=kwargs.pop("date", clock()),
            title=kwargs.pop("title", "Test transaction"),
            **kwargs,
        )

    return _make


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()


@pytest.fixture
def run_cli(cli_runner, temp_db):
    """Invoke the CLI against the temporary database, without the recurring run."""
    from pocketledger.cli.main import cli

    def _run(*args, input=None):
        return cli_runner.invoke(
            cli, ["--db-path", temp_db.database_path, "--no-recurring", *args], input=input
        )

    return _run


@pytest.fixture
def load_ledger(temp_db):
    """Open a fresh Ledger on the temporary database file."""
    opened = []

    def _load():
        db = create_sqlite_database(database_path=temp_db.database_path)
        opened.append(db)
        return Ledger(db)

    yield _load
    for db in opened:
        db.disconnect()
