"""Tests for transaction, recurring, alert and summary commands."""

from datetime import date, timedelta
from decimal import Decimal

import pytest

from pocketledger.cli.main import cli
from pocketledger.domain.entities import TransactionType


@pytest.fixture
def accounts(run_cli):
    """Create a USD checking account and a EUR savings account."""
    run_cli("account", "create", "Checking", "--balance", "1000")
    run_cli("account", "create", "Savings", "--type", "savings", "--currency", "EUR", "--balance", "100")
    run_cli("rates", "set", "EUR=0.5")


class TestAddTransaction:
    """Tests for the add command."""

    def test_add_expense(self, run_cli, load_ledger, accounts):
        result = run_cli(
            "add", "--account", "Checking", "--amount", "12.50+7.50", "--category", "food", "--title", "Lunch"
        )

        assert result.exit_code == 0
        assert "Created transaction" in result.output
        assert "Account: Checking" in result.output
        assert "Amount: $20.00 USD" in result.output
        assert "Title: Lunch" in result.output

        ledger = load_ledger()
        assert ledger.get_account(ledger.transactions[0].account_id).balance == Decimal("980")
        assert ledger.transactions[0].category == "cat_food"

    def test_add_income_defaults_title_to_category(self, run_cli, load_ledger, accounts):
        result = run_cli("add", "--account", "Checking", "--amount", "500", "--type", "income", "--category", "salary")

        assert result.exit_code == 0
        assert "Title: Salary" in result.output
        assert load_ledger().accounts[0].balance == Decimal("1500")

    def test_transfer_converts_currency(self, run_cli, load_ledger, accounts):
        result = run_cli("add", "--account", "Checking", "--to", "Savings", "--amount", "100")

        assert result.exit_code == 0
        assert "To: Savings" in result.output

        ledger = load_ledger()
        balances = {a.name: a.balance for a in ledger.accounts}
        assert balances == {"Checking": Decimal("900"), "Savings": Decimal("150")}
        assert ledger.transactions[0].type == TransactionType.TRANSFER
        assert ledger.transactions[0].category == "transfer"

    def test_transfer_to_same_account_fails(self, run_cli, load_ledger, accounts):
        result = run_cli("add", "--account", "Checking", "--to", "Checking", "--amount", "10")

        assert result.exit_code == 1
        assert "Cannot transfer to the same account" in result.output
        assert load_ledger().transactions == ()

    def test_transfer_requires_destination(self, run_cli, accounts):
        result = run_cli("add", "--account", "Checking", "--type", "transfer", "--amount", "10")

        assert result.exit_code == 1
        assert "Transfers require --to" in result.output

    @pytest.mark.parametrize("amount", ["0", "-5", "5/0", "abc"])
    def test_invalid_amounts(self, run_cli, load_ledger, accounts, amount):
        result = run_cli("add", "--account", "Checking", "--amount", amount)

        assert result.exit_code == 1
        assert "Error" in result.output
        assert load_ledger().transactions == ()

    def test_unknown_account(self, run_cli, accounts):
        result = run_cli("add", "--account", "Nowhere", "--amount", "10")

        assert result.exit_code == 1
        assert "No account or goal named 'Nowhere'" in result.output

    def test_add_recurring(self, run_cli, load_ledger, accounts):
        result = run_cli(
            "add", "--account", "Checking", "--amount", "9.99", "--title", "Music",
            "--date", "2024-03-15 08:00", "--recurring", "monthly", "--notify",
        )

        assert result.exit_code == 0
        assert "Repeats: Every 15th" in result.output

        ledger = load_ledger()
        assert ledger.transactions[0].is_recurring is True
        rule = ledger.recurring_rules[0]
        assert rule.template.title == "Music"
        assert rule.notify is True
        assert rule.next_due_date.month == 4


class TestTransactionCommands:
    """Tests for list, edit, delete and undo."""

    def _add(self, run_cli, *args):
        result = run_cli("add", "--account", "Checking", *args)
        assert result.exit_code == 0
        return result.output.splitlines()[0].split()[-1]

    def test_list(self, run_cli, accounts):
        self._add(run_cli, "--amount", "10", "--category", "food", "--title", "Lunch", "--date", "2024-01-10")
        self._add(run_cli, "--amount", "25", "--category", "transport", "--title", "Taxi", "--date", "2024-02-10")

        result = run_cli("transaction", "list")
        assert result.exit_code == 0
        assert "Found 2 transaction(s)" in result.output
        assert result.output.index("Taxi") < result.output.index("Lunch")

        result = run_cli("transaction", "list", "--category", "food")
        assert "Lunch" in result.output
        assert "Taxi" not in result.output

        result = run_cli("transaction", "list", "--start-date", "2024-02-01", "--end-date", "2024-02-29")
        assert "Taxi" in result.output
        assert "Lunch" not in result.output

    def test_list_empty(self, run_cli, accounts):
        assert "No transactions found." in run_cli("transaction", "list").output

    def test_list_verbose_shows_ids(self, run_cli, accounts):
        tx_id = self._add(run_cli, "--amount", "10", "--description", "with friends")

        result = run_cli("transaction", "list", "-v")
        assert f"ID: {tx_id}" in result.output
        assert "Description: with friends" in result.output

    def test_edit_reapplies_effect(self, run_cli, load_ledger, accounts):
        tx_id = self._add(run_cli, "--amount", "10")

        result = run_cli("transaction", "edit", tx_id[:10], "--amount", "30", "--title", "Groceries")
        assert result.exit_code == 0
        assert f"Updated transaction {tx_id}" in result.output

        ledger = load_ledger()
        assert ledger.get_transaction(tx_id).title == "Groceries"
        assert {a.name: a.balance for a in ledger.accounts}["Checking"] == Decimal("970")

    def test_edit_moves_to_other_account(self, run_cli, load_ledger, accounts):
        tx_id = self._add(run_cli, "--amount", "10")

        assert run_cli("transaction", "edit", tx_id, "--account", "Savings").exit_code == 0

        balances = {a.name: a.balance for a in load_ledger().accounts}
        assert balances == {"Checking": Decimal("1000"), "Savings": Decimal("95")}

    def test_delete_and_undo(self, run_cli, load_ledger, accounts):
        tx_id = self._add(run_cli, "--amount", "40", "--title", "Shoes")

        result = run_cli("transaction", "delete", tx_id)
        assert result.exit_code == 0
        assert f"Deleted transaction {tx_id} (Shoes)" in result.output
        assert load_ledger().accounts[0].balance == Decimal("1000")

        result = run_cli("transaction", "undo")
        assert result.exit_code == 0
        assert f"Restored transaction {tx_id} (Shoes)" in result.output
        assert load_ledger().accounts[0].balance == Decimal("960")

        result = run_cli("transaction", "undo")
        assert result.exit_code == 1
        assert "Nothing to undo" in result.output

    def test_undo_after_window_expires(self, run_cli, accounts):
        tx_id = self._add(run_cli, "--amount", "40")
        run_cli("settings", "set", "--undo-window", "0")
        run_cli("transaction", "delete", tx_id)

        result = run_cli("transaction", "undo")

        assert result.exit_code == 1
        assert "Undo window has expired" in result.output

    def test_delete_unknown(self, run_cli, accounts):
        result = run_cli("transaction", "delete", "zzz")

        assert result.exit_code == 1
        assert "Transaction 'zzz' not found" in result.output


class TestRecurringCommands:
    def _add_daily(self, run_cli, days_ago=3, *extra):
        start = (date.today() - timedelta(days=days_ago)).isoformat()
        result = run_cli(
            "add", "--account", "Checking", "--amount", "5", "--title", "Coffee",
            "--date", start, "--recurring", "daily", *extra,
        )
        assert result.exit_code == 0

    def test_run_catches_up(self, run_cli, load_ledger, accounts):
        self._add_daily(run_cli)

        result = run_cli("recurring", "run")
        assert result.exit_code == 0
        assert "Generated 3 transaction(s):" in result.output

        assert "No recurring transactions due." in run_cli("recurring", "run").output
        ledger = load_ledger()
        assert len(ledger.transactions) == 4
        assert ledger.accounts[0].balance == Decimal("980")

    def test_startup_runs_rules(self, cli_runner, temp_db, run_cli, load_ledger, accounts):
        self._add_daily(run_cli)

        result = cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "account", "list"])

        assert result.exit_code == 0
        assert len(load_ledger().transactions) == 4

    def test_pause_and_resume(self, run_cli, load_ledger, accounts):
        self._add_daily(run_cli)

        result = run_cli("recurring", "pause", "Coffee")
        assert "Paused recurring rule 'Coffee'" in result.output
        assert "paused" in run_cli("recurring", "list").output
        assert "No recurring transactions due." in run_cli("recurring", "run").output

        assert "Resumed recurring rule 'Coffee'" in run_cli("recurring", "resume", "coffee").output
        assert "Generated 3" in run_cli("recurring", "run").output

    def test_notify_raises_alerts(self, run_cli, accounts):
        self._add_daily(run_cli, 1, "--notify")
        run_cli("recurring", "run")

        result = run_cli("alerts", "list")
        assert result.output.count("recurring_processed") == 1
        alert_id = result.output.split(" | ")[0].strip()

        assert f"Dismissed alert {alert_id}" in run_cli("alerts", "dismiss", alert_id).output
        assert "No alerts." in run_cli("alerts", "list").output

    def test_delete_rule_keeps_transactions(self, run_cli, load_ledger, accounts):
        self._add_daily(run_cli)

        assert "Deleted recurring rule 'Coffee'" in run_cli("recurring", "delete", "Coffee").output
        ledger = load_ledger()
        assert ledger.recurring_rules == ()
        assert len(ledger.transactions) == 1


class TestSummaryCommands:
    def test_overview(self, run_cli, accounts):
        run_cli("add", "--account", "Checking", "--amount", "200", "--type", "income", "--category", "salary")
        run_cli("add", "--account", "Checking", "--amount", "50", "--category", "food", "--title", "Dinner")
        run_cli("debt", "create", "Alice", "--amount", "100")

        result = run_cli("summary", "overview")

        assert result.exit_code == 0
        # 1150 USD plus 100 EUR at 0.5 per USD
        assert "Total balance:  $1,350.00 USD" in result.output
        assert "I owe:          $100.00 USD" in result.output
        assert "Net worth:      $1,250.00 USD" in result.output
        assert "Income:   $200.00 USD" in result.output
        assert "Expenses: $50.00 USD" in result.output
        assert "Dinner" in result.output

    def test_categories(self, run_cli, accounts):
        run_cli("add", "--account", "Checking", "--amount", "30", "--category", "food")
        run_cli("add", "--account", "Checking", "--amount", "10", "--category", "transport")
        run_cli("add", "--account", "Savings", "--amount", "10", "--category", "transport")

        result = run_cli("summary", "categories")

        assert result.exit_code == 0
        lines = result.output.splitlines()
        food = next(line for line in lines if line.startswith("Food"))
        transport = next(line for line in lines if line.startswith("Transport"))
        assert "$30.00 USD" in food
        assert "$30.00 USD" in transport
        assert "$60.00 USD" in next(line for line in lines if line.startswith("Total"))

    def test_categories_empty(self, run_cli, accounts):
        assert "No expenses found." in run_cli("summary", "categories", "--last-year").output

    def test_categories_rejects_two_periods(self, run_cli, accounts):
        result = run_cli("summary", "categories", "--this-month", "--last-month")

        assert result.exit_code == 1
        assert "Only one period option" in result.output
