"""Tests for read-only aggregations."""

from datetime import date, datetime
from decimal import Decimal

import pytest

from pocketledger.domain.entities import (
    Account,
    AccountType,
    Budget,
    Debt,
    DebtType,
    Frequency,
    Goal,
    InterestConfig,
    LedgerSnapshot,
    Transaction,
    TransactionType,
    UserSettings,
)
from pocketledger.domain.summary import (
    budget_status,
    build_overview,
    debt_totals,
    expenses_by_category,
    filter_transactions,
    monthly_pace,
    total_balance,
)

RATES = {"USD": Decimal("1"), "EUR": Decimal("0.5")}
NOW = datetime(2024, 3, 15, 12, 0)


def txn(tx_id, amount, when, type=TransactionType.EXPENSE, category="cat_food", currency="USD", **kwargs):
    return Transaction(
        id=tx_id,
        amount=Decimal(amount),
        currency=currency,
        type=type,
        category=category,
        account_id=kwargs.pop("account_id", "a1"),
        date=when,
        title=kwargs.pop("title", tx_id),
        **kwargs,
    )


@pytest.fixture
def transactions():
    return [
        txn("t1", "30", datetime(2024, 3, 2, 9, 0)),
        txn("t2", "20", datetime(2024, 3, 10, 18, 0), currency="EUR"),
        txn("t3", "500", datetime(2024, 3, 1, 8, 0), type=TransactionType.INCOME, category="cat_salary"),
        txn("t4", "100", datetime(2024, 3, 5, 8, 0), type=TransactionType.TRANSFER, category="transfer",
            to_account_id="a2"),
        txn("t5", "70", datetime(2024, 2, 20, 8, 0), category="cat_transport"),
        txn("t6", "15", datetime(2024, 3, 12, 8, 0), category="cat_transport", account_id="a2"),
    ]


class TestFilterTransactions:
    def test_date_range_is_inclusive(self, transactions):
        result = filter_transactions(transactions, start=date(2024, 3, 2), end=date(2024, 3, 10))
        assert [t.id for t in result] == ["t1", "t2", "t4"]

    def test_category_and_type(self, transactions):
        assert [t.id for t in filter_transactions(transactions, category="cat_transport")] == ["t5", "t6"]
        assert [t.id for t in filter_transactions(transactions, type=TransactionType.INCOME)] == ["t3"]

    def test_account_matches_either_side(self, transactions):
        assert [t.id for t in filter_transactions(transactions, account_id="a2")] == ["t4", "t6"]


def test_total_balance_converts_and_adds_interest():
    accounts = [
        Account(id="a1", name="Checking", type=AccountType.CHECKING, balance=Decimal("100"), currency="USD"),
        Account(id="a2", name="Euro", type=AccountType.CHECKING, balance=Decimal("50"), currency="EUR"),
        Account(
            id="a3",
            name="Savings",
            type=AccountType.SAVINGS,
            balance=Decimal("1000"),
            currency="USD",
            interest=InterestConfig(rate_percent=Decimal("1"), frequency=Frequency.DAILY, start_date=date(2024, 3, 14)),
        ),
    ]
    assert total_balance(accounts, "USD", RATES, NOW, include_interest=False) == Decimal("1200")
    assert total_balance(accounts, "USD", RATES, NOW) == Decimal("1210")


def test_debt_totals():
    debts = [
        Debt(id="d1", person_name="Alice", amount=Decimal("40"), currency="USD", type=DebtType.I_OWE),
        Debt(id="d2", person_name="Bob", amount=Decimal("10"), currency="EUR", type=DebtType.OWES_ME),
        Debt(id="d3", person_name="Carol", amount=Decimal("5"), currency="USD", type=DebtType.I_OWE),
    ]
    totals = debt_totals(debts, "USD", RATES, NOW)
    assert totals.i_owe == Decimal("45")
    assert totals.owes_me == Decimal("20")


class TestBudgetStatus:
    def test_month_to_date_spending(self, transactions):
        budget = Budget(id="b1", category="cat_food", limit=Decimal("200"), currency="USD")
        status = budget_status(budget, transactions, RATES, NOW)
        # 30 USD + 20 EUR (40 USD)
        assert status.spent == Decimal("70")
        assert status.remaining == Decimal("130")
        assert status.percentage == Decimal("35")

    def test_overspent_budget_is_clamped(self, transactions):
        budget = Budget(id="b1", category="cat_food", limit=Decimal("50"), currency="USD")
        status = budget_status(budget, transactions, RATES, NOW)
        assert status.remaining == Decimal("0")
        assert status.percentage == Decimal("100")

    def test_previous_month_is_ignored(self, transactions):
        budget = Budget(id="b2", category="cat_transport", limit=Decimal("100"), currency="USD")
        assert budget_status(budget, transactions, RATES, NOW).spent == Decimal("15")


def test_expenses_by_category_sorted_descending(transactions):
    result = expenses_by_category(transactions, "USD", RATES)
    assert result == [("cat_transport", Decimal("85")), ("cat_food", Decimal("70"))]


def test_expenses_by_category_with_range(transactions):
    result = expenses_by_category(transactions, "USD", RATES, start=date(2024, 3, 1), end=date(2024, 3, 31))
    assert [category for category, _ in result] == ["cat_food", "cat_transport"]


def test_monthly_pace_excludes_transfers(transactions):
    pace = monthly_pace(transactions, "USD", RATES, NOW)
    assert pace.income == Decimal("500")
    assert pace.expenses == Decimal("85")


def test_build_overview(transactions):
    snapshot = LedgerSnapshot(
        settings=UserSettings(currency="USD"),
        accounts=(Account(id="a1", name="Checking", type=AccountType.CHECKING, balance=Decimal("300"), currency="USD"),),
        goals=(Goal(id="g1", name="Bike", target_amount=Decimal("100"), current_amount=Decimal("20"), currency="EUR"),),
        debts=(Debt(id="d1", person_name="Alice", amount=Decimal("50"), currency="USD", type=DebtType.I_OWE),),
        transactions=tuple(transactions),
        budgets=(Budget(id="b1", category="cat_food", limit=Decimal("200"), currency="USD"),),
        rates=RATES,
    )

    overview = build_overview(snapshot, NOW)

    assert overview.total_balance == Decimal("300")
    assert overview.net_worth == Decimal("250")
    assert overview.goals_saved == Decimal("40")
    assert overview.pace.income == Decimal("500")
    assert overview.budgets[0][1].spent == Decimal("70")
    assert [t.id for t in overview.recent] == ["t6", "t2", "t4", "t1", "t3"]
