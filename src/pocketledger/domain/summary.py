"""Read-only aggregations over the ledger state.

Everything here is a pure function of its arguments; amounts are converted
into the requested currency with the given rate table.
"""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Iterable, Mapping, Optional, Sequence

from pocketledger.domain.currency import convert
from pocketledger.domain.entities import (
    Account,
    Budget,
    Debt,
    DebtType,
    LedgerSnapshot,
    Transaction,
    TransactionType,
)
from pocketledger.domain.interest import account_details, debt_details

RECENT_TRANSACTIONS = 5


@dataclass(frozen=True)
class DebtTotals:
    """Outstanding debts, interest included, split by direction."""

    i_owe: Decimal
    owes_me: Decimal


@dataclass(frozen=True)
class BudgetStatus:
    """Month-to-date spending against a budget."""

    spent: Decimal
    remaining: Decimal
    percentage: Decimal


@dataclass(frozen=True)
class Pace:
    """Month-to-date income and expenses."""

    income: Decimal
    expenses: Decimal


@dataclass(frozen=True)
class Overview:
    """Dashboard figures in the reporting currency."""

    currency: str
    total_balance: Decimal
    debts: DebtTotals
    net_worth: Decimal
    goals_saved: Decimal
    pace: Pace
    budgets: tuple[tuple[Budget, BudgetStatus], ...]
    recent: tuple[Transaction, ...]


def _day(value: datetime | date) -> date:
    return value.date() if isinstance(value, datetime) else value


def _month_start(now: datetime) -> date:
    return date(now.year, now.month, 1)


def filter_transactions(
    transactions: Iterable[Transaction],
    start: Optional[date] = None,
    end: Optional[date] = None,
    category: Optional[str] = None,
    account_id: Optional[str] = None,
    type: Optional[TransactionType] = None,
) -> list[Transaction]:
    """Filter transactions.

    Args:
        transactions: Transactions to filter
        start: Optional first day to include
        end: Optional last day to include
        category: Optional category key
        account_id: Optional id matched against either side of the transaction
        type: Optional transaction type

    Returns:
        Matching transactions, in their original order
    """
    result = []
    for transaction in transactions:
        day = _day(transaction.date)
        if start is not None and day < start:
            continue
        if end is not None and day > end:
            continue
        if category is not None and transaction.category != category:
            continue
        if account_id is not None and account_id not in (transaction.account_id, transaction.to_account_id):
            continue
        if type is not None and transaction.type != type:
            continue
        result.append(transaction)
    return result


def total_balance(
    accounts: Iterable[Account],
    currency: str,
    rates: Mapping[str, Decimal],
    as_of: Optional[datetime | date] = None,
    include_interest: bool = True,
) -> Decimal:
    """Sum account balances in ``currency``, optionally with accrued interest."""
    total = Decimal(0)
    for account in accounts:
        amount = account_details(account, as_of).total if include_interest else account.balance
        total += convert(amount, account.currency, currency, rates)
    return total


def debt_totals(
    debts: Iterable[Debt],
    currency: str,
    rates: Mapping[str, Decimal],
    as_of: Optional[datetime | date] = None,
) -> DebtTotals:
    i_owe = Decimal(0)
    owes_me = Decimal(0)
    for debt in debts:
        amount = convert(debt_details(debt, as_of).total, debt.currency, currency, rates)
        if debt.type == DebtType.I_OWE:
            i_owe += amount
        else:
            owes_me += amount
    return DebtTotals(i_owe=i_owe, owes_me=owes_me)


def budget_status(
    budget: Budget,
    transactions: Iterable[Transaction],
    rates: Mapping[str, Decimal],
    now: Optional[datetime] = None,
) -> BudgetStatus:
    """Compare a budget's limit with this month's expenses in its category.

    ``remaining`` never goes below zero and ``percentage`` is capped at 100.
    """
    now = now or datetime.now()
    expenses = filter_transactions(
        transactions,
        start=_month_start(now),
        end=now.date(),
        category=budget.category,
        type=TransactionType.EXPENSE,
    )
    spent = sum((convert(t.amount, t.currency, budget.currency, rates) for t in expenses), Decimal(0))
    remaining = max(budget.limit - spent, Decimal(0))
    percentage = min(spent / budget.limit * 100, Decimal(100)) if budget.limit > 0 else Decimal(100)
    return BudgetStatus(spent=spent, remaining=remaining, percentage=percentage)


def expenses_by_category(
    transactions: Iterable[Transaction],
    currency: str,
    rates: Mapping[str, Decimal],
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> list[tuple[str, Decimal]]:
    """Total expenses per category, largest first, without empty categories."""
    totals: dict[str, Decimal] = {}
    for transaction in filter_transactions(transactions, start=start, end=end, type=TransactionType.EXPENSE):
        amount = convert(transaction.amount, transaction.currency, currency, rates)
        totals[transaction.category] = totals.get(transaction.category, Decimal(0)) + amount
    return sorted(
        ((category, total) for category, total in totals.items() if total != 0),
        key=lambda item: item[1],
        reverse=True,
    )


def monthly_pace(
    transactions: Iterable[Transaction],
    currency: str,
    rates: Mapping[str, Decimal],
    now: Optional[datetime] = None,
) -> Pace:
    """Income and expenses since the start of the month. Transfers are excluded."""
    now = now or datetime.now()
    income = Decimal(0)
    expenses = Decimal(0)
    for transaction in filter_transactions(transactions, start=_month_start(now), end=now.date()):
        amount = convert(transaction.amount, transaction.currency, currency, rates)
        if transaction.type == TransactionType.INCOME:
            income += amount
        elif transaction.type == TransactionType.EXPENSE:
            expenses += amount
    return Pace(income=income, expenses=expenses)


def _goals_saved(snapshot: LedgerSnapshot, currency: str) -> Decimal:
    return sum(
        (convert(goal.current_amount, goal.currency, currency, snapshot.rates) for goal in snapshot.goals),
        Decimal(0),
    )


def build_overview(snapshot: LedgerSnapshot, as_of: Optional[datetime] = None) -> Overview:
    """Build the dashboard figures for a snapshot."""
    as_of = as_of or datetime.now()
    currency = snapshot.settings.currency
    balance = total_balance(snapshot.accounts, currency, snapshot.rates, as_of)
    debts = debt_totals(snapshot.debts, currency, snapshot.rates, as_of)
    recent: Sequence[Transaction] = sorted(snapshot.transactions, key=lambda t: t.date, reverse=True)
    return Overview(
        currency=currency,
        total_balance=balance,
        debts=debts,
        net_worth=balance + debts.owes_me - debts.i_owe,
        goals_saved=_goals_saved(snapshot, currency),
        pace=monthly_pace(snapshot.transactions, currency, snapshot.rates, as_of),
        budgets=tuple(
            (budget, budget_status(budget, snapshot.transactions, snapshot.rates, as_of))
            for budget in snapshot.budgets
        ),
        recent=tuple(recent[:RECENT_TRANSACTIONS]),
    )
