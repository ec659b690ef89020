"""Utilities for resolving user-typed names and ids to ledger entities."""

from typing import Callable, Iterable, Optional, TypeVar

from pocketledger.domain.category import category_label
from pocketledger.domain.entities import (
    Account,
    Budget,
    Debt,
    Goal,
    RecurringRule,
    Target,
    TargetKind,
    Transaction,
)
from pocketledger.domain.errors import NotFoundError
from pocketledger.domain.ledger import Ledger

T = TypeVar("T")


def _resolve(
    items: Iterable[T],
    reference: str,
    kind: str,
    name_of: Optional[Callable[[T], str]] = None,
) -> T:
    """Find one item by exact id, case-insensitive name, or unique id prefix.

    Raises:
        NotFoundError: If nothing matches, or a name or prefix matches several items
    """
    items = list(items)
    reference = reference.strip()

    for item in items:
        if item.id == reference:
            return item

    if name_of is not None:
        named = [item for item in items if name_of(item).lower() == reference.lower()]
        if len(named) == 1:
            return named[0]
        if len(named) > 1:
            raise NotFoundError(f"{kind} '{reference}' is ambiguous; use its id")

    if reference:
        prefixed = [item for item in items if item.id.startswith(reference)]
        if len(prefixed) == 1:
            return prefixed[0]
        if len(prefixed) > 1:
            raise NotFoundError(f"{kind} id prefix '{reference}' matches several entries")

    raise NotFoundError(f"{kind} '{reference}' not found")


def resolve_account(ledger: Ledger, account: str) -> Account:
    """Resolve account name or ID to an account.

    Args:
        ledger: Ledger to search
        account: Account id, unique id prefix, or name (case-insensitive)

    Returns:
        Account entity

    Raises:
        NotFoundError: If account is not found
    """
    return _resolve(ledger.accounts, account, "Account", lambda a: a.name)


def resolve_goal(ledger: Ledger, goal: str) -> Goal:
    return _resolve(ledger.goals, goal, "Goal", lambda g: g.name)


def resolve_debt(ledger: Ledger, debt: str) -> Debt:
    """Resolve a debt by id or by the other person's name."""
    return _resolve(ledger.debts, debt, "Debt", lambda d: d.person_name)


def resolve_target(ledger: Ledger, reference: str) -> Target:
    """Resolve a transaction destination, trying goals before accounts."""
    try:
        return Target(kind=TargetKind.GOAL, ref=resolve_goal(ledger, reference))
    except NotFoundError:
        pass
    try:
        return Target(kind=TargetKind.ACCOUNT, ref=resolve_account(ledger, reference))
    except NotFoundError:
        raise NotFoundError(f"No account or goal named '{reference}'") from None


def resolve_transaction(ledger: Ledger, transaction: str) -> Transaction:
    """Resolve a transaction by id or unique id prefix."""
    return _resolve(ledger.transactions, transaction, "Transaction")


def resolve_rule(ledger: Ledger, rule: str) -> RecurringRule:
    """Resolve a recurring rule by id, id prefix, or the title it generates."""
    return _resolve(ledger.recurring_rules, rule, "Recurring rule", lambda r: r.template.title)


def resolve_budget(ledger: Ledger, budget: str) -> Budget:
    """Resolve a budget by id, category key or category label."""
    for item in ledger.budgets:
        if item.category == budget or category_label(item.category).lower() == budget.strip().lower():
            return item
    return _resolve(ledger.budgets, budget, "Budget")
