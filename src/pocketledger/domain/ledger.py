"""Ledger domain service.

The ledger owns the whole application state: accounts, goals, debts, the
transaction log, recurring rules, budgets, alerts, settings and the exchange
rate table. Account balances and goal amounts are never edited directly by
transactions; they change only through ``apply_effect``, which keeps every
balance equal to its starting value plus the effects of the logged
transactions that reference it.
"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass, replace
from decimal import Decimal
from datetime import datetime
from types import MappingProxyType
from typing import Callable, Iterator, Mapping, Optional, Sequence, TypeVar

from pocketledger.database.base import Database
from pocketledger.database.mappers import snapshot_from_records, snapshot_to_records
from pocketledger.domain import alerts as alert_rules
from pocketledger.domain.currency import FALLBACK_RATES, convert, normalize_rates
from pocketledger.domain.entities import (
    Account,
    Alert,
    Budget,
    Debt,
    Goal,
    LedgerSnapshot,
    PendingUndo,
    RecurringOptions,
    RecurringRule,
    RecurringTemplate,
    Target,
    TargetKind,
    Transaction,
    TransactionType,
    UserSettings,
    new_id,
)
from pocketledger.domain.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    account_not_found,
    alert_not_found,
    budget_not_found,
    debt_not_found,
    duplicate_account_name,
    duplicate_id,
    goal_not_found,
    recurring_rule_not_found,
    transaction_not_found,
)
from pocketledger.domain.recurrence import next_occurrence

logger = logging.getLogger(__name__)

UNKNOWN_ACCOUNT = "Unknown account"

T = TypeVar("T")


@dataclass(frozen=True)
class CascadeResult:
    """What ``delete_account`` removed."""

    account: Account
    transactions: tuple[Transaction, ...]
    rules: tuple[RecurringRule, ...]


def validate_transaction(
    transaction: Transaction, resolve: Callable[[str], Optional[Target]]
) -> None:
    """Check a transaction before it is recorded.

    Args:
        transaction: Transaction to check
        resolve: Target lookup used to reject goals on either side of a transfer

    Raises:
        ValidationError: If the transaction is not acceptable
    """
    if transaction.amount <= 0:
        raise ValidationError("Amount must be greater than zero")
    if not transaction.title or not transaction.title.strip():
        raise ValidationError("Title is required")

    if transaction.type == TransactionType.TRANSFER:
        if not transaction.to_account_id:
            raise ValidationError("Transfers require a destination account")
        if transaction.to_account_id == transaction.account_id:
            raise ValidationError("Cannot transfer to the same account")
        for side in (transaction.account_id, transaction.to_account_id):
            target = resolve(side)
            if target is not None and target.kind == TargetKind.GOAL:
                raise ValidationError("Transfers cannot move money into or out of a goal")


def _goal_completed(goal: Goal) -> bool:
    return goal.target_amount > 0 and goal.current_amount >= goal.target_amount


def _find(items: Sequence[T], entity_id: str) -> Optional[int]:
    for index, item in enumerate(items):
        if item.id == entity_id:
            return index
    return None


class Ledger:
    """Service that owns and mutates the ledger state.

    Every public mutation runs in a mutation scope: on failure the state is
    restored to what it was before the call; on success alerts are
    re-evaluated and the new state is saved. Scopes nest, so only the
    outermost one saves.
    """

    def __init__(self, db: Database, clock: Callable[[], datetime] = datetime.now):
        """Initialize the ledger and load the stored state.

        Args:
            db: Database instance
            clock: Callable returning the current local time
        """
        self.db = db
        self.clock = clock
        self._depth = 0
        self._load(snapshot_from_records(db.load))

    # State handling

    def _load(self, snapshot: LedgerSnapshot) -> None:
        self._settings = snapshot.settings
        self._accounts = list(snapshot.accounts)
        self._goals = list(snapshot.goals)
        self._debts = list(snapshot.debts)
        self._transactions = list(snapshot.transactions)
        self._recurring_rules = list(snapshot.recurring_rules)
        self._budgets = list(snapshot.budgets)
        self._alerts = list(snapshot.alerts)
        self._suppressed = dict(snapshot.suppressed_alerts)
        self._rates = MappingProxyType(dict(snapshot.rates or FALLBACK_RATES))
        self._pending_undo = snapshot.pending_undo

    def snapshot(self) -> LedgerSnapshot:
        """Return an immutable copy of the complete state."""
        return LedgerSnapshot(
            settings=self._settings,
            accounts=tuple(self._accounts),
            goals=tuple(self._goals),
            debts=tuple(self._debts),
            transactions=tuple(self._transactions),
            recurring_rules=tuple(self._recurring_rules),
            budgets=tuple(self._budgets),
            alerts=tuple(self._alerts),
            suppressed_alerts=dict(self._suppressed),
            rates=self._rates,
            pending_undo=self._pending_undo,
        )

    def _refresh_alerts(self, previous: Optional[LedgerSnapshot]) -> None:
        state = alert_rules.reevaluate(self.snapshot(), previous, self.clock())
        self._alerts = list(state.active)
        self._suppressed = dict(state.suppressed)

    def _persist(self) -> None:
        self.db.save_many(snapshot_to_records(self.snapshot()))
        logger.debug("Ledger saved (%d transactions)", len(self._transactions))

    @contextmanager
    def _mutation(self) -> Iterator[None]:
        before = self.snapshot()
        outermost = self._depth == 0
        self._depth += 1
        try:
            yield
        except Exception:
            self._load(before)
            raise
        finally:
            self._depth -= 1

        if outermost:
            try:
                self._refresh_alerts(before)
                self._persist()
            except Exception:
                self._load(before)
                raise

    @contextmanager
    def batch(self) -> Iterator["Ledger"]:
        """Group several mutations so they succeed, or fail, together."""
        with self._mutation():
            yield self

    def refresh_alerts(self) -> tuple[Alert, ...]:
        """Re-evaluate alerts against the current time and save them."""
        with self._mutation():
            pass
        return self.alerts

    def replace_state(self, snapshot: LedgerSnapshot) -> None:
        """Replace the whole state at once, as a backup import does."""
        with self._mutation():
            self._load(snapshot)
            self._pending_undo = None
        logger.debug("Ledger state replaced")

    # Read-only views

    @property
    def settings(self) -> UserSettings:
        return self._settings

    @property
    def rates(self) -> Mapping[str, Decimal]:
        return self._rates

    @property
    def accounts(self) -> tuple[Account, ...]:
        return tuple(self._accounts)

    @property
    def goals(self) -> tuple[Goal, ...]:
        return tuple(self._goals)

    @property
    def debts(self) -> tuple[Debt, ...]:
        return tuple(self._debts)

    @property
    def transactions(self) -> tuple[Transaction, ...]:
        return tuple(self._transactions)

    @property
    def recurring_rules(self) -> tuple[RecurringRule, ...]:
        return tuple(self._recurring_rules)

    @property
    def budgets(self) -> tuple[Budget, ...]:
        return tuple(self._budgets)

    @property
    def alerts(self) -> tuple[Alert, ...]:
        return tuple(self._alerts)

    @property
    def pending_undo(self) -> Optional[PendingUndo]:
        return self._pending_undo

    def get_account(self, account_id: str) -> Optional[Account]:
        index = _find(self._accounts, account_id)
        return self._accounts[index] if index is not None else None

    def get_goal(self, goal_id: str) -> Optional[Goal]:
        index = _find(self._goals, goal_id)
        return self._goals[index] if index is not None else None

    def get_debt(self, debt_id: str) -> Optional[Debt]:
        index = _find(self._debts, debt_id)
        return self._debts[index] if index is not None else None

    def get_transaction(self, transaction_id: str) -> Optional[Transaction]:
        index = _find(self._transactions, transaction_id)
        return self._transactions[index] if index is not None else None

    def get_recurring_rule(self, rule_id: str) -> Optional[RecurringRule]:
        index = _find(self._recurring_rules, rule_id)
        return self._recurring_rules[index] if index is not None else None

    def get_budget(self, budget_id: str) -> Optional[Budget]:
        index = _find(self._budgets, budget_id)
        return self._budgets[index] if index is not None else None

    def resolve_target(self, entity_id: Optional[str]) -> Optional[Target]:
        """Resolve an id to the goal or account it names.

        Goals are checked before accounts.

        Returns:
            Target, or None if the id names neither
        """
        if not entity_id:
            return None
        goal = self.get_goal(entity_id)
        if goal is not None:
            return Target(kind=TargetKind.GOAL, ref=goal)
        account = self.get_account(entity_id)
        if account is not None:
            return Target(kind=TargetKind.ACCOUNT, ref=account)
        return None

    def display_name(self, entity_id: Optional[str]) -> str:
        """Name of the account or goal an id points at, for display."""
        target = self.resolve_target(entity_id)
        if target is None:
            return UNKNOWN_ACCOUNT
        return target.ref.name

    # Transaction effects

    def _capture_rates(self, transaction: Transaction) -> Mapping[str, Decimal]:
        codes = {transaction.currency}
        for entity_id in (transaction.account_id, transaction.to_account_id):
            target = self.resolve_target(entity_id)
            if target is not None:
                codes.add(target.ref.currency)
        return MappingProxyType({code: self._rates[code] for code in sorted(codes) if code in self._rates})

    def _adjust_account(
        self, account: Account, delta: Decimal, currency: str, rates: Mapping[str, Decimal]
    ) -> None:
        converted = convert(delta, currency, account.currency, rates)
        index = _find(self._accounts, account.id)
        self._accounts[index] = replace(account, balance=account.balance + converted)

    def _adjust_goal(self, goal: Goal, delta: Decimal, currency: str, rates: Mapping[str, Decimal]) -> None:
        converted = convert(delta, currency, goal.currency, rates)
        updated = replace(goal, current_amount=goal.current_amount + converted)
        index = _find(self._goals, goal.id)
        self._goals[index] = replace(updated, is_completed=_goal_completed(updated))

    def _apply_effect(self, transaction: Transaction, reverse: bool = False) -> None:
        rates = transaction.rate_snapshot if transaction.rate_snapshot is not None else self._rates
        amount = -transaction.amount if reverse else transaction.amount

        if transaction.type == TransactionType.TRANSFER and transaction.to_account_id:
            # Re-fetch between sides so neither update is lost
            source = self.get_account(transaction.account_id)
            if source is not None:
                self._adjust_account(source, -amount, transaction.currency, rates)
            else:
                logger.warning(
                    "Transaction %s references unknown account %s", transaction.id, transaction.account_id
                )
            destination = self.get_account(transaction.to_account_id)
            if destination is not None:
                self._adjust_account(destination, amount, transaction.currency, rates)
            else:
                logger.warning(
                    "Transaction %s references unknown account %s", transaction.id, transaction.to_account_id
                )
            return

        target = self.resolve_target(transaction.account_id)
        if target is None:
            logger.warning("Transaction %s references unknown account %s", transaction.id, transaction.account_id)
            return

        if target.kind == TargetKind.GOAL:
            delta = amount if transaction.type == TransactionType.INCOME else -amount
            self._adjust_goal(target.ref, delta, transaction.currency, rates)
        else:
            delta = -amount if transaction.type == TransactionType.EXPENSE else amount
            self._adjust_account(target.ref, delta, transaction.currency, rates)

    def apply_effect(self, transaction: Transaction, reverse: bool = False) -> None:
        """Apply, or revert, a transaction's effect on balances.

        Transfers move money between two accounts. Otherwise the transaction
        routes to the goal or account named by ``account_id``: income adds to
        either, while an expense subtracts from an account and any non-income
        transaction withdraws from a goal. Amounts are converted into the
        target's currency when applied. An id that names nothing is skipped
        with a warning.

        Args:
            transaction: Transaction whose effect to apply
            reverse: Apply the exact inverse instead
        """
        with self._mutation():
            self._apply_effect(transaction, reverse)

    # Transactions

    def _record(self, transaction: Transaction) -> Transaction:
        if self.get_transaction(transaction.id) is not None:
            raise ConflictError(duplicate_id("Transaction", transaction.id))
        # A restored transaction keeps the rates it was first applied with
        if transaction.rate_snapshot is None:
            transaction = replace(transaction, rate_snapshot=self._capture_rates(transaction))
        recorded = transaction
        self._transactions.insert(0, recorded)
        self._apply_effect(recorded)
        if self._pending_undo is not None and self._pending_undo.transaction.id == recorded.id:
            self._pending_undo = None
        logger.debug("Recorded transaction %s (%s %s)", recorded.id, recorded.amount, recorded.currency)
        return recorded

    def record_transaction(self, transaction: Transaction) -> Transaction:
        """Add a transaction to the log and apply it, without validation or recurrence."""
        with self._mutation():
            return self._record(transaction)

    def add_transaction(
        self, transaction: Transaction, recurring: Optional[RecurringOptions] = None
    ) -> Transaction:
        """Validate, record and apply a new transaction.

        Args:
            transaction: Transaction to add
            recurring: When given, also register a rule that repeats the
                transaction every period starting one period after its date

        Returns:
            The recorded transaction

        Raises:
            ValidationError: If the transaction is invalid
            ConflictError: If the id is already in the log
        """
        validate_transaction(transaction, self.resolve_target)
        if recurring is not None:
            transaction = replace(transaction, is_recurring=True, frequency=recurring.frequency)

        with self._mutation():
            recorded = self._record(transaction)
            if recurring is not None:
                rule = RecurringRule(
                    id=new_id(),
                    template=RecurringTemplate.from_transaction(recorded),
                    frequency=recurring.frequency,
                    next_due_date=next_occurrence(recorded.date, recurring.frequency),
                    notify=recurring.notify,
                )
                self._recurring_rules.append(rule)
                logger.debug("Registered recurring rule %s (%s)", rule.id, rule.frequency.value)
            return recorded

    def update_transaction(self, transaction: Transaction) -> Transaction:
        """Replace a logged transaction, reverting the old effect and applying the new one.

        Raises:
            ValidationError: If the new version is invalid
            NotFoundError: If no transaction has the same id
        """
        validate_transaction(transaction, self.resolve_target)
        with self._mutation():
            index = _find(self._transactions, transaction.id)
            if index is None:
                raise NotFoundError(transaction_not_found(transaction.id))
            self._apply_effect(self._transactions[index], reverse=True)
            updated = replace(transaction, rate_snapshot=self._capture_rates(transaction))
            self._transactions[index] = updated
            self._apply_effect(updated)
            logger.debug("Updated transaction %s", updated.id)
            return updated

    def delete_transaction(self, transaction_id: str) -> Transaction:
        """Revert and remove a transaction, keeping it available for undo.

        Returns:
            The deleted transaction

        Raises:
            NotFoundError: If the transaction doesn't exist
        """
        with self._mutation():
            index = _find(self._transactions, transaction_id)
            if index is None:
                raise NotFoundError(transaction_not_found(transaction_id))
            transaction = self._transactions.pop(index)
            self._apply_effect(transaction, reverse=True)
            self._pending_undo = PendingUndo(transaction=transaction, deleted_at=self.clock())
            logger.debug("Deleted transaction %s", transaction_id)
            return transaction

    def undo_delete(self) -> Transaction:
        """Restore the most recently deleted transaction.

        Raises:
            NotFoundError: If there is nothing to undo
            ValidationError: If the undo window has passed
        """
        pending = self._pending_undo
        if pending is None:
            raise NotFoundError("Nothing to undo")

        elapsed = (self.clock() - pending.deleted_at).total_seconds()
        if elapsed > self._settings.undo_window_seconds:
            with self._mutation():
                self._pending_undo = None
            raise ValidationError("Undo window has expired")

        return self.add_transaction(pending.transaction)

    # Accounts

    def _check_new_id(self, kind: str, entity_id: str) -> None:
        # Accounts and goals share the id space that transactions route through
        if self.resolve_target(entity_id) is not None:
            raise ConflictError(duplicate_id(kind, entity_id))

    def _check_account_name(self, name: str, exclude_id: Optional[str] = None) -> None:
        if not name or not name.strip():
            raise ValidationError("Account name is required")
        for account in self._accounts:
            if account.id != exclude_id and account.name.lower() == name.lower():
                raise ConflictError(duplicate_account_name(name))

    def add_account(self, account: Account) -> Account:
        """Add an account.

        Raises:
            ConflictError: If the id or name is already in use
        """
        with self._mutation():
            self._check_new_id("Account", account.id)
            self._check_account_name(account.name)
            self._accounts.append(account)
            logger.debug("Added account %s (%s)", account.id, account.name)
            return account

    def update_account(self, account: Account) -> Account:
        """Replace an account wholesale, balance included."""
        with self._mutation():
            index = _find(self._accounts, account.id)
            if index is None:
                raise NotFoundError(account_not_found(account.id))
            self._check_account_name(account.name, exclude_id=account.id)
            self._accounts[index] = account
            return account

    def delete_account(self, account_id: str) -> CascadeResult:
        """Delete an account with every transaction and rule that references it.

        Removed transactions are not reverted: the other side of a removed
        transfer keeps its balance.

        Returns:
            CascadeResult describing what was removed

        Raises:
            NotFoundError: If the account doesn't exist
        """
        with self._mutation():
            account = self.get_account(account_id)
            if account is None:
                raise NotFoundError(account_not_found(account_id))

            def references(transaction: Transaction) -> bool:
                return account_id in (transaction.account_id, transaction.to_account_id)

            removed_transactions = tuple(t for t in self._transactions if references(t))
            self._transactions = [t for t in self._transactions if not references(t)]
            removed_rules = tuple(r for r in self._recurring_rules if r.references(account_id))
            self._recurring_rules = [r for r in self._recurring_rules if not r.references(account_id)]
            self._accounts = [a for a in self._accounts if a.id != account_id]

            if self._pending_undo is not None and references(self._pending_undo.transaction):
                self._pending_undo = None

            logger.debug(
                "Deleted account %s with %d transactions and %d rules",
                account_id,
                len(removed_transactions),
                len(removed_rules),
            )
            return CascadeResult(account=account, transactions=removed_transactions, rules=removed_rules)

    # Goals

    def add_goal(self, goal: Goal) -> Goal:
        """Add a goal; ``is_completed`` is derived from its amounts."""
        with self._mutation():
            self._check_new_id("Goal", goal.id)
            if goal.target_amount <= 0:
                raise ValidationError("Goal target must be greater than zero")
            goal = replace(goal, is_completed=_goal_completed(goal))
            self._goals.append(goal)
            logger.debug("Added goal %s (%s)", goal.id, goal.name)
            return goal

    def update_goal(self, goal: Goal) -> Goal:
        with self._mutation():
            index = _find(self._goals, goal.id)
            if index is None:
                raise NotFoundError(goal_not_found(goal.id))
            if goal.target_amount <= 0:
                raise ValidationError("Goal target must be greater than zero")
            goal = replace(goal, is_completed=_goal_completed(goal))
            self._goals[index] = goal
            return goal

    def delete_goal(self, goal_id: str) -> Goal:
        """Delete a goal. Transactions that routed to it are kept as orphans."""
        with self._mutation():
            index = _find(self._goals, goal_id)
            if index is None:
                raise NotFoundError(goal_not_found(goal_id))
            return self._goals.pop(index)

    # Debts

    def add_debt(self, debt: Debt) -> Debt:
        with self._mutation():
            if self.get_debt(debt.id) is not None:
                raise ConflictError(duplicate_id("Debt", debt.id))
            if debt.amount <= 0:
                raise ValidationError("Debt amount must be greater than zero")
            self._debts.append(debt)
            logger.debug("Added debt %s (%s)", debt.id, debt.person_name)
            return debt

    def update_debt(self, debt: Debt) -> Debt:
        with self._mutation():
            index = _find(self._debts, debt.id)
            if index is None:
                raise NotFoundError(debt_not_found(debt.id))
            self._debts[index] = debt
            return debt

    def delete_debt(self, debt_id: str) -> Debt:
        with self._mutation():
            index = _find(self._debts, debt_id)
            if index is None:
                raise NotFoundError(debt_not_found(debt_id))
            return self._debts.pop(index)

    # Budgets

    def _check_budget_category(self, budget: Budget) -> None:
        for existing in self._budgets:
            if existing.id != budget.id and existing.category == budget.category:
                raise ConflictError(f"A budget for category '{budget.category}' already exists")

    def add_budget(self, budget: Budget) -> Budget:
        """Add a monthly budget; each category may have one budget."""
        with self._mutation():
            if self.get_budget(budget.id) is not None:
                raise ConflictError(duplicate_id("Budget", budget.id))
            if budget.limit <= 0:
                raise ValidationError("Budget limit must be greater than zero")
            self._check_budget_category(budget)
            self._budgets.append(budget)
            return budget

    def update_budget(self, budget: Budget) -> Budget:
        with self._mutation():
            index = _find(self._budgets, budget.id)
            if index is None:
                raise NotFoundError(budget_not_found(budget.id))
            self._check_budget_category(budget)
            self._budgets[index] = budget
            return budget

    def delete_budget(self, budget_id: str) -> Budget:
        with self._mutation():
            index = _find(self._budgets, budget_id)
            if index is None:
                raise NotFoundError(budget_not_found(budget_id))
            return self._budgets.pop(index)

    # Recurring rules

    def replace_recurring_rule(self, rule: RecurringRule) -> RecurringRule:
        with self._mutation():
            index = _find(self._recurring_rules, rule.id)
            if index is None:
                raise NotFoundError(recurring_rule_not_found(rule.id))
            self._recurring_rules[index] = rule
            return rule

    def set_rule_active(self, rule_id: str, active: bool) -> RecurringRule:
        """Pause or resume a recurring rule."""
        rule = self.get_recurring_rule(rule_id)
        if rule is None:
            raise NotFoundError(recurring_rule_not_found(rule_id))
        return self.replace_recurring_rule(replace(rule, active=active))

    def delete_recurring_rule(self, rule_id: str) -> RecurringRule:
        """Delete a rule. Transactions it already generated are kept."""
        with self._mutation():
            index = _find(self._recurring_rules, rule_id)
            if index is None:
                raise NotFoundError(recurring_rule_not_found(rule_id))
            return self._recurring_rules.pop(index)

    # Settings, rates and alerts

    def update_settings(self, settings: UserSettings) -> UserSettings:
        with self._mutation():
            if settings.undo_window_seconds < 0:
                raise ValidationError("Undo window cannot be negative")
            self._settings = settings
            return settings

    def set_rates(self, rates: Mapping[str, object]) -> Mapping[str, Decimal]:
        """Replace the exchange rate table.

        Stored balances are not touched; logged transactions keep the rates
        captured when they were recorded.
        """
        normalized = normalize_rates(rates)
        if not normalized:
            raise ValidationError("Rate table cannot be empty")
        if any(rate <= 0 for rate in normalized.values()):
            raise ValidationError("Rates must be greater than zero")
        with self._mutation():
            self._rates = MappingProxyType(normalized)
        logger.debug("Rate table replaced (%d currencies)", len(normalized))
        return self._rates

    def push_alert(self, alert: Alert) -> Alert:
        """Add an event alert, replacing any active alert with the same id."""
        with self._mutation():
            self._alerts = [a for a in self._alerts if a.id != alert.id]
            self._alerts.append(alert)
            return alert

    def dismiss_alert(self, alert_id: str) -> None:
        """Dismiss an active alert.

        Raises:
            NotFoundError: If no active alert has this id
        """
        if not any(alert.id == alert_id for alert in self._alerts):
            raise NotFoundError(alert_not_found(alert_id))
        with self._mutation():
            state = alert_rules.dismiss(
                alert_rules.AlertState(active=tuple(self._alerts), suppressed=dict(self._suppressed)),
                alert_id,
            )
            self._alerts = list(state.active)
            self._suppressed = dict(state.suppressed)
