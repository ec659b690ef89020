"""Domain model entities for pocketledger.

These are pure data classes representing business concepts, independent of
how the store persists them. Entities are immutable: the ledger replaces an
entity with an updated copy instead of mutating it in place.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Mapping, Optional, Union
from uuid import uuid4


def new_id() -> str:
    """Return a fresh opaque entity identifier."""
    return uuid4().hex


class AccountType(str, Enum):
    """Kinds of account a user can hold."""

    CASH = "cash"
    CHECKING = "checking"
    SAVINGS = "savings"
    CREDIT_CARD = "credit_card"
    INVESTMENT = "investment"


class TransactionType(str, Enum):
    """Direction of a transaction."""

    EXPENSE = "expense"
    INCOME = "income"
    TRANSFER = "transfer"


class Frequency(str, Enum):
    """Period used for recurrence and interest compounding."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class DebtType(str, Enum):
    """Whether a debt is owed to the user or by the user."""

    OWES_ME = "owes_me"
    I_OWE = "i_owe"


class AlertType(str, Enum):
    """Categories of advisory alert."""

    LOW_BALANCE = "low_balance"
    DEBT_DUE = "debt_due"
    GOAL_MILESTONE = "goal_milestone"
    RECURRING_PROCESSED = "recurring_processed"


class TargetKind(Enum):
    """Kind of entity a transaction's account_id can point at."""

    ACCOUNT = "account"
    GOAL = "goal"


@dataclass(frozen=True)
class InterestConfig:
    """Compound interest settings shared by accounts and debts."""

    rate_percent: Decimal
    frequency: Frequency = Frequency.MONTHLY
    start_date: Optional[date] = None
    enabled: bool = True


@dataclass(frozen=True)
class Account:
    """Account domain entity. ``balance`` is always expressed in ``currency``."""

    id: str
    name: str
    type: AccountType
    balance: Decimal
    currency: str
    interest: Optional[InterestConfig] = None
    icon: Optional[str] = None


@dataclass(frozen=True)
class Goal:
    """Savings goal domain entity."""

    id: str
    name: str
    target_amount: Decimal
    current_amount: Decimal
    currency: str
    is_completed: bool = False
    deadline: Optional[date] = None


@dataclass(frozen=True)
class Debt:
    """Debt domain entity. Debts are informational and never routed by transactions."""

    id: str
    person_name: str
    amount: Decimal
    currency: str
    type: DebtType
    due_date: Optional[datetime] = None
    description: Optional[str] = None
    interest: Optional[InterestConfig] = None


@dataclass(frozen=True)
class Transaction:
    """Transaction domain entity.

    ``account_id`` is the debit side of a transfer, or the affected account or
    goal for income and expenses. ``to_account_id`` is only set for transfers.
    ``rate_snapshot`` holds the exchange rates used when the transaction was
    applied, so that reverting it is exact even after the rate table changes.
    """

    id: str
    amount: Decimal
    currency: str
    type: TransactionType
    category: str
    account_id: str
    date: datetime
    title: str
    to_account_id: Optional[str] = None
    description: Optional[str] = None
    is_recurring: bool = False
    frequency: Optional[Frequency] = None
    generated_from_rule_id: Optional[str] = None
    rate_snapshot: Optional[Mapping[str, Decimal]] = field(default=None, compare=False)


@dataclass(frozen=True)
class RecurringTemplate:
    """Transaction fields a recurring rule copies into each generated instance."""

    amount: Decimal
    currency: str
    type: TransactionType
    category: str
    account_id: str
    title: str
    to_account_id: Optional[str] = None
    description: Optional[str] = None

    @classmethod
    def from_transaction(cls, transaction: Transaction) -> "RecurringTemplate":
        return cls(
            amount=transaction.amount,
            currency=transaction.currency,
            type=transaction.type,
            category=transaction.category,
            account_id=transaction.account_id,
            title=transaction.title,
            to_account_id=transaction.to_account_id,
            description=transaction.description,
        )

    def materialize(self, transaction_id: str, when: datetime, rule_id: str) -> Transaction:
        """Build a concrete transaction from this template."""
        return Transaction(
            id=transaction_id,
            amount=self.amount,
            currency=self.currency,
            type=self.type,
            category=self.category,
            account_id=self.account_id,
            date=when,
            title=self.title,
            to_account_id=self.to_account_id,
            description=self.description,
            generated_from_rule_id=rule_id,
        )


@dataclass(frozen=True)
class RecurringRule:
    """Rule that generates a transaction every period."""

    id: str
    template: RecurringTemplate
    frequency: Frequency
    next_due_date: datetime
    notify: bool = False
    active: bool = True

    def references(self, entity_id: str) -> bool:
        return self.template.account_id == entity_id or self.template.to_account_id == entity_id


@dataclass(frozen=True)
class RecurringOptions:
    """Options supplied alongside a transaction marked as recurring."""

    frequency: Frequency
    notify: bool = False


@dataclass(frozen=True)
class Budget:
    """Monthly spending limit for one category."""

    id: str
    category: str
    limit: Decimal
    currency: str


@dataclass(frozen=True)
class Alert:
    """Advisory alert.

    ``fingerprint`` identifies the state that raised a condition alert; a
    dismissed alert stays quiet while the same fingerprint holds.
    """

    id: str
    type: AlertType
    message_key: str
    data: Optional[str] = None
    fingerprint: Optional[str] = None


@dataclass(frozen=True)
class NotificationSettings:
    """Which alerts are evaluated, and the low balance threshold."""

    low_balance: bool = True
    debt_reminders: bool = True
    goal_milestones: bool = True
    low_balance_threshold: Decimal = Decimal("100")


@dataclass(frozen=True)
class UserSettings:
    """User preferences stored alongside the ledger."""

    name: str = ""
    currency: str = "USD"
    language: str = "en"
    notifications: NotificationSettings = field(default_factory=NotificationSettings)
    undo_window_seconds: int = 60


@dataclass(frozen=True)
class PendingUndo:
    """A deleted transaction that can still be restored."""

    transaction: Transaction
    deleted_at: datetime


@dataclass(frozen=True)
class Target:
    """Resolved routing target for a transaction's account_id."""

    kind: TargetKind
    ref: Union[Account, Goal]


@dataclass(frozen=True)
class LedgerSnapshot:
    """Immutable view of the complete ledger state."""

    settings: UserSettings = field(default_factory=UserSettings)
    accounts: tuple[Account, ...] = ()
    goals: tuple[Goal, ...] = ()
    debts: tuple[Debt, ...] = ()
    transactions: tuple[Transaction, ...] = ()
    recurring_rules: tuple[RecurringRule, ...] = ()
    budgets: tuple[Budget, ...] = ()
    alerts: tuple[Alert, ...] = ()
    suppressed_alerts: Mapping[str, str] = field(default_factory=dict)
    rates: Mapping[str, Decimal] = field(default_factory=dict)
    pending_undo: Optional[PendingUndo] = None
