"""Mapper functions to convert between domain entities and JSON-compatible dicts.

The same shapes are used for the key-value store and for backup files. Field
names follow the camelCase backup format of the original application so that
its backups can be imported. Parsing is tolerant: optional fields fall back to
defaults and unknown keys are ignored, while a missing identifier or amount
raises ValueError.
"""

from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Callable, Mapping, Optional, TypeVar

from dateutil.parser import isoparse

from pocketledger.domain.currency import normalize_rates
from pocketledger.domain.entities import (
    Account,
    AccountType,
    Alert,
    AlertType,
    Budget,
    Debt,
    DebtType,
    Frequency,
    Goal,
    InterestConfig,
    LedgerSnapshot,
    NotificationSettings,
    PendingUndo,
    RecurringRule,
    RecurringTemplate,
    Transaction,
    TransactionType,
    UserSettings,
)

E = TypeVar("E", bound=Enum)
T = TypeVar("T")

DEFAULT_CURRENCY = "USD"

STORE_KEYS = (
    "settings",
    "accounts",
    "transactions",
    "goals",
    "debts",
    "recurring_rules",
    "budgets",
    "alerts",
    "suppressed_alerts",
    "rates",
    "pending_undo",
)


# Field parsing helpers


def _required(data: Mapping[str, Any], key: str) -> Any:
    value = data.get(key)
    if value is None or value == "":
        raise ValueError(f"Missing required field '{key}'")
    return value


def _decimal(value: Any, field_name: str, default: Optional[Decimal] = None) -> Decimal:
    if value is None or value == "":
        if default is None:
            raise ValueError(f"Missing required field '{field_name}'")
        return default
    if isinstance(value, bool):
        raise ValueError(f"Invalid number for '{field_name}': {value!r}")
    try:
        result = Decimal(str(value))
    except InvalidOperation as e:
        raise ValueError(f"Invalid number for '{field_name}': {value!r}") from e
    if not result.is_finite():
        raise ValueError(f"Invalid number for '{field_name}': {value!r}")
    return result


def _instant(value: Any) -> Optional[datetime]:
    """Parse an ISO-8601 instant into a naive local datetime."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    else:
        try:
            parsed = isoparse(str(value))
        except (ValueError, OverflowError) as e:
            raise ValueError(f"Invalid date '{value}': {e}") from e
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def _day(value: Any) -> Optional[date]:
    parsed = _instant(value)
    return parsed.date() if parsed is not None else None


def _enum(enum_cls: type[E], value: Any, default: E) -> E:
    if value is None or value == "":
        return default
    try:
        return enum_cls(value)
    except ValueError as e:
        raise ValueError(f"Invalid {enum_cls.__name__} '{value}'") from e


def _optional_str(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    return str(value)


def _iso(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def _number(value: Decimal) -> str:
    return str(value)


def list_from_dicts(parser: Callable[[Mapping[str, Any]], T], items: Any, section: str) -> list[T]:
    """Parse a list of dicts with ``parser``, rejecting anything that is not a list of objects."""
    if not isinstance(items, list):
        raise ValueError(f"Section '{section}' must be a list")
    result = []
    for item in items:
        if not isinstance(item, Mapping):
            raise ValueError(f"Section '{section}' must contain objects")
        result.append(parser(item))
    return result


# Interest


def _interest_to_dict(interest: Optional[InterestConfig]) -> dict[str, Any]:
    if interest is None:
        return {"enableInterest": False}
    return {
        "enableInterest": interest.enabled,
        "interestRate": _number(interest.rate_percent),
        "interestFrequency": interest.frequency.value,
        "startDate": _iso(interest.start_date),
    }


def _interest_from_dict(data: Mapping[str, Any]) -> Optional[InterestConfig]:
    rate = data.get("interestRate")
    if rate is None or rate == "":
        return None
    return InterestConfig(
        rate_percent=_decimal(rate, "interestRate"),
        frequency=_enum(Frequency, data.get("interestFrequency"), Frequency.MONTHLY),
        start_date=_day(data.get("startDate")),
        enabled=bool(data.get("enableInterest", False)),
    )


# Entities


def account_to_dict(account: Account) -> dict[str, Any]:
    """Convert an Account entity to a JSON-compatible dict."""
    return {
        "id": account.id,
        "name": account.name,
        "type": account.type.value,
        "balance": _number(account.balance),
        "currency": account.currency,
        "icon": account.icon,
        **_interest_to_dict(account.interest),
    }


def account_from_dict(data: Mapping[str, Any]) -> Account:
    """Convert a dict to an Account entity."""
    return Account(
        id=str(_required(data, "id")),
        name=str(data.get("name") or ""),
        type=_enum(AccountType, data.get("type"), AccountType.CHECKING),
        balance=_decimal(data.get("balance"), "balance", Decimal(0)),
        currency=str(data.get("currency") or DEFAULT_CURRENCY),
        interest=_interest_from_dict(data),
        icon=_optional_str(data.get("icon")),
    )


def goal_to_dict(goal: Goal) -> dict[str, Any]:
    """Convert a Goal entity to a JSON-compatible dict."""
    return {
        "id": goal.id,
        "name": goal.name,
        "targetAmount": _number(goal.target_amount),
        "currentAmount": _number(goal.current_amount),
        "currency": goal.currency,
        "isCompleted": goal.is_completed,
        "deadline": _iso(goal.deadline),
    }


def goal_from_dict(data: Mapping[str, Any]) -> Goal:
    """Convert a dict to a Goal entity."""
    return Goal(
        id=str(_required(data, "id")),
        name=str(data.get("name") or ""),
        target_amount=_decimal(data.get("targetAmount"), "targetAmount"),
        current_amount=_decimal(data.get("currentAmount"), "currentAmount", Decimal(0)),
        currency=str(data.get("currency") or DEFAULT_CURRENCY),
        is_completed=bool(data.get("isCompleted", False)),
        deadline=_day(data.get("deadline")),
    )


def debt_to_dict(debt: Debt) -> dict[str, Any]:
    """Convert a Debt entity to a JSON-compatible dict."""
    return {
        "id": debt.id,
        "personName": debt.person_name,
        "amount": _number(debt.amount),
        "currency": debt.currency,
        "type": debt.type.value,
        "dueDate": _iso(debt.due_date),
        "description": debt.description,
        **_interest_to_dict(debt.interest),
    }


def debt_from_dict(data: Mapping[str, Any]) -> Debt:
    """Convert a dict to a Debt entity."""
    return Debt(
        id=str(_required(data, "id")),
        person_name=str(data.get("personName") or ""),
        amount=_decimal(data.get("amount"), "amount"),
        currency=str(data.get("currency") or DEFAULT_CURRENCY),
        type=_enum(DebtType, data.get("type"), DebtType.I_OWE),
        due_date=_instant(data.get("dueDate")),
        description=_optional_str(data.get("description")),
        interest=_interest_from_dict(data),
    )


def transaction_to_dict(transaction: Transaction) -> dict[str, Any]:
    """Convert a Transaction entity to a JSON-compatible dict."""
    data = {
        "id": transaction.id,
        "amount": _number(transaction.amount),
        "currency": transaction.currency,
        "type": transaction.type.value,
        "category": transaction.category,
        "accountId": transaction.account_id,
        "toAccountId": transaction.to_account_id,
        "date": transaction.date.isoformat(),
        "title": transaction.title,
        "description": transaction.description,
        "isRecurring": transaction.is_recurring,
        "frequency": transaction.frequency.value if transaction.frequency else None,
        "generatedFromRuleId": transaction.generated_from_rule_id,
    }
    if transaction.rate_snapshot is not None:
        data["rateSnapshot"] = {code: _number(rate) for code, rate in transaction.rate_snapshot.items()}
    return data


def transaction_from_dict(data: Mapping[str, Any]) -> Transaction:
    """Convert a dict to a Transaction entity."""
    frequency = data.get("frequency")
    snapshot = data.get("rateSnapshot")
    return Transaction(
        id=str(_required(data, "id")),
        amount=_decimal(data.get("amount"), "amount"),
        currency=str(data.get("currency") or DEFAULT_CURRENCY),
        type=_enum(TransactionType, data.get("type"), TransactionType.EXPENSE),
        category=str(data.get("category") or "cat_other"),
        account_id=str(_required(data, "accountId")),
        date=_instant(_required(data, "date")),
        title=str(data.get("title") or ""),
        to_account_id=_optional_str(data.get("toAccountId")),
        description=_optional_str(data.get("description")),
        is_recurring=bool(data.get("isRecurring", False)),
        frequency=_enum(Frequency, frequency, Frequency.MONTHLY) if frequency else None,
        generated_from_rule_id=_optional_str(data.get("generatedFromRuleId")),
        rate_snapshot=normalize_rates(snapshot) if isinstance(snapshot, Mapping) else None,
    )


def template_to_dict(template: RecurringTemplate) -> dict[str, Any]:
    """Convert a RecurringTemplate to a JSON-compatible dict."""
    return {
        "amount": _number(template.amount),
        "currency": template.currency,
        "type": template.type.value,
        "category": template.category,
        "accountId": template.account_id,
        "toAccountId": template.to_account_id,
        "title": template.title,
        "description": template.description,
    }


def template_from_dict(data: Mapping[str, Any]) -> RecurringTemplate:
    """Convert a dict to a RecurringTemplate."""
    return RecurringTemplate(
        amount=_decimal(data.get("amount"), "amount"),
        currency=str(data.get("currency") or DEFAULT_CURRENCY),
        type=_enum(TransactionType, data.get("type"), TransactionType.EXPENSE),
        category=str(data.get("category") or "cat_other"),
        account_id=str(_required(data, "accountId")),
        title=str(data.get("title") or ""),
        to_account_id=_optional_str(data.get("toAccountId")),
        description=_optional_str(data.get("description")),
    )


def recurring_rule_to_dict(rule: RecurringRule) -> dict[str, Any]:
    """Convert a RecurringRule to a JSON-compatible dict."""
    return {
        "id": rule.id,
        "template": template_to_dict(rule.template),
        "frequency": rule.frequency.value,
        "notify": rule.notify,
        "nextDueDate": rule.next_due_date.isoformat(),
        "active": rule.active,
    }


def recurring_rule_from_dict(data: Mapping[str, Any]) -> RecurringRule:
    """Convert a dict to a RecurringRule."""
    template = _required(data, "template")
    if not isinstance(template, Mapping):
        raise ValueError("Recurring rule template must be an object")
    return RecurringRule(
        id=str(_required(data, "id")),
        template=template_from_dict(template),
        frequency=_enum(Frequency, data.get("frequency"), Frequency.MONTHLY),
        next_due_date=_instant(_required(data, "nextDueDate")),
        notify=bool(data.get("notify", False)),
        active=bool(data.get("active", True)),
    )


def budget_to_dict(budget: Budget) -> dict[str, Any]:
    """Convert a Budget to a JSON-compatible dict."""
    return {
        "id": budget.id,
        "categoryId": budget.category,
        "limit": _number(budget.limit),
        "currency": budget.currency,
    }


def budget_from_dict(data: Mapping[str, Any]) -> Budget:
    """Convert a dict to a Budget."""
    return Budget(
        id=str(_required(data, "id")),
        category=str(_required(data, "categoryId")),
        limit=_decimal(data.get("limit"), "limit"),
        currency=str(data.get("currency") or DEFAULT_CURRENCY),
    )


def alert_to_dict(alert: Alert) -> dict[str, Any]:
    """Convert an Alert to a JSON-compatible dict."""
    return {
        "id": alert.id,
        "type": alert.type.value,
        "messageKey": alert.message_key,
        "data": alert.data,
        "fingerprint": alert.fingerprint,
    }


def alert_from_dict(data: Mapping[str, Any]) -> Alert:
    """Convert a dict to an Alert."""
    alert_type = _enum(AlertType, _required(data, "type"), AlertType.RECURRING_PROCESSED)
    return Alert(
        id=str(_required(data, "id")),
        type=alert_type,
        message_key=str(data.get("messageKey") or f"alert_{alert_type.value}"),
        data=_optional_str(data.get("data")),
        fingerprint=_optional_str(data.get("fingerprint")),
    )


def settings_to_dict(settings: UserSettings) -> dict[str, Any]:
    """Convert UserSettings to a JSON-compatible dict."""
    notifications = settings.notifications
    return {
        "name": settings.name,
        "currency": settings.currency,
        "language": settings.language,
        "undoWindowSeconds": settings.undo_window_seconds,
        "notifications": {
            "lowBalance": notifications.low_balance,
            "debtReminders": notifications.debt_reminders,
            "goalMilestones": notifications.goal_milestones,
            "lowBalanceThreshold": _number(notifications.low_balance_threshold),
        },
    }


def settings_from_dict(data: Mapping[str, Any]) -> UserSettings:
    """Convert a dict to UserSettings, defaulting anything missing."""
    defaults = UserSettings()
    raw = data.get("notifications")
    notifications = defaults.notifications
    if isinstance(raw, Mapping):
        notifications = NotificationSettings(
            low_balance=bool(raw.get("lowBalance", notifications.low_balance)),
            debt_reminders=bool(raw.get("debtReminders", notifications.debt_reminders)),
            goal_milestones=bool(raw.get("goalMilestones", notifications.goal_milestones)),
            low_balance_threshold=_decimal(
                raw.get("lowBalanceThreshold"), "lowBalanceThreshold", notifications.low_balance_threshold
            ),
        )
    return UserSettings(
        name=str(data.get("name") or defaults.name),
        currency=str(data.get("currency") or defaults.currency),
        language=str(data.get("language") or defaults.language),
        notifications=notifications,
        undo_window_seconds=int(data.get("undoWindowSeconds", defaults.undo_window_seconds)),
    )


def pending_undo_to_dict(pending: Optional[PendingUndo]) -> Optional[dict[str, Any]]:
    if pending is None:
        return None
    return {
        "transaction": transaction_to_dict(pending.transaction),
        "deletedAt": pending.deleted_at.isoformat(),
    }


def pending_undo_from_dict(data: Optional[Mapping[str, Any]]) -> Optional[PendingUndo]:
    if not data:
        return None
    return PendingUndo(
        transaction=transaction_from_dict(_required(data, "transaction")),
        deleted_at=_instant(_required(data, "deletedAt")),
    )


# Whole snapshot


def snapshot_to_records(snapshot: LedgerSnapshot) -> dict[str, Any]:
    """Convert a ledger snapshot into one JSON-compatible value per store key."""
    return {
        "settings": settings_to_dict(snapshot.settings),
        "accounts": [account_to_dict(a) for a in snapshot.accounts],
        "transactions": [transaction_to_dict(t) for t in snapshot.transactions],
        "goals": [goal_to_dict(g) for g in snapshot.goals],
        "debts": [debt_to_dict(d) for d in snapshot.debts],
        "recurring_rules": [recurring_rule_to_dict(r) for r in snapshot.recurring_rules],
        "budgets": [budget_to_dict(b) for b in snapshot.budgets],
        "alerts": [alert_to_dict(a) for a in snapshot.alerts],
        "suppressed_alerts": dict(snapshot.suppressed_alerts),
        "rates": {code: _number(rate) for code, rate in snapshot.rates.items()},
        "pending_undo": pending_undo_to_dict(snapshot.pending_undo),
    }


def snapshot_from_records(load: Callable[[str], Any]) -> LedgerSnapshot:
    """Build a ledger snapshot from a store lookup function.

    Args:
        load: Callable returning the stored value for a key, or None
    """

    def section(key: str, parser: Callable[[Mapping[str, Any]], T]) -> tuple[T, ...]:
        value = load(key)
        if value is None:
            return ()
        return tuple(list_from_dicts(parser, value, key))

    settings = load("settings")
    suppressed = load("suppressed_alerts") or {}
    return LedgerSnapshot(
        settings=settings_from_dict(settings) if isinstance(settings, Mapping) else UserSettings(),
        accounts=section("accounts", account_from_dict),
        goals=section("goals", goal_from_dict),
        debts=section("debts", debt_from_dict),
        transactions=section("transactions", transaction_from_dict),
        recurring_rules=section("recurring_rules", recurring_rule_from_dict),
        budgets=section("budgets", budget_from_dict),
        alerts=section("alerts", alert_from_dict),
        suppressed_alerts={str(k): str(v) for k, v in suppressed.items()},
        rates=normalize_rates(load("rates") or {}),
        pending_undo=pending_undo_from_dict(load("pending_undo")),
    )
