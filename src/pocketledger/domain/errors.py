"""Shared domain error messages and error types."""


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as duplicate identifiers or names."""


def account_not_found(account_id: str) -> str:
    """Return message for missing account."""
    return f"Account {account_id} not found"


def goal_not_found(goal_id: str) -> str:
    """Return message for missing goal."""
    return f"Goal {goal_id} not found"


def debt_not_found(debt_id: str) -> str:
    """Return message for missing debt."""
    return f"Debt {debt_id} not found"


def budget_not_found(budget_id: str) -> str:
    """Return message for missing budget."""
    return f"Budget {budget_id} not found"


def transaction_not_found(transaction_id: str) -> str:
    """Return message for missing transaction."""
    return f"Transaction {transaction_id} not found"


def recurring_rule_not_found(rule_id: str) -> str:
    """Return message for missing recurring rule."""
    return f"Recurring rule {rule_id} not found"


def alert_not_found(alert_id: str) -> str:
    """Return message for missing alert."""
    return f"Alert {alert_id} not found"


def duplicate_id(kind: str, entity_id: str) -> str:
    """Return message for an identifier that is already in use."""
    return f"{kind} with id '{entity_id}' already exists"


def duplicate_account_name(name: str) -> str:
    """Return message for a duplicate account name."""
    return f"Account with name '{name}' already exists"


def cascade_summary(name: str, transaction_count: int, rule_count: int) -> str:
    """Describe what deleting an account removed alongside it."""
    parts = [f"{transaction_count} transaction{'s' if transaction_count != 1 else ''}"]
    parts.append(f"{rule_count} recurring rule{'s' if rule_count != 1 else ''}")
    return f"Deleted account '{name}' along with {' and '.join(parts)}"
