"""Alert evaluation.

``reevaluate`` is a pure function of the ledger snapshot: the ledger calls it
after every mutation and stores the result. Condition alerts (low balance,
debt due) resolve themselves when the condition stops holding; event alerts
(goal milestone, recurring processed) stay until dismissed.
"""

import math
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Mapping, Optional

from pocketledger.domain.currency import convert
from pocketledger.domain.entities import (
    Alert,
    AlertType,
    DebtType,
    LedgerSnapshot,
)

LOW_BALANCE_ID = "low_balance"
DEBT_DUE_WINDOW_DAYS = 3

_CONDITION_TYPES = {AlertType.LOW_BALANCE, AlertType.DEBT_DUE}

MESSAGES = {
    "alert_low_balance": "Low balance!",
    "alert_debt_due": "Due soon:",
    "alert_goal_milestone": "Milestone:",
    "alert_recurring_processed": "Processed:",
}


@dataclass(frozen=True)
class AlertState:
    """Active alerts plus fingerprints of dismissed condition alerts."""

    active: tuple[Alert, ...] = ()
    suppressed: Mapping[str, str] = field(default_factory=dict)


def debt_alert_id(debt_id: str) -> str:
    return f"debt_{debt_id}"


def goal_alert_id(goal_id: str) -> str:
    return f"goal_{goal_id}"


def describe(alert: Alert) -> str:
    """English message for an alert."""
    message = MESSAGES.get(alert.message_key, alert.message_key)
    return f"{message} {alert.data}" if alert.data else message


def _total_balance(snapshot: LedgerSnapshot) -> Decimal:
    currency = snapshot.settings.currency
    return sum(
        (convert(acc.balance, acc.currency, currency, snapshot.rates) for acc in snapshot.accounts),
        Decimal(0),
    )


def _condition_alerts(snapshot: LedgerSnapshot, now: datetime) -> dict[str, Alert]:
    """Condition alerts whose condition currently holds, keyed by alert id."""
    notifications = snapshot.settings.notifications
    holding: dict[str, Alert] = {}

    if notifications.low_balance and snapshot.accounts and snapshot.transactions:
        if _total_balance(snapshot) < notifications.low_balance_threshold:
            holding[LOW_BALANCE_ID] = Alert(
                id=LOW_BALANCE_ID,
                type=AlertType.LOW_BALANCE,
                message_key="alert_low_balance",
                fingerprint=LOW_BALANCE_ID,
            )

    if notifications.debt_reminders:
        for debt in snapshot.debts:
            if debt.type != DebtType.I_OWE or debt.due_date is None:
                continue
            diff_days = math.ceil((debt.due_date - now).total_seconds() / 86400)
            if 0 <= diff_days <= DEBT_DUE_WINDOW_DAYS:
                alert_id = debt_alert_id(debt.id)
                holding[alert_id] = Alert(
                    id=alert_id,
                    type=AlertType.DEBT_DUE,
                    message_key="alert_debt_due",
                    data=debt.person_name,
                    fingerprint=debt.due_date.isoformat(),
                )

    return holding


def reevaluate(
    snapshot: LedgerSnapshot,
    previous: Optional[LedgerSnapshot] = None,
    now: Optional[datetime] = None,
) -> AlertState:
    """Recompute the active alert set for a snapshot.

    Args:
        snapshot: Current ledger state, including its active and suppressed alerts
        previous: State before the mutation being evaluated; used to detect goals
            that have just been completed
        now: Evaluation time (defaults to the current time)

    Returns:
        New AlertState
    """
    now = now or datetime.now()
    holding = _condition_alerts(snapshot, now)
    goal_alert_ids = {goal_alert_id(goal.id) for goal in snapshot.goals}

    active: list[Alert] = []
    for alert in snapshot.alerts:
        if alert.type in _CONDITION_TYPES and alert.id not in holding:
            continue
        if alert.type == AlertType.GOAL_MILESTONE and alert.id not in goal_alert_ids:
            continue
        active.append(alert)

    # A suppression only lasts while the exact same condition holds
    suppressed = {
        alert_id: fingerprint
        for alert_id, fingerprint in snapshot.suppressed_alerts.items()
        if alert_id in holding and holding[alert_id].fingerprint == fingerprint
    }

    active_ids = {alert.id for alert in active}
    for alert_id, alert in holding.items():
        if alert_id not in active_ids and alert_id not in suppressed:
            active.append(alert)
            active_ids.add(alert_id)

    if snapshot.settings.notifications.goal_milestones:
        before = {goal.id: goal.is_completed for goal in previous.goals} if previous is not None else {}
        for goal in snapshot.goals:
            if goal.target_amount <= 0 or goal.current_amount / goal.target_amount < 1:
                continue
            was_completed = before.get(goal.id, False) if previous is not None else goal.is_completed
            alert_id = goal_alert_id(goal.id)
            if was_completed or alert_id in active_ids:
                continue
            active.append(
                Alert(
                    id=alert_id,
                    type=AlertType.GOAL_MILESTONE,
                    message_key="alert_goal_milestone",
                    data=goal.name,
                )
            )
            active_ids.add(alert_id)

    return AlertState(active=tuple(active), suppressed=suppressed)


def dismiss(state: AlertState, alert_id: str) -> AlertState:
    """Remove an alert, remembering the condition it was raised for."""
    suppressed = dict(state.suppressed)
    active = []
    for alert in state.active:
        if alert.id == alert_id:
            if alert.fingerprint is not None:
                suppressed[alert.id] = alert.fingerprint
            continue
        active.append(alert)
    return AlertState(active=tuple(active), suppressed=suppressed)
