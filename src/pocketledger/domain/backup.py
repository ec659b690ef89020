"""Backup export and import.

A backup is a JSON object with a ``version``, a ``timestamp`` and one section
per entity list. Import is all-or-nothing: every section is parsed before the
ledger is touched, and sections missing from the file keep the current data.
"""

import json
import logging
from dataclasses import replace
from datetime import datetime
from typing import Any, Mapping, Optional, Union

from pocketledger.database.mappers import (
    account_from_dict,
    account_to_dict,
    budget_from_dict,
    budget_to_dict,
    debt_from_dict,
    debt_to_dict,
    goal_from_dict,
    goal_to_dict,
    list_from_dicts,
    recurring_rule_from_dict,
    recurring_rule_to_dict,
    settings_from_dict,
    settings_to_dict,
    transaction_from_dict,
    transaction_to_dict,
)
from pocketledger.domain.entities import LedgerSnapshot
from pocketledger.domain.ledger import Ledger

logger = logging.getLogger(__name__)

BACKUP_VERSION = 1

# Backup section name -> (snapshot field, parser)
_SECTIONS = {
    "accounts": ("accounts", account_from_dict),
    "transactions": ("transactions", transaction_from_dict),
    "goals": ("goals", goal_from_dict),
    "debts": ("debts", debt_from_dict),
    "recurringRules": ("recurring_rules", recurring_rule_from_dict),
    "budgets": ("budgets", budget_from_dict),
}


def export_state(snapshot: LedgerSnapshot, now: Optional[datetime] = None) -> dict[str, Any]:
    """Build a backup document for a snapshot.

    Alerts, the undo slot and the rate table are not part of a backup.
    """
    now = now or datetime.now()
    return {
        "version": BACKUP_VERSION,
        "timestamp": now.isoformat(),
        "settings": settings_to_dict(snapshot.settings),
        "accounts": [account_to_dict(a) for a in snapshot.accounts],
        "transactions": [transaction_to_dict(t) for t in snapshot.transactions],
        "goals": [goal_to_dict(g) for g in snapshot.goals],
        "debts": [debt_to_dict(d) for d in snapshot.debts],
        "recurringRules": [recurring_rule_to_dict(r) for r in snapshot.recurring_rules],
        "budgets": [budget_to_dict(b) for b in snapshot.budgets],
    }


def export_json(snapshot: LedgerSnapshot, now: Optional[datetime] = None, indent: int = 2) -> str:
    """Serialize a backup document to a JSON string."""
    return json.dumps(export_state(snapshot, now), indent=indent, ensure_ascii=False)


def parse_backup(payload: Union[str, bytes, Mapping[str, Any]]) -> dict[str, Any]:
    """Parse a backup into snapshot fields, one per section present.

    Raises:
        ValueError: If the payload is not a valid backup
    """
    if isinstance(payload, (str, bytes)):
        try:
            data = json.loads(payload)
        except json.JSONDecodeError as e:
            raise ValueError(f"Backup is not valid JSON: {e}") from e
    else:
        data = payload

    if not isinstance(data, Mapping):
        raise ValueError("Backup must be a JSON object")

    fields: dict[str, Any] = {}
    if data.get("settings") is not None:
        if not isinstance(data["settings"], Mapping):
            raise ValueError("Section 'settings' must be an object")
        fields["settings"] = settings_from_dict(data["settings"])

    for section, (field_name, parser) in _SECTIONS.items():
        if data.get(section) is None:
            continue
        fields[field_name] = tuple(list_from_dicts(parser, data[section], section))

    return fields


def import_state(ledger: Ledger, payload: Union[str, bytes, Mapping[str, Any]]) -> bool:
    """Replace ledger sections with the ones in a backup.

    Args:
        ledger: Ledger to import into
        payload: Backup as JSON text or an already decoded object

    Returns:
        True on success; False if the backup is malformed, in which case the
        ledger is unchanged
    """
    try:
        fields = parse_backup(payload)
    except (ValueError, TypeError, KeyError) as e:
        logger.warning("Backup import failed: %s", e)
        return False

    ledger.replace_state(replace(ledger.snapshot(), **fields))
    logger.debug("Imported backup sections: %s", ", ".join(sorted(fields)) or "none")
    return True
