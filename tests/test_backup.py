"""Tests for backup export and import."""

import json
from datetime import datetime
from decimal import Decimal

import pytest

from pocketledger.database.factories import create_memory_database
from pocketledger.domain.backup import BACKUP_VERSION, export_json, export_state, import_state, parse_backup
from pocketledger.domain.entities import Budget, TransactionType
from pocketledger.domain.ledger import Ledger


@pytest.fixture
def populated(ledger, make_account, make_goal, make_transaction):
    checking = make_account("Checking", balance="1000")
    make_account("Savings", balance="200")
    make_goal("Bike", target="300")
    ledger.add_transaction(make_transaction(checking.id, "40", category="cat_food", title="Groceries"))
    ledger.add_budget(Budget(id="b1", category="cat_food", limit=Decimal("250"), currency="USD"))
    return ledger


def test_export_contains_sections(populated, clock):
    document = export_state(populated.snapshot(), clock())

    assert document["version"] == BACKUP_VERSION
    assert document["timestamp"] == "2024-03-15T10:00:00"
    assert [a["name"] for a in document["accounts"]] == ["Checking", "Savings"]
    assert document["transactions"][0]["title"] == "Groceries"
    assert document["budgets"][0]["categoryId"] == "cat_food"
    assert "alerts" not in document


def test_export_import_round_trip(populated, clock):
    payload = export_json(populated.snapshot(), clock())

    other = Ledger(create_memory_database(), clock=clock)
    assert other.accounts == ()

    assert import_state(other, payload) is True
    assert other.accounts == populated.accounts
    assert other.goals == populated.goals
    assert other.transactions == populated.transactions
    assert other.budgets == populated.budgets
    assert other.get_account("acc_checking").balance == Decimal("960")


def test_import_does_not_re_apply_effects(populated):
    payload = export_json(populated.snapshot())
    assert import_state(populated, payload) is True
    assert populated.get_account("acc_checking").balance == Decimal("960")


def test_absent_sections_keep_current_data(populated):
    payload = {"version": 1, "goals": []}
    assert import_state(populated, payload) is True

    assert populated.goals == ()
    assert len(populated.accounts) == 2
    assert len(populated.transactions) == 1


def test_import_clears_pending_undo(populated):
    populated.delete_transaction(populated.transactions[0].id)
    assert populated.pending_undo is not None

    import_state(populated, {"version": 1})
    assert populated.pending_undo is None


@pytest.mark.parametrize(
    "payload",
    [
        "not json",
        "[1, 2, 3]",
        json.dumps({"accounts": {"id": "a1"}}),
        json.dumps({"accounts": [{"name": "no id"}]}),
        json.dumps({"transactions": [{"id": "t1", "amount": "x", "accountId": "a", "date": "2024-01-01"}]}),
        json.dumps({"settings": "dark mode"}),
        json.dumps({"accounts": [{"id": "a1", "balance": "NaN"}]}),
        json.dumps({"accounts": [{"id": "a1", "balance": "Infinity"}]}),
        '{"accounts": [{"id": "a1", "balance": NaN}]}',
        json.dumps({"transactions": [{"id": "t1", "amount": "-Infinity", "accountId": "a", "date": "2024-01-01"}]}),
    ],
)
def test_malformed_backup_leaves_state_untouched(populated, payload):
    before = populated.snapshot()

    assert import_state(populated, payload) is False
    assert populated.snapshot() == before


def test_parse_backup_rejects_non_objects():
    with pytest.raises(ValueError, match="JSON object"):
        parse_backup("42")


def test_imports_camel_case_backup_from_mobile_app(ledger):
    payload = {
        "version": 1,
        "timestamp": "2024-03-01T12:00:00.000Z",
        "settings": {"name": "Ana", "currency": "EUR", "language": "es"},
        "accounts": [
            {
                "id": "1709290000000",
                "name": "Banco",
                "type": "savings",
                "balance": 1520.5,
                "currency": "EUR",
                "enableInterest": True,
                "interestRate": 2,
                "interestFrequency": "monthly",
                "startDate": "2024-01-01T00:00:00.000Z",
            }
        ],
        "transactions": [
            {
                "id": "1709290000001",
                "amount": 30,
                "currency": "EUR",
                "type": "expense",
                "category": "cat_food",
                "accountId": "1709290000000",
                "date": "2024-02-28T18:30:00.000Z",
                "title": "Mercado",
                "isRecurring": False,
            }
        ],
        "recurringRules": [],
    }

    assert import_state(ledger, payload) is True

    account = ledger.get_account("1709290000000")
    assert account.balance == Decimal("1520.5")
    assert account.interest.rate_percent == Decimal("2")
    assert account.interest.enabled is True
    assert ledger.settings.language == "es"
    assert ledger.transactions[0].type == TransactionType.EXPENSE
    assert isinstance(ledger.transactions[0].date, datetime)
    assert ledger.transactions[0].date.tzinfo is None
