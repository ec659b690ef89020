"""Tests for the recurring rule runner."""

import logging
from datetime import datetime
from decimal import Decimal

import pytest

from pocketledger.domain.entities import AlertType, Frequency, RecurringOptions
from pocketledger.domain.recurring import RecurringRuleRunner


@pytest.fixture
def account(make_account):
    return make_account("Checking", balance="1000")


def add_recurring(ledger, make_transaction, account, when, frequency, notify=False, title="Gym"):
    ledger.add_transaction(
        make_transaction(account.id, "20", title=title, date=when),
        recurring=RecurringOptions(frequency=frequency, notify=notify),
    )
    return ledger.recurring_rules[-1]


def test_generates_due_transaction(ledger, make_transaction, account):
    rule = add_recurring(ledger, make_transaction, account, datetime(2024, 1, 31, 9, 0), Frequency.MONTHLY)

    result = RecurringRuleRunner(ledger).run(datetime(2024, 3, 15, 10, 0))

    assert len(result.generated) == 1
    generated = result.generated[0]
    assert generated.date == datetime(2024, 2, 29, 9, 0)
    assert generated.generated_from_rule_id == rule.id
    assert generated.title == "Gym"
    # Month steps drift after a short month
    assert ledger.get_recurring_rule(rule.id).next_due_date == datetime(2024, 3, 29, 9, 0)
    assert ledger.get_account(account.id).balance == Decimal("960")


def test_catches_up_every_missed_period(ledger, make_transaction, account):
    rule = add_recurring(ledger, make_transaction, account, datetime(2024, 3, 1, 10, 0), Frequency.WEEKLY)

    result = RecurringRuleRunner(ledger).run(datetime(2024, 3, 29, 10, 0))

    assert [t.date.day for t in result.generated] == [8, 15, 22, 29]
    assert len({t.id for t in result.generated}) == 4
    assert ledger.get_recurring_rule(rule.id).next_due_date == datetime(2024, 4, 5, 10, 0)
    assert ledger.get_account(account.id).balance == Decimal("900")


def test_second_run_generates_nothing(ledger, make_transaction, account):
    add_recurring(ledger, make_transaction, account, datetime(2024, 3, 1, 10, 0), Frequency.WEEKLY)
    runner = RecurringRuleRunner(ledger)
    runner.run(datetime(2024, 3, 20, 10, 0))

    result = runner.run(datetime(2024, 3, 20, 10, 0))

    assert result.generated == ()


def test_uses_ledger_clock_by_default(ledger, clock, make_transaction, account):
    add_recurring(ledger, make_transaction, account, datetime(2024, 3, 14, 10, 0), Frequency.DAILY)
    assert len(RecurringRuleRunner(ledger).run().generated) == 1


def test_paused_rule_is_skipped(ledger, make_transaction, account):
    rule = add_recurring(ledger, make_transaction, account, datetime(2024, 3, 1, 10, 0), Frequency.WEEKLY)
    ledger.set_rule_active(rule.id, False)

    result = RecurringRuleRunner(ledger).run(datetime(2024, 3, 29, 10, 0))

    assert result.generated == ()
    assert ledger.get_recurring_rule(rule.id).next_due_date == datetime(2024, 3, 8, 10, 0)


def test_notify_pushes_alert_per_transaction(ledger, make_transaction, account):
    add_recurring(
        ledger, make_transaction, account, datetime(2024, 3, 1, 10, 0), Frequency.WEEKLY, notify=True, title="Rent"
    )

    result = RecurringRuleRunner(ledger).run(datetime(2024, 3, 15, 10, 0))

    assert len(result.alerts) == 2
    processed = [a for a in ledger.alerts if a.type == AlertType.RECURRING_PROCESSED]
    assert {a.id for a in processed} == {f"rec_{t.id}" for t in result.generated}
    assert all(a.data == "Rent" for a in processed)


def test_catch_up_is_capped(ledger, make_transaction, account, caplog):
    rule = add_recurring(ledger, make_transaction, account, datetime(2024, 3, 1, 10, 0), Frequency.DAILY)

    with caplog.at_level(logging.WARNING, logger="pocketledger"):
        result = RecurringRuleRunner(ledger, max_periods=3).run(datetime(2024, 3, 10, 10, 0))

    assert len(result.generated) == 3
    assert ledger.get_recurring_rule(rule.id).next_due_date == datetime(2024, 3, 5, 10, 0)
    assert "catch-up limit" in caplog.text


def test_rule_that_does_not_advance_is_skipped(ledger, make_transaction, account, monkeypatch, caplog):
    rule = add_recurring(ledger, make_transaction, account, datetime(2024, 3, 1, 10, 0), Frequency.WEEKLY)
    monkeypatch.setattr("pocketledger.domain.recurring.next_occurrence", lambda when, frequency: when)

    with caplog.at_level(logging.WARNING, logger="pocketledger"):
        result = RecurringRuleRunner(ledger).run(datetime(2024, 3, 29, 10, 0))

    assert len(result.generated) == 1
    assert ledger.get_recurring_rule(rule.id).next_due_date == datetime(2024, 3, 8, 10, 0)
    assert "did not advance" in caplog.text


def test_failed_run_changes_nothing(ledger, make_transaction, account, monkeypatch):
    rule = add_recurring(ledger, make_transaction, account, datetime(2024, 3, 1, 10, 0), Frequency.WEEKLY)
    original = ledger.record_transaction
    calls = []

    def flaky(transaction):
        calls.append(transaction)
        if len(calls) == 2:
            raise RuntimeError("boom")
        return original(transaction)

    monkeypatch.setattr(ledger, "record_transaction", flaky)

    with pytest.raises(RuntimeError):
        RecurringRuleRunner(ledger).run(datetime(2024, 3, 29, 10, 0))

    assert len(ledger.transactions) == 1
    assert ledger.get_recurring_rule(rule.id).next_due_date == datetime(2024, 3, 8, 10, 0)
    assert ledger.get_account(account.id).balance == Decimal("980")
