"""Recurring rule runner.

Materializes the transactions that recurring rules owe up to a point in time.
A rule that was not run for several periods catches up with one transaction
per missed period.
"""

import logging
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Optional

from pocketledger.domain.entities import Alert, AlertType, Transaction, new_id
from pocketledger.domain.ledger import Ledger
from pocketledger.domain.recurrence import next_occurrence

logger = logging.getLogger(__name__)

# Ten years of daily catch-up
MAX_CATCH_UP_PERIODS = 3660


@dataclass(frozen=True)
class RunResult:
    """Transactions generated and alerts pushed by one run."""

    generated: tuple[Transaction, ...] = ()
    alerts: tuple[Alert, ...] = ()


def recurring_alert_id(transaction_id: str) -> str:
    return f"rec_{transaction_id}"


class RecurringRuleRunner:
    """Generates due transactions for every active recurring rule."""

    def __init__(self, ledger: Ledger, max_periods: int = MAX_CATCH_UP_PERIODS):
        """Initialize the runner.

        Args:
            ledger: Ledger to record generated transactions in
            max_periods: Upper bound on transactions generated per rule and run
        """
        self.ledger = ledger
        self.max_periods = max_periods

    def run(self, now: Optional[datetime] = None) -> RunResult:
        """Process every active rule that is due at ``now``.

        The whole run is one ledger batch: either every rule is processed and
        saved, or nothing changes.

        Args:
            now: Point in time to catch up to (defaults to the ledger clock)

        Returns:
            RunResult with the generated transactions and pushed alerts
        """
        now = now or self.ledger.clock()
        generated: list[Transaction] = []
        alerts: list[Alert] = []

        with self.ledger.batch():
            for rule in self.ledger.recurring_rules:
                if not rule.active or rule.next_due_date > now:
                    continue

                due = rule.next_due_date
                periods = 0
                while due <= now:
                    if periods >= self.max_periods:
                        logger.warning(
                            "Recurring rule %s hit the catch-up limit of %d periods", rule.id, self.max_periods
                        )
                        break

                    transaction = self.ledger.record_transaction(
                        rule.template.materialize(new_id(), due, rule.id)
                    )
                    generated.append(transaction)
                    periods += 1

                    if rule.notify:
                        alerts.append(
                            self.ledger.push_alert(
                                Alert(
                                    id=recurring_alert_id(transaction.id),
                                    type=AlertType.RECURRING_PROCESSED,
                                    message_key="alert_recurring_processed",
                                    data=transaction.title,
                                )
                            )
                        )

                    following = next_occurrence(due, rule.frequency)
                    if following <= due:
                        logger.warning("Recurring rule %s did not advance past %s; skipping", rule.id, due)
                        break
                    due = following

                self.ledger.replace_recurring_rule(replace(rule, next_due_date=due))
                logger.debug("Recurring rule %s generated %d transactions", rule.id, periods)

        return RunResult(generated=tuple(generated), alerts=tuple(alerts))
