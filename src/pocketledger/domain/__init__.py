"""Domain layer for pocketledger application."""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pocketledger.domain.ledger import Ledger
    from pocketledger.domain.recurring import RecurringRuleRunner

__all__ = ["Ledger", "RecurringRuleRunner"]


def __getattr__(name: str):
    # Imported lazily: the ledger depends on the database mappers, which in
    # turn import the entity modules of this package
    if name == "Ledger":
        from pocketledger.domain.ledger import Ledger

        return Ledger
    if name == "RecurringRuleRunner":
        from pocketledger.domain.recurring import RecurringRuleRunner

        return RecurringRuleRunner
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
