"""Compound interest accrual.

Interest is always derived on read: nothing in this module writes the accrued
amount back into a stored balance or principal.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Union

from pocketledger.domain.entities import Account, AccountType, Debt, Frequency, InterestConfig

logger = logging.getLogger(__name__)

# Average calendar lengths; accrual does not use exact calendar arithmetic
PERIOD_DAYS: dict[Frequency, Decimal] = {
    Frequency.DAILY: Decimal("1"),
    Frequency.WEEKLY: Decimal("7"),
    Frequency.MONTHLY: Decimal("30.44"),
    Frequency.YEARLY: Decimal("365.25"),
}


@dataclass(frozen=True)
class InterestDetails:
    """Principal, accrued interest and their total."""

    principal: Decimal
    interest: Decimal
    total: Decimal


def _as_date(value: Union[date, datetime]) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def accrue(
    principal: Decimal,
    rate_percent: Optional[Decimal],
    frequency: Frequency,
    start_date: Optional[Union[date, datetime]],
    as_of: Optional[Union[date, datetime]] = None,
) -> Decimal:
    """Compute principal plus compound interest accrued since ``start_date``.

    Elapsed time is counted in whole days and divided by the average period
    length of ``frequency``. Fractional periods are allowed, which gives smooth
    growth between period boundaries.

    Args:
        principal: Starting amount
        rate_percent: Rate per period, in percent
        frequency: Compounding period
        start_date: Date accrual starts from
        as_of: Date to accrue up to (defaults to today)

    Returns:
        Principal plus accrued interest. Returns ``principal`` unchanged when
        there is no rate, no start date, or ``as_of`` precedes ``start_date``.
    """
    if not rate_percent or start_date is None:
        return principal

    start = _as_date(start_date)
    end = _as_date(as_of) if as_of is not None else date.today()
    days_elapsed = (end - start).days
    if days_elapsed < 0:
        return principal

    base = 1 + Decimal(rate_percent) / 100
    if base <= 0:
        logger.warning("Interest rate %s%% is out of range; skipping accrual", rate_percent)
        return principal

    periods = Decimal(days_elapsed) / PERIOD_DAYS.get(frequency, PERIOD_DAYS[Frequency.MONTHLY])
    return principal * base**periods


def interest_details(
    principal: Decimal,
    config: Optional[InterestConfig],
    as_of: Optional[Union[date, datetime]] = None,
) -> InterestDetails:
    """Split a principal into principal, interest and total for display."""
    if config is None or not config.enabled:
        return InterestDetails(principal=principal, interest=Decimal(0), total=principal)

    total = accrue(principal, config.rate_percent, config.frequency, config.start_date, as_of)
    return InterestDetails(principal=principal, interest=total - principal, total=total)


def account_details(account: Account, as_of: Optional[Union[date, datetime]] = None) -> InterestDetails:
    """Interest projection for an account. Cash never earns interest."""
    if account.type == AccountType.CASH:
        return interest_details(account.balance, None)
    return interest_details(account.balance, account.interest, as_of)


def debt_details(debt: Debt, as_of: Optional[Union[date, datetime]] = None) -> InterestDetails:
    """Interest projection for a debt."""
    return interest_details(debt.amount, debt.interest, as_of)
