"""Currency conversion against a rate table keyed to one base unit."""

import logging
from decimal import Decimal, InvalidOperation
from typing import Any, Mapping, Optional

logger = logging.getLogger(__name__)

# Approximate rates per 1 USD, used until a real table is injected
FALLBACK_RATES: Mapping[str, Decimal] = {
    "USD": Decimal("1"),
    "EUR": Decimal("0.92"),
    "GBP": Decimal("0.79"),
    "COP": Decimal("3900"),
    "MXN": Decimal("17.5"),
    "BRL": Decimal("5.0"),
    "ARS": Decimal("850"),
    "CLP": Decimal("950"),
    "PEN": Decimal("3.7"),
    "JPY": Decimal("150"),
    "CNY": Decimal("7.2"),
    "INR": Decimal("83"),
    "KRW": Decimal("1330"),
    "CAD": Decimal("1.35"),
    "AUD": Decimal("1.52"),
    "CHF": Decimal("0.88"),
}

SUPPORTED_CURRENCIES: tuple[str, ...] = tuple(FALLBACK_RATES)

_SYMBOLS = {
    "EUR": "€",
    "GBP": "£",
    "BRL": "R$",
    "JPY": "¥",
    "CNY": "¥",
    "INR": "₹",
    "KRW": "₩",
    "CHF": "Fr",
    "PEN": "S/",
}

_ZERO_DECIMAL = {"JPY", "KRW", "CLP"}


def convert(
    amount: Decimal,
    from_currency: str,
    to_currency: str,
    rates: Optional[Mapping[str, Decimal]] = None,
) -> Decimal:
    """Convert an amount between currencies.

    Rates are read as "units of currency per 1 base unit". A rate that is
    missing or zero is treated as 1 so that a partial table never raises.

    Args:
        amount: Amount in ``from_currency``
        from_currency: Source currency code
        to_currency: Target currency code
        rates: Rate table; defaults to FALLBACK_RATES

    Returns:
        Amount expressed in ``to_currency``
    """
    if from_currency == to_currency:
        return amount
    if rates is None:
        rates = FALLBACK_RATES

    rate_from = rates.get(from_currency) or Decimal(1)
    rate_to = rates.get(to_currency) or Decimal(1)
    return amount / rate_from * rate_to


def normalize_rates(raw: Mapping[str, Any]) -> dict[str, Decimal]:
    """Coerce a loosely typed rate mapping into ``{CODE: Decimal}``.

    Entries whose value is not a finite number are dropped with a warning.
    """
    rates: dict[str, Decimal] = {}
    for code, value in raw.items():
        try:
            rate = Decimal(str(value))
        except (InvalidOperation, ValueError):
            rate = None
        if rate is None or not rate.is_finite():
            logger.warning("Ignoring non-numeric rate for %s: %r", code, value)
            continue
        rates[str(code).upper()] = rate
    return rates


def currency_symbol(currency: str) -> str:
    """Return the display symbol for a currency code."""
    return _SYMBOLS.get(currency, "$")


def format_currency(amount: Decimal, currency: str) -> str:
    """Format an amount for display, e.g. ``$1,234.50 USD``."""
    places = 0 if currency in _ZERO_DECIMAL else 2
    sign = "-" if amount < 0 else ""
    return f"{sign}{currency_symbol(currency)}{abs(amount):,.{places}f} {currency}"
