"""
Currency Converter - maps base-currency (INR) amounts to a display currency.

Rates come from a static table supplied by configuration; there are no
live foreign-exchange lookups.
"""
import logging
from typing import Optional

from ..config.settings import DEFAULT_EXCHANGE_RATES

logger = logging.getLogger(__name__)

BASE_CURRENCY = 'INR'


def get_rate(currency: str, rates: Optional[dict[str, float]] = None) -> float:
    """Factor for converting one base unit into `currency`. Unknown codes give 1."""
    table = rates if rates is not None else DEFAULT_EXCHANGE_RATES
    code = str(currency or '').strip().upper()
    rate = table.get(code)
    if rate is None:
        logger.warning("No exchange rate for %r, using factor 1", currency)
        return 1.0
    return rate


def convert(amount: float, target_currency: str, rates: Optional[dict[str, float]] = None) -> float:
    """Convert an amount in the base currency to `target_currency`."""
    return amount * get_rate(target_currency, rates)


def resolve_currency(currency: Optional[str], rates: Optional[dict[str, float]] = None) -> str:
    """Normalise a currency code; unknown or empty codes display as the base currency."""
    table = rates if rates is not None else DEFAULT_EXCHANGE_RATES
    code = str(currency or '').strip().upper()
    return code if code in table else BASE_CURRENCY
