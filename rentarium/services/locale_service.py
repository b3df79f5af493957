"""Locale service for currency, dates, and number formatting.

Single source of truth for locale-related operations, built on babel.

Configuration:
    LOCALE env var (default: en_PH) - determines currency, number/date formatting

Example:
    >>> from rentarium.services.locale_service import format_amount
    >>> format_amount(Decimal("15000"))
    '₱15,000.00'
"""

import logging
from datetime import date
from decimal import Decimal

from babel import Locale, UnknownLocaleError
from babel.dates import format_date as babel_format_date
from babel.numbers import (
    format_currency as babel_format_currency,
)
from babel.numbers import (
    format_decimal as babel_format_decimal,
)
from babel.numbers import (
    get_currency_symbol as babel_get_currency_symbol,
)
from babel.numbers import (
    get_territory_currencies,
)
from babel.numbers import (
    parse_decimal as babel_parse_decimal,
)

from rentarium.services.config import get_settings

logger = logging.getLogger(__name__)

# Default locale if LOCALE is invalid or missing
DEFAULT_LOCALE = "en_PH"
DEFAULT_CURRENCY = "PHP"


def _get_locale() -> str:
    """Get configured locale with validation and fallback."""
    locale_str = get_settings().locale
    try:
        Locale.parse(locale_str)
        return locale_str
    except (UnknownLocaleError, ValueError) as e:
        logger.warning("Invalid LOCALE '%s': %s. Falling back to '%s'", locale_str, e, DEFAULT_LOCALE)
        return DEFAULT_LOCALE


def _get_currency_from_locale(locale_str: str) -> str:
    """Derive currency code from locale territory.

    Args:
        locale_str: Locale string (e.g., 'en_PH')

    Returns:
        Currency code (e.g., 'PHP')
    """
    try:
        locale = Locale.parse(locale_str)
        territory = locale.territory
        if territory:
            currencies = get_territory_currencies(territory)
            if currencies:
                return currencies[0]
    except (UnknownLocaleError, ValueError) as e:
        logger.warning("Could not derive currency from locale '%s': %s", locale_str, e)

    return DEFAULT_CURRENCY


# Module-level constants (computed once at import)
LOCALE = _get_locale()
CURRENCY = _get_currency_from_locale(LOCALE)


def get_currency_code() -> str:
    """Get currency code derived from locale."""
    return CURRENCY


def get_currency_symbol() -> str:
    """Get currency symbol for current locale (e.g., '₱')."""
    return babel_get_currency_symbol(CURRENCY, locale=LOCALE)


def format_amount(amount: float | Decimal, include_symbol: bool = True) -> str:
    """Format monetary amount according to locale.

    Args:
        amount: Numeric amount to format
        include_symbol: Whether to include currency symbol (default True)

    Returns:
        Formatted currency string (e.g., '₱1,234.56')
    """
    if include_symbol:
        return babel_format_currency(Decimal(str(amount)), CURRENCY, locale=LOCALE)
    return babel_format_decimal(Decimal(str(amount)), format="#,##0.00", locale=LOCALE)


def format_day(value: date, format: str = "medium") -> str:
    """Format a calendar date according to locale (e.g., 'Mar 1, 2024')."""
    return babel_format_date(value, format=format, locale=LOCALE)


def parse_decimal(value: str) -> Decimal:
    """Parse locale-formatted decimal string to Decimal.

    Args:
        value: Locale-formatted number string (e.g., '15,000.50' for en_PH)

    Raises:
        NumberFormatError: If value cannot be parsed
    """
    return babel_parse_decimal(value.strip(), locale=LOCALE)


def get_locale_info() -> dict:
    """Get current locale configuration for debugging/display."""
    return {
        "locale": LOCALE,
        "currency_code": CURRENCY,
        "currency_symbol": get_currency_symbol(),
    }


__all__ = [
    "LOCALE",
    "CURRENCY",
    "get_currency_code",
    "get_currency_symbol",
    "format_amount",
    "format_day",
    "parse_decimal",
    "get_locale_info",
]
