"""Currency, date and number formatting driven by an explicit formatting context.

A ``FormattingContext`` is resolved once per request from the user's stored
preferences (falling back to application settings) and handed to every
formatter and to the document renderer.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Optional

import structlog
from babel import Locale, UnknownLocaleError
from babel.dates import format_date as babel_format_date
from babel.numbers import UnknownCurrencyError, format_currency as babel_format_currency, validate_currency

from backend.app.core.settings import Settings, get_settings

LOGGER = structlog.get_logger(__name__)

CURRENCIES = [
    {"code": "USD", "name": "US Dollar", "symbol": "$"},
    {"code": "EUR", "name": "Euro", "symbol": "€"},
    {"code": "GBP", "name": "British Pound", "symbol": "£"},
    {"code": "INR", "name": "Indian Rupee", "symbol": "₹"},
    {"code": "AUD", "name": "Australian Dollar", "symbol": "A$"},
    {"code": "CAD", "name": "Canadian Dollar", "symbol": "C$"},
    {"code": "SGD", "name": "Singapore Dollar", "symbol": "S$"},
    {"code": "JPY", "name": "Japanese Yen", "symbol": "¥"},
    {"code": "CNY", "name": "Chinese Yuan", "symbol": "¥"},
    {"code": "NZD", "name": "New Zealand Dollar", "symbol": "NZ$"},
    {"code": "ZAR", "name": "South African Rand", "symbol": "R"},
    {"code": "CHF", "name": "Swiss Franc", "symbol": "Fr"},
    {"code": "BRL", "name": "Brazilian Real", "symbol": "R$"},
    {"code": "MXN", "name": "Mexican Peso", "symbol": "$"},
    {"code": "AED", "name": "United Arab Emirates Dirham", "symbol": "د.إ"},
    {"code": "SAR", "name": "Saudi Riyal", "symbol": "﷼"},
    {"code": "HKD", "name": "Hong Kong Dollar", "symbol": "HK$"},
    {"code": "SEK", "name": "Swedish Krona", "symbol": "kr"},
    {"code": "NOK", "name": "Norwegian Krone", "symbol": "kr"},
    {"code": "RUB", "name": "Russian Ruble", "symbol": "₽"},
]

DATE_FORMATS = {
    "MM/DD/YYYY": "%m/%d/%Y",
    "DD/MM/YYYY": "%d/%m/%Y",
    "YYYY-MM-DD": "%Y-%m-%d",
}


@dataclass(frozen=True)
class FormattingContext:
    default_currency: str = "USD"
    date_format: str = "MM/DD/YYYY"
    locale: str = "en_US"


def _supported_locale(locale: Optional[str], fallback: str) -> str:
    if not locale:
        return fallback
    try:
        Locale.parse(locale.replace("-", "_"))
    except (UnknownLocaleError, ValueError):
        return fallback
    return locale.replace("-", "_")


def build_formatting_context(preferences=None, settings: Optional[Settings] = None) -> FormattingContext:
    """Resolve the formatting context for a user, falling back to application settings."""
    settings = settings or get_settings()
    if preferences is None:
        return FormattingContext(
            default_currency=settings.default_currency,
            date_format=settings.default_date_format,
            locale=settings.default_locale,
        )
    date_format = preferences.date_format if preferences.date_format in DATE_FORMATS else settings.default_date_format
    return FormattingContext(
        default_currency=(preferences.default_currency or settings.default_currency).upper(),
        date_format=date_format,
        locale=_supported_locale(preferences.locale, settings.default_locale),
    )


def _as_decimal(amount) -> Decimal:
    try:
        return Decimal(str(amount if amount is not None else 0))
    except InvalidOperation:
        return Decimal("0")


def format_currency(amount, currency_code: Optional[str], context: FormattingContext) -> str:
    """Format an amount in the given currency, or in the context default when none is given.

    Unrecognised currency codes never raise; they render as ``"<amount> <code>"``.
    """
    value = _as_decimal(amount)
    code = (currency_code or context.default_currency or "USD").strip().upper()
    try:
        validate_currency(code)
        return babel_format_currency(value, code, locale=context.locale)
    except (UnknownCurrencyError, ValueError):
        LOGGER.warning("currency_format_fallback", currency=code)
        return f"{value.quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)} {code}"


def format_date(value: date, context: FormattingContext) -> str:
    pattern = DATE_FORMATS.get(context.date_format)
    if pattern is None:
        return babel_format_date(value, format="long", locale=context.locale)
    return value.strftime(pattern)


def format_quantity(quantity) -> str:
    """Render a quantity exactly as entered, without padding or truncating decimals."""
    value = _as_decimal(quantity).normalize()
    return format(value, "f")


def format_percentage(rate) -> str:
    return f"{format_quantity(rate)}%"


def get_currency_symbol(currency_code: str) -> str:
    for currency in CURRENCIES:
        if currency["code"] == currency_code:
            return currency["symbol"]
    return currency_code


def convert_currency(amount, from_currency: str, to_currency: str) -> Decimal:
    """Exchange rates are not supported; amounts pass through unchanged."""
    if from_currency != to_currency:
        LOGGER.warning("currency_conversion_passthrough", from_currency=from_currency, to_currency=to_currency)
    return _as_decimal(amount)
