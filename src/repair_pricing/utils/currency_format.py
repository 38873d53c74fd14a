"""
Locale-correct money strings.

Locale and fraction digits are picked from fixed tables keyed by the
normalized ISO code. Rendering goes through Babel's CLDR patterns; if that
fails for any reason a plain ``<symbol><amount>`` string is produced instead.
"""

from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation
from typing import Iterable, Optional

from babel import Locale
from babel.numbers import format_currency as babel_format_currency
from babel.numbers import parse_pattern

from repair_pricing.core.errors import FormattingFailure
from repair_pricing.core.models.currency import Currency
from repair_pricing.utils.money import parse_decimal, quantize_money

logger = logging.getLogger(__name__)

MISSING = "-"

DEFAULT_LOCALE = "en-US"
LOCALES = {
    "GBP": "en-GB",
    "JPY": "ja-JP",
    "EUR": "de-DE",
}

DEFAULT_MINOR_UNITS = 2
MINOR_UNITS = {
    "JPY": 0,
}

DEFAULT_SYMBOL = "$"
SYMBOLS = {
    "GBP": "£",
    "EUR": "€",
    "JPY": "¥",
}


def locale_for(code: str) -> str:
    return LOCALES.get((code or "").upper(), DEFAULT_LOCALE)


def minor_unit_digits(code: str) -> int:
    return MINOR_UNITS.get((code or "").upper(), DEFAULT_MINOR_UNITS)


def _format_localized(amount: Decimal, code: str, locale_tag: str, digits: int) -> str:
    try:
        locale = Locale.parse(locale_tag, sep="-")
        pattern = parse_pattern(locale.currency_formats["standard"].pattern)
        pattern.frac_prec = (digits, digits)
        return babel_format_currency(
            quantize_money(amount, digits),
            code,
            format=pattern,
            locale=locale,
            currency_digits=False,
        )
    except Exception as exc:
        raise FormattingFailure(f"cannot format {amount} {code} for {locale_tag}: {exc}") from exc


def _format_plain(amount: Decimal, code: str, digits: int) -> str:
    symbol = SYMBOLS.get((code or "").upper(), DEFAULT_SYMBOL)
    try:
        text = str(quantize_money(amount, digits))
    except InvalidOperation:
        text = f"{float(amount):.{digits}f}"
    return f"{symbol}{text}"


def format_money(amount, code: str) -> str:
    """
    Render ``amount`` in currency ``code`` (an already normalized ISO code).

    None, NaN, infinities and strings that are not numbers render as ``"-"``.
    """
    number = parse_decimal(amount)
    if number is None:
        return MISSING
    digits = minor_unit_digits(code)
    try:
        return _format_localized(number, code, locale_for(code), digits)
    except FormattingFailure as exc:
        logger.debug("Falling back to symbol formatting: %s", exc)
        return _format_plain(number, code, digits)


class CurrencyFormatter:
    def format(self, amount, code: str) -> str:
        return format_money(amount, code)


def currency_symbol(
    code: Optional[str],
    currencies: Iterable[Currency] = (),
    default_currency: Optional[Currency] = None,
) -> str:
    """Symbol shown next to money inputs: matching currency, else the default currency's, else ``$``."""
    if code:
        for currency in currencies:
            if currency.code == code and currency.symbol:
                return currency.symbol
    if default_currency is not None and default_currency.symbol:
        return default_currency.symbol
    return DEFAULT_SYMBOL
