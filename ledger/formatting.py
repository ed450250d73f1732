"""Locale-aware rendering of amounts, percentages and month labels.

Formatter construction is memoized per currency code inside a
:class:`FormatterCache` instance. The presentation layer builds one cache per
process and passes it around; nothing here is module-global.
"""
import logging
from datetime import date
from decimal import Decimal
from functools import partial
from typing import Callable, Optional

from babel.dates import format_date
from babel.numbers import (
    UnknownCurrencyError,
    format_currency,
    format_decimal,
    format_percent,
    validate_currency,
)

from ledger.domain import round_whole, to_amount
from ledger.errors import InvalidAmountError
from ledger.periods import parse_period

logger = logging.getLogger(__name__)

MISSING = "—"
NO_CURRENCY = "none"
PERCENT = "percent"

Formatter = Callable[[Decimal], str]


def month_label(period: str, locale: str = "en_US") -> str:
    year, month = parse_period(period)
    return format_date(date(year, month, 1), "LLLL y", locale=locale)


class FormatterCache:
    def __init__(self, locale: str = "en_US", default_currency: str = "RUB"):
        self.locale = locale
        self.default_currency = default_currency
        self._int_formatters: dict[str, Formatter] = {}
        self._currency2_formatters: dict[str, Formatter] = {}
        self._percent_formatters: dict[str, Formatter] = {}

    def integer(self, n, currency: Optional[str] = None) -> str:
        """Whole units, currency style when ``currency`` is given."""
        key = currency or NO_CURRENCY
        fmt = self._int_formatters.get(key)
        if fmt is None:
            if currency:
                fmt = partial(
                    format_currency,
                    currency=currency,
                    format="¤#,##0",
                    currency_digits=False,
                    locale=self.locale,
                )
            else:
                fmt = partial(format_decimal, format="#,##0", locale=self.locale)
            self._int_formatters[key] = fmt
        return fmt(round_whole(to_amount(n)))

    def currency2(self, n, currency: Optional[str] = None) -> str:
        key = currency or self.default_currency
        fmt = self._currency2_formatters.get(key)
        if fmt is None:
            fmt = partial(
                format_currency,
                currency=key,
                format="¤#,##0.00",
                currency_digits=False,
                locale=self.locale,
            )
            self._currency2_formatters[key] = fmt
        return fmt(to_amount(n))

    def money(self, amount, currency: Optional[str] = None) -> str:
        try:
            value = to_amount(amount)
        except InvalidAmountError:
            return MISSING
        code = currency or self.default_currency
        try:
            validate_currency(code)
        except UnknownCurrencyError:
            logger.warning("Unknown currency %r, formatting as %s", code, self.default_currency)
            code = self.default_currency
        return self.currency2(value, code)

    def percent(self, value) -> str:
        """``0.25`` renders as ``25%``."""
        try:
            fraction = to_amount(value)
        except InvalidAmountError:
            return MISSING
        fmt = self._percent_formatters.get(PERCENT)
        if fmt is None:
            fmt = partial(format_percent, format="#,##0%", locale=self.locale)
            self._percent_formatters[PERCENT] = fmt
        return fmt(fraction)

    def month_label(self, period: str) -> str:
        return month_label(period, self.locale)
