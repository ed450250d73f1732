import calendar
import re
from datetime import date
from typing import Callable, Optional

from ledger.domain import Transaction
from ledger.errors import InvalidPeriodError

YEAR_TO_DATE = "year_to_date"
ALL_TIME = "all_time"
RANGE_POLICIES = (YEAR_TO_DATE, ALL_TIME)

_PERIOD_RE = re.compile(r"([0-9]{4})-([0-9]{2})")


def parse_period(period: str) -> tuple[int, int]:
    if not isinstance(period, str):
        raise InvalidPeriodError(period)
    match = _PERIOD_RE.fullmatch(period)
    if match is None:
        raise InvalidPeriodError(period)
    year, month = int(match.group(1)), int(match.group(2))
    if not 1 <= month <= 12 or year < 1:
        raise InvalidPeriodError(period)
    return year, month


def month_bounds(period: str) -> tuple[date, date]:
    """First and last calendar day of ``period``, leap years included."""
    year, month = parse_period(period)
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def period_key(d: date) -> str:
    return f"{d.year:04d}-{d.month:02d}"


def resolve_range(
    start: Optional[date] = None,
    end: Optional[date] = None,
    policy: str = YEAR_TO_DATE,
    today: Optional[date] = None,
) -> tuple[Optional[date], Optional[date]]:
    """Fill in missing range bounds according to ``policy``.

    ``year_to_date`` defaults to January 1 of the current year through today;
    ``all_time`` leaves missing bounds open (``None``).
    """
    if policy not in RANGE_POLICIES:
        raise ValueError(f"unknown range policy {policy!r}")
    if policy == ALL_TIME:
        return start, end
    today = today or date.today()
    return start or date(today.year, 1, 1), end or today


def by_date_range(start: Optional[date], end: Optional[date]) -> Callable[[Transaction], bool]:
    def _filter(t: Transaction) -> bool:
        if start is not None and t.date < start:
            return False
        if end is not None and t.date > end:
            return False
        return True

    return _filter


def by_period(period: str) -> Callable[[Transaction], bool]:
    first, last = month_bounds(period)
    return by_date_range(first, last)


def by_kind(kind: str) -> Callable[[Transaction], bool]:
    def _filter(t: Transaction) -> bool:
        return t.kind == kind

    return _filter


def by_category(category_id: str) -> Callable[[Transaction], bool]:
    def _filter(t: Transaction) -> bool:
        return t.category_id == category_id

    return _filter
