from datetime import date
from decimal import Decimal

import pytest

from ledger.domain import EXPENSE, INCOME, Transaction
from ledger.errors import InvalidPeriodError
from ledger.periods import (
    ALL_TIME,
    YEAR_TO_DATE,
    by_category,
    by_date_range,
    by_kind,
    by_period,
    month_bounds,
    parse_period,
    period_key,
    resolve_range,
)


@pytest.mark.parametrize(
    "bad",
    [
        "2024-13", "2024-00", "2024-1", "24-01", "January", "", None,
        "2024-01\n", " 2024-01", "2024-01-05",
        "\u0662\u0660\u0662\u0664-\u0660\u0661",  # Arabic-Indic digits
    ],
)
def test_parse_period_rejects_malformed(bad):
    with pytest.raises(InvalidPeriodError):
        parse_period(bad)


def test_parse_period():
    assert parse_period("2024-02") == (2024, 2)


def test_month_bounds_leap_year():
    assert month_bounds("2024-02") == (date(2024, 2, 1), date(2024, 2, 29))
    assert month_bounds("2023-02") == (date(2023, 2, 1), date(2023, 2, 28))
    assert month_bounds("2024-12") == (date(2024, 12, 1), date(2024, 12, 31))


def test_period_key():
    assert period_key(date(2024, 3, 9)) == "2024-03"


def test_resolve_range_year_to_date():
    today = date(2024, 5, 17)
    assert resolve_range(None, None, YEAR_TO_DATE, today) == (date(2024, 1, 1), today)
    assert resolve_range(date(2023, 6, 1), None, YEAR_TO_DATE, today) == (date(2023, 6, 1), today)


def test_resolve_range_all_time_leaves_bounds_open():
    assert resolve_range(None, None, ALL_TIME) == (None, None)
    assert resolve_range(None, date(2024, 1, 31), ALL_TIME) == (None, date(2024, 1, 31))


def test_resolve_range_unknown_policy():
    with pytest.raises(ValueError):
        resolve_range(policy="last_week")


def test_filters():
    t = Transaction("t1", date(2024, 2, 29), EXPENSE, Decimal("5"), "food", "w1")

    assert by_period("2024-02")(t)
    assert not by_period("2024-03")(t)
    assert by_date_range(date(2024, 2, 29), date(2024, 2, 29))(t)
    assert by_date_range(None, None)(t)
    assert not by_date_range(date(2024, 3, 1), None)(t)
    assert by_kind(EXPENSE)(t)
    assert not by_kind(INCOME)(t)
    assert by_category("food")(t)
