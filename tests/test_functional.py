from datetime import date
from decimal import Decimal

from ledger.domain import EXPENSE, INCOME, BudgetEntry, Category, Transaction, Wallet
from ledger.functional import (
    Left,
    Nothing,
    Right,
    Some,
    safe_category,
    safe_wallet,
    validate_budget,
    validate_category,
    validate_transaction,
)

CATS = (
    Category("food", "Food", EXPENSE),
    Category("groceries", "Groceries", EXPENSE, "food"),
    Category("salary", "Salary", INCOME),
)
WALLETS = (Wallet("w1", "Cash", "RUB"),)


def make_tx(kind=EXPENSE, amount="10", cat="groceries", wallet="w1"):
    return Transaction("t1", date(2024, 1, 5), kind, Decimal(amount), cat, wallet)


def test_maybe():
    assert Some(2).map(lambda x: x * 2) == Some(4)
    assert Nothing().map(lambda x: x * 2) == Nothing()
    assert Some(2).bind(lambda x: Nothing()).is_none()
    assert Nothing().get_or_else(5) == 5


def test_either():
    assert Right(2).map(lambda x: x + 1) == Right(3)
    assert Left("bad").map(lambda x: x + 1) == Left("bad")
    assert Left("bad").get_error() == "bad"
    assert Right(1).is_right()
    assert Left("bad").is_left()


def test_safe_lookups():
    assert safe_category(CATS, "food").get_or_else(None).name == "Food"
    assert safe_category(CATS, "ghost").is_none()
    assert safe_wallet(WALLETS, "w1").is_some()
    assert safe_wallet(WALLETS, "w2").is_none()


def test_validate_transaction_ok():
    t = make_tx()
    assert validate_transaction(t, WALLETS, CATS) == Right(t)


def test_validate_transaction_errors():
    cases = [
        (make_tx(kind="transfer"), "invalid_kind"),
        (make_tx(amount="-1"), "negative_amount"),
        (make_tx(wallet="w9"), "wallet_not_found"),
        (make_tx(cat="ghost"), "category_not_found"),
        (make_tx(kind=INCOME, cat="groceries"), "category_kind_mismatch"),
    ]
    for t, code in cases:
        result = validate_transaction(t, WALLETS, CATS)
        assert result.is_left()
        assert result.get_error()["error"] == code


def test_validate_category():
    assert validate_category(Category("rent", "Rent", EXPENSE), CATS).is_right()
    assert validate_category(Category("fruit", "Fruit", EXPENSE, "groceries"), CATS).is_right()

    missing = validate_category(Category("x", "X", EXPENSE, "nope"), CATS)
    assert missing.get_error()["error"] == "parent_not_found"

    mismatch = validate_category(Category("bonus", "Bonus", INCOME, "food"), CATS)
    assert mismatch.get_error()["error"] == "parent_kind_mismatch"

    bad_kind = validate_category(Category("x", "X", "savings"), CATS)
    assert bad_kind.get_error()["error"] == "invalid_kind"


def test_validate_category_rejects_cycles():
    moved = Category("food", "Food", EXPENSE, "groceries")
    result = validate_category(moved, CATS)
    assert result.get_error()["error"] == "cycle"

    self_parent = validate_category(Category("food", "Food", EXPENSE, "food"), CATS)
    assert self_parent.is_left()


def test_validate_budget():
    ok = BudgetEntry("b1", "food", "2024-01", Decimal("10"))
    assert validate_budget(ok, CATS) == Right(ok)

    bad_period = BudgetEntry("b1", "food", "2024-1", Decimal("10"))
    assert validate_budget(bad_period, CATS).get_error()["error"] == "invalid_period"

    unknown = BudgetEntry("b1", "ghost", "2024-01", Decimal("10"))
    assert validate_budget(unknown, CATS).get_error()["error"] == "category_not_found"
