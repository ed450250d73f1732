from datetime import date
from decimal import Decimal
from pathlib import Path

import pytest

from ledger.domain import EXPENSE, INCOME, BudgetEntry, Category, Ledger, Transaction, Wallet
from ledger.errors import InvalidAmountError, InvalidPeriodError
from ledger.transforms import (
    add_transaction,
    delete_budget,
    delete_category,
    delete_transaction,
    delete_wallet,
    edit_ledger,
    ledger_from_dict,
    ledger_to_dict,
    load_seed,
    update_transaction,
    upsert_budget,
    upsert_category,
    upsert_wallet,
)

SEED = Path(__file__).resolve().parent.parent / "data" / "seed.json"


def make_tx(id, day, amount, kind=EXPENSE, cat="c1"):
    return Transaction(id, date.fromisoformat(day), kind, Decimal(amount), cat, "w1", "")


def test_add_transaction():
    t1 = make_tx("t1", "2025-09-01", "100", INCOME)
    t2 = make_tx("t2", "2025-09-02", "50")

    transactions = (t1,)
    new_transactions = add_transaction(transactions, t2)

    assert len(new_transactions) == 2
    assert new_transactions[0] is t2
    assert transactions == (t1,)


def test_update_transaction_replaces_by_id():
    t1 = make_tx("t1", "2025-09-01", "100")
    t2 = make_tx("t2", "2025-09-02", "50")
    edited = make_tx("t1", "2025-09-01", "150")

    result = update_transaction((t1, t2), edited)

    assert result == (edited, t2)


def test_delete_transaction():
    t1 = make_tx("t1", "2025-09-01", "100")
    t2 = make_tx("t2", "2025-09-02", "50")
    assert delete_transaction((t1, t2), "t1") == (t2,)
    assert delete_transaction((t1, t2), "missing") == (t1, t2)


def test_upsert_category_and_wallet():
    food = Category("c1", "Food", EXPENSE)
    renamed = Category("c1", "Meals", EXPENSE)
    cats = upsert_category((food,), renamed)
    assert cats == (renamed,)

    cash = Wallet("w1", "Cash", "RUB", Decimal("10"))
    card = Wallet("w2", "Card", "USD")
    wallets = upsert_wallet((cash,), card)
    assert wallets == (card, cash)
    assert delete_wallet(wallets, "w1") == (card,)
    assert delete_category(cats, "c1") == ()


def test_upsert_budget_same_key_keeps_one_entry():
    budgets = upsert_budget((), "Groceries", "2024-01", 500)
    budgets = upsert_budget(budgets, "Groceries", "2024-01", 600)

    assert len(budgets) == 1
    assert budgets[0].amount == Decimal("600")


def test_upsert_budget_keeps_id_and_position():
    budgets = (
        BudgetEntry("b1", "food", "2024-01", Decimal("100")),
        BudgetEntry("b2", "rent", "2024-01", Decimal("900")),
    )
    result = upsert_budget(budgets, "food", "2024-01", "120.50")

    assert [b.id for b in result] == ["b1", "b2"]
    assert result[0].amount == Decimal("120.50")
    assert budgets[0].amount == Decimal("100")


def test_upsert_budget_other_period_appends():
    budgets = upsert_budget((), "food", "2024-01", 100)
    budgets = upsert_budget(budgets, "food", "2024-02", 100)
    assert [b.period for b in budgets] == ["2024-01", "2024-02"]


def test_upsert_budget_clamps_bad_amounts():
    budgets = upsert_budget((), "food", "2024-01", -50)
    budgets = upsert_budget(budgets, "rent", "2024-01", "abc")
    assert [b.amount for b in budgets] == [Decimal("0"), Decimal("0")]


def test_upsert_budget_rejects_bad_period():
    with pytest.raises(InvalidPeriodError):
        upsert_budget((), "food", "January", 10)


def test_delete_budget_by_key():
    budgets = upsert_budget((), "food", "2024-01", 100)
    budgets = upsert_budget(budgets, "food", "2024-02", 100)
    result = delete_budget(budgets, "food", "2024-01")
    assert [b.period for b in result] == ["2024-02"]


def test_edit_ledger_bumps_version():
    ledger = Ledger()
    t1 = make_tx("t1", "2025-09-01", "100")
    edited = edit_ledger(ledger, transactions=add_transaction(ledger.transactions, t1))

    assert edited.version == 1
    assert edited.transactions == (t1,)
    assert ledger.transactions == ()


def test_load_seed():
    ledger = load_seed(SEED)

    assert len(ledger.categories) >= 10
    assert len(ledger.wallets) >= 3
    assert len(ledger.transactions) >= 10
    assert len(ledger.budgets) >= 5
    assert all(isinstance(t.amount, Decimal) for t in ledger.transactions)
    assert all(isinstance(t.date, date) for t in ledger.transactions)


def test_ledger_from_dict_normalizes_records():
    data = {
        "categories": [{"name": "Food", "kind": "Expense"}],
        "wallets": [{"id": "w1", "name": "Cash"}],
        "transactions": [],
        "budgets": [
            {"category_id": "x", "period": "2024-01", "amount": 10},
            {"category_id": "x", "period": "2024-01", "amount": -3},
        ],
    }
    ledger = ledger_from_dict(data)

    food = ledger.categories[0]
    assert food.kind == EXPENSE
    assert food.parent_id is None
    assert food.id
    assert ledger.wallets[0].initial_balance == Decimal("0")
    assert len(ledger.budgets) == 1
    assert ledger.budgets[0].amount == Decimal("0")


def test_ledger_from_dict_rejects_negative_transaction():
    data = {
        "transactions": [
            {"date": "2024-01-01", "kind": "expense", "amount": "-5", "category_id": "c", "wallet_id": "w"},
        ],
    }
    with pytest.raises(InvalidAmountError):
        ledger_from_dict(data)


def test_ledger_to_dict_is_plain_data():
    ledger = load_seed(SEED)
    data = ledger_to_dict(ledger)

    first = data["transactions"][0]
    assert isinstance(first["date"], str)
    assert isinstance(first["amount"], str)
    assert ledger_from_dict(data) == ledger


def test_upsert_budget_rejects_padded_period():
    budgets = upsert_budget((), "food", "2024-01", 500)
    with pytest.raises(InvalidPeriodError):
        upsert_budget(budgets, "food", "2024-01\n", 600)
    assert [(b.period, b.amount) for b in budgets] == [("2024-01", Decimal("500"))]
