import dataclasses
import json
import logging
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Any, Iterable, Optional, TypeVar, Union
from uuid import uuid4

from ledger.domain import (
    EXPENSE,
    KINDS,
    ZERO,
    BudgetEntry,
    Category,
    Ledger,
    Transaction,
    Wallet,
    clamp_budget,
    to_amount,
)
from ledger.errors import InvalidAmountError
from ledger.periods import parse_period

logger = logging.getLogger(__name__)

R = TypeVar("R", Category, Wallet, Transaction, BudgetEntry)


def new_id() -> str:
    return uuid4().hex


def load_seed(path: Union[str, Path]) -> Ledger:
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    return ledger_from_dict(data)


def ledger_from_dict(data: dict) -> Ledger:
    """Build a snapshot from plain JSON-like data.

    Missing parent ids become roots, budgets are clamped to non-negative
    amounts and records without an id get a fresh one. Transactions with
    negative or non-numeric amounts raise InvalidAmountError.
    """
    categories = tuple(
        Category(
            id=c.get("id") or new_id(),
            name=c["name"],
            kind=_kind(c.get("kind", EXPENSE)),
            parent_id=c.get("parent_id") or None,
        )
        for c in data.get("categories", [])
    )
    wallets = tuple(
        Wallet(
            id=w.get("id") or new_id(),
            name=w["name"],
            currency=w.get("currency") or None,
            initial_balance=to_amount(w.get("initial_balance", 0)),
        )
        for w in data.get("wallets", [])
    )
    transactions = tuple(
        Transaction(
            id=t.get("id") or new_id(),
            date=date.fromisoformat(t["date"]),
            kind=_kind(t["kind"]),
            amount=_magnitude(t["amount"]),
            category_id=t["category_id"],
            wallet_id=t["wallet_id"],
            comment=(t.get("comment") or "").strip(),
        )
        for t in data.get("transactions", [])
    )
    budgets: tuple[BudgetEntry, ...] = ()
    for b in data.get("budgets", []):
        budgets = upsert_budget(budgets, b["category_id"], b["period"], b.get("amount", 0), b.get("id"))
    return Ledger(
        categories=categories,
        wallets=wallets,
        transactions=transactions,
        budgets=budgets,
        version=int(data.get("version", 0)),
    )


def ledger_to_dict(ledger: Ledger) -> dict:
    def plain(record) -> dict[str, Any]:
        out = {}
        for key, value in dataclasses.asdict(record).items():
            if isinstance(value, date):
                value = value.isoformat()
            elif isinstance(value, Decimal):
                value = str(value)
            out[key] = value
        return out

    return {
        "version": ledger.version,
        "categories": [plain(c) for c in ledger.categories],
        "wallets": [plain(w) for w in ledger.wallets],
        "transactions": [plain(t) for t in ledger.transactions],
        "budgets": [plain(b) for b in ledger.budgets],
    }


def edit_ledger(ledger: Ledger, **parts) -> Ledger:
    """Replace whole record tuples and bump the snapshot version."""
    return dataclasses.replace(ledger, version=ledger.version + 1, **parts)


def add_transaction(
    trans: tuple[Transaction, ...], t: Transaction
) -> tuple[Transaction, ...]:
    # newest first, as the ledger is displayed
    return (t,) + trans


def update_transaction(
    trans: tuple[Transaction, ...], t: Transaction
) -> tuple[Transaction, ...]:
    return tuple(t if x.id == t.id else x for x in trans)


def delete_transaction(
    trans: tuple[Transaction, ...], tid: str
) -> tuple[Transaction, ...]:
    return _without(trans, tid)


def upsert_category(
    cats: tuple[Category, ...], c: Category
) -> tuple[Category, ...]:
    return _upsert(cats, c)


def delete_category(
    cats: tuple[Category, ...], cid: str
) -> tuple[Category, ...]:
    # children keep their parent_id and resolve as orphan roots afterwards
    return _without(cats, cid)


def upsert_wallet(
    wallets: tuple[Wallet, ...], w: Wallet
) -> tuple[Wallet, ...]:
    return _upsert(wallets, w)


def delete_wallet(
    wallets: tuple[Wallet, ...], wid: str
) -> tuple[Wallet, ...]:
    return _without(wallets, wid)


def upsert_budget(
    budgets: tuple[BudgetEntry, ...],
    category_id: str,
    period: str,
    amount,
    bid: Optional[str] = None,
) -> tuple[BudgetEntry, ...]:
    """Insert or replace the single entry for ``(category_id, period)``.

    An existing entry keeps its id and position; the later amount wins.
    """
    parse_period(period)
    clamped = clamp_budget(amount)
    if clamped == ZERO and amount not in (0, "0", None):
        logger.warning("Budget %r for %s clamped to 0 (got %r)", category_id, period, amount)

    for b in budgets:
        if b.category_id == category_id and b.period == period:
            return tuple(
                dataclasses.replace(x, amount=clamped) if x is b else x
                for x in budgets
            )
    return budgets + (BudgetEntry(
        id=bid or new_id(),
        category_id=category_id,
        period=period,
        amount=clamped,
    ),)


def delete_budget(
    budgets: tuple[BudgetEntry, ...], category_id: str, period: str
) -> tuple[BudgetEntry, ...]:
    return tuple(
        b for b in budgets
        if not (b.category_id == category_id and b.period == period)
    )


def _upsert(records: tuple[R, ...], rec: R) -> tuple[R, ...]:
    if any(x.id == rec.id for x in records):
        return tuple(rec if x.id == rec.id else x for x in records)
    return (rec,) + records


def _without(records: Iterable[R], rid: str) -> tuple[R, ...]:
    return tuple(x for x in records if x.id != rid)


def _kind(value: str) -> str:
    kind = str(value).strip().lower()
    if kind not in KINDS:
        raise ValueError(f"kind must be one of {KINDS}, got {value!r}")
    return kind


def _magnitude(value) -> Decimal:
    amount = to_amount(value)
    if amount < 0:
        raise InvalidAmountError(value, "transaction amounts must be non-negative")
    return amount
