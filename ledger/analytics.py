"""Time-bucketed and structural views over a transaction log.

Canonical aggregates keep exact ``Decimal`` sums; the ``*_rounded`` variant
exists for chart display and rounds only at the very end.
"""
import dataclasses
import logging
from datetime import date
from decimal import Decimal
from typing import Callable, Iterable, Optional

from ledger.domain import (
    EXPENSE,
    INCOME,
    ZERO,
    Category,
    ExpenseShare,
    LedgerTotals,
    MonthlyBucket,
    MonthSummary,
    Transaction,
    Wallet,
    round_whole,
)
from ledger.formatting import month_label
from ledger.lazy import iter_transactions
from ledger.periods import YEAR_TO_DATE, by_date_range, by_period, period_key, resolve_range
from ledger.tree import CategoryTree

logger = logging.getLogger(__name__)

HUNDRED = Decimal(100)


def _in_range(
    trans: Iterable[Transaction],
    start: Optional[date],
    end: Optional[date],
    policy: str,
    today: Optional[date],
) -> Iterable[Transaction]:
    start, end = resolve_range(start, end, policy, today)
    return iter_transactions(trans, by_date_range(start, end))


def build_monthly_series(
    trans: Iterable[Transaction],
    start: Optional[date] = None,
    end: Optional[date] = None,
    *,
    policy: str = YEAR_TO_DATE,
    today: Optional[date] = None,
    labeler: Callable[[str], str] = month_label,
) -> list[MonthlyBucket]:
    sums: dict[str, list[Decimal]] = {}
    for t in _in_range(trans, start, end, policy, today):
        bucket = sums.setdefault(period_key(t.date), [ZERO, ZERO])
        bucket[0 if t.kind == INCOME else 1] += t.amount

    return [
        MonthlyBucket(period_key=key, label=labeler(key), income=income, expense=expense)
        for key, (income, expense) in sorted(sums.items())
    ]


def build_monthly_series_rounded(
    trans: Iterable[Transaction],
    start: Optional[date] = None,
    end: Optional[date] = None,
    **kwargs,
) -> list[MonthlyBucket]:
    return [
        dataclasses.replace(b, income=round_whole(b.income), expense=round_whole(b.expense))
        for b in build_monthly_series(trans, start, end, **kwargs)
    ]


def build_expense_structure(
    trans: Iterable[Transaction],
    cats: Iterable[Category],
    start: Optional[date] = None,
    end: Optional[date] = None,
    *,
    policy: str = YEAR_TO_DATE,
    today: Optional[date] = None,
) -> list[ExpenseShare]:
    """Expense totals per category name with their integer share of the total.

    Every unknown category id lands in the same "Unknown" row. Shares are
    rounded independently, so they need not add up to exactly 100.
    """
    tree = cats if isinstance(cats, CategoryTree) else CategoryTree(cats)
    by_name: dict[str, Decimal] = {}
    for t in _in_range(trans, start, end, policy, today):
        if t.kind != EXPENSE:
            continue
        name = tree.name_of(t.category_id)
        by_name[name] = by_name.get(name, ZERO) + t.amount

    total = sum(by_name.values(), ZERO)
    if not total:
        return []
    return [
        ExpenseShare(
            category_name=name,
            amount=amount,
            share_percent=int(round_whole(amount / total * HUNDRED)),
        )
        for name, amount in by_name.items()
    ]


def wallet_balances(
    wallets: Iterable[Wallet], trans: Iterable[Transaction]
) -> dict[str, Decimal]:
    balances = {w.id: w.initial_balance for w in wallets}
    for t in trans:
        if t.wallet_id not in balances:
            logger.debug("Transaction %r references unknown wallet %r", t.id, t.wallet_id)
            continue
        delta = t.amount if t.kind == INCOME else -t.amount
        balances[t.wallet_id] += delta
    return balances


def ledger_totals(
    wallets: Iterable[Wallet], trans: Iterable[Transaction]
) -> LedgerTotals:
    wallets = tuple(wallets)
    trans = tuple(trans)
    income = sum((t.amount for t in trans if t.kind == INCOME), ZERO)
    expense = sum((t.amount for t in trans if t.kind == EXPENSE), ZERO)
    balances = wallet_balances(wallets, trans)
    return LedgerTotals(
        income=income,
        expense=expense,
        net=income - expense,
        total_balance=sum(balances.values(), ZERO),
    )


def month_summary(trans: Iterable[Transaction], period: str) -> MonthSummary:
    income = expense = ZERO
    for t in iter_transactions(trans, by_period(period)):
        if t.kind == INCOME:
            income += t.amount
        else:
            expense += t.amount
    return MonthSummary(
        period=period,
        income=income,
        expense=expense,
        net=income - expense,
        expense_income_ratio=expense / income if income else ZERO,
    )
