"""Budget Reconciliation Engine.

Two granularities share the same month boundaries and tree resolver:

* :func:`build_budget_report` compares plan and actual per leaf category,
  rounded to cents with totals computed sum-then-round.
* :func:`actual_by_root_for_month` / :func:`budget_by_root_for_month` roll
  everything up to root categories and leave rounding to the renderer;
  :func:`build_rollup_report` joins the two for the top-level table.
"""
import logging
from decimal import Decimal
from typing import Iterable, Union

from ledger.domain import (
    EXPENSE,
    INCOME,
    ZERO,
    BudgetEntry,
    BudgetReport,
    BudgetRow,
    BudgetTotals,
    Category,
    RollupRow,
    Transaction,
    clamp_budget,
    round_cents,
)
from ledger.lazy import iter_transactions
from ledger.periods import by_period, parse_period
from ledger.tree import CategoryTree

logger = logging.getLogger(__name__)

TreeLike = Union[CategoryTree, Iterable[Category]]


def _as_tree(cats: TreeLike) -> CategoryTree:
    return cats if isinstance(cats, CategoryTree) else CategoryTree(cats)


def build_budget_report(
    trans: Iterable[Transaction],
    cats: TreeLike,
    budgets: Iterable[BudgetEntry],
    period: str,
) -> BudgetReport:
    tree = _as_tree(cats)
    in_month = by_period(period)

    actual: dict[str, Decimal] = {}
    for t in iter_transactions(trans, in_month):
        if t.kind != EXPENSE:
            continue
        actual[t.category_id] = actual.get(t.category_id, ZERO) + t.amount

    # budgeted categories first, in budget order, then actual-only ones
    planned: dict[str, Decimal] = {}
    for b in budgets:
        if b.period == period:
            planned[b.category_id] = clamp_budget(b.amount)
    order = list(planned) + [cid for cid in actual if cid not in planned]

    rows = []
    for cid in order:
        budget = planned.get(cid, ZERO)
        spent = actual.get(cid, ZERO)
        row = BudgetRow(
            category_id=cid,
            category_name=tree.name_of(cid),
            budget=round_cents(budget),
            actual=round_cents(spent),
            difference=round_cents(budget - spent),
        )
        if row.budget > 0 or row.actual > 0:
            rows.append(row)

    totals = BudgetTotals(
        budget=round_cents(sum((r.budget for r in rows), ZERO)),
        actual=round_cents(sum((r.actual for r in rows), ZERO)),
        difference=round_cents(sum((r.difference for r in rows), ZERO)),
    )
    return BudgetReport(period=period, rows=tuple(rows), totals=totals)


def actual_by_root_for_month(
    trans: Iterable[Transaction], cats: TreeLike, period: str
) -> dict[str, Decimal]:
    """Actual amounts of ``period`` summed per root category id.

    Transactions whose category (and so root) is unknown are left out.
    """
    tree = _as_tree(cats)
    sums: dict[str, Decimal] = {}
    for t in iter_transactions(trans, by_period(period)):
        root_id = tree.root_of(t.category_id)
        if root_id not in tree:
            logger.debug("Skipping transaction %r with unknown category %r", t.id, t.category_id)
            continue
        root = tree.require(root_id)
        if root.kind != t.kind:
            logger.warning(
                "Transaction %r is %s but rolls up to %s category %r",
                t.id, t.kind, root.kind, root.name,
            )
        sums[root_id] = sums.get(root_id, ZERO) + abs(t.amount)
    return sums


def budget_by_root_for_month(
    budgets: Iterable[BudgetEntry], cats: TreeLike, period: str
) -> dict[str, Decimal]:
    parse_period(period)
    tree = _as_tree(cats)
    sums: dict[str, Decimal] = {}
    for b in budgets:
        if b.period != period:
            continue
        root_id = tree.root_of(b.category_id)
        sums[root_id] = sums.get(root_id, ZERO) + clamp_budget(b.amount)
    return sums


def build_rollup_report(
    trans: Iterable[Transaction],
    cats: TreeLike,
    budgets: Iterable[BudgetEntry],
    period: str,
) -> dict[str, list[RollupRow]]:
    """Plan vs. actual for every root category, split into income and expense.

    Values are left unrounded.
    """
    tree = _as_tree(cats)
    actual = actual_by_root_for_month(trans, tree, period)
    plan = budget_by_root_for_month(budgets, tree, period)

    report: dict[str, list[RollupRow]] = {INCOME: [], EXPENSE: []}
    for kind, rows in report.items():
        for root in tree.roots(kind):
            planned = plan.get(root.id, ZERO)
            spent = actual.get(root.id, ZERO)
            rows.append(RollupRow(
                category_id=root.id,
                category_name=root.name,
                kind=kind,
                plan=planned,
                actual=spent,
                difference=planned - spent,
            ))
    return report
