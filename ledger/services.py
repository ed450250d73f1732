import logging
from datetime import date
from decimal import Decimal
from functools import lru_cache
from typing import Optional

from ledger.analytics import (
    build_expense_structure,
    build_monthly_series,
    build_monthly_series_rounded,
    ledger_totals,
    month_summary,
    wallet_balances,
)
from ledger.budgets import (
    actual_by_root_for_month,
    budget_by_root_for_month,
    build_budget_report,
    build_rollup_report,
)
from ledger.config import LedgerConfig
from ledger.domain import BudgetReport, ExpenseShare, Ledger, LedgerTotals, MonthlyBucket, MonthSummary, RollupRow
from ledger.formatting import month_label
from ledger.periods import ALL_TIME, resolve_range
from ledger.tree import CategoryTree

logger = logging.getLogger(__name__)

CACHE_SIZE = 128


class ReportService:
    """Facade over the reporting functions for one ledger at a time.

    Each report is memoized per ``(snapshot, parameters)`` in caches owned by
    this instance. Snapshots are frozen and hashable, so any edit made through
    :mod:`ledger.transforms` yields a new key. Ranges left open are resolved
    with the configured policy before the lookup so "today" never leaks into
    a cached result.
    """

    def __init__(self, config: Optional[LedgerConfig] = None, cache_size: int = CACHE_SIZE):
        self.config = config or LedgerConfig()
        self._tree = lru_cache(maxsize=cache_size)(self._build_tree)
        self._monthly = lru_cache(maxsize=cache_size)(self._monthly_series)
        self._structure = lru_cache(maxsize=cache_size)(self._expense_structure)
        self._budget = lru_cache(maxsize=cache_size)(self._budget_report)
        self._rollup = lru_cache(maxsize=cache_size)(self._rollup_report)

    def tree(self, ledger: Ledger) -> CategoryTree:
        return self._tree(ledger.categories)

    def monthly_series(
        self,
        ledger: Ledger,
        start: Optional[date] = None,
        end: Optional[date] = None,
        rounded: bool = False,
        today: Optional[date] = None,
    ) -> list[MonthlyBucket]:
        start, end = self._range(start, end, today)
        return list(self._monthly(ledger, start, end, rounded))

    def expense_structure(
        self,
        ledger: Ledger,
        start: Optional[date] = None,
        end: Optional[date] = None,
        today: Optional[date] = None,
    ) -> list[ExpenseShare]:
        start, end = self._range(start, end, today)
        return list(self._structure(ledger, start, end))

    def budget_report(self, ledger: Ledger, period: str) -> BudgetReport:
        return self._budget(ledger, period)

    def rollup_report(self, ledger: Ledger, period: str) -> dict[str, list[RollupRow]]:
        return {kind: list(rows) for kind, rows in self._rollup(ledger, period).items()}

    def actual_by_root(self, ledger: Ledger, period: str) -> dict[str, Decimal]:
        return actual_by_root_for_month(ledger.transactions, self.tree(ledger), period)

    def budget_by_root(self, ledger: Ledger, period: str) -> dict[str, Decimal]:
        return budget_by_root_for_month(ledger.budgets, self.tree(ledger), period)

    def totals(self, ledger: Ledger) -> LedgerTotals:
        return ledger_totals(ledger.wallets, ledger.transactions)

    def wallet_balances(self, ledger: Ledger) -> dict[str, Decimal]:
        return wallet_balances(ledger.wallets, ledger.transactions)

    def month_summary(self, ledger: Ledger, period: str) -> MonthSummary:
        return month_summary(ledger.transactions, period)

    def cache_info(self) -> dict[str, object]:
        return {
            "tree": self._tree.cache_info(),
            "monthly": self._monthly.cache_info(),
            "structure": self._structure.cache_info(),
            "budget": self._budget.cache_info(),
            "rollup": self._rollup.cache_info(),
        }

    def clear(self) -> None:
        for cached in (self._tree, self._monthly, self._structure, self._budget, self._rollup):
            cached.cache_clear()

    def _range(self, start, end, today):
        return resolve_range(start, end, self.config.range_policy, today)

    def _build_tree(self, categories) -> CategoryTree:
        logger.debug("Indexing %d categories", len(categories))
        return CategoryTree(categories, max_depth=self.config.max_category_depth)

    def _monthly_series(self, ledger, start, end, rounded) -> tuple[MonthlyBucket, ...]:
        build = build_monthly_series_rounded if rounded else build_monthly_series
        # bounds are already resolved, so open ends stay open
        return tuple(build(
            ledger.transactions, start, end,
            policy=ALL_TIME,
            labeler=self._label,
        ))

    def _expense_structure(self, ledger, start, end) -> tuple[ExpenseShare, ...]:
        return tuple(build_expense_structure(
            ledger.transactions, self.tree(ledger), start, end, policy=ALL_TIME,
        ))

    def _budget_report(self, ledger, period) -> BudgetReport:
        logger.debug("Building budget report for %s (ledger v%d)", period, ledger.version)
        return build_budget_report(ledger.transactions, self.tree(ledger), ledger.budgets, period)

    def _rollup_report(self, ledger, period) -> dict[str, tuple[RollupRow, ...]]:
        logger.debug("Building rollup report for %s (ledger v%d)", period, ledger.version)
        report = build_rollup_report(ledger.transactions, self.tree(ledger), ledger.budgets, period)
        return {kind: tuple(rows) for kind, rows in report.items()}

    def _label(self, period: str) -> str:
        return month_label(period, self.config.locale)
