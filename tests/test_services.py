from datetime import date
from pathlib import Path

from ledger.config import LedgerConfig
from ledger.periods import ALL_TIME, YEAR_TO_DATE
from ledger.services import ReportService
from ledger.transforms import edit_ledger, load_seed, upsert_budget

SEED = Path(__file__).resolve().parent.parent / "data" / "seed.json"


def make_service(policy=ALL_TIME):
    return ReportService(LedgerConfig(range_policy=policy))


def test_reports_are_memoized_per_snapshot():
    reports = make_service()
    ledger = load_seed(SEED)

    first = reports.budget_report(ledger, "2024-01")
    second = reports.budget_report(ledger, "2024-01")

    assert first is second
    info = reports.cache_info()["budget"]
    assert (info.hits, info.misses) == (1, 1)


def test_edit_invalidates_by_new_snapshot():
    reports = make_service()
    ledger = load_seed(SEED)
    before = reports.budget_report(ledger, "2024-02")

    edited = edit_ledger(ledger, budgets=upsert_budget(ledger.budgets, "groceries", "2024-02", 6000))
    after = reports.budget_report(edited, "2024-02")

    assert before.rows[0].budget != after.rows[0].budget
    assert reports.cache_info()["budget"].misses == 2


def test_tree_is_shared_between_reports():
    reports = make_service()
    ledger = load_seed(SEED)

    assert reports.tree(ledger) is reports.tree(ledger)
    reports.rollup_report(ledger, "2024-01")
    reports.expense_structure(ledger)
    assert reports.cache_info()["tree"].misses == 1


def test_monthly_series_all_time():
    reports = make_service()
    ledger = load_seed(SEED)

    series = reports.monthly_series(ledger)
    assert [b.period_key for b in series] == ["2024-01", "2024-02"]
    assert series[0].label == "January 2024"

    rounded = reports.monthly_series(ledger, rounded=True)
    assert rounded[0].expense == 44821


def test_monthly_series_year_to_date_uses_today():
    reports = make_service(YEAR_TO_DATE)
    ledger = load_seed(SEED)

    assert reports.monthly_series(ledger, today=date(2024, 1, 31))[0].period_key == "2024-01"
    assert len(reports.monthly_series(ledger, today=date(2024, 1, 31))) == 1
    assert reports.monthly_series(ledger, today=date(2026, 6, 1)) == []


def test_clear_empties_caches():
    reports = make_service()
    ledger = load_seed(SEED)
    reports.monthly_series(ledger)
    reports.clear()
    assert reports.cache_info()["monthly"].currsize == 0


def test_derived_views():
    reports = make_service()
    ledger = load_seed(SEED)

    balances = reports.wallet_balances(ledger)
    assert balances["cash"] == -3610
    assert balances["savings"] == 500

    assert reports.budget_by_root(ledger, "2024-01")["food"] == 6500
    assert reports.actual_by_root(ledger, "2024-01")["transport"] == 640
    assert reports.month_summary(ledger, "2024-02").income == 85000
    assert reports.totals(ledger).income == 182000
