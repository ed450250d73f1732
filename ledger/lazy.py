from collections import defaultdict
from decimal import Decimal
from typing import Callable, Iterable, Iterator

from ledger.domain import EXPENSE, UNKNOWN_NAME, Category, Transaction, Wallet


def iter_transactions(
    trans: Iterable[Transaction], pred: Callable[[Transaction], bool]
) -> Iterator[Transaction]:
    for t in trans:
        if pred(t):
            yield t


def sorted_for_display(trans: Iterable[Transaction]) -> list[Transaction]:
    # sorted() is stable, so equal dates keep their ledger order
    return sorted(trans, key=lambda t: t.date, reverse=True)


def search_transactions(
    trans: Iterable[Transaction],
    query: str,
    cats: Iterable[Category],
    wallets: Iterable[Wallet],
) -> Iterator[Transaction]:
    """Yield transactions whose date, kind, amount, category name, wallet
    name or comment contains ``query`` (case-insensitive). A blank query
    matches everything."""
    needle = query.strip().lower()
    category_name_by_id = {c.id: c.name for c in cats}
    wallet_name_by_id = {w.id: w.name for w in wallets}

    def matches(t: Transaction) -> bool:
        if not needle:
            return True
        haystack = (
            t.date.isoformat(),
            t.kind,
            str(t.amount),
            category_name_by_id.get(t.category_id, ""),
            wallet_name_by_id.get(t.wallet_id, ""),
            t.comment,
        )
        return any(needle in field.lower() for field in haystack)

    return iter_transactions(trans, matches)


def top_expense_categories(
    trans: Iterable[Transaction], cats: Iterable[Category], k: int
) -> Iterator[tuple[str, Decimal]]:
    category_name_by_id: dict[str, str] = {c.id: c.name for c in cats}
    totals_by_category: dict[str, Decimal] = defaultdict(Decimal)

    for t in trans:
        if t.kind == EXPENSE:
            totals_by_category[t.category_id] += t.amount

    ordered: list[tuple[str, Decimal]] = sorted(
        ((category_name_by_id.get(cid, UNKNOWN_NAME), total) for cid, total in totals_by_category.items()),
        key=lambda item: item[1],
        reverse=True,
    )

    for name, total in ordered[: max(0, k)]:
        yield name, total
