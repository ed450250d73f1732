from abc import ABC, abstractmethod
from typing import Callable, Generic, Iterable, TypeVar

from ledger.domain import KINDS, BudgetEntry, Category, Transaction, Wallet
from ledger.errors import CorruptHierarchyError, InvalidPeriodError
from ledger.periods import parse_period

T = TypeVar('T')
U = TypeVar('U')
E = TypeVar('E')


class Maybe(Generic[T], ABC):

    @abstractmethod
    def map(self, f: Callable[[T], U]) -> 'Maybe[U]':
        pass

    @abstractmethod
    def bind(self, f: Callable[[T], 'Maybe[U]']) -> 'Maybe[U]':
        pass

    @abstractmethod
    def get_or_else(self, default: T) -> T:
        pass

    def is_some(self) -> bool:
        return isinstance(self, Some)

    def is_none(self) -> bool:
        return not self.is_some()


class Some(Maybe[T]):

    def __init__(self, value: T):
        self._value = value

    def map(self, f: Callable[[T], U]) -> 'Maybe[U]':
        return Some(f(self._value))

    def bind(self, f: Callable[[T], 'Maybe[U]']) -> 'Maybe[U]':
        return f(self._value)

    def get_or_else(self, default: T) -> T:
        return self._value

    def __repr__(self) -> str:
        return f"Some({self._value!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Some) and self._value == other._value


class Nothing(Maybe[T]):

    def map(self, f: Callable[[T], U]) -> 'Maybe[U]':
        return self

    def bind(self, f: Callable[[T], 'Maybe[U]']) -> 'Maybe[U]':
        return self

    def get_or_else(self, default: T) -> T:
        return default

    def __repr__(self) -> str:
        return "Nothing()"

    def __eq__(self, other) -> bool:
        return isinstance(other, Nothing)


class Either(Generic[E, T], ABC):

    @abstractmethod
    def map(self, f: Callable[[T], U]) -> 'Either[E, U]':
        pass

    @abstractmethod
    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        pass

    @abstractmethod
    def get_or_else(self, default: T) -> T:
        pass

    @abstractmethod
    def get_error(self) -> E:
        pass

    def is_right(self) -> bool:
        return isinstance(self, Right)

    def is_left(self) -> bool:
        return not self.is_right()


class Right(Either[E, T]):

    def __init__(self, value: T):
        self._value = value

    def map(self, f: Callable[[T], U]) -> 'Either[E, U]':
        return Right(f(self._value))

    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        return f(self._value)

    def get_or_else(self, default: T) -> T:
        return self._value

    def get_error(self) -> E:
        raise ValueError("Cannot get error from Right")

    def __repr__(self) -> str:
        return f"Right({self._value!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Right) and self._value == other._value


class Left(Either[E, T]):

    def __init__(self, error: E):
        self._error = error

    def map(self, f: Callable[[T], U]) -> 'Either[E, U]':
        return self

    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        return self

    def get_or_else(self, default: T) -> T:
        return default

    def get_error(self) -> E:
        return self._error

    def __repr__(self) -> str:
        return f"Left({self._error!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Left) and self._error == other._error


def safe_category(cats: Iterable[Category], cat_id: str) -> Maybe[Category]:
    for cat in cats:
        if cat.id == cat_id:
            return Some(cat)
    return Nothing()


def safe_wallet(wallets: Iterable[Wallet], wallet_id: str) -> Maybe[Wallet]:
    for w in wallets:
        if w.id == wallet_id:
            return Some(w)
    return Nothing()


def validate_transaction(
    t: Transaction,
    wallets: tuple[Wallet, ...],
    cats: tuple[Category, ...],
) -> Either[dict, Transaction]:

    if t.kind not in KINDS:
        return Left({
            "error": "invalid_kind",
            "message": f"Transaction kind must be one of {KINDS}, got {t.kind!r}",
            "kind": t.kind,
        })

    if t.amount < 0:
        return Left({
            "error": "negative_amount",
            "message": "Transaction amounts are stored as non-negative magnitudes",
            "amount": t.amount,
        })

    if safe_wallet(wallets, t.wallet_id).is_none():
        return Left({
            "error": "wallet_not_found",
            "message": f"Wallet with ID {t.wallet_id} does not exist",
            "wallet_id": t.wallet_id,
        })

    category = safe_category(cats, t.category_id).get_or_else(None)
    if category is None:
        return Left({
            "error": "category_not_found",
            "message": f"Category with ID {t.category_id} does not exist",
            "category_id": t.category_id,
        })

    if category.kind != t.kind:
        return Left({
            "error": "category_kind_mismatch",
            "message": f"{t.kind.capitalize()} transaction cannot use {category.kind} category {category.name}",
            "category_kind": category.kind,
            "kind": t.kind,
        })

    return Right(t)


def validate_category(
    c: Category,
    cats: tuple[Category, ...],
) -> Either[dict, Category]:
    """Check a new or edited category against the rest of the tree.

    The parent must exist, share the category's kind and not be the category
    itself or one of its descendants.
    """
    if c.kind not in KINDS:
        return Left({
            "error": "invalid_kind",
            "message": f"Category kind must be one of {KINDS}, got {c.kind!r}",
            "kind": c.kind,
        })

    if c.parent_id is None:
        return Right(c)

    others = {x.id: x for x in cats if x.id != c.id}
    parent = others.get(c.parent_id)
    if parent is None:
        return Left({
            "error": "parent_not_found",
            "message": f"Parent category with ID {c.parent_id} does not exist",
            "parent_id": c.parent_id,
        })

    if parent.kind != c.kind:
        return Left({
            "error": "parent_kind_mismatch",
            "message": f"{c.kind.capitalize()} category {c.name} cannot live under {parent.kind} category {parent.name}",
            "parent_kind": parent.kind,
            "kind": c.kind,
        })

    by_id = {**others, c.id: c}
    seen: set[str] = set()
    current = parent
    while current is not None:
        if current.id == c.id or current.id in seen:
            return Left({
                "error": "cycle",
                "message": f"Moving {c.name} under {parent.name} would create a cycle",
                "error_type": CorruptHierarchyError.__name__,
            })
        seen.add(current.id)
        current = by_id.get(current.parent_id) if current.parent_id else None

    return Right(c)


def validate_budget(b: BudgetEntry, cats: tuple[Category, ...]) -> Either[dict, BudgetEntry]:
    try:
        parse_period(b.period)
    except InvalidPeriodError as exc:
        return Left({
            "error": "invalid_period",
            "message": str(exc),
            "period": b.period,
        })

    if safe_category(cats, b.category_id).is_none():
        return Left({
            "error": "category_not_found",
            "message": f"Category with ID {b.category_id} does not exist",
            "category_id": b.category_id,
        })

    return Right(b)
