from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import Optional, Union

from ledger.errors import InvalidAmountError

INCOME = "income"
EXPENSE = "expense"
KINDS = (INCOME, EXPENSE)

UNKNOWN_NAME = "Unknown"

ZERO = Decimal("0")
CENTS = Decimal("0.01")
WHOLE = Decimal("1")


@dataclass(frozen=True)
class Category:
    id: str
    name: str
    kind: str                        # "income" or "expense"
    parent_id: Optional[str] = None  # None for a root


@dataclass(frozen=True)
class UnknownCategory:
    """Stand-in for a category id that is missing from the snapshot."""
    id: str
    name: str = UNKNOWN_NAME
    kind: Optional[str] = None
    parent_id: Optional[str] = None


CategoryRef = Union[Category, UnknownCategory]


@dataclass(frozen=True)
class Wallet:
    id: str
    name: str
    currency: Optional[str] = None
    initial_balance: Decimal = ZERO


@dataclass(frozen=True)
class Transaction:
    id: str
    date: date
    kind: str          # "income" or "expense"
    amount: Decimal    # non-negative magnitude
    category_id: str
    wallet_id: str
    comment: str = ""


# Planned amount for one category in one "YYYY-MM" period
@dataclass(frozen=True)
class BudgetEntry:
    id: str
    category_id: str
    period: str
    amount: Decimal


@dataclass(frozen=True)
class Ledger:
    categories: tuple[Category, ...] = ()
    wallets: tuple[Wallet, ...] = ()
    transactions: tuple[Transaction, ...] = ()
    budgets: tuple[BudgetEntry, ...] = ()
    version: int = 0


@dataclass(frozen=True)
class MonthlyBucket:
    period_key: str
    label: str
    income: Decimal
    expense: Decimal


@dataclass(frozen=True)
class ExpenseShare:
    category_name: str
    amount: Decimal
    share_percent: int


@dataclass(frozen=True)
class BudgetRow:
    category_id: str
    category_name: str
    budget: Decimal
    actual: Decimal
    difference: Decimal


@dataclass(frozen=True)
class BudgetTotals:
    budget: Decimal = ZERO
    actual: Decimal = ZERO
    difference: Decimal = ZERO


@dataclass(frozen=True)
class BudgetReport:
    period: str
    rows: tuple[BudgetRow, ...] = ()
    totals: BudgetTotals = field(default_factory=BudgetTotals)


@dataclass(frozen=True)
class RollupRow:
    category_id: str
    category_name: str
    kind: str
    plan: Decimal
    actual: Decimal
    difference: Decimal


@dataclass(frozen=True)
class LedgerTotals:
    income: Decimal
    expense: Decimal
    net: Decimal
    total_balance: Decimal


@dataclass(frozen=True)
class MonthSummary:
    period: str
    income: Decimal
    expense: Decimal
    net: Decimal
    expense_income_ratio: Decimal


def to_amount(value) -> Decimal:
    """Coerce ``value`` into a Decimal, going through ``str`` for floats so
    ``0.1`` stays ``Decimal("0.1")``. Raises InvalidAmountError for anything
    non-numeric, NaN or infinite."""
    if isinstance(value, bool):
        raise InvalidAmountError(value, "booleans are not amounts")
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value).strip())
        except (InvalidOperation, ValueError):
            raise InvalidAmountError(value, "not a number") from None
    if not result.is_finite():
        raise InvalidAmountError(value, "not a finite number")
    return result


def round_cents(value: Decimal) -> Decimal:
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


def round_whole(value: Decimal) -> Decimal:
    return value.quantize(WHOLE, rounding=ROUND_HALF_UP)


def clamp_budget(value) -> Decimal:
    """Budgets never fail on bad input: non-numeric becomes 0, negative is clamped to 0."""
    try:
        amount = to_amount(value)
    except InvalidAmountError:
        return ZERO
    return max(ZERO, amount)
