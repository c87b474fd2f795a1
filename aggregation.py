"""
aggregation.py
--------------

Derives everything the dashboard shows from the record store and the
current filter selections. Every function here is pure: nothing is cached,
so calling again after the inputs change always gives fresh numbers.

Filter values are strings, with ``"all"`` meaning no restriction. Years are
compared as calendar-year strings ("2024"); months as the zero-based month
index ("0" for January .. "11" for December). Sums use ``Decimal`` so long
columns of cents do not drift.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, List, Sequence, Tuple

from models import Category

ALL = "all"
ZERO = Decimal("0")
CENTS = Decimal("0.01")

MONTHS: Tuple[Tuple[str, str], ...] = (
    (ALL, "All months"),
    ("0", "January"),
    ("1", "February"),
    ("2", "March"),
    ("3", "April"),
    ("4", "May"),
    ("5", "June"),
    ("6", "July"),
    ("7", "August"),
    ("8", "September"),
    ("9", "October"),
    ("10", "November"),
    ("11", "December"),
)


@dataclass(frozen=True)
class Filters:
    year: str = ALL
    month: str = ALL
    category: object = ALL


@dataclass(frozen=True)
class Totals:
    total_expenses: Decimal
    total_income: Decimal

    @property
    def balance(self) -> Decimal:
        return self.total_income - self.total_expenses


def time_filtered(records: Iterable, year: str = ALL, month: str = ALL) -> list:
    """Records whose date falls in the selected year and month."""
    year, month = str(year), str(month)
    return [
        r for r in records
        if (year == ALL or str(r.date.year) == year)
        and (month == ALL or str(r.date.month - 1) == month)
    ]


def category_filtered(expenses: Iterable, category_id=ALL) -> list:
    if category_id == ALL:
        return list(expenses)
    return [e for e in expenses if e.category == category_id]


def distinct_years(records: Iterable) -> List[str]:
    """``"all"`` followed by every year present, newest first."""
    years = sorted({r.date.year for r in records}, reverse=True)
    return [ALL] + [str(y) for y in years]


def total_amount(records: Iterable) -> Decimal:
    return sum((r.amount for r in records), ZERO)


def totals(expenses: Iterable, incomes: Iterable) -> Totals:
    """
    Totals for already time-filtered expense and income sets.

    The two sets may have been filtered with different selections; the
    dashboard keeps separate filters for each.
    """
    return Totals(total_expenses=total_amount(expenses), total_income=total_amount(incomes))


def distribution(expenses: Sequence, categories: Iterable[Category]) -> List[Tuple[Category, Decimal]]:
    """
    Spend per category, in registry order.

    Categories with nothing spent are left out so a chart never gets a
    zero-sized slice.
    """
    by_category = {}
    for e in expenses:
        by_category[e.category] = by_category.get(e.category, ZERO) + e.amount

    result = []
    for category in categories:
        value = by_category.get(category.id, ZERO)
        if value != ZERO:
            result.append((category, value))
    return result


def round_cents(value: Decimal) -> Decimal:
    return value.quantize(CENTS)


@dataclass(frozen=True)
class DashboardState:
    """One consistent snapshot of every derived dashboard value."""

    expense_years: List[str]
    income_years: List[str]
    time_filtered_expenses: list
    table_expenses: list
    filtered_incomes: list
    totals: Totals
    distribution: List[Tuple[Category, Decimal]]

    @classmethod
    def compute(cls, store, registry, expense_filters: Filters = Filters(), income_filters: Filters = Filters()):
        expenses = store.expenses
        incomes = store.incomes
        timed = time_filtered(expenses, expense_filters.year, expense_filters.month)
        timed_incomes = time_filtered(incomes, income_filters.year, income_filters.month)
        return cls(
            expense_years=distinct_years(expenses),
            income_years=distinct_years(incomes),
            time_filtered_expenses=timed,
            table_expenses=category_filtered(timed, expense_filters.category),
            filtered_incomes=timed_incomes,
            totals=totals(timed, timed_incomes),
            distribution=distribution(timed, registry.list_all()),
        )
