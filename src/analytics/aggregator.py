from __future__ import annotations

from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import Iterable, Sequence

from analytics._periods import in_month, month_key, shift_month
from domain.models import Category, Transaction, TransactionKind
from domain.schemas import CategoryBreakdown, MonthlyOverview, TrendPoint

ZERO = Decimal("0")


def transactions_in_month(transactions: Iterable[Transaction], month: int, year: int) -> list[Transaction]:
    return [t for t in transactions if in_month(t.date, year, month)]


def monthly_overview(transactions: Iterable[Transaction], month: int, year: int) -> MonthlyOverview:
    """Income, expense and balance for one calendar month. Empty input gives zeros."""
    rows = transactions_in_month(transactions, month, year)
    total_income = sum((t.amount for t in rows if t.kind is TransactionKind.INCOME), ZERO)
    total_expense = sum((t.amount for t in rows if t.kind is TransactionKind.EXPENSE), ZERO)
    return MonthlyOverview(
        year=year,
        month=month,
        total_income=total_income,
        total_expense=total_expense,
        balance=total_income - total_expense,
        transaction_count=len(rows),
    )


def category_breakdown(transactions: Iterable[Transaction], categories: Sequence[Category]) -> list[CategoryBreakdown]:
    """
    Per-category totals in category enumeration order.

    Percentages are scoped by kind: income categories share 100 among
    themselves, expense categories share another 100. A kind whose grand total
    is zero reports 0 for every category of that kind.
    """
    totals: dict[str, Decimal] = defaultdict(lambda: ZERO)
    counts: dict[str, int] = defaultdict(int)
    for txn in transactions:
        totals[txn.category_id] += txn.amount
        counts[txn.category_id] += 1

    kind_totals: dict[TransactionKind, Decimal] = defaultdict(lambda: ZERO)
    for category in categories:
        kind_totals[category.kind] += totals[category.id]

    rows: list[CategoryBreakdown] = []
    for category in categories:
        total = totals[category.id]
        grand = kind_totals[category.kind]
        percentage = float(total * 100 / grand) if grand else 0.0
        rows.append(
            CategoryBreakdown(
                category_id=category.id,
                name=category.name,
                kind=category.kind.value,
                color=category.color,
                icon=category.icon,
                total=total,
                count=counts[category.id],
                percentage=percentage,
            )
        )
    return rows


def trailing_trend(
    transactions: Sequence[Transaction],
    months_back: int = 6,
    today: date | None = None,
) -> list[TrendPoint]:
    """One point per calendar month ending with the current one, oldest first."""
    if months_back < 1:
        raise ValueError("months_back must be >= 1")

    today = today or date.today()
    points: list[TrendPoint] = []
    for offset in range(months_back - 1, -1, -1):
        year, month = shift_month(today.year, today.month, -offset)
        overview = monthly_overview(transactions, month, year)
        points.append(
            TrendPoint(
                period=month_key(year, month),
                income=overview.total_income,
                expense=overview.total_expense,
                balance=overview.balance,
            )
        )
    return points
