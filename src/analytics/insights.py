from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Sequence

from analytics._periods import quantize_money
from domain.schemas import CategoryBreakdown, Insight, MonthlyOverview, Predictions, TrendPoint

# Placeholder heuristics carried over for behavioral parity; no statistical basis.
EXPENSE_GROWTH_THRESHOLD = Decimal("0.20")
SAVINGS_RATE = Decimal("0.15")
NEXT_MONTH_GROWTH = Decimal("1.05")
HEALTHY_BALANCE_RATIO = Decimal("0.3")


def expense_change_percent(current: MonthlyOverview, previous: MonthlyOverview) -> Decimal:
    """Month-over-month expense growth in percent; 0 when there is no previous spend."""
    if previous.total_expense <= 0:
        return Decimal("0")
    return (current.total_expense - previous.total_expense) * 100 / previous.total_expense


def top_expense_category(categories: Sequence[CategoryBreakdown]) -> CategoryBreakdown | None:
    top: CategoryBreakdown | None = None
    for row in categories:
        if row.kind != "expense" or row.total <= 0:
            continue
        # Strictly greater keeps the first category on ties.
        if top is None or row.total > top.total:
            top = row
    return top


def potential_savings(current: MonthlyOverview) -> Decimal:
    return quantize_money(current.total_expense * SAVINGS_RATE)


def generate_insights(
    current: MonthlyOverview,
    previous: MonthlyOverview,
    categories: Sequence[CategoryBreakdown] = (),
) -> list[Insight]:
    """
    Advisory messages for the dashboard, in display order:

      1. expense growth above 20% versus the previous month (skipped when the
         previous month had no expenses)
      2. the largest expense category of the current month, if any
      3. a savings suggestion, always present
    """
    insights: list[Insight] = []

    if previous.total_expense > 0:
        growth = (current.total_expense - previous.total_expense) / previous.total_expense
        if growth > EXPENSE_GROWTH_THRESHOLD:
            percent = (growth * 100).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)
            insights.append(
                Insight(
                    kind="warning",
                    title="Watch your spending",
                    message=f"Your expenses grew {percent}% compared with last month",
                    suggestion="Review the expenses of the category that grew the most",
                    icon="exclamation-triangle",
                    priority="high",
                )
            )

    top = top_expense_category(categories)
    if top is not None:
        insights.append(
            Insight(
                kind="info",
                title="Biggest expense",
                message=f"Your largest expense is in {top.name}",
                suggestion="Consider trimming spending in this category",
                icon="chart-pie",
                priority="medium",
            )
        )

    savings = potential_savings(current)
    insights.append(
        Insight(
            kind="success",
            title="Savings opportunity",
            message=f"You could save up to {savings:.2f} this month",
            suggestion="Cut non-essential expenses by 15%",
            icon="piggy-bank",
            priority="medium",
        )
    )
    return insights


def financial_health(overview: MonthlyOverview) -> str:
    if overview.balance > overview.total_expense * HEALTHY_BALANCE_RATIO:
        return "excellent"
    if overview.balance > 0:
        return "good"
    return "warning"


def predictions(current: MonthlyOverview, trend: Sequence[TrendPoint]) -> Predictions:
    previous_expense = trend[-2].expense if len(trend) >= 2 else Decimal("0")
    return Predictions(
        next_month_expense=quantize_money(current.total_expense * NEXT_MONTH_GROWTH),
        savings_opportunity=potential_savings(current),
        trend="up" if current.total_expense > previous_expense else "down",
    )
