from __future__ import annotations

import logging
import time
from datetime import date
from decimal import Decimal
from typing import Callable

from analytics._periods import previous_month
from analytics.aggregator import category_breakdown, monthly_overview, trailing_trend, transactions_in_month
from analytics.insights import (
    expense_change_percent,
    financial_health,
    generate_insights,
    potential_savings,
    predictions,
    top_expense_category,
)
from domain.models import Account
from domain.schemas import (
    CategoryUsage,
    CategoryView,
    Dashboard,
    DashboardOverview,
    InsightReport,
    InsightSummary,
    TopCategory,
)
from infrastructure.persistence.store import DocumentStore

logger = logging.getLogger(__name__)


class DashboardService:
    """Read-only views over one account's transactions."""

    TREND_MONTHS = 6

    def __init__(self, store: DocumentStore, today: Callable[[], date] = date.today):
        self._store = store
        self._today = today

    def overview(self, owner: Account) -> Dashboard:
        t = time.perf_counter()
        document = self._store.load()
        rows = document.transactions_for(owner.id)
        today = self._today()

        current = monthly_overview(rows, today.month, today.year)
        breakdown = category_breakdown(transactions_in_month(rows, today.month, today.year), document.categories)
        trend = trailing_trend(rows, months_back=self.TREND_MONTHS, today=today)

        dashboard = Dashboard(
            overview=DashboardOverview(
                balance=current.balance,
                total_income=current.total_income,
                total_expenses=current.total_expense,
                transactions_count=current.transaction_count,
                financial_health=financial_health(current),
            ),
            category_analysis=[row for row in breakdown if row.total > 0],
            monthly_trends=trend,
            predictions=predictions(current, trend),
        )
        logger.info(
            "DashboardService overview owner_id=%s month=%04d-%02d transactions=%d in %.2fs",
            owner.id,
            today.year,
            today.month,
            current.transaction_count,
            time.perf_counter() - t,
        )
        return dashboard

    def insights(self, owner: Account) -> InsightReport:
        document = self._store.load()
        rows = document.transactions_for(owner.id)
        today = self._today()
        prev_year, prev_month = previous_month(today.year, today.month)

        current = monthly_overview(rows, today.month, today.year)
        previous = monthly_overview(rows, prev_month, prev_year)
        breakdown = category_breakdown(transactions_in_month(rows, today.month, today.year), document.categories)
        insights = generate_insights(current, previous, breakdown)

        top = top_expense_category(breakdown)
        summary = InsightSummary(
            current_expenses=current.total_expense,
            expense_change=float(expense_change_percent(current, previous)),
            potential_savings=potential_savings(current),
            top_category=TopCategory(category_id=top.category_id, name=top.name, amount=top.total) if top else None,
        )
        logger.info("DashboardService insights owner_id=%s insights=%d", owner.id, len(insights))
        return InsightReport(insights=insights, summary=summary)

    def categories(self, owner: Account) -> list[CategoryView]:
        document = self._store.load()
        rows = document.transactions_for(owner.id)

        views: list[CategoryView] = []
        for category in document.categories:
            used = [r for r in rows if r.category_id == category.id]
            views.append(
                CategoryView(
                    id=category.id,
                    name=category.name,
                    kind=category.kind.value,
                    color=category.color,
                    icon=category.icon,
                    stats=CategoryUsage(
                        total_amount=sum((r.amount for r in used), Decimal("0")),
                        transaction_count=len(used),
                        last_used=max((r.date for r in used), default=None),
                    ),
                )
            )
        return views
