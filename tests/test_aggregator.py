from __future__ import annotations

import unittest
from datetime import date, datetime
from decimal import Decimal

from analytics._periods import previous_month, shift_month
from analytics.aggregator import category_breakdown, monthly_overview, trailing_trend
from domain.models import DEFAULT_CATEGORIES, Transaction, TransactionKind


def _txn(id: str, kind: str, amount: str, category_id: str, when: datetime, owner_id: str = "u1") -> Transaction:
    return Transaction(
        id=id,
        owner_id=owner_id,
        description=f"txn {id}",
        amount=Decimal(amount),
        kind=TransactionKind(kind),
        category_id=category_id,
        date=when,
        created_at=when,
    )


class MonthlyOverviewTests(unittest.TestCase):
    def test_income_and_expense_scenario(self) -> None:
        rows = [
            _txn("t1", "expense", "100", "food", datetime(2026, 10, 3, 12, 0)),
            _txn("t2", "income", "500", "salary", datetime(2026, 10, 5, 9, 30)),
        ]

        overview = monthly_overview(rows, 10, 2026)

        self.assertEqual(overview.total_income, Decimal("500"))
        self.assertEqual(overview.total_expense, Decimal("100"))
        self.assertEqual(overview.balance, Decimal("400"))
        self.assertEqual(overview.transaction_count, 2)

    def test_filters_by_calendar_month(self) -> None:
        rows = [
            _txn("t1", "expense", "10.10", "food", datetime(2026, 9, 30, 23, 59)),
            _txn("t2", "expense", "20.20", "food", datetime(2026, 10, 1, 0, 0)),
            _txn("t3", "expense", "30.30", "food", datetime(2026, 10, 31, 23, 59)),
            _txn("t4", "expense", "40.40", "food", datetime(2025, 10, 15)),
        ]

        overview = monthly_overview(rows, 10, 2026)

        self.assertEqual(overview.total_expense, Decimal("50.50"))
        self.assertEqual(overview.transaction_count, 2)

    def test_empty_input_is_all_zero(self) -> None:
        overview = monthly_overview([], 1, 2026)

        self.assertEqual(overview.total_income, 0)
        self.assertEqual(overview.total_expense, 0)
        self.assertEqual(overview.balance, 0)

    def test_balance_is_exact(self) -> None:
        rows = [
            _txn("t1", "income", "0.10", "salary", datetime(2026, 10, 1)),
            _txn("t2", "income", "0.20", "salary", datetime(2026, 10, 2)),
            _txn("t3", "expense", "0.30", "food", datetime(2026, 10, 3)),
        ]

        overview = monthly_overview(rows, 10, 2026)

        self.assertEqual(overview.total_income - overview.total_expense, overview.balance)
        self.assertEqual(overview.balance, Decimal("0"))


class CategoryBreakdownTests(unittest.TestCase):
    def setUp(self) -> None:
        self.categories = list(DEFAULT_CATEGORIES)
        when = datetime(2026, 10, 10)
        self.rows = [
            _txn("t1", "expense", "60", "food", when),
            _txn("t2", "expense", "30", "transport", when),
            _txn("t3", "expense", "10", "food", when),
            _txn("t4", "income", "900", "salary", when),
            _txn("t5", "income", "100", "freelance", when),
        ]

    def test_one_row_per_category_in_order(self) -> None:
        rows = category_breakdown(self.rows, self.categories)

        self.assertEqual([r.category_id for r in rows], [c.id for c in self.categories])

    def test_totals_counts_and_kind_scoped_percentages(self) -> None:
        rows = {r.category_id: r for r in category_breakdown(self.rows, self.categories)}

        self.assertEqual(rows["food"].total, Decimal("70"))
        self.assertEqual(rows["food"].count, 2)
        self.assertAlmostEqual(rows["food"].percentage, 70.0)
        self.assertAlmostEqual(rows["transport"].percentage, 30.0)
        self.assertAlmostEqual(rows["salary"].percentage, 90.0)
        self.assertAlmostEqual(rows["freelance"].percentage, 10.0)
        self.assertEqual(rows["health"].count, 0)
        self.assertEqual(rows["health"].percentage, 0.0)

    def test_percentages_sum_to_hundred_per_kind(self) -> None:
        rows = category_breakdown(
            [
                _txn("a", "expense", "1", "food", datetime(2026, 10, 1)),
                _txn("b", "expense", "1", "transport", datetime(2026, 10, 1)),
                _txn("c", "expense", "1", "health", datetime(2026, 10, 1)),
            ],
            self.categories,
        )

        expense_sum = sum(r.percentage for r in rows if r.kind == "expense")
        income_sum = sum(r.percentage for r in rows if r.kind == "income")
        self.assertAlmostEqual(expense_sum, 100.0, places=6)
        self.assertEqual(income_sum, 0.0)

    def test_zero_kind_total_gives_zero_percentage(self) -> None:
        rows = category_breakdown([], self.categories)

        self.assertTrue(all(r.percentage == 0 for r in rows))
        self.assertTrue(all(r.total == 0 for r in rows))


class TrailingTrendTests(unittest.TestCase):
    def test_always_returns_requested_number_of_months(self) -> None:
        trend = trailing_trend([], months_back=6, today=date(2026, 3, 15))

        self.assertEqual(len(trend), 6)
        self.assertEqual(
            [p.period for p in trend],
            ["2025-10", "2025-11", "2025-12", "2026-01", "2026-02", "2026-03"],
        )
        self.assertTrue(all(p.income == 0 and p.expense == 0 and p.balance == 0 for p in trend))

    def test_points_match_monthly_overview(self) -> None:
        rows = [
            _txn("t1", "income", "1000", "salary", datetime(2026, 1, 5)),
            _txn("t2", "expense", "250.50", "housing", datetime(2026, 1, 6)),
            _txn("t3", "expense", "80", "food", datetime(2026, 3, 2)),
            _txn("t4", "expense", "999", "food", datetime(2025, 6, 2)),
        ]

        trend = trailing_trend(rows, months_back=6, today=date(2026, 3, 15))
        by_period = {p.period: p for p in trend}

        self.assertEqual(by_period["2026-01"].income, Decimal("1000"))
        self.assertEqual(by_period["2026-01"].expense, Decimal("250.50"))
        self.assertEqual(by_period["2026-01"].balance, Decimal("749.50"))
        self.assertEqual(by_period["2026-03"].expense, Decimal("80"))
        self.assertEqual(by_period["2026-02"].expense, Decimal("0"))
        self.assertNotIn("2025-06", by_period)

    def test_rejects_non_positive_window(self) -> None:
        with self.assertRaises(ValueError):
            trailing_trend([], months_back=0)


class PeriodHelperTests(unittest.TestCase):
    def test_previous_month_wraps_year(self) -> None:
        self.assertEqual(previous_month(2026, 1), (2025, 12))
        self.assertEqual(previous_month(2026, 7), (2026, 6))

    def test_shift_month_multiple_years(self) -> None:
        self.assertEqual(shift_month(2026, 3, -27), (2023, 12))
        self.assertEqual(shift_month(2026, 11, 3), (2027, 2))


if __name__ == "__main__":
    unittest.main()
