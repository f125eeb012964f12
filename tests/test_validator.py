from __future__ import annotations

import unittest
from datetime import datetime, timedelta, timezone
from decimal import Decimal

from analytics.aggregator import monthly_overview
from application.validator import TransactionValidator
from domain.errors import InputValidationError
from domain.models import DEFAULT_CATEGORIES, Transaction, TransactionKind


class TransactionValidatorTests(unittest.TestCase):
    def setUp(self) -> None:
        self.validator = TransactionValidator()
        self.categories = list(DEFAULT_CATEGORIES)
        self.now = datetime(2026, 10, 18, 14, 30, 0)

    def _payload(self, **overrides):
        payload = {
            "description": "  Groceries  ",
            "amount": 42.5,
            "kind": "expense",
            "category_id": "food",
            "date": "2026-10-12",
        }
        payload.update(overrides)
        return payload

    def _assert_code(self, code: str, **overrides) -> None:
        with self.assertRaises(InputValidationError) as ctx:
            self.validator.validate(self._payload(**overrides), self.categories, now=self.now)
        self.assertEqual(ctx.exception.code, code)

    def test_rejections_carry_specific_codes(self) -> None:
        self._assert_code("INVALID_AMOUNT", amount=0)
        self._assert_code("INVALID_AMOUNT", amount=-5)
        self._assert_code("INVALID_DESCRIPTION", description="a")
        self._assert_code("INVALID_KIND", kind="other")
        self._assert_code("INVALID_CATEGORY", category_id="does-not-exist")

    def test_description_is_checked_after_trimming(self) -> None:
        self._assert_code("INVALID_DESCRIPTION", description=" b  ")
        self._assert_code("INVALID_DESCRIPTION", description=None)

    def test_amount_must_be_a_finite_real_number(self) -> None:
        self._assert_code("INVALID_AMOUNT", amount="10")
        self._assert_code("INVALID_AMOUNT", amount=True)
        self._assert_code("INVALID_AMOUNT", amount=float("nan"))
        self._assert_code("INVALID_AMOUNT", amount=float("inf"))
        self._assert_code("INVALID_AMOUNT", amount=0.001)
        self._assert_code("INVALID_AMOUNT", amount=1e30)
        self._assert_code("INVALID_AMOUNT", amount=Decimal("1E+40"))

    def test_checks_short_circuit_in_order(self) -> None:
        self._assert_code("INVALID_DESCRIPTION", description="", amount=-1, kind="x", category_id="y")
        self._assert_code("INVALID_AMOUNT", amount=-1, kind="x", category_id="y")
        self._assert_code("INVALID_KIND", kind="x", category_id="y")

    def test_unparseable_date(self) -> None:
        self._assert_code("INVALID_DATE", date="yesterday")

    def test_normalizes_fields(self) -> None:
        result = self.validator.validate(self._payload(amount=10.005), self.categories, now=self.now)

        self.assertEqual(result.description, "Groceries")
        self.assertEqual(result.amount, Decimal("10.01"))
        self.assertIs(result.kind, TransactionKind.EXPENSE)
        self.assertEqual(result.date, datetime(2026, 10, 12, 0, 0))
        self.assertEqual(result.payment_method, "other")

    def test_rounds_half_up(self) -> None:
        result = self.validator.validate(self._payload(amount=Decimal("2.675")), self.categories, now=self.now)

        self.assertEqual(result.amount, Decimal("2.68"))

    def test_missing_date_uses_now(self) -> None:
        result = self.validator.validate(self._payload(date=None), self.categories, now=self.now)

        self.assertEqual(result.date, self.now)

    def test_aware_timestamp_becomes_naive_local(self) -> None:
        aware = datetime(2026, 10, 12, 15, 0, tzinfo=timezone(timedelta(hours=-3)))

        result = self.validator.validate(self._payload(date=aware.isoformat()), self.categories, now=self.now)

        self.assertIsNone(result.date.tzinfo)
        self.assertEqual(result.date, aware.astimezone().replace(tzinfo=None))

    def test_validated_amount_flows_into_its_month(self) -> None:
        result = self.validator.validate(
            self._payload(amount=19.999, kind="income", category_id="salary"),
            self.categories,
            now=self.now,
        )
        txn = Transaction(
            id="t1",
            owner_id="u1",
            description=result.description,
            amount=result.amount,
            kind=result.kind,
            category_id=result.category_id,
            date=result.date,
            created_at=self.now,
        )

        overview = monthly_overview([txn], result.date.month, result.date.year)

        self.assertEqual(overview.total_income, Decimal("20.00"))
        self.assertEqual(overview.total_expense, Decimal("0"))


if __name__ == "__main__":
    unittest.main()
