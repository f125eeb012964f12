from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal, InvalidOperation
from numbers import Real
from typing import Any, Mapping, Sequence

from analytics._periods import coerce_datetime, quantize_money
from domain.errors import InputValidationError
from domain.models import Category, TransactionKind


@dataclass(frozen=True)
class NormalizedTransaction:
    description: str
    amount: Decimal
    kind: TransactionKind
    category_id: str
    date: datetime
    payment_method: str = "other"
    tags: tuple[str, ...] = field(default_factory=tuple)


class TransactionValidator:
    """
    Deterministic validator for incoming transaction payloads.

    Checks run in a fixed order and stop at the first failure:
      - description present, >= 2 chars after trimming
      - amount is a positive finite real number
      - kind is exactly "income" or "expense"
      - category id is one of the known categories
      - date, when given, parses as an ISO-8601 date or timestamp

    Amounts are rounded half-up to cents. Dates are normalized to naive local
    time; aware timestamps are converted to the local zone first. Identity and
    creation time are left to the caller.
    """

    MIN_DESCRIPTION_LENGTH = 2

    def validate(
        self,
        payload: Mapping[str, Any],
        categories: Sequence[Category],
        now: datetime | None = None,
    ) -> NormalizedTransaction:
        description = self._check_description(payload.get("description"))
        amount = self._check_amount(payload.get("amount"))
        kind = self._check_kind(payload.get("kind"))
        category_id = self._check_category(payload.get("category_id"), categories)
        when = self._check_date(payload.get("date"), now)

        tags = payload.get("tags") or ()
        return NormalizedTransaction(
            description=description,
            amount=amount,
            kind=kind,
            category_id=category_id,
            date=when,
            payment_method=str(payload.get("payment_method") or "other"),
            tags=tuple(str(tag) for tag in tags),
        )

    # ---------------- checks ----------------

    def _check_description(self, value: Any) -> str:
        text = value.strip() if isinstance(value, str) else ""
        if len(text) < self.MIN_DESCRIPTION_LENGTH:
            raise InputValidationError(
                f"Description must have at least {self.MIN_DESCRIPTION_LENGTH} characters",
                code="INVALID_DESCRIPTION",
            )
        return text

    def _check_amount(self, value: Any) -> Decimal:
        # bool is an int subclass; True must not read as 1.
        if isinstance(value, bool) or not isinstance(value, (Real, Decimal)):
            raise InputValidationError("Amount must be a positive number", code="INVALID_AMOUNT")
        try:
            amount = Decimal(str(value))
        except InvalidOperation as exc:
            raise InputValidationError("Amount must be a positive number", code="INVALID_AMOUNT") from exc
        if not amount.is_finite():
            raise InputValidationError("Amount must be a finite number", code="INVALID_AMOUNT")
        try:
            rounded = quantize_money(amount)
        except InvalidOperation as exc:
            # More digits than the decimal context can hold at cent precision.
            raise InputValidationError("Amount is too large", code="INVALID_AMOUNT") from exc
        if amount <= 0 or rounded <= 0:
            raise InputValidationError("Amount must be a positive number", code="INVALID_AMOUNT")
        return rounded

    def _check_kind(self, value: Any) -> TransactionKind:
        if value not in (TransactionKind.INCOME.value, TransactionKind.EXPENSE.value):
            raise InputValidationError("Kind must be income or expense", code="INVALID_KIND")
        return TransactionKind(value)

    def _check_category(self, value: Any, categories: Sequence[Category]) -> str:
        if not isinstance(value, str) or not any(c.id == value for c in categories):
            raise InputValidationError("Unknown category", code="INVALID_CATEGORY")
        return value

    def _check_date(self, value: Any, now: datetime | None) -> datetime:
        if value is None or (isinstance(value, str) and not value.strip()):
            return (now or datetime.now()).replace(microsecond=0)
        parsed = coerce_datetime(value)
        if parsed is None:
            raise InputValidationError("Date must be an ISO-8601 date or timestamp", code="INVALID_DATE")
        if parsed.tzinfo is not None:
            parsed = parsed.astimezone().replace(tzinfo=None)
        return parsed


def validate_transaction(
    payload: Mapping[str, Any],
    categories: Sequence[Category],
    now: datetime | None = None,
) -> NormalizedTransaction:
    return TransactionValidator().validate(payload, categories, now=now)
