from __future__ import annotations

import logging
import math
import time
import uuid
from datetime import datetime
from decimal import Decimal
from typing import Callable

from analytics._periods import quantize_money
from application.validator import TransactionValidator
from domain.errors import NotFoundError
from domain.models import Account, Transaction, TransactionKind
from domain.schemas import TransactionCreate, TransactionFilters, TransactionPage, TransactionView
from infrastructure.persistence.store import DocumentStore

logger = logging.getLogger(__name__)

# Share of each income assumed to be saved; feeds the account's totalSaved stat.
INCOME_SAVINGS_SHARE = Decimal("0.2")


def transaction_view(txn: Transaction) -> TransactionView:
    return TransactionView(
        id=txn.id,
        owner_id=txn.owner_id,
        description=txn.description,
        amount=txn.amount,
        kind=txn.kind.value,
        category_id=txn.category_id,
        date=txn.date,
        payment_method=txn.payment_method,
        tags=list(txn.tags),
        created_at=txn.created_at,
        updated_at=txn.updated_at,
    )


class TransactionService:
    def __init__(
        self,
        store: DocumentStore,
        validator: TransactionValidator | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self._store = store
        self._validator = validator or TransactionValidator()
        self._clock = clock

    def create(self, owner: Account, payload: TransactionCreate) -> TransactionView:
        t = time.perf_counter()
        document = self._store.load()
        now = self._clock().replace(microsecond=0)
        normalized = self._validator.validate(payload.model_dump(), document.categories, now=now)

        account = document.find_account(owner.id)
        if account is None:
            raise NotFoundError("Account not found", code="ACCOUNT_NOT_FOUND")

        txn = Transaction(
            id=str(uuid.uuid4()),
            owner_id=account.id,
            description=normalized.description,
            amount=normalized.amount,
            kind=normalized.kind,
            category_id=normalized.category_id,
            date=normalized.date,
            created_at=now,
            updated_at=now,
            payment_method=normalized.payment_method,
            tags=list(normalized.tags),
        )
        document.transactions.append(txn)

        account.stats.total_transactions += 1
        if txn.kind is TransactionKind.INCOME:
            account.stats.total_saved = quantize_money(account.stats.total_saved + txn.amount * INCOME_SAVINGS_SHARE)

        self._store.save(document)
        logger.info(
            "TransactionService created txn_id=%s owner_id=%s kind=%s in %.2fs",
            txn.id,
            account.id,
            txn.kind.value,
            time.perf_counter() - t,
        )
        return transaction_view(txn)

    def list_page(self, owner: Account, filters: TransactionFilters) -> TransactionPage:
        rows = self._store.load().transactions_for(owner.id)

        if filters.kind:
            rows = [r for r in rows if r.kind.value == filters.kind]
        if filters.category_id:
            rows = [r for r in rows if r.category_id == filters.category_id]
        if filters.start_date:
            start = _naive_local(filters.start_date)
            rows = [r for r in rows if r.date >= start]
        if filters.end_date:
            end = _naive_local(filters.end_date)
            rows = [r for r in rows if r.date <= end]

        rows.sort(key=lambda r: r.date, reverse=True)

        offset = (filters.page - 1) * filters.limit
        page_rows = rows[offset:offset + filters.limit]
        logger.info("TransactionService list owner_id=%s matched=%d page=%d", owner.id, len(rows), filters.page)
        return TransactionPage(
            transactions=[transaction_view(r) for r in page_rows],
            total=len(rows),
            total_income=sum((r.amount for r in rows if r.kind is TransactionKind.INCOME), Decimal("0")),
            total_expenses=sum((r.amount for r in rows if r.kind is TransactionKind.EXPENSE), Decimal("0")),
            page=filters.page,
            total_pages=math.ceil(len(rows) / filters.limit),
        )


def _naive_local(value: datetime) -> datetime:
    if value.tzinfo is not None:
        return value.astimezone().replace(tzinfo=None)
    return value
