from __future__ import annotations

import json
import logging
import os
import tempfile
from datetime import datetime
from decimal import Decimal
from pathlib import Path
from typing import Any

from domain.errors import StoreError
from domain.models import (
    Account,
    AccountPreferences,
    AccountStats,
    Category,
    Document,
    Transaction,
    TransactionKind,
    new_document,
)
from infrastructure.persistence.store import DocumentStore

logger = logging.getLogger(__name__)

DEFAULT_DB_FILE = "data/database.json"


class JsonDocumentStore(DocumentStore):
    """
    Single JSON file holding accounts, transactions and categories.

    Each load reads and parses the whole file; each save rewrites it through a
    temp file and an atomic rename. There is no locking: two concurrent
    read-modify-write cycles race and the last save wins.
    """

    name = "json"

    def __init__(self, path: str | Path | None = None) -> None:
        self.path = Path(path or os.getenv("GRANA_DB_FILE", DEFAULT_DB_FILE))

    def initialize(self) -> bool:
        """Create the file with the default categories. Returns False if it already exists."""
        if self.path.exists():
            return False
        self.save(new_document())
        logger.info("JSON store initialized path=%s", self.path)
        return True

    def load(self) -> Document:
        if not self.path.exists():
            self.initialize()
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            logger.exception("JSON store read failed path=%s", self.path)
            raise StoreError(f"Unable to read document store: {exc}") from exc

        if not isinstance(raw, dict):
            raise StoreError(f"Expected a JSON object in {self.path}, got {type(raw).__name__}")

        try:
            document = Document(
                accounts=[self._parse_account(row) for row in raw.get("accounts") or []],
                transactions=[self._parse_transaction(row) for row in raw.get("transactions") or []],
                categories=[self._parse_category(row) for row in raw.get("categories") or []],
            )
        except (KeyError, TypeError, ValueError, ArithmeticError) as exc:
            raise StoreError(f"Document store {self.path} is malformed: {exc}") from exc

        logger.debug(
            "JSON store loaded accounts=%d transactions=%d categories=%d",
            len(document.accounts),
            len(document.transactions),
            len(document.categories),
        )
        return document

    def save(self, document: Document) -> None:
        payload = {
            "accounts": [self._serialize_account(a) for a in document.accounts],
            "transactions": [self._serialize_transaction(t) for t in document.transactions],
            "categories": [self._serialize_category(c) for c in document.categories],
        }
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=".database-", suffix=".json")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    json.dump(payload, fh, indent=2, ensure_ascii=False)
                os.replace(tmp_name, self.path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            logger.exception("JSON store write failed path=%s", self.path)
            raise StoreError(f"Unable to write document store: {exc}") from exc

    # ---- row parsing ----

    def _parse_category(self, row: dict[str, Any]) -> Category:
        return Category(
            id=str(row["id"]),
            name=str(row["name"]),
            kind=TransactionKind(row.get("kind") or row.get("type")),
            color=str(row.get("color") or "#64748b"),
            icon=str(row.get("icon") or "tag"),
        )

    def _parse_transaction(self, row: dict[str, Any]) -> Transaction:
        return Transaction(
            id=str(row["id"]),
            owner_id=str(row["ownerId"]),
            description=str(row["description"]),
            amount=Decimal(str(row["amount"])),
            kind=TransactionKind(row["kind"]),
            category_id=str(row["categoryId"]),
            date=self._parse_timestamp(row["date"]),
            created_at=self._parse_timestamp(row["createdAt"]),
            updated_at=self._parse_optional_timestamp(row.get("updatedAt")),
            payment_method=str(row.get("paymentMethod") or "other"),
            tags=[str(tag) for tag in row.get("tags") or []],
        )

    def _parse_account(self, row: dict[str, Any]) -> Account:
        stats = row.get("stats") or {}
        prefs = row.get("preferences") or {}
        return Account(
            id=str(row["id"]),
            name=str(row["name"]),
            email=str(row["email"]),
            password_hash=str(row["passwordHash"]),
            created_at=self._parse_timestamp(row["createdAt"]),
            last_login_at=self._parse_optional_timestamp(row.get("lastLoginAt")),
            stats=AccountStats(
                total_transactions=int(stats.get("totalTransactions", 0)),
                total_saved=Decimal(str(stats.get("totalSaved", 0))),
                streak=int(stats.get("streak", 0)),
            ),
            preferences=AccountPreferences(
                currency=str(prefs.get("currency", "BRL")),
                theme=str(prefs.get("theme", "dark")),
                notifications=bool(prefs.get("notifications", True)),
                language=str(prefs.get("language", "pt-BR")),
            ),
        )

    def _parse_timestamp(self, value: Any) -> datetime:
        parsed = datetime.fromisoformat(str(value))
        if parsed.tzinfo is not None:
            parsed = parsed.astimezone().replace(tzinfo=None)
        return parsed

    def _parse_optional_timestamp(self, value: Any) -> datetime | None:
        return self._parse_timestamp(value) if value else None

    # ---- row serialization ----

    def _serialize_category(self, category: Category) -> dict[str, Any]:
        return {
            "id": category.id,
            "name": category.name,
            "kind": category.kind.value,
            "color": category.color,
            "icon": category.icon,
        }

    def _serialize_transaction(self, txn: Transaction) -> dict[str, Any]:
        return {
            "id": txn.id,
            "ownerId": txn.owner_id,
            "description": txn.description,
            "amount": float(txn.amount),
            "kind": txn.kind.value,
            "categoryId": txn.category_id,
            "date": txn.date.isoformat(),
            "paymentMethod": txn.payment_method,
            "tags": list(txn.tags),
            "createdAt": txn.created_at.isoformat(),
            "updatedAt": txn.updated_at.isoformat() if txn.updated_at else None,
        }

    def _serialize_account(self, account: Account) -> dict[str, Any]:
        return {
            "id": account.id,
            "name": account.name,
            "email": account.email,
            "passwordHash": account.password_hash,
            "createdAt": account.created_at.isoformat(),
            "lastLoginAt": account.last_login_at.isoformat() if account.last_login_at else None,
            "stats": {
                "totalTransactions": account.stats.total_transactions,
                "totalSaved": float(account.stats.total_saved),
                "streak": account.stats.streak,
            },
            "preferences": {
                "currency": account.preferences.currency,
                "theme": account.preferences.theme,
                "notifications": account.preferences.notifications,
                "language": account.preferences.language,
            },
        }
