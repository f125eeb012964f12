from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum


class TransactionKind(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"


@dataclass
class Category:
    id: str
    name: str
    kind: TransactionKind
    color: str = "#64748b"
    icon: str = "tag"


@dataclass
class Transaction:
    id: str
    owner_id: str
    description: str
    amount: Decimal
    kind: TransactionKind
    category_id: str
    date: datetime
    created_at: datetime
    updated_at: datetime | None = None
    payment_method: str = "other"
    tags: list[str] = field(default_factory=list)


@dataclass
class AccountStats:
    total_transactions: int = 0
    total_saved: Decimal = Decimal("0")
    streak: int = 0


@dataclass
class AccountPreferences:
    currency: str = "BRL"
    theme: str = "dark"
    notifications: bool = True
    language: str = "pt-BR"


@dataclass
class Account:
    id: str
    name: str
    email: str
    password_hash: str
    created_at: datetime
    last_login_at: datetime | None = None
    stats: AccountStats = field(default_factory=AccountStats)
    preferences: AccountPreferences = field(default_factory=AccountPreferences)


@dataclass
class Document:
    """Aggregate root persisted as a single JSON document."""

    accounts: list[Account] = field(default_factory=list)
    transactions: list[Transaction] = field(default_factory=list)
    categories: list[Category] = field(default_factory=list)

    def find_account(self, account_id: str) -> Account | None:
        return next((a for a in self.accounts if a.id == account_id), None)

    def find_account_by_email(self, email: str) -> Account | None:
        return next((a for a in self.accounts if a.email == email), None)

    def transactions_for(self, owner_id: str) -> list[Transaction]:
        return [t for t in self.transactions if t.owner_id == owner_id]


DEFAULT_CATEGORIES: tuple[Category, ...] = (
    Category("food", "Food", TransactionKind.EXPENSE, "#f59e0b", "utensils"),
    Category("transport", "Transport", TransactionKind.EXPENSE, "#3b82f6", "car"),
    Category("entertainment", "Entertainment", TransactionKind.EXPENSE, "#ec4899", "film"),
    Category("education", "Education", TransactionKind.EXPENSE, "#10b981", "graduation-cap"),
    Category("health", "Health", TransactionKind.EXPENSE, "#ef4444", "heart"),
    Category("housing", "Housing", TransactionKind.EXPENSE, "#8b5cf6", "home"),
    Category("salary", "Salary", TransactionKind.INCOME, "#10b981", "money-bill-wave"),
    Category("freelance", "Freelance", TransactionKind.INCOME, "#6366f1", "laptop-code"),
    Category("investments", "Investments", TransactionKind.INCOME, "#06b6d4", "chart-line"),
    Category("gifts", "Gifts", TransactionKind.INCOME, "#d946ef", "gift"),
)


def new_document() -> Document:
    """Fresh document seeded with the default category set."""
    return Document(categories=[
        Category(c.id, c.name, c.kind, c.color, c.icon) for c in DEFAULT_CATEGORIES
    ])
