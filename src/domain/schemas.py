from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Annotated, Any, List, Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, PlainSerializer
from pydantic.alias_generators import to_camel

# Money stays Decimal in memory and goes out on the wire as a JSON number.
Amount = Annotated[Decimal, PlainSerializer(lambda value: float(value), return_type=float, when_used="json")]


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------- requests ----------------

class RegisterRequest(ApiModel):
    name: str = ""
    email: str = ""
    password: str = ""
    confirm_password: str = ""


class LoginRequest(ApiModel):
    email: str = ""
    password: str = ""


class TransactionCreate(ApiModel):
    """
    Raw transaction payload.

    Fields are deliberately loose; the transaction validator owns the checks so
    that each failure maps to its own error code. `type` and `category` are
    accepted as aliases of `kind` and `categoryId`.
    """

    description: Any = None
    amount: Any = None
    kind: Any = Field(default=None, validation_alias=AliasChoices("kind", "type"))
    category_id: Any = Field(default=None, validation_alias=AliasChoices("categoryId", "category_id", "category"))
    date: Any = None
    payment_method: Optional[str] = Field(default=None, validation_alias=AliasChoices("paymentMethod", "payment_method"))
    tags: List[str] = Field(default_factory=list)


class TransactionFilters(ApiModel):
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=20, ge=1, le=100)
    kind: Optional[Literal["income", "expense"]] = None
    category_id: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None


# ---------------- analytics ----------------

class MonthlyOverview(ApiModel):
    year: int
    month: int
    total_income: Amount = Decimal("0")
    total_expense: Amount = Decimal("0")
    balance: Amount = Decimal("0")
    transaction_count: int = 0


class CategoryBreakdown(ApiModel):
    category_id: str
    name: str
    kind: Literal["income", "expense"]
    color: str = ""
    icon: str = ""
    total: Amount = Decimal("0")
    count: int = 0
    percentage: float = 0.0


class TrendPoint(ApiModel):
    period: str = Field(description="Calendar month as YYYY-MM.")
    income: Amount = Decimal("0")
    expense: Amount = Decimal("0")
    balance: Amount = Decimal("0")


class Insight(ApiModel):
    kind: Literal["warning", "info", "success"]
    title: str
    message: str
    suggestion: str
    icon: str = ""
    priority: Literal["high", "medium", "low"]


class Predictions(ApiModel):
    next_month_expense: Amount
    savings_opportunity: Amount
    trend: Literal["up", "down"]


class TopCategory(ApiModel):
    category_id: str
    name: str
    amount: Amount


class InsightSummary(ApiModel):
    current_expenses: Amount
    expense_change: float
    potential_savings: Amount
    top_category: Optional[TopCategory] = None


# ---------------- responses ----------------

class AccountView(ApiModel):
    id: str
    name: str
    email: str
    preferences: dict[str, Any] = Field(default_factory=dict)
    stats: dict[str, Any] = Field(default_factory=dict)


class AuthResult(ApiModel):
    token: str
    user: AccountView


class TransactionView(ApiModel):
    id: str
    owner_id: str
    description: str
    amount: Amount
    kind: Literal["income", "expense"]
    category_id: str
    date: datetime
    payment_method: str
    tags: List[str] = Field(default_factory=list)
    created_at: datetime
    updated_at: Optional[datetime] = None


class TransactionPage(ApiModel):
    transactions: List[TransactionView] = Field(default_factory=list)
    total: int = 0
    total_income: Amount = Decimal("0")
    total_expenses: Amount = Decimal("0")
    page: int = 1
    total_pages: int = 0


class CategoryUsage(ApiModel):
    total_amount: Amount = Decimal("0")
    transaction_count: int = 0
    last_used: Optional[datetime] = None


class CategoryView(ApiModel):
    id: str
    name: str
    kind: Literal["income", "expense"]
    color: str
    icon: str
    stats: CategoryUsage = Field(default_factory=CategoryUsage)


class DashboardOverview(ApiModel):
    balance: Amount
    total_income: Amount
    total_expenses: Amount
    transactions_count: int
    financial_health: Literal["excellent", "good", "warning"]


class Dashboard(ApiModel):
    overview: DashboardOverview
    category_analysis: List[CategoryBreakdown] = Field(default_factory=list)
    monthly_trends: List[TrendPoint] = Field(default_factory=list)
    predictions: Predictions


class InsightReport(ApiModel):
    insights: List[Insight] = Field(default_factory=list)
    summary: InsightSummary
