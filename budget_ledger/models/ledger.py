"""
Core Data Models for Budget Ledger

These models define the strict schemas for the four ledger collections:
categories, transactions, savings goals and recurring transactions.
They are designed to:
1. Enforce types and value constraints at runtime
2. Provide clear validation error messages
3. Serialize to the camelCase JSON shape used by exports and backups

DESIGN DECISION: Money is always Decimal. JSON carries it as a decimal
string, so "50.00" survives an export/import round trip unchanged.

Each entity has three shapes:
- <Entity>Create: what a caller supplies (no id, no timestamps)
- <Entity>: the stored record
- <Entity>Update: a partial patch; only explicitly set fields are applied
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Annotated, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)
from pydantic.alias_generators import to_camel

from budget_ledger.utils.dates import utc_now


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class TransactionType(str, Enum):
    """Direction of money. Categories use the same two values."""
    INCOME = "income"
    EXPENSE = "expense"


CategoryType = TransactionType


class Frequency(str, Enum):
    """How often a recurring transaction repeats."""
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class EntityKind(str, Enum):
    """Names of the four ledger collections."""
    CATEGORY = "category"
    TRANSACTION = "transaction"
    GOAL = "goal"
    RECURRING = "recurring"


# =============================================================================
# SHARED FIELD TYPES
# =============================================================================

Money = Annotated[
    Decimal,
    Field(gt=0, decimal_places=2, description="Strictly positive amount"),
]

Balance = Annotated[
    Decimal,
    Field(ge=0, decimal_places=2, description="Non-negative amount"),
]

HexColor = Annotated[
    str,
    Field(pattern=r"^#[0-9a-fA-F]{6}$", description="Hex color, e.g. #ef4444"),
]

DEFAULT_CATEGORY_COLOR = "#6B7280"
DEFAULT_CATEGORY_ICON = "📊"
DEFAULT_GOAL_COLOR = "#3b82f6"


class LedgerModel(BaseModel):
    """
    Base for every ledger schema.

    Attributes are snake_case in Python and camelCase on the wire.
    Both spellings are accepted on input.
    """
    model_config = ConfigDict(
        str_strip_whitespace=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class PatchModel(LedgerModel):
    """
    Base for partial patches.

    Unknown keys are rejected, so an attempt to patch `id` or a
    timestamp fails instead of being silently dropped.
    """
    model_config = ConfigDict(extra="forbid")


class StoredRecord(LedgerModel):
    """Identity and timestamps assigned by the store."""

    id: str = Field(
        ...,
        min_length=1,
        description="Unique, immutable identifier"
    )
    created_at: datetime = Field(
        default_factory=utc_now,
        description="When the record was created (UTC)"
    )
    updated_at: datetime = Field(
        default_factory=utc_now,
        description="Last update timestamp (UTC)"
    )


# =============================================================================
# CATEGORY
# =============================================================================

class CategoryCreate(LedgerModel):
    """Fields a caller supplies to create a category."""

    name: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Display name"
    )
    icon: str = Field(
        default=DEFAULT_CATEGORY_ICON,
        min_length=1,
        max_length=16,
        description="Emoji or short icon code"
    )
    color: HexColor = DEFAULT_CATEGORY_COLOR
    type: CategoryType = Field(
        ...,
        description="Whether this category classifies income or expenses"
    )


class Category(StoredRecord, CategoryCreate):
    """A stored category."""


class CategoryUpdate(PatchModel):
    """Partial patch for a category."""

    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    icon: Optional[str] = Field(default=None, min_length=1, max_length=16)
    color: Optional[HexColor] = None
    type: Optional[CategoryType] = None


# =============================================================================
# TRANSACTION
# =============================================================================

class TransactionCreate(LedgerModel):
    """Fields a caller supplies to record a transaction."""

    description: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="What the money was for"
    )
    amount: Money
    type: TransactionType
    category_id: str = Field(
        ...,
        min_length=1,
        description="Category this transaction is classified under"
    )
    date: datetime = Field(
        ...,
        description="When the transaction happened"
    )
    location: Optional[str] = Field(
        default=None,
        max_length=200
    )
    notes: Optional[str] = Field(
        default=None,
        max_length=1000
    )
    tags: list[str] = Field(default_factory=list)

    @field_validator("tags", mode="before")
    @classmethod
    def default_tags(cls, v):
        """A null tag list is stored as an empty one."""
        return [] if v is None else v


class Transaction(StoredRecord, TransactionCreate):
    """A stored transaction."""


class TransactionUpdate(PatchModel):
    """Partial patch for a transaction."""

    description: Optional[str] = Field(default=None, min_length=1, max_length=200)
    amount: Optional[Money] = None
    type: Optional[TransactionType] = None
    category_id: Optional[str] = Field(default=None, min_length=1)
    date: Optional[datetime] = None
    location: Optional[str] = Field(default=None, max_length=200)
    notes: Optional[str] = Field(default=None, max_length=1000)
    tags: Optional[list[str]] = None


# =============================================================================
# GOAL
# =============================================================================

class GoalCreate(LedgerModel):
    """
    Fields a caller supplies to create a savings goal.

    current_amount may exceed target_amount; the engine never clamps it.
    """

    name: str = Field(
        ...,
        min_length=1,
        max_length=100
    )
    description: Optional[str] = Field(
        default=None,
        max_length=500
    )
    target_amount: Money
    current_amount: Balance = Decimal("0")
    deadline: Optional[datetime] = None
    color: HexColor = DEFAULT_GOAL_COLOR
    is_completed: bool = False


class Goal(StoredRecord, GoalCreate):
    """A stored savings goal."""

    @property
    def target_reached(self) -> bool:
        return self.current_amount >= self.target_amount


class GoalUpdate(PatchModel):
    """Partial patch for a goal."""

    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    target_amount: Optional[Money] = None
    current_amount: Optional[Balance] = None
    deadline: Optional[datetime] = None
    color: Optional[HexColor] = None
    is_completed: Optional[bool] = None


# =============================================================================
# RECURRING TRANSACTION
# =============================================================================

class RecurringTransactionCreate(LedgerModel):
    """Fields a caller supplies to schedule a recurring transaction."""

    description: str = Field(
        ...,
        min_length=1,
        max_length=200
    )
    amount: Money
    type: TransactionType
    category_id: str = Field(..., min_length=1)
    frequency: Frequency = Frequency.MONTHLY
    next_due: datetime = Field(
        ...,
        description="Next occurrence"
    )
    last_executed: Optional[datetime] = None
    is_active: bool = Field(
        default=True,
        description="False while paused"
    )
    end_date: Optional[datetime] = Field(
        default=None,
        description="No occurrence is scheduled after this instant"
    )
    notes: Optional[str] = Field(
        default=None,
        max_length=1000
    )


class RecurringTransaction(StoredRecord, RecurringTransactionCreate):
    """A stored recurring transaction."""


class RecurringTransactionUpdate(PatchModel):
    """Partial patch for a recurring transaction."""

    description: Optional[str] = Field(default=None, min_length=1, max_length=200)
    amount: Optional[Money] = None
    type: Optional[TransactionType] = None
    category_id: Optional[str] = Field(default=None, min_length=1)
    frequency: Optional[Frequency] = None
    next_due: Optional[datetime] = None
    last_executed: Optional[datetime] = None
    is_active: Optional[bool] = None
    end_date: Optional[datetime] = None
    notes: Optional[str] = Field(default=None, max_length=1000)


# =============================================================================
# VALIDATION & SNAPSHOT MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single problem found while validating input."""

    field: str = Field(
        ...,
        description="Field with the issue (dotted path for nested fields)"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_value', 'suspicious_value')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )


class LedgerSnapshot(BaseModel):
    """Copies of all four collections taken at one point in time."""

    categories: list[Category] = Field(default_factory=list)
    transactions: list[Transaction] = Field(default_factory=list)
    goals: list[Goal] = Field(default_factory=list)
    recurring: list[RecurringTransaction] = Field(default_factory=list)


DEFAULT_CATEGORIES: tuple[CategoryCreate, ...] = (
    CategoryCreate(name="Food & Dining", icon="🍔", color="#ef4444", type=CategoryType.EXPENSE),
    CategoryCreate(name="Transportation", icon="🚗", color="#3b82f6", type=CategoryType.EXPENSE),
    CategoryCreate(name="Shopping", icon="🛒", color="#8b5cf6", type=CategoryType.EXPENSE),
    CategoryCreate(name="Entertainment", icon="🎬", color="#f59e0b", type=CategoryType.EXPENSE),
    CategoryCreate(name="Healthcare", icon="🏥", color="#06b6d4", type=CategoryType.EXPENSE),
    CategoryCreate(name="Salary", icon="💰", color="#22c55e", type=CategoryType.INCOME),
    CategoryCreate(name="Freelance", icon="💼", color="#10b981", type=CategoryType.INCOME),
    CategoryCreate(name="Investment", icon="📈", color="#8b5cf6", type=CategoryType.INCOME),
)
