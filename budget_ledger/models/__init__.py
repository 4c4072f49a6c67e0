"""
Data Models Package

This package contains all Pydantic models used by Budget Ledger.
All data flowing through the store, the engine and the exporters
conforms to these schemas.
"""

from budget_ledger.models.ledger import (
    DEFAULT_CATEGORIES,
    Category,
    CategoryCreate,
    CategoryType,
    CategoryUpdate,
    EntityKind,
    Frequency,
    Goal,
    GoalCreate,
    GoalUpdate,
    LedgerSnapshot,
    RecurringTransaction,
    RecurringTransactionCreate,
    RecurringTransactionUpdate,
    Transaction,
    TransactionCreate,
    TransactionType,
    TransactionUpdate,
    ValidationIssue,
)
from budget_ledger.models.analysis import (
    AnalyticsReport,
    CategoryGroup,
    CategoryTypeTotals,
    DashboardOverview,
    GoalProgress,
    TransactionFilter,
    TransactionSummary,
)
from budget_ledger.models.activity import (
    EventSeverity,
    LedgerEvent,
    LedgerEventBuilder,
    LedgerEventType,
)

__all__ = [
    # Ledger models
    "DEFAULT_CATEGORIES",
    "Category",
    "CategoryCreate",
    "CategoryType",
    "CategoryUpdate",
    "EntityKind",
    "Frequency",
    "Goal",
    "GoalCreate",
    "GoalUpdate",
    "LedgerSnapshot",
    "RecurringTransaction",
    "RecurringTransactionCreate",
    "RecurringTransactionUpdate",
    "Transaction",
    "TransactionCreate",
    "TransactionType",
    "TransactionUpdate",
    "ValidationIssue",
    # Aggregation models
    "AnalyticsReport",
    "CategoryGroup",
    "CategoryTypeTotals",
    "DashboardOverview",
    "GoalProgress",
    "TransactionFilter",
    "TransactionSummary",
    # Activity models
    "EventSeverity",
    "LedgerEvent",
    "LedgerEventBuilder",
    "LedgerEventType",
]
