"""
Storage Services Package

Provides the abstract ledger store interface and its in-memory
implementation. Callers depend on the interface so the backend stays
swappable.
"""

from budget_ledger.services.storage.interface import (
    CategoryCollection,
    CollectionInterface,
    GoalCollection,
    LedgerError,
    LedgerStorageInterface,
    NotFoundError,
    RecurringCollection,
    ReferenceError,
    TransactionCollection,
    ValidationError,
)
from budget_ledger.services.storage.memory import (
    CategoryStore,
    GoalStore,
    InMemoryLedgerStore,
    RecurringStore,
    TransactionStore,
)

__all__ = [
    # Interfaces
    "CategoryCollection",
    "CollectionInterface",
    "GoalCollection",
    "LedgerStorageInterface",
    "RecurringCollection",
    "TransactionCollection",
    # Exceptions
    "LedgerError",
    "NotFoundError",
    "ReferenceError",
    "ValidationError",
    # In-memory implementation
    "CategoryStore",
    "GoalStore",
    "InMemoryLedgerStore",
    "RecurringStore",
    "TransactionStore",
]
