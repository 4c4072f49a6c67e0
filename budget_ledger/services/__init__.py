"""Services package."""

from budget_ledger.services.storage import (
    InMemoryLedgerStore,
    LedgerError,
    LedgerStorageInterface,
    NotFoundError,
    ReferenceError,
    ValidationError,
)

__all__ = [
    # Storage services
    "InMemoryLedgerStore",
    "LedgerError",
    "LedgerStorageInterface",
    "NotFoundError",
    "ReferenceError",
    "ValidationError",
]
