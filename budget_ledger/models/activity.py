"""
Activity Event Models for Budget Ledger

Every store mutation and every rejected operation is described by a
LedgerEvent and written to the structured log. Events are not stored:
they exist so a log reader can follow what happened to an entity.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from budget_ledger.utils.dates import utc_now


class LedgerEventType(str, Enum):
    """Types of events the ledger logs."""
    # Categories
    CATEGORY_CREATED = "category_created"
    CATEGORY_UPDATED = "category_updated"
    CATEGORY_DELETED = "category_deleted"

    # Transactions
    TRANSACTION_CREATED = "transaction_created"
    TRANSACTION_UPDATED = "transaction_updated"
    TRANSACTION_DELETED = "transaction_deleted"

    # Goals
    GOAL_CREATED = "goal_created"
    GOAL_UPDATED = "goal_updated"
    GOAL_DELETED = "goal_deleted"

    # Recurring transactions
    RECURRING_CREATED = "recurring_created"
    RECURRING_UPDATED = "recurring_updated"
    RECURRING_DELETED = "recurring_deleted"
    RECURRING_ADVANCED = "recurring_advanced"
    RECURRING_PAUSED = "recurring_paused"

    # Backups
    BACKUP_EXPORTED = "backup_exported"
    BACKUP_RESTORED = "backup_restored"

    # Failures
    OPERATION_REJECTED = "operation_rejected"


class EventSeverity(str, Enum):
    """Severity level for ledger events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


_MUTATION_EVENTS = {
    ("category", "created"): LedgerEventType.CATEGORY_CREATED,
    ("category", "updated"): LedgerEventType.CATEGORY_UPDATED,
    ("category", "deleted"): LedgerEventType.CATEGORY_DELETED,
    ("transaction", "created"): LedgerEventType.TRANSACTION_CREATED,
    ("transaction", "updated"): LedgerEventType.TRANSACTION_UPDATED,
    ("transaction", "deleted"): LedgerEventType.TRANSACTION_DELETED,
    ("goal", "created"): LedgerEventType.GOAL_CREATED,
    ("goal", "updated"): LedgerEventType.GOAL_UPDATED,
    ("goal", "deleted"): LedgerEventType.GOAL_DELETED,
    ("recurring", "created"): LedgerEventType.RECURRING_CREATED,
    ("recurring", "updated"): LedgerEventType.RECURRING_UPDATED,
    ("recurring", "deleted"): LedgerEventType.RECURRING_DELETED,
}


class LedgerEvent(BaseModel):
    """A single ledger event."""

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=utc_now,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: LedgerEventType
    severity: EventSeverity = EventSeverity.INFO

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Collection name (e.g., 'transaction', 'goal')"
    )
    entity_id: Optional[str] = None

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(default_factory=dict)

    error_code: Optional[str] = None
    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "description": self.description,
            "details": self.details,
            "error_code": self.error_code,
            "error_message": self.error_message,
        }


class LedgerEventBuilder:
    """
    Helper class to build ledger events with common patterns.

    Usage:
        event = LedgerEventBuilder.mutation("transaction", "created", tx.id)
        event = LedgerEventBuilder.rejected("goal", "update", goal_id, error)
    """

    @staticmethod
    def mutation(
        entity_type: str,
        action: str,
        entity_id: str,
        details: Optional[dict] = None,
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=_MUTATION_EVENTS[(entity_type, action)],
            entity_type=entity_type,
            entity_id=entity_id,
            description=f"{entity_type.capitalize()} {action}: {entity_id}",
            details=details or {},
        )

    @staticmethod
    def rejected(
        entity_type: str,
        operation: str,
        entity_id: Optional[str],
        error: Exception,
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.OPERATION_REJECTED,
            severity=EventSeverity.WARNING,
            entity_type=entity_type,
            entity_id=entity_id,
            description=f"{entity_type.capitalize()} {operation} rejected",
            details={"operation": operation},
            error_code=type(error).__name__,
            error_message=str(error),
        )

    @staticmethod
    def recurring_advanced(
        recurring_id: str,
        next_due: datetime,
        posted: int,
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.RECURRING_ADVANCED,
            entity_type="recurring",
            entity_id=recurring_id,
            description=f"Recurring transaction advanced to {next_due.isoformat()}",
            details={
                "next_due": next_due.isoformat(),
                "transactions_posted": posted,
            },
        )

    @staticmethod
    def recurring_paused(
        recurring_id: str,
        end_date: Optional[datetime],
        posted: int,
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.RECURRING_PAUSED,
            entity_type="recurring",
            entity_id=recurring_id,
            description="Recurring transaction reached its end date and was paused",
            details={
                "end_date": end_date.isoformat() if end_date else None,
                "transactions_posted": posted,
            },
        )

    @staticmethod
    def backup_exported(
        version: str,
        transaction_count: int,
        category_count: int,
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.BACKUP_EXPORTED,
            description=f"Backup exported (version {version})",
            details={
                "version": version,
                "transactions": transaction_count,
                "categories": category_count,
            },
        )

    @staticmethod
    def backup_restored(
        version: str,
        transaction_count: int,
        category_count: int,
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.BACKUP_RESTORED,
            description=f"Backup restored (version {version})",
            details={
                "version": version,
                "transactions": transaction_count,
                "categories": category_count,
            },
        )
