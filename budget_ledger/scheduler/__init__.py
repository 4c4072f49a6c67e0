"""Recurring transaction scheduling package."""

from budget_ledger.scheduler.recurring import (
    PERIODS,
    advance,
    due_recurring,
    is_overdue,
    next_occurrence,
    occurrences_through,
    toggle,
)

__all__ = [
    "PERIODS",
    "advance",
    "due_recurring",
    "is_overdue",
    "next_occurrence",
    "occurrences_through",
    "toggle",
]
