"""Ledger exceptions"""

from typing import Optional

from budget_ledger.models.ledger import ValidationIssue


class LedgerError(Exception):
    """Base exception for ledger operations."""
    pass


class ValidationError(LedgerError):
    """Missing or malformed field on create/update."""

    def __init__(self, message: str, issues: Optional[list[ValidationIssue]] = None):
        super().__init__(message)
        self.issues = issues or []


class ReferenceError(LedgerError):
    """A category reference does not resolve, or is still in use."""
    pass


class NotFoundError(LedgerError):
    """Entity not found in storage."""

    def __init__(self, entity: str, entity_id: str):
        super().__init__(f"{entity.capitalize()} not found: {entity_id}")
        self.entity = entity
        self.entity_id = entity_id
