"""Validation package."""

from budget_ledger.validation.validator import LedgerValidator, issues_from_pydantic

__all__ = ["LedgerValidator", "issues_from_pydantic"]
