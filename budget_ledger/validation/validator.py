"""
Ledger Validation

Validation happens in two stages:

STAGE 1 - SCHEMA VALIDATION:
- Required field presence
- Types and formats (decimal amounts, enum values, dates)
- Value constraints (positive amounts, non-empty names)

STAGE 2 - REFERENTIAL VALIDATION:
- category_id resolves to a live category
- the category's type matches the entry's type
- a category still in use is not deleted or re-typed

Stage 1 raises ValidationError with one ValidationIssue per problem.
Stage 2 raises ReferenceError. Validation never fixes input silently.
"""

from collections.abc import Iterable, Mapping
from decimal import Decimal
from typing import Any, Optional, TypeVar, Union

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from budget_ledger.config import LedgerSettings, get_settings
from budget_ledger.exceptions import (
    ReferenceError,
    ValidationError,
)
from budget_ledger.models.ledger import (
    Category,
    RecurringTransaction,
    Transaction,
    TransactionType,
    ValidationIssue,
)


ModelT = TypeVar("ModelT", bound=BaseModel)

# pydantic error types mapped to the issue vocabulary used in messages
_ISSUE_TYPES = {
    "missing": "missing",
    "greater_than": "invalid_value",
    "greater_than_equal": "invalid_value",
    "string_too_short": "invalid_value",
    "string_too_long": "invalid_value",
    "string_pattern_mismatch": "invalid_format",
    "decimal_parsing": "invalid_format",
    "decimal_max_places": "invalid_format",
    "datetime_parsing": "invalid_format",
    "datetime_from_date_parsing": "invalid_format",
    "enum": "invalid_value",
    "extra_forbidden": "not_allowed",
}


def issues_from_pydantic(error: PydanticValidationError) -> list[ValidationIssue]:
    """Convert pydantic errors into ValidationIssue records."""
    issues = []
    for detail in error.errors():
        field = ".".join(str(part) for part in detail["loc"]) or "__root__"
        issues.append(ValidationIssue(
            field=field,
            issue_type=_ISSUE_TYPES.get(detail["type"], detail["type"]),
            message=detail["msg"],
        ))
    return issues


class LedgerValidator:
    """
    Validates store input.

    Schema checks run without any store state. Referential checks are
    handed the collections they need by the caller, which holds the
    relevant locks while they run.
    """

    def __init__(self, settings: Optional[LedgerSettings] = None):
        self._settings = settings or get_settings().ledger

    # -------------------------------------------------------------------------
    # Stage 1: schema
    # -------------------------------------------------------------------------

    def parse(
        self,
        model: type[ModelT],
        data: Union[ModelT, Mapping[str, Any]],
    ) -> ModelT:
        """
        Coerce caller input into `model`.

        Model instances pass through; mappings are validated.
        """
        if isinstance(data, model):
            return data
        if isinstance(data, BaseModel):
            data = data.model_dump(exclude_unset=True)
        if not isinstance(data, Mapping):
            raise ValidationError(
                f"Expected {model.__name__} or a mapping, got {type(data).__name__}",
                [ValidationIssue(
                    field="__root__",
                    issue_type="invalid_format",
                    message="Input must be a mapping of fields",
                )],
            )
        try:
            return model.model_validate(data)
        except PydanticValidationError as e:
            issues = issues_from_pydantic(e)
            raise ValidationError(
                f"Invalid {model.__name__}: {len(issues)} issue(s)",
                issues,
            ) from e

    def check_amount(self, amount: Decimal, field: str = "amount") -> None:
        """Reject amounts above the configured maximum."""
        maximum = Decimal(str(self._settings.max_transaction_amount))
        if amount > maximum:
            raise ValidationError(
                f"Amount {amount} exceeds the maximum of {maximum}",
                [ValidationIssue(
                    field=field,
                    issue_type="suspicious_value",
                    message=f"Amount ({amount:,.2f}) is larger than {maximum:,.2f}",
                )],
            )

    # -------------------------------------------------------------------------
    # Stage 2: references
    # -------------------------------------------------------------------------

    def check_category_reference(
        self,
        category_id: str,
        entry_type: TransactionType,
        categories: Mapping[str, Category],
    ) -> Category:
        """
        Ensure category_id names a live category of the same type.

        Returns the resolved category.
        """
        category = categories.get(category_id)
        if category is None:
            raise ReferenceError(f"Category does not exist: {category_id}")
        if category.type != entry_type:
            raise ReferenceError(
                f"Category {category.name!r} is an {category.type.value} category "
                f"and cannot hold {entry_type.value} entries"
            )
        return category

    def check_category_unused(
        self,
        category_id: str,
        transactions: Iterable[Transaction],
        recurring: Iterable[RecurringTransaction],
    ) -> None:
        """Reject deleting a category that is still referenced."""
        tx_refs = sum(1 for tx in transactions if tx.category_id == category_id)
        rec_refs = sum(1 for item in recurring if item.category_id == category_id)
        if tx_refs or rec_refs:
            raise ReferenceError(
                f"Category {category_id} is still used by {tx_refs} transaction(s) "
                f"and {rec_refs} recurring transaction(s)"
            )

    def check_category_retype(
        self,
        category: Category,
        new_type: TransactionType,
        transactions: Iterable[Transaction],
        recurring: Iterable[RecurringTransaction],
    ) -> None:
        """Reject changing the type of a category that entries still point at."""
        if new_type == category.type:
            return
        try:
            self.check_category_unused(category.id, transactions, recurring)
        except ReferenceError as e:
            raise ReferenceError(
                f"Cannot change type of category {category.name!r}: {e}"
            ) from e

    def check_unique_ids(self, entity: str, ids: Iterable[str]) -> None:
        """Reject a batch that repeats an id."""
        seen = set()
        duplicates = []
        for entity_id in ids:
            if entity_id in seen:
                duplicates.append(entity_id)
            seen.add(entity_id)
        if duplicates:
            raise ValidationError(
                f"Duplicate {entity} ids: {', '.join(sorted(set(duplicates)))}",
                [ValidationIssue(
                    field="id",
                    issue_type="duplicate",
                    message=f"{entity.capitalize()} id {entity_id} appears more than once",
                ) for entity_id in sorted(set(duplicates))],
            )
