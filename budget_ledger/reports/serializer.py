"""
Report Serializer

Turns ledger data into two export shapes:

1. TABULAR ROWS - lists of string cells in a fixed order, ready for a
   CSV writer or a PDF table. Same input, same rows.
2. JSON BACKUP - a versioned payload of transactions and categories
   that `parse` reads back into equal entities.

Rendering bytes (CSV quoting, PDF layout, file download) is left to
the caller.
"""

import json
from collections.abc import Iterable, Mapping
from datetime import datetime
from typing import Any, Optional, Union

from pydantic import Field
from pydantic import ValidationError as PydanticValidationError

from budget_ledger.exceptions import LedgerError
from budget_ledger.models.analysis import CategoryGroup, TransactionSummary
from budget_ledger.models.ledger import (
    Category,
    LedgerModel,
    Transaction,
    ValidationIssue,
)
from budget_ledger.utils.dates import short_date, utc_now
from budget_ledger.validation import issues_from_pydantic


FORMAT_VERSION = "1.0"
SUPPORTED_MAJOR_VERSION = "1"

UNKNOWN_CATEGORY = "Unknown"

CATEGORY_TRANSACTION_HEADER = ["Date", "Description", "Amount", "Notes"]
TRANSACTION_HEADER = ["Date", "Description", "Category", "Type", "Amount", "Notes", "Location"]


class BackupFormatError(LedgerError):
    """A backup payload could not be read."""

    def __init__(self, message: str, issues: Optional[list[ValidationIssue]] = None):
        super().__init__(message)
        self.issues = issues or []


# =============================================================================
# TABULAR ROWS
# =============================================================================

def summary_rows(summary: TransactionSummary) -> list[list[str]]:
    """Label/value rows for the summary block."""
    return [
        ["Total Income", str(summary.total_income)],
        ["Total Expenses", str(summary.total_expenses)],
        ["Balance", str(summary.balance)],
        ["Total Transactions", str(summary.count)],
    ]


def category_rows(groups: Iterable[CategoryGroup]) -> list[list[str]]:
    """
    Rows for the category breakdown.

    Per group: the category name, its total (as a magnitude), a column
    header and one row per transaction. Groups keep their input order.
    """
    rows = []
    for group in groups:
        rows.append([group.category.name])
        rows.append(["Total", str(group.magnitude)])
        rows.append(list(CATEGORY_TRANSACTION_HEADER))
        for tx in group.transactions:
            rows.append([
                short_date(tx.date),
                tx.description,
                str(tx.amount),
                tx.notes or "",
            ])
    return rows


def transaction_rows(
    transactions: Iterable[Transaction],
    categories: Iterable[Category],
) -> list[list[str]]:
    """Header row plus one row per transaction, in input order."""
    names = {category.id: category.name for category in categories}
    rows = [list(TRANSACTION_HEADER)]
    for tx in transactions:
        rows.append([
            short_date(tx.date),
            tx.description,
            names.get(tx.category_id, UNKNOWN_CATEGORY),
            tx.type.value,
            str(tx.amount),
            tx.notes or "",
            tx.location or "",
        ])
    return rows


# =============================================================================
# JSON BACKUP
# =============================================================================

class BackupPayload(LedgerModel):
    """Wire shape of a JSON backup."""

    export_date: datetime
    version: str = Field(..., min_length=1)
    transactions: list[Transaction] = Field(default_factory=list)
    categories: list[Category] = Field(default_factory=list)


class BackupContents(LedgerModel):
    """Entities read back from a backup."""

    transactions: list[Transaction]
    categories: list[Category]
    version: str
    export_date: datetime


def serialize(
    transactions: Iterable[Transaction],
    categories: Iterable[Category],
    export_date: Optional[datetime] = None,
    version: str = FORMAT_VERSION,
) -> dict[str, Any]:
    """
    Build a JSON-ready backup dict.

    Keys are camelCase, amounts are decimal strings and datetimes are
    ISO-8601.
    """
    payload = BackupPayload(
        export_date=export_date or utc_now(),
        version=version,
        transactions=list(transactions),
        categories=list(categories),
    )
    return payload.model_dump(mode="json", by_alias=True)


def serialize_json(
    transactions: Iterable[Transaction],
    categories: Iterable[Category],
    export_date: Optional[datetime] = None,
    version: str = FORMAT_VERSION,
    indent: Optional[int] = 2,
) -> str:
    """Backup as a JSON document."""
    return json.dumps(
        serialize(transactions, categories, export_date, version),
        indent=indent,
        ensure_ascii=False,
    )


def parse(payload: Union[str, bytes, Mapping[str, Any]]) -> BackupContents:
    """
    Read a backup produced by `serialize` or `serialize_json`.

    Raises:
        BackupFormatError: If the payload is not valid JSON, is missing
                           fields, or has an unsupported major version
    """
    if isinstance(payload, (str, bytes)):
        try:
            payload = json.loads(payload)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise BackupFormatError(f"Backup is not valid JSON: {e}") from e

    if not isinstance(payload, Mapping):
        raise BackupFormatError("Backup must be a JSON object")

    version = payload.get("version")
    if not isinstance(version, str) or version.split(".")[0] != SUPPORTED_MAJOR_VERSION:
        raise BackupFormatError(
            f"Unsupported backup version: {version!r} "
            f"(expected {SUPPORTED_MAJOR_VERSION}.x)"
        )

    try:
        backup = BackupPayload.model_validate(payload)
    except PydanticValidationError as e:
        issues = issues_from_pydantic(e)
        raise BackupFormatError(
            f"Malformed backup: {len(issues)} issue(s)",
            issues,
        ) from e

    return BackupContents(
        transactions=backup.transactions,
        categories=backup.categories,
        version=backup.version,
        export_date=backup.export_date,
    )
