"""Report serialization package."""

from budget_ledger.reports.serializer import (
    FORMAT_VERSION,
    BackupContents,
    BackupFormatError,
    BackupPayload,
    category_rows,
    parse,
    serialize,
    serialize_json,
    summary_rows,
    transaction_rows,
)

__all__ = [
    "FORMAT_VERSION",
    "BackupContents",
    "BackupFormatError",
    "BackupPayload",
    "category_rows",
    "parse",
    "serialize",
    "serialize_json",
    "summary_rows",
    "transaction_rows",
]
