"""
Main Orchestrator for Budget Ledger

This module ties together all the components and defines the
flows that span more than one of them:
1. Post due recurring (scheduler -> store -> activity log)
2. Export backup (store snapshot -> serializer -> activity log)
3. Import backup (parser -> store restore -> activity log)

DESIGN DECISION: Nothing here runs on its own.
There is no timer and no background thread. An external job calls
`post_due_recurring` when it wants recurring transactions booked.
"""

from collections.abc import Mapping
from datetime import datetime
from typing import Any, Optional, Union

from pydantic import BaseModel, Field

from budget_ledger.activity import ActivityLogger
from budget_ledger.config import Settings, get_settings
from budget_ledger.exceptions import LedgerError
from budget_ledger.models.ledger import (
    RecurringTransaction,
    RecurringTransactionUpdate,
    Transaction,
    TransactionCreate,
)
from budget_ledger.queries import LedgerQueryExecutor
from budget_ledger.reports import BackupContents, parse, serialize
from budget_ledger.scheduler import advance, due_recurring, occurrences_through, toggle
from budget_ledger.services.storage import InMemoryLedgerStore, LedgerStorageInterface
from budget_ledger.utils.dates import utc_now
from budget_ledger.validation import LedgerValidator


class RecurringPostingResult(BaseModel):
    """Outcome of posting one recurring item."""

    recurring: RecurringTransaction
    posted: list[Transaction] = Field(default_factory=list)
    paused: bool = False


class LedgerOrchestrator:
    """
    Runs the flows that touch several components.

    Flow for post_due_recurring:
    1. Pick active recurring items with next_due <= as_of
    2. Create one transaction per missed occurrence, dated on it
    3. Advance the item past as_of (or pause it at end_date)
    4. Persist the advanced item

    A failure on one item removes what was posted for it, is logged,
    and does not stop the others.
    """

    def __init__(
        self,
        store: LedgerStorageInterface,
        activity_logger: Optional[ActivityLogger] = None,
        settings: Optional[Settings] = None,
    ):
        self._store = store
        self._activity = activity_logger
        self._settings = settings or get_settings()

    @property
    def store(self) -> LedgerStorageInterface:
        return self._store

    def post_due_recurring(self, as_of: Optional[datetime] = None) -> list[RecurringPostingResult]:
        """
        Book every due recurring transaction up to `as_of`.

        Args:
            as_of: Cut-off instant (defaults to the current time)

        Returns:
            One result per recurring item that was processed successfully
        """
        as_of = as_of or utc_now()
        results = []

        for item in due_recurring(self._store.recurring.list(), as_of):
            try:
                results.append(self._post_one(item, as_of))
            except LedgerError as e:
                if self._activity:
                    self._activity.log_rejected("recurring", "post", item.id, e)

        return results

    def _post_one(self, item: RecurringTransaction, as_of: datetime) -> RecurringPostingResult:
        posted = []
        try:
            for occurrence in occurrences_through(item, as_of):
                posted.append(self._store.transactions.create(TransactionCreate(
                    description=item.description,
                    amount=item.amount,
                    type=item.type,
                    category_id=item.category_id,
                    date=occurrence,
                    notes=item.notes,
                )))

            advanced = advance(item, as_of)
            saved = self._store.recurring.update(item.id, RecurringTransactionUpdate(
                next_due=advanced.next_due,
                last_executed=advanced.last_executed,
                is_active=advanced.is_active,
            ))
        except LedgerError:
            # Undo the postings; the item keeps its old next_due.
            for tx in posted:
                self._store.transactions.delete(tx.id)
            raise

        paused = item.is_active and not saved.is_active
        if self._activity:
            if paused:
                self._activity.log_recurring_paused(saved.id, saved.end_date, len(posted))
            else:
                self._activity.log_recurring_advanced(saved.id, saved.next_due, len(posted))

        return RecurringPostingResult(recurring=saved, posted=posted, paused=paused)

    def toggle_recurring(self, recurring_id: str) -> RecurringTransaction:
        """Pause an active recurring item or resume a paused one."""
        current = self._store.recurring.get(recurring_id)
        flipped = toggle(current)
        return self._store.recurring.update(
            recurring_id,
            RecurringTransactionUpdate(is_active=flipped.is_active),
        )

    def export_backup(self, export_date: Optional[datetime] = None) -> dict[str, Any]:
        """JSON-ready backup of all transactions and categories."""
        snapshot = self._store.snapshot()
        version = self._settings.ledger.export_version
        payload = serialize(
            snapshot.transactions,
            snapshot.categories,
            export_date=export_date,
            version=version,
        )

        if self._activity:
            self._activity.log_backup_exported(
                version,
                len(snapshot.transactions),
                len(snapshot.categories),
            )
        return payload

    def import_backup(self, payload: Union[str, bytes, Mapping[str, Any]]) -> BackupContents:
        """
        Replace transactions and categories with a backup's contents.

        Goals and recurring items are kept. Nothing changes if the
        backup is malformed or its references do not resolve.

        Raises:
            BackupFormatError: If the payload cannot be read
            ValidationError: If the backup repeats an id
            ReferenceError: If a transaction or a kept recurring item
                            would point at a missing category
        """
        contents = parse(payload)
        self._store.restore(contents.transactions, contents.categories)

        if self._activity:
            self._activity.log_backup_restored(
                contents.version,
                len(contents.transactions),
                len(contents.categories),
            )
        return contents


def create_ledger_components(
    settings: Optional[Settings] = None,
) -> tuple[InMemoryLedgerStore, LedgerQueryExecutor, LedgerOrchestrator]:
    """
    Factory function to create all ledger components.

    Args:
        settings: Root settings. Defaults to the cached environment settings.

    Returns:
        (store, query_executor, orchestrator)
    """
    settings = settings or get_settings()
    ledger_settings = settings.ledger

    activity_logger = ActivityLogger(ledger_settings=ledger_settings)
    store = InMemoryLedgerStore(
        validator=LedgerValidator(ledger_settings),
        activity_logger=activity_logger,
        seed_default_categories=ledger_settings.seed_default_categories,
    )
    executor = LedgerQueryExecutor(store, ledger_settings)
    orchestrator = LedgerOrchestrator(store, activity_logger, settings)

    return store, executor, orchestrator
