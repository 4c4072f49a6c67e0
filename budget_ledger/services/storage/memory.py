"""
In-Memory Storage Implementation

The ledger lives in four insertion-ordered dicts, one per entity kind.
Nothing survives a process restart.

CONCURRENCY: every collection owns a re-entrant lock. Mutations hold the
lock of the collection they change, plus the locks of the collections
they check references against. Locks are always acquired in the fixed
order categories -> transactions -> goals -> recurring, so concurrent
callers cannot deadlock and a category cannot disappear between the
reference check and the write that depends on it.

Callers only ever see deep copies of stored entities.
"""

import threading
from collections.abc import Mapping
from contextlib import ExitStack, contextmanager
from typing import Any, Generic, Optional, Union
from uuid import uuid4

from budget_ledger.activity import ActivityLogger
from budget_ledger.exceptions import LedgerError, NotFoundError
from budget_ledger.models.ledger import (
    DEFAULT_CATEGORIES,
    Category,
    CategoryCreate,
    CategoryUpdate,
    EntityKind,
    Goal,
    GoalCreate,
    GoalUpdate,
    LedgerSnapshot,
    RecurringTransaction,
    RecurringTransactionCreate,
    RecurringTransactionUpdate,
    Transaction,
    TransactionCreate,
    TransactionUpdate,
)
from budget_ledger.services.storage.interface import (
    CollectionInterface,
    CreateT,
    EntityT,
    LedgerStorageInterface,
    UpdateT,
)
from budget_ledger.utils.dates import utc_now
from budget_ledger.validation import LedgerValidator


@contextmanager
def _hold(locks):
    """Acquire `locks` in the given order and release them in reverse."""
    with ExitStack() as stack:
        for lock in locks:
            stack.enter_context(lock)
        yield


class InMemoryCollection(CollectionInterface[EntityT, CreateT, UpdateT], Generic[EntityT, CreateT, UpdateT]):
    """
    Generic dict-backed collection.

    Subclasses name their models and override `_finalize` and
    `_before_delete` to add their invariants.
    """

    kind: EntityKind
    entity_model: type
    create_model: type
    update_model: type

    def __init__(self, store: "InMemoryLedgerStore"):
        self._store = store
        self._items: dict[str, EntityT] = {}
        self._retired_ids: set[str] = set()
        self._lock = threading.RLock()

    @property
    def lock(self) -> threading.RLock:
        return self._lock

    def _mutation_locks(self) -> tuple:
        """Locks held while this collection is mutated, in global order."""
        return (self._lock,)

    def _values(self):
        """Stored entities without copying. Callers must hold the lock."""
        return self._items.values()

    def _lookup(self) -> Mapping[str, EntityT]:
        """Stored entities by id without copying. Callers must hold the lock."""
        return self._items

    def _new_id(self) -> str:
        entity_id = str(uuid4())
        while entity_id in self._items or entity_id in self._retired_ids:
            entity_id = str(uuid4())
        return entity_id

    def _require(self, entity_id: str) -> EntityT:
        item = self._items.get(entity_id)
        if item is None:
            raise NotFoundError(self.kind.value, entity_id)
        return item

    def _build(self, fields: dict) -> EntityT:
        return self._store.validator.parse(self.entity_model, fields)

    def _finalize(self, entity: EntityT, previous: Optional[EntityT]) -> EntityT:
        """Check cross-field and referential invariants; may adjust derived fields."""
        return entity

    def _before_delete(self, entity: EntityT) -> None:
        """Raise to veto a delete."""

    def get(self, entity_id: str) -> EntityT:
        with self._lock:
            return self._require(entity_id).model_copy(deep=True)

    def create(self, data: Union[CreateT, Mapping[str, Any]]) -> EntityT:
        try:
            fields = self._store.validator.parse(self.create_model, data)
            with _hold(self._mutation_locks()):
                now = utc_now()
                entity = self._build({
                    **fields.model_dump(),
                    "id": self._new_id(),
                    "created_at": now,
                    "updated_at": now,
                })
                entity = self._finalize(entity, None)
                self._items[entity.id] = entity
        except LedgerError as e:
            self._store.log_rejected(self.kind, "create", None, e)
            raise

        self._store.log_mutation(self.kind, "created", entity.id)
        return entity.model_copy(deep=True)

    def update(
        self,
        entity_id: str,
        patch: Union[UpdateT, Mapping[str, Any]],
    ) -> EntityT:
        try:
            changes = self._store.validator.parse(self.update_model, patch)
            changed_fields = changes.model_dump(exclude_unset=True)
            with _hold(self._mutation_locks()):
                current = self._require(entity_id)
                entity = self._build({
                    **current.model_dump(),
                    **changed_fields,
                    "id": current.id,
                    "created_at": current.created_at,
                    "updated_at": utc_now(),
                })
                entity = self._finalize(entity, current)
                self._items[entity_id] = entity
        except LedgerError as e:
            self._store.log_rejected(self.kind, "update", entity_id, e)
            raise

        self._store.log_mutation(
            self.kind,
            "updated",
            entity_id,
            {"fields": sorted(changed_fields)},
        )
        return entity.model_copy(deep=True)

    def delete(self, entity_id: str) -> None:
        try:
            with _hold(self._mutation_locks()):
                entity = self._require(entity_id)
                self._before_delete(entity)
                del self._items[entity_id]
                self._retired_ids.add(entity_id)
        except LedgerError as e:
            self._store.log_rejected(self.kind, "delete", entity_id, e)
            raise

        self._store.log_mutation(self.kind, "deleted", entity_id)

    def _replace(self, entities) -> None:
        """Swap the whole collection. Callers must hold the lock."""
        self._retired_ids.update(set(self._items) - {e.id for e in entities})
        self._items = {e.id: e.model_copy(deep=True) for e in entities}

    def list(self):
        with self._lock:
            return [item.model_copy(deep=True) for item in self._items.values()]


class CategoryStore(InMemoryCollection[Category, CategoryCreate, CategoryUpdate]):
    """Categories. Deleting or re-typing a category in use is rejected."""

    kind = EntityKind.CATEGORY
    entity_model = Category
    create_model = CategoryCreate
    update_model = CategoryUpdate

    def _mutation_locks(self) -> tuple:
        return (self._lock, self._store.transactions.lock, self._store.recurring.lock)

    def _finalize(self, entity: Category, previous: Optional[Category]) -> Category:
        if previous is not None:
            self._store.validator.check_category_retype(
                previous,
                entity.type,
                self._store.transactions._values(),
                self._store.recurring._values(),
            )
        return entity

    def _before_delete(self, entity: Category) -> None:
        self._store.validator.check_category_unused(
            entity.id,
            self._store.transactions._values(),
            self._store.recurring._values(),
        )


class TransactionStore(InMemoryCollection[Transaction, TransactionCreate, TransactionUpdate]):
    """Transactions. Each must point at a live category of its own type."""

    kind = EntityKind.TRANSACTION
    entity_model = Transaction
    create_model = TransactionCreate
    update_model = TransactionUpdate

    def _mutation_locks(self) -> tuple:
        return (self._store.categories.lock, self._lock)

    def _finalize(self, entity: Transaction, previous: Optional[Transaction]) -> Transaction:
        validator = self._store.validator
        validator.check_amount(entity.amount)
        validator.check_category_reference(
            entity.category_id,
            entity.type,
            self._store.categories._lookup(),
        )
        return entity


class GoalStore(InMemoryCollection[Goal, GoalCreate, GoalUpdate]):
    """Savings goals. Reaching the target marks the goal completed."""

    kind = EntityKind.GOAL
    entity_model = Goal
    create_model = GoalCreate
    update_model = GoalUpdate

    def _finalize(self, entity: Goal, previous: Optional[Goal]) -> Goal:
        if entity.target_reached and not entity.is_completed:
            entity = entity.model_copy(update={"is_completed": True})
        return entity


class RecurringStore(InMemoryCollection[
    RecurringTransaction,
    RecurringTransactionCreate,
    RecurringTransactionUpdate,
]):
    """Recurring transactions. Same category rules as transactions."""

    kind = EntityKind.RECURRING
    entity_model = RecurringTransaction
    create_model = RecurringTransactionCreate
    update_model = RecurringTransactionUpdate

    def _mutation_locks(self) -> tuple:
        return (self._store.categories.lock, self._lock)

    def _finalize(
        self,
        entity: RecurringTransaction,
        previous: Optional[RecurringTransaction],
    ) -> RecurringTransaction:
        validator = self._store.validator
        validator.check_amount(entity.amount)
        validator.check_category_reference(
            entity.category_id,
            entity.type,
            self._store.categories._lookup(),
        )
        return entity


class InMemoryLedgerStore(LedgerStorageInterface):
    """
    In-memory implementation of the ledger store.

    Args:
        validator: Validation rules. Defaults to one built from settings.
        activity_logger: Receives one event per mutation or rejection.
                         If None, nothing is logged.
        seed_default_categories: Create the default category set.
    """

    def __init__(
        self,
        validator: Optional[LedgerValidator] = None,
        activity_logger: Optional[ActivityLogger] = None,
        seed_default_categories: bool = False,
    ):
        self.validator = validator or LedgerValidator()
        self._activity = activity_logger

        self._categories = CategoryStore(self)
        self._transactions = TransactionStore(self)
        self._goals = GoalStore(self)
        self._recurring = RecurringStore(self)

        if seed_default_categories:
            for category in DEFAULT_CATEGORIES:
                self._categories.create(category)

    @property
    def categories(self) -> CategoryStore:
        return self._categories

    @property
    def transactions(self) -> TransactionStore:
        return self._transactions

    @property
    def goals(self) -> GoalStore:
        return self._goals

    @property
    def recurring(self) -> RecurringStore:
        return self._recurring

    def _all_locks(self) -> tuple:
        return (
            self._categories.lock,
            self._transactions.lock,
            self._goals.lock,
            self._recurring.lock,
        )

    def snapshot(self) -> LedgerSnapshot:
        with _hold(self._all_locks()):
            return LedgerSnapshot(
                categories=self._categories.list(),
                transactions=self._transactions.list(),
                goals=self._goals.list(),
                recurring=self._recurring.list(),
            )

    def restore(
        self,
        transactions: list[Transaction],
        categories: list[Category],
    ) -> None:
        validator = self.validator
        try:
            categories = [validator.parse(Category, c) for c in categories]
            transactions = [validator.parse(Transaction, t) for t in transactions]
            validator.check_unique_ids("category", (c.id for c in categories))
            validator.check_unique_ids("transaction", (t.id for t in transactions))

            lookup = {c.id: c for c in categories}
            with _hold(self._all_locks()):
                for tx in transactions:
                    validator.check_amount(tx.amount)
                    validator.check_category_reference(tx.category_id, tx.type, lookup)
                for item in self._recurring._values():
                    validator.check_category_reference(item.category_id, item.type, lookup)

                self._categories._replace(categories)
                self._transactions._replace(transactions)
        except LedgerError as e:
            self.log_rejected(EntityKind.TRANSACTION, "restore", None, e)
            raise

    # -------------------------------------------------------------------------
    # Activity logging
    # -------------------------------------------------------------------------

    def log_mutation(
        self,
        kind: EntityKind,
        action: str,
        entity_id: str,
        details: Optional[dict] = None,
    ) -> None:
        if self._activity:
            self._activity.log_mutation(kind.value, action, entity_id, details)

    def log_rejected(
        self,
        kind: EntityKind,
        operation: str,
        entity_id: Optional[str],
        error: Exception,
    ) -> None:
        if self._activity:
            self._activity.log_rejected(kind.value, operation, entity_id, error)
