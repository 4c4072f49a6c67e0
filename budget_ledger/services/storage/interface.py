"""
Abstract Storage Interface

DESIGN DECISION: The ledger store is defined as an abstract interface.
This allows us to:
1. Keep the aggregation engine independent of where data lives
2. Use the in-memory store in tests and in the running service alike
3. Add a database-backed store later without touching callers

Every entity kind exposes the same CRUD contract through a collection
object: list, get, create, update, delete.
"""

from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any, Generic, TypeVar, Union

from budget_ledger.exceptions import (
    LedgerError,
    NotFoundError,
    ReferenceError,
    ValidationError,
)
from budget_ledger.models.ledger import (
    Category,
    CategoryCreate,
    CategoryUpdate,
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


EntityT = TypeVar("EntityT")
CreateT = TypeVar("CreateT")
UpdateT = TypeVar("UpdateT")


class CollectionInterface(ABC, Generic[EntityT, CreateT, UpdateT]):
    """
    CRUD contract for one entity kind.

    Every method is synchronous. Returned entities are copies; mutating
    them never changes what the store holds.
    """

    @abstractmethod
    def list(self) -> list[EntityT]:
        """
        Snapshot of the collection in insertion order.
        """
        pass

    @abstractmethod
    def get(self, entity_id: str) -> EntityT:
        """
        Retrieve one entity by id.

        Raises:
            NotFoundError: If the id is absent
        """
        pass

    @abstractmethod
    def create(self, data: Union[CreateT, Mapping[str, Any]]) -> EntityT:
        """
        Validate input, assign an id and timestamps, and store it.

        Args:
            data: Typed input model or a plain mapping of fields

        Returns:
            The stored entity

        Raises:
            ValidationError: If a required field is missing or malformed
            ReferenceError: If a category reference does not resolve
        """
        pass

    @abstractmethod
    def update(
        self,
        entity_id: str,
        patch: Union[UpdateT, Mapping[str, Any]],
    ) -> EntityT:
        """
        Apply a partial patch and refresh the update timestamp.

        Only fields set on the patch are applied. The id never changes.

        Raises:
            NotFoundError: If the id is absent
            ValidationError: If the merged entity is invalid
            ReferenceError: If a category reference does not resolve
        """
        pass

    @abstractmethod
    def delete(self, entity_id: str) -> None:
        """
        Remove an entity.

        Raises:
            NotFoundError: If the id is absent
        """
        pass


CategoryCollection = CollectionInterface[Category, CategoryCreate, CategoryUpdate]
TransactionCollection = CollectionInterface[Transaction, TransactionCreate, TransactionUpdate]
GoalCollection = CollectionInterface[Goal, GoalCreate, GoalUpdate]
RecurringCollection = CollectionInterface[
    RecurringTransaction,
    RecurringTransactionCreate,
    RecurringTransactionUpdate,
]


class LedgerStorageInterface(ABC):
    """
    Abstract interface for the whole ledger.

    Owns the four collections and the operations that span them.
    """

    @property
    @abstractmethod
    def categories(self) -> CategoryCollection:
        pass

    @property
    @abstractmethod
    def transactions(self) -> TransactionCollection:
        pass

    @property
    @abstractmethod
    def goals(self) -> GoalCollection:
        pass

    @property
    @abstractmethod
    def recurring(self) -> RecurringCollection:
        pass

    @abstractmethod
    def snapshot(self) -> LedgerSnapshot:
        """
        Copies of all four collections, taken consistently.
        """
        pass

    @abstractmethod
    def restore(
        self,
        transactions: list[Transaction],
        categories: list[Category],
    ) -> None:
        """
        Replace the transaction and category collections.

        Used to import a backup. Either both collections are replaced
        or nothing changes.

        Raises:
            ValidationError: If ids are duplicated
            ReferenceError: If any reference would not resolve afterwards
        """
        pass

