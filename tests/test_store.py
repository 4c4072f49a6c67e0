"""
Tests for the in-memory ledger store

Covers the CRUD contract, referential invariants, copy semantics,
snapshot/restore and the activity events the store emits.
"""

import threading
import pytest
from datetime import datetime
from decimal import Decimal

from budget_ledger.config import LedgerSettings
from budget_ledger.models import DEFAULT_CATEGORIES, CategoryUpdate, TransactionCreate
from budget_ledger.services.storage import (
    InMemoryLedgerStore,
    NotFoundError,
    ReferenceError,
    ValidationError,
)
from budget_ledger.validation import LedgerValidator
from tests.factories import make_category, make_transaction


def expense(category_id: str, amount: str = "50.00", **fields) -> dict:
    return {
        "description": "Groceries",
        "amount": amount,
        "type": "expense",
        "categoryId": category_id,
        "date": "2024-01-05T12:00:00",
        **fields,
    }


class TestCreate:
    """Tests for create."""

    def test_create_assigns_id_and_timestamps(self, store, food):
        """Test that the store assigns identity and timestamps."""
        tx = store.transactions.create(expense(food.id))
        assert tx.id
        assert tx.created_at == tx.updated_at
        assert tx.amount == Decimal("50.00")

    def test_create_accepts_typed_input(self, store, food):
        """Test that an input model is accepted as well as a mapping."""
        tx = store.transactions.create(TransactionCreate(
            description="Bus",
            amount=Decimal("2.40"),
            type="expense",
            category_id=food.id,
            date=datetime(2024, 1, 6),
        ))
        assert store.transactions.get(tx.id).description == "Bus"

    def test_ids_are_unique(self, store, food):
        """Test that every create gets a fresh id."""
        ids = {store.transactions.create(expense(food.id)).id for _ in range(20)}
        assert len(ids) == 20

    def test_missing_field_raises_validation_error(self, store, food):
        """Test that a missing field is reported per field."""
        data = expense(food.id)
        del data["description"]
        with pytest.raises(ValidationError) as exc_info:
            store.transactions.create(data)
        assert [i.field for i in exc_info.value.issues] == ["description"]
        assert exc_info.value.issues[0].issue_type == "missing"

    def test_non_mapping_input_rejected(self, store):
        """Test that arbitrary objects are not accepted."""
        with pytest.raises(ValidationError):
            store.categories.create(["Food", "expense"])

    def test_unknown_category_raises_reference_error(self, store):
        """Test that category_id must resolve."""
        with pytest.raises(ReferenceError):
            store.transactions.create(expense("missing"))
        assert store.transactions.list() == []

    def test_type_mismatch_raises_reference_error(self, store, salary):
        """Test that an expense cannot sit in an income category."""
        with pytest.raises(ReferenceError):
            store.transactions.create(expense(salary.id))

    def test_recurring_checks_category(self, store, salary):
        """Test that recurring items follow the same category rules."""
        with pytest.raises(ReferenceError):
            store.recurring.create({
                "description": "Rent",
                "amount": "1200.00",
                "type": "expense",
                "categoryId": salary.id,
                "nextDue": "2024-01-15T00:00:00",
            })

    def test_amount_above_maximum_rejected(self, activity):
        """Test that the configured maximum amount is enforced."""
        store = InMemoryLedgerStore(
            validator=LedgerValidator(LedgerSettings(max_transaction_amount=100.0)),
            activity_logger=activity,
        )
        category = store.categories.create({"name": "Food", "type": "expense"})
        with pytest.raises(ValidationError) as exc_info:
            store.transactions.create(expense(category.id, amount="100.01"))
        assert exc_info.value.issues[0].issue_type == "suspicious_value"

    def test_goal_marked_completed_when_target_reached(self, store):
        """Test that reaching the target sets is_completed without clamping."""
        goal = store.goals.create({
            "name": "Holiday",
            "targetAmount": "100.00",
            "currentAmount": "150.00",
        })
        assert goal.is_completed is True
        assert goal.current_amount == Decimal("150.00")


class TestReadCopies:
    """Tests that callers never hold store internals."""

    def test_list_keeps_insertion_order(self, store, food):
        """Test list order."""
        first = store.transactions.create(expense(food.id, description="first"))
        second = store.transactions.create(expense(food.id, description="second"))
        assert [t.id for t in store.transactions.list()] == [first.id, second.id]

    def test_mutating_returned_entity_does_not_leak(self, store, food):
        """Test that returned entities are copies."""
        tx = store.transactions.create(expense(food.id, tags=["weekly"]))
        tx.tags.append("changed")
        listed = store.transactions.list()[0]
        listed.description = "changed"
        stored = store.transactions.get(tx.id)
        assert stored.tags == ["weekly"]
        assert stored.description == "Groceries"

    def test_get_missing_raises(self, store):
        """Test get on an absent id."""
        with pytest.raises(NotFoundError) as exc_info:
            store.goals.get("nope")
        assert exc_info.value.entity == "goal"
        assert exc_info.value.entity_id == "nope"


class TestUpdate:
    """Tests for update."""

    def test_update_applies_only_set_fields(self, store, food):
        """Test partial patch semantics."""
        tx = store.transactions.create(expense(food.id, notes="weekly shop"))
        updated = store.transactions.update(tx.id, {"amount": "75.00"})
        assert updated.amount == Decimal("75.00")
        assert updated.notes == "weekly shop"
        assert updated.id == tx.id
        assert updated.created_at == tx.created_at
        assert updated.updated_at >= tx.updated_at

    def test_update_missing_raises_not_found(self, store):
        """Test update on an absent id."""
        with pytest.raises(NotFoundError):
            store.categories.update("nope", {"name": "X"})

    def test_update_cannot_change_id(self, store, food):
        """Test that id is not patchable."""
        with pytest.raises(ValidationError):
            store.categories.update(food.id, {"id": "other"})
        assert store.categories.get(food.id).id == food.id

    def test_failed_update_leaves_store_unchanged(self, store, food, salary):
        """Test that a rejected patch changes nothing."""
        tx = store.transactions.create(expense(food.id))
        with pytest.raises(ReferenceError):
            store.transactions.update(tx.id, {"categoryId": salary.id})
        assert store.transactions.get(tx.id).model_dump() == tx.model_dump()

    def test_update_with_type_and_category_together(self, store, food, salary):
        """Test that type and category may change in one patch."""
        tx = store.transactions.create(expense(food.id))
        updated = store.transactions.update(tx.id, {"type": "income", "categoryId": salary.id})
        assert updated.category_id == salary.id

    def test_update_invalid_value_rejected(self, store, food):
        """Test that patches are validated."""
        tx = store.transactions.create(expense(food.id))
        with pytest.raises(ValidationError):
            store.transactions.update(tx.id, {"amount": "-1"})

    def test_goal_update_completes_goal(self, store):
        """Test that topping up past the target completes the goal."""
        goal = store.goals.create({"name": "Bike", "targetAmount": "300.00"})
        assert goal.is_completed is False
        goal = store.goals.update(goal.id, {"currentAmount": "300.00"})
        assert goal.is_completed is True

    def test_retype_referenced_category_rejected(self, store, food):
        """Test that a category in use cannot change type."""
        store.transactions.create(expense(food.id))
        with pytest.raises(ReferenceError):
            store.categories.update(food.id, CategoryUpdate(type="income"))

    def test_retype_unused_category_allowed(self, store, food):
        """Test that an unused category may change type."""
        updated = store.categories.update(food.id, {"type": "income"})
        assert updated.type.value == "income"


class TestDelete:
    """Tests for delete."""

    def test_delete_removes(self, store, food):
        """Test delete."""
        tx = store.transactions.create(expense(food.id))
        store.transactions.delete(tx.id)
        assert store.transactions.list() == []

    def test_delete_missing_raises(self, store):
        """Test delete on an absent id."""
        with pytest.raises(NotFoundError):
            store.recurring.delete("nope")

    def test_delete_referenced_category_rejected(self, store, food):
        """Test that a referenced category cannot be deleted."""
        store.transactions.create(expense(food.id))
        with pytest.raises(ReferenceError) as exc_info:
            store.categories.delete(food.id)
        assert "1 transaction" in str(exc_info.value)
        assert store.categories.get(food.id).name == "Food"

    def test_delete_category_referenced_by_recurring_rejected(self, store, food):
        """Test that recurring references also block deletion."""
        store.recurring.create({
            "description": "Box",
            "amount": "20.00",
            "type": "expense",
            "categoryId": food.id,
            "nextDue": "2024-01-15T00:00:00",
        })
        with pytest.raises(ReferenceError):
            store.categories.delete(food.id)


class TestSnapshotRestore:
    """Tests for snapshot and restore."""

    def test_snapshot_copies_all_collections(self, store, food):
        """Test snapshot contents."""
        store.transactions.create(expense(food.id))
        store.goals.create({"name": "Bike", "targetAmount": "300.00"})
        snapshot = store.snapshot()
        assert len(snapshot.categories) == 1
        assert len(snapshot.transactions) == 1
        assert len(snapshot.goals) == 1
        assert snapshot.recurring == []

    def test_restore_replaces_transactions_and_categories(self, store, food):
        """Test that restore swaps both collections."""
        store.transactions.create(expense(food.id))
        categories = [make_category("c1"), make_category("c2", "income")]
        transactions = [make_transaction("t1", "10.00"), make_transaction("t2", "5.00", "income", "c2")]

        store.restore(transactions, categories)

        assert [c.id for c in store.categories.list()] == ["c1", "c2"]
        assert [t.id for t in store.transactions.list()] == ["t1", "t2"]

    def test_restore_with_dangling_reference_changes_nothing(self, store, food):
        """Test that restore is all-or-nothing."""
        before = store.snapshot()
        with pytest.raises(ReferenceError):
            store.restore([make_transaction("t1", "10.00", category_id="gone")], [make_category("c1")])
        after = store.snapshot()
        assert after.model_dump() == before.model_dump()

    def test_restore_duplicate_ids_rejected(self, store):
        """Test that repeated ids are rejected."""
        with pytest.raises(ValidationError):
            store.restore([], [make_category("c1"), make_category("c1")])

    def test_restore_keeps_recurring_references_valid(self, store, food):
        """Test that restore cannot orphan a recurring item."""
        store.recurring.create({
            "description": "Box",
            "amount": "20.00",
            "type": "expense",
            "categoryId": food.id,
            "nextDue": "2024-01-15T00:00:00",
        })
        with pytest.raises(ReferenceError):
            store.restore([], [make_category("c1")])


class TestSeedingAndActivity:
    """Tests for default seeding and emitted events."""

    def test_seed_default_categories(self):
        """Test that defaults are created when asked."""
        store = InMemoryLedgerStore(seed_default_categories=True)
        names = [c.name for c in store.categories.list()]
        assert names == [c.name for c in DEFAULT_CATEGORIES]

    def test_mutations_are_logged(self, store, food, activity):
        """Test that each mutation produces one event."""
        tx = store.transactions.create(expense(food.id))
        store.transactions.update(tx.id, {"notes": "x"})
        store.transactions.delete(tx.id)
        assert activity.names() == ["log_mutation"] * 4
        assert [args[1] for _, args in activity.calls] == ["created", "created", "updated", "deleted"]

    def test_rejections_are_logged(self, store, activity):
        """Test that failed operations are logged."""
        with pytest.raises(NotFoundError):
            store.transactions.delete("nope")
        name, args = activity.calls[-1]
        assert name == "log_rejected"
        assert args[:3] == ("transaction", "delete", "nope")


class TestConcurrency:
    """Tests for concurrent callers."""

    def test_concurrent_creates_keep_ids_unique(self, store, food):
        """Test that parallel creates neither lose writes nor repeat ids."""
        def worker():
            for _ in range(25):
                store.transactions.create(expense(food.id))

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        ids = [t.id for t in store.transactions.list()]
        assert len(ids) == 100
        assert len(set(ids)) == 100


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
