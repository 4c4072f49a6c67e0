"""Tests for the ledger validator."""

import pytest
from decimal import Decimal

from budget_ledger.config import LedgerSettings
from budget_ledger.exceptions import ReferenceError, ValidationError
from budget_ledger.models import CategoryCreate, TransactionType
from budget_ledger.validation import LedgerValidator
from tests.factories import make_category, make_transaction


@pytest.fixture
def validator():
    return LedgerValidator(LedgerSettings(_env_file=None))


class TestSchemaStage:
    """Tests for schema validation."""

    def test_parse_passes_models_through(self, validator):
        """Test that an instance of the target model is returned as is."""
        category = CategoryCreate(name="Books", type="expense")
        assert validator.parse(CategoryCreate, category) is category

    def test_parse_reports_every_issue(self, validator):
        """Test that all problems are reported at once."""
        with pytest.raises(ValidationError) as exc_info:
            validator.parse(CategoryCreate, {"name": "", "type": "transfer", "color": "blue"})
        fields = sorted(issue.field for issue in exc_info.value.issues)
        assert fields == ["color", "name", "type"]

    def test_amount_limit(self, validator):
        """Test the configured maximum."""
        validator.check_amount(Decimal("1000000.00"))
        with pytest.raises(ValidationError):
            validator.check_amount(Decimal("1000000.01"))


class TestReferenceStage:
    """Tests for referential validation."""

    def test_resolves_category(self, validator):
        """Test that a matching category is returned."""
        food = make_category("c1")
        assert validator.check_category_reference("c1", TransactionType.EXPENSE, {"c1": food}) is food

    def test_type_mismatch(self, validator):
        """Test that types must match."""
        with pytest.raises(ReferenceError):
            validator.check_category_reference("c1", TransactionType.INCOME, {"c1": make_category("c1")})

    def test_unused_check_counts_references(self, validator):
        """Test the in-use message."""
        txs = [make_transaction("t1", "1.00"), make_transaction("t2", "2.00")]
        with pytest.raises(ReferenceError, match="2 transaction"):
            validator.check_category_unused("c1", txs, [])

    def test_retype_same_type_allowed(self, validator):
        """Test that keeping the type is always allowed."""
        validator.check_category_retype(
            make_category("c1"),
            TransactionType.EXPENSE,
            [make_transaction("t1", "1.00")],
            [],
        )

    def test_unique_ids(self, validator):
        """Test duplicate detection."""
        with pytest.raises(ValidationError) as exc_info:
            validator.check_unique_ids("category", ["a", "b", "a"])
        assert [issue.issue_type for issue in exc_info.value.issues] == ["duplicate"]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
