"""Tests for the recurring transaction scheduler."""

import pytest
from datetime import datetime, timezone

from budget_ledger.models import Frequency
from budget_ledger.scheduler import (
    advance,
    due_recurring,
    is_overdue,
    next_occurrence,
    occurrences_through,
    toggle,
)
from tests.factories import make_recurring


class TestNextOccurrence:
    """Tests for period arithmetic."""

    @pytest.mark.parametrize("frequency,expected", [
        (Frequency.DAILY, datetime(2024, 1, 16)),
        (Frequency.WEEKLY, datetime(2024, 1, 22)),
        (Frequency.MONTHLY, datetime(2024, 2, 15)),
        (Frequency.YEARLY, datetime(2025, 1, 15)),
    ])
    def test_one_period(self, frequency, expected):
        """Test one period per frequency."""
        assert next_occurrence(datetime(2024, 1, 15), frequency) == expected

    def test_month_end_clamps(self):
        """Test that Jan 31 plus a month is the end of February."""
        assert next_occurrence(datetime(2024, 1, 31), Frequency.MONTHLY) == datetime(2024, 2, 29)

    def test_leap_day_yearly(self):
        """Test that Feb 29 plus a year is Feb 28."""
        assert next_occurrence(datetime(2024, 2, 29), Frequency.YEARLY) == datetime(2025, 2, 28)

    def test_multiple_periods_from_anchor(self):
        """Test that counting from the anchor avoids day drift."""
        assert next_occurrence(datetime(2024, 1, 31), Frequency.MONTHLY, 2) == datetime(2024, 3, 31)


class TestOverdueAndToggle:
    """Tests for is_overdue and toggle."""

    def test_overdue_strictly_before(self):
        """Test that next_due equal to now is not overdue."""
        item = make_recurring(datetime(2024, 1, 15))
        assert not is_overdue(item, datetime(2024, 1, 15))
        assert is_overdue(item, datetime(2024, 1, 15, 0, 0, 1))

    def test_paused_items_can_be_overdue(self):
        """Test that overdue ignores the active flag."""
        item = make_recurring(datetime(2024, 1, 15), is_active=False)
        assert is_overdue(item, datetime(2024, 2, 1))

    def test_overdue_with_aware_now(self):
        """Test comparison of a naive next_due with an aware now."""
        item = make_recurring(datetime(2024, 1, 15))
        assert is_overdue(item, datetime(2024, 2, 1, tzinfo=timezone.utc))

    def test_toggle_flips_only_active(self):
        """Test that toggle leaves dates alone."""
        item = make_recurring(datetime(2024, 1, 15))
        paused = toggle(item)
        assert paused.is_active is False
        assert paused.next_due == item.next_due
        assert paused.last_executed == item.last_executed
        assert item.is_active is True
        assert toggle(paused).is_active is True


class TestAdvance:
    """Tests for advance."""

    def test_monthly_scenario(self):
        """Test monthly advance from Jan 15 as of Jan 20."""
        item = make_recurring(datetime(2024, 1, 15))
        advanced = advance(item, datetime(2024, 1, 20))
        assert advanced.next_due == datetime(2024, 2, 15)
        assert advanced.last_executed == datetime(2024, 1, 20)
        assert advanced.is_active is True

    def test_skips_missed_periods(self):
        """Test that advance lands strictly after as_of."""
        item = make_recurring(datetime(2024, 1, 15), frequency="weekly")
        advanced = advance(item, datetime(2024, 2, 5))
        assert advanced.next_due == datetime(2024, 2, 12)

    def test_as_of_on_occurrence_moves_past_it(self):
        """Test that an occurrence equal to as_of is not kept."""
        item = make_recurring(datetime(2024, 1, 15), frequency="daily")
        assert advance(item, datetime(2024, 1, 16)).next_due == datetime(2024, 1, 17)

    def test_always_moves_at_least_one_period(self):
        """Test advance when next_due is already in the future."""
        item = make_recurring(datetime(2024, 3, 1))
        assert advance(item, datetime(2024, 1, 1)).next_due == datetime(2024, 4, 1)

    def test_month_end_anchor_does_not_drift(self):
        """Test that a 31st schedule returns to the 31st."""
        item = make_recurring(datetime(2024, 1, 31))
        assert advance(item, datetime(2024, 3, 1)).next_due == datetime(2024, 3, 31)

    def test_end_date_pauses(self):
        """Test that passing end_date pauses instead of advancing."""
        item = make_recurring(datetime(2024, 1, 15), end_date=datetime(2024, 2, 1))
        advanced = advance(item, datetime(2024, 1, 20))
        assert advanced.is_active is False
        assert advanced.next_due == datetime(2024, 1, 15)
        assert advanced.last_executed == datetime(2024, 1, 20)

    def test_end_date_inclusive(self):
        """Test that an occurrence on end_date is still scheduled."""
        item = make_recurring(datetime(2024, 1, 15), end_date=datetime(2024, 2, 15))
        advanced = advance(item, datetime(2024, 1, 20))
        assert advanced.is_active is True
        assert advanced.next_due == datetime(2024, 2, 15)

    def test_input_not_mutated(self):
        """Test that advance returns a copy."""
        item = make_recurring(datetime(2024, 1, 15))
        advance(item, datetime(2024, 1, 20))
        assert item.next_due == datetime(2024, 1, 15)
        assert item.last_executed is None


class TestDueAndOccurrences:
    """Tests for due_recurring and occurrences_through."""

    def test_due_recurring_active_only(self):
        """Test that paused and future items are not due."""
        due = make_recurring(datetime(2024, 1, 15))
        paused = make_recurring(datetime(2024, 1, 15), is_active=False)
        future = make_recurring(datetime(2024, 3, 15))
        assert due_recurring([due, paused, future], datetime(2024, 1, 15)) == [due]

    def test_occurrences_through(self):
        """Test every missed occurrence up to as_of."""
        item = make_recurring(datetime(2024, 1, 15))
        assert occurrences_through(item, datetime(2024, 3, 20)) == [
            datetime(2024, 1, 15),
            datetime(2024, 2, 15),
            datetime(2024, 3, 15),
        ]

    def test_occurrences_stop_at_end_date(self):
        """Test that occurrences after end_date are not returned."""
        item = make_recurring(datetime(2024, 1, 15), end_date=datetime(2024, 2, 20))
        assert occurrences_through(item, datetime(2024, 6, 1)) == [
            datetime(2024, 1, 15),
            datetime(2024, 2, 15),
        ]

    def test_no_occurrences_before_next_due(self):
        """Test an item that is not yet due."""
        item = make_recurring(datetime(2024, 1, 15))
        assert occurrences_through(item, datetime(2024, 1, 1)) == []

    def test_occurrences_skip_already_executed(self):
        """Test that occurrences on or before last_executed are not repeated."""
        item = make_recurring(datetime(2024, 1, 15)).model_copy(
            update={"last_executed": datetime(2024, 2, 15)}
        )
        assert occurrences_through(item, datetime(2024, 3, 20)) == [datetime(2024, 3, 15)]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
