"""
Recurring Transaction Scheduler

Pure functions over RecurringTransaction values. Each returns a new
copy and never touches the store. Nothing here runs on a timer: an
external job decides when to call `advance`.

States:
- Active: is_active is True
- Paused: is_active is False (set by `toggle`, or by `advance` once the
  schedule runs past end_date)

Calendar arithmetic uses dateutil's relativedelta. Adding a month to
Jan 31 gives Feb 29 (or 28). Later occurrences are always computed from
the original anchor, so a schedule anchored on the 31st returns to the
31st in long months instead of drifting to the 28th.
"""

from collections.abc import Iterable
from datetime import datetime
from typing import Optional

from dateutil.relativedelta import relativedelta

from budget_ledger.models.ledger import Frequency, RecurringTransaction
from budget_ledger.utils.dates import align_tz


PERIODS = {
    Frequency.DAILY: relativedelta(days=1),
    Frequency.WEEKLY: relativedelta(weeks=1),
    Frequency.MONTHLY: relativedelta(months=1),
    Frequency.YEARLY: relativedelta(years=1),
}


def next_occurrence(anchor: datetime, frequency: Frequency, periods: int = 1) -> datetime:
    """`anchor` moved forward by `periods` whole periods."""
    return anchor + PERIODS[Frequency(frequency)] * periods


def occurrences_through(
    recurring: RecurringTransaction,
    as_of: datetime,
) -> list[datetime]:
    """
    Every scheduled occurrence from next_due up to and including `as_of`.

    Occurrences after end_date are not included, and neither are those
    at or before last_executed, which an earlier run already booked.
    """
    anchor = recurring.next_due
    as_of = align_tz(as_of, anchor)
    end_date = align_tz(recurring.end_date, anchor) if recurring.end_date else None
    booked_through = (
        align_tz(recurring.last_executed, anchor) if recurring.last_executed else None
    )

    result = []
    k = 0
    occurrence = anchor
    while occurrence <= as_of:
        if end_date is not None and occurrence > end_date:
            break
        if booked_through is None or occurrence > booked_through:
            result.append(occurrence)
        k += 1
        occurrence = next_occurrence(anchor, recurring.frequency, k)
    return result


def is_overdue(recurring: RecurringTransaction, now: datetime) -> bool:
    """True when next_due is strictly before `now`, whether active or paused."""
    return recurring.next_due < align_tz(now, recurring.next_due)


def toggle(recurring: RecurringTransaction) -> RecurringTransaction:
    """Flip between active and paused. Dates are left alone."""
    return recurring.model_copy(update={"is_active": not recurring.is_active}, deep=True)


def advance(recurring: RecurringTransaction, as_of: datetime) -> RecurringTransaction:
    """
    Move next_due to the first occurrence strictly after `as_of`.

    Always moves at least one period, even when next_due is already in
    the future. last_executed becomes `as_of`. If the new occurrence
    would fall after end_date the copy is paused instead and next_due
    keeps its current value.

    Calling this twice with the same `as_of` advances twice; callers
    that must not double-book pass a strictly increasing `as_of`.
    """
    anchor = recurring.next_due
    cutoff = align_tz(as_of, anchor)

    k = 1
    candidate = next_occurrence(anchor, recurring.frequency, k)
    while candidate <= cutoff:
        k += 1
        candidate = next_occurrence(anchor, recurring.frequency, k)

    update = {"last_executed": as_of}
    if recurring.end_date is not None and candidate > align_tz(recurring.end_date, anchor):
        update["is_active"] = False
    else:
        update["next_due"] = candidate

    return recurring.model_copy(update=update, deep=True)


def due_recurring(
    items: Iterable[RecurringTransaction],
    now: datetime,
) -> list[RecurringTransaction]:
    """Active items whose next_due is at or before `now`."""
    return [
        item for item in items
        if item.is_active and item.next_due <= align_tz(now, item.next_due)
    ]
