"""
Ledger Query Executor

DESIGN DECISION: Reads go through ONE snapshot.
Each method takes a consistent copy of the store and hands it to the
pure aggregation functions. The executor never mutates the store, so
everything it returns reflects a single point in time.
"""

from datetime import datetime, timedelta
from decimal import Decimal
from typing import Optional

from budget_ledger.config import LedgerSettings, get_settings
from budget_ledger.models.analysis import (
    AnalyticsReport,
    CategoryGroup,
    DashboardOverview,
    GoalProgress,
    TransactionFilter,
    TransactionSummary,
)
from budget_ledger.models.ledger import RecurringTransaction, Transaction
from budget_ledger.queries import aggregation
from budget_ledger.scheduler import is_overdue
from budget_ledger.services.storage import LedgerStorageInterface
from budget_ledger.utils.dates import utc_now


class LedgerQueryExecutor:
    """
    Runs read-side queries against a ledger store.

    GUARANTEES:
    - Only returns data that is in the store
    - Every result is computed from one snapshot
    - Empty ledgers produce zero totals and empty lists, never errors
    """

    def __init__(
        self,
        store: LedgerStorageInterface,
        settings: Optional[LedgerSettings] = None,
    ):
        self._store = store
        self._settings = settings or get_settings().ledger

    def summary(self, filters: Optional[TransactionFilter] = None) -> TransactionSummary:
        """Totals over all transactions, or those matching `filters`."""
        snapshot = self._store.snapshot()
        return aggregation.summarize(
            aggregation.filter_transactions(snapshot.transactions, filters)
        )

    def transactions(
        self,
        filters: Optional[TransactionFilter] = None,
        newest_first: bool = True,
    ) -> list[Transaction]:
        """Filtered transactions ordered by date."""
        snapshot = self._store.snapshot()
        matched = aggregation.filter_transactions(snapshot.transactions, filters)
        return aggregation.sort_by_date(matched, descending=newest_first)

    def category_breakdown(
        self,
        filters: Optional[TransactionFilter] = None,
    ) -> list[CategoryGroup]:
        """Category groups over the matching transactions."""
        snapshot = self._store.snapshot()
        matched = aggregation.filter_transactions(snapshot.transactions, filters)
        return aggregation.group_by_category(matched, snapshot.categories)

    def top_categories(self, limit: Optional[int] = None) -> list[CategoryGroup]:
        snapshot = self._store.snapshot()
        return aggregation.top_categories(
            snapshot.transactions,
            snapshot.categories,
            limit or self._settings.top_categories_limit,
        )

    def monthly_totals(self) -> dict[str, dict[str, Decimal]]:
        snapshot = self._store.snapshot()
        return aggregation.monthly_totals(snapshot.transactions)

    def recent(self, limit: Optional[int] = None) -> list[Transaction]:
        snapshot = self._store.snapshot()
        return aggregation.recent_transactions(
            snapshot.transactions,
            limit or self._settings.recent_transactions_limit,
        )

    def goals_progress(self, now: Optional[datetime] = None) -> list[GoalProgress]:
        snapshot = self._store.snapshot()
        return aggregation.goals_progress(snapshot.goals, now)

    def overdue_recurring(self, now: Optional[datetime] = None) -> list[RecurringTransaction]:
        """Recurring items whose next_due has passed, paused ones included."""
        now = now or utc_now()
        snapshot = self._store.snapshot()
        return [item for item in snapshot.recurring if is_overdue(item, now)]

    def analytics(self, days: int = 30, now: Optional[datetime] = None) -> AnalyticsReport:
        """
        Breakdown of the last `days` days.

        Args:
            days: Window length, counted back from `now`
            now: End of the window (defaults to the current time)
        """
        now = now or utc_now()
        snapshot = self._store.snapshot()
        window = aggregation.transactions_since(snapshot.transactions, days, now)
        groups = aggregation.group_by_category(window, snapshot.categories)

        return AnalyticsReport(
            window_days=days,
            since=now - timedelta(days=days),
            summary=aggregation.summarize(window),
            groups=groups,
            type_totals=aggregation.category_type_totals(groups),
        )

    def dashboard(self, now: Optional[datetime] = None) -> DashboardOverview:
        """Summary, recent activity, top spending and overdue items."""
        now = now or utc_now()
        snapshot = self._store.snapshot()

        return DashboardOverview(
            summary=aggregation.summarize(snapshot.transactions),
            recent_transactions=aggregation.recent_transactions(
                snapshot.transactions,
                self._settings.recent_transactions_limit,
            ),
            top_categories=aggregation.top_categories(
                snapshot.transactions,
                snapshot.categories,
                self._settings.top_categories_limit,
            ),
            overdue_recurring=[
                item for item in snapshot.recurring if is_overdue(item, now)
            ],
        )
