"""Activity logging package."""

from budget_ledger.activity.logger import (
    ActivityLogger,
    configure_logging,
    resolve_log_level,
)

__all__ = ["ActivityLogger", "configure_logging", "resolve_log_level"]
