"""
Activity Logger

Every mutation of the ledger and every rejected operation is logged as a
structured event. Logging never raises into the caller: a store operation
that succeeded stays successful even if the log sink misbehaves.
"""

import logging
import sys
from datetime import datetime
from typing import Optional

import structlog

from budget_ledger.config import LedgerSettings, LoggingSettings, get_settings
from budget_ledger.models.activity import (
    EventSeverity,
    LedgerEvent,
    LedgerEventBuilder,
)


_configured = False


def resolve_log_level(settings: LoggingSettings, debug_mode: bool = False) -> int:
    """Debug mode forces DEBUG whatever level is configured."""
    if debug_mode:
        return logging.DEBUG
    return getattr(logging, settings.level)


def configure_logging(
    settings: Optional[LoggingSettings] = None,
    debug_mode: Optional[bool] = None,
) -> None:
    """
    Configure structlog on top of the standard library logger.

    debug_mode defaults to LEDGER_DEBUG_MODE.

    Safe to call more than once; only the first call takes effect
    unless the module flag is reset.
    """
    global _configured
    if _configured:
        return

    settings = settings or get_settings().logging
    if debug_mode is None:
        debug_mode = get_settings().ledger.debug_mode
    level = resolve_log_level(settings, debug_mode)

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=level,
    )

    renderer = (
        structlog.processors.JSONRenderer()
        if settings.json_output
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    _configured = True


class ActivityLogger:
    """
    Central ledger activity logging service.

    Every event carries the configured app environment.
    """

    def __init__(
        self,
        logger_name: str = "budget_ledger",
        ledger_settings: Optional[LedgerSettings] = None,
    ):
        ledger_settings = ledger_settings or get_settings().ledger
        configure_logging(debug_mode=ledger_settings.debug_mode)
        self._environment = ledger_settings.app_environment
        self._logger = structlog.get_logger(logger_name)

    def log(self, event: LedgerEvent) -> bool:
        """
        Log a ledger event.

        Returns True if the event was handed to the log sink.
        """
        log_dict = event.to_log_dict()
        event_name = log_dict.pop("event_type")
        log_dict["environment"] = self._environment

        try:
            if event.severity == EventSeverity.ERROR:
                self._logger.error(event_name, **log_dict)
            elif event.severity == EventSeverity.WARNING:
                self._logger.warning(event_name, **log_dict)
            elif event.severity == EventSeverity.DEBUG:
                self._logger.debug(event_name, **log_dict)
            else:
                self._logger.info(event_name, **log_dict)
        except Exception as e:
            # Log sink failure is reported on stderr and swallowed
            print(f"activity log failure: {e}", file=sys.stderr)
            return False

        return True

    def log_mutation(
        self,
        entity_type: str,
        action: str,
        entity_id: str,
        details: Optional[dict] = None,
    ) -> None:
        """Log a create, update or delete."""
        self.log(LedgerEventBuilder.mutation(entity_type, action, entity_id, details))

    def log_rejected(
        self,
        entity_type: str,
        operation: str,
        entity_id: Optional[str],
        error: Exception,
    ) -> None:
        """Log an operation that failed validation or lookup."""
        self.log(LedgerEventBuilder.rejected(entity_type, operation, entity_id, error))

    def log_recurring_advanced(
        self,
        recurring_id: str,
        next_due: datetime,
        posted: int,
    ) -> None:
        self.log(LedgerEventBuilder.recurring_advanced(recurring_id, next_due, posted))

    def log_recurring_paused(
        self,
        recurring_id: str,
        end_date: Optional[datetime],
        posted: int,
    ) -> None:
        self.log(LedgerEventBuilder.recurring_paused(recurring_id, end_date, posted))

    def log_backup_exported(
        self,
        version: str,
        transaction_count: int,
        category_count: int,
    ) -> None:
        self.log(LedgerEventBuilder.backup_exported(version, transaction_count, category_count))

    def log_backup_restored(
        self,
        version: str,
        transaction_count: int,
        category_count: int,
    ) -> None:
        self.log(LedgerEventBuilder.backup_restored(version, transaction_count, category_count))
