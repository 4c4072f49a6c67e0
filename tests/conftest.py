"""Shared fixtures for Budget Ledger tests."""

import pytest

from budget_ledger.config import LedgerSettings
from budget_ledger.services.storage import InMemoryLedgerStore
from budget_ledger.validation import LedgerValidator
from tests.factories import RecordingActivityLogger


@pytest.fixture
def ledger_settings():
    return LedgerSettings()


@pytest.fixture
def activity():
    return RecordingActivityLogger()


@pytest.fixture
def store(ledger_settings, activity):
    return InMemoryLedgerStore(
        validator=LedgerValidator(ledger_settings),
        activity_logger=activity,
    )


@pytest.fixture
def food(store):
    return store.categories.create({"name": "Food", "type": "expense", "color": "#ef4444"})


@pytest.fixture
def salary(store):
    return store.categories.create({"name": "Salary", "type": "income"})
