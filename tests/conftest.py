"""Shared fixtures for the Finance Tracker tests."""

from datetime import date

import pytest

from finance_tracker.config import TrackerSettings, get_settings
from finance_tracker.models import Transaction
from finance_tracker.services import InMemoryStorage, TransactionStore


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Each test sees freshly loaded settings."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def tracker_settings():
    return TrackerSettings()


@pytest.fixture
def storage():
    return InMemoryStorage()


@pytest.fixture
def store(storage):
    store = TransactionStore(storage)
    store.load()
    return store


def _make_transaction(
    id=1,
    title="Coffee",
    amount="50",
    type="expense",
    category="Food",
    date=date(2024, 1, 5),
    **extra,
):
    """Build a valid Transaction with sensible defaults."""
    return Transaction(
        id=id,
        title=title,
        amount=amount,
        type=type,
        category=category,
        date=date,
        **extra,
    )


@pytest.fixture
def make_transaction():
    """Factory for valid transactions."""
    return _make_transaction
