"""Pytest configuration and fixtures."""

import asyncio

import pytest

from ledger.domain.value_objects import Credentials
from ledger.infrastructure.database import MemoryDriver
from ledger.store import LedgerStore


async def _settle(rounds: int = 3) -> None:
    """Let callbacks scheduled on the event loop run."""
    for _ in range(rounds):
        await asyncio.sleep(0)


@pytest.fixture
def settle():
    """Coroutine function that yields to the event loop a few times."""
    return _settle


@pytest.fixture
def credentials():
    """Unauthenticated credentials for a local server."""
    return Credentials(host="localhost", database="expenses")


@pytest.fixture
def driver():
    """In-memory driver standing in for MongoDB."""
    return MemoryDriver()


@pytest.fixture
async def store(credentials, driver):
    """Connected ledger store backed by the in-memory driver."""
    store = LedgerStore(credentials, driver=driver)
    await _settle()
    assert store.is_connected
    yield store
    await store.flush()
    store.disconnect()


def make_record(**overrides):
    """Record input as the web layer sends it."""
    data = {
        "account": "acc-1",
        "amount": 42.5,
        "currency": "EUR",
        "timestamp": 150,
        "description": "groceries",
        "availableCredit": 1000.0,
        "category": "food",
    }
    data.update(overrides)
    return data


@pytest.fixture
def record_input():
    """Factory for record input dicts."""
    return make_record
