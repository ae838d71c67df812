"""
Shared pytest fixtures for Sessionflow tests.

This module provides common fixtures including:
- A frozen clock for deterministic expiry and regeneration tests
- In-memory session handlers sharing one record store
- Redis mocks for the Redis handler
"""

import os
import sys
from unittest.mock import AsyncMock

import pytest

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sessionflow.config.provider import SessionConfig
from sessionflow.modules.handlers import MemoryRecordStore, MemorySessionHandler
from sessionflow.modules.session import (
    FrozenClock,
    RecordSerializer,
    SessionManager,
    SessionStore,
    StaticTransport,
)

START_TIME = 1_700_000_000.0


# =============================================================================
# Session Fixtures
# =============================================================================

@pytest.fixture
def clock():
    """Clock frozen at a fixed instant."""
    return FrozenClock(START_TIME)


@pytest.fixture
def records(clock):
    """Record store shared by every handler built in one test."""
    return MemoryRecordStore(clock)


@pytest.fixture
def session_config():
    """Default session configuration."""
    return SessionConfig(cookie_name="ci_session", expiration=7200, time_to_update=300)


@pytest.fixture
def transport():
    """Transport that echoes the identifier back on the next start()."""
    return StaticTransport(client_ip="10.0.0.1", user_agent="pytest-agent")


@pytest.fixture
def make_session(records, session_config, transport, clock):
    """
    Factory for SessionManager instances bound to the shared record store.

    Usage:
        def test_something(make_session):
            session = make_session(time_to_update=0)
    """

    def _make(transport_override=None, **config_overrides) -> SessionManager:
        config = session_config
        if config_overrides:
            config = SessionConfig(**{**session_config.__dict__, **config_overrides})
        return SessionManager(
            MemorySessionHandler(records),
            config=config,
            transport=transport_override or transport,
            clock=clock,
        )

    return _make


@pytest.fixture
def session(make_session):
    """A SessionManager that has not been started yet."""
    return make_session()


@pytest.fixture
def seed_record(records, clock):
    """
    Store a record directly in the memory backend.

    Returns the identifier the record was stored under.
    """
    serializer = RecordSerializer()

    def _seed(session_id: str, store: SessionStore) -> str:
        records.records[session_id] = (serializer.dumps(store), clock.now())
        return session_id

    return _seed


# =============================================================================
# Redis Mocking Infrastructure
# =============================================================================

@pytest.fixture
def mock_redis():
    """Create a mock async Redis client."""
    redis = AsyncMock()
    redis.set = AsyncMock(return_value=True)
    redis.get = AsyncMock(return_value=None)
    redis.exists = AsyncMock(return_value=0)
    redis.delete = AsyncMock(return_value=1)
    redis.expire = AsyncMock(return_value=True)
    redis.eval = AsyncMock(return_value=1)
    return redis


# =============================================================================
# Test Markers Configuration
# =============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "integration: Integration tests requiring infrastructure"
    )
