"""
Shared pytest fixtures and configuration for all tests.
"""
import os
from unittest.mock import MagicMock, AsyncMock

import pytest

# Hypothesis configuration for property-based testing
from hypothesis import settings, Verbosity, Phase

from session.cookie import CookieCodec
from session.kv_store import KeyValueSessionStore
from storage.memory_store import InMemoryKeyValueStore

# Configure Hypothesis profiles for different environments
# Default profile: balanced for local development
settings.register_profile(
    "default",
    max_examples=100,
    verbosity=Verbosity.normal,
    deadline=None,
    print_blob=True,  # Print failing examples for debugging
)

# CI profile: more thorough testing for continuous integration
settings.register_profile(
    "ci",
    max_examples=200,
    verbosity=Verbosity.verbose,
    deadline=None,
    print_blob=True,
    derandomize=True,  # Reproducible results in CI
)

# Debug profile: minimal examples for quick debugging
settings.register_profile(
    "debug",
    max_examples=10,
    verbosity=Verbosity.verbose,
    deadline=None,
    print_blob=True,
    phases=[Phase.explicit, Phase.reuse, Phase.generate],  # Skip shrinking for speed
)

# Fast profile: quick smoke tests
settings.register_profile(
    "fast",
    max_examples=20,
    verbosity=Verbosity.normal,
    deadline=None,
)

# Load profile from environment variable HYPOTHESIS_PROFILE, default to "default"
settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "default"))


TEST_SIGNING_KEY = "test-signing-key-0123456789abcdef0123456789"


@pytest.fixture
def cookie_codec() -> CookieCodec:
    """Cookie codec with a fixed test key."""
    return CookieCodec(TEST_SIGNING_KEY)


@pytest.fixture
def kv_store() -> InMemoryKeyValueStore:
    """Empty in-memory key-value store."""
    return InMemoryKeyValueStore()


@pytest.fixture
def session_store(kv_store, cookie_codec) -> KeyValueSessionStore:
    """Session store over the in-memory backend."""
    return KeyValueSessionStore(kv_store, cookie_codec)


@pytest.fixture
def mock_dynamodb_table() -> MagicMock:
    """Create a mock DynamoDB Table resource for unit tests."""
    table = MagicMock()
    table.put_item.return_value = {}
    table.get_item.return_value = {}
    table.query.return_value = {"Items": []}
    table.delete_item.return_value = {}
    return table


@pytest.fixture
def mock_redis() -> MagicMock:
    """Create a mock Redis client for unit tests."""
    mock = MagicMock()
    mock.hset = AsyncMock(return_value=1)
    mock.hget = AsyncMock(return_value=None)
    mock.hgetall = AsyncMock(return_value={})
    mock.hdel = AsyncMock(return_value=1)
    mock.aclose = AsyncMock()
    return mock


@pytest.fixture
def sample_emails() -> list[dict]:
    """Profile emails where only the last one is primary and verified."""
    return [
        {"email": "a@x", "primary": False, "verified": True},
        {"email": "b@x", "primary": True, "verified": False},
        {"email": "c@x", "primary": True, "verified": True},
    ]
