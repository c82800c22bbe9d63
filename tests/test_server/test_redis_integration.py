"""Integration tests for the Redis-backed session store.

These tests talk to the Redis server named by REDIS_URL and are skipped
when it cannot be reached.
"""

import os
import secrets
from typing import Final

import pytest
import redis
from django.core.cache.backends.redis import RedisCache

from server.apps.accounts.infrastructure.session_store import SessionStore

_REDIS_URL: Final = os.getenv('REDIS_URL', 'redis://localhost:6379/0')


@pytest.fixture
def redis_store() -> SessionStore:
    """Session store over the live Redis server.

    Returns:
        SessionStore bound to a RedisCache.
    """
    try:
        redis.Redis.from_url(_REDIS_URL).ping()
    except redis.exceptions.ConnectionError:
        pytest.skip(f'Redis is not reachable at {_REDIS_URL}')
    return SessionStore(RedisCache(_REDIS_URL, {'KEY_PREFIX': 'files_manager_test'}))


@pytest.mark.integration
def test_put_get_delete(redis_store: SessionStore) -> None:
    """Values round trip through Redis and can be removed."""
    key = f'auth_{secrets.token_hex(8)}'

    redis_store.put(key, '42', ttl_seconds=60)
    assert redis_store.get(key) == '42'

    redis_store.delete(key)
    assert redis_store.get(key) is None


@pytest.mark.integration
def test_is_available(redis_store: SessionStore) -> None:
    """A live server is reported available."""
    assert redis_store.is_available()


@pytest.mark.integration
def test_unreachable_server() -> None:
    """A closed port is reported unavailable."""
    store = SessionStore(RedisCache('redis://127.0.0.1:1/0', {}))

    assert not store.is_available()
