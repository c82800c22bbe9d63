"""Shared fixtures for accounts app tests."""

import base64

import pytest
from django.core.cache import caches
from redis.exceptions import ConnectionError as RedisConnectionError

from server.apps.accounts.infrastructure.session_store import SessionStore


class UnreachableCache:
    """Cache double whose backend connection is down."""

    def _fail(self, *args, **kwargs):
        raise RedisConnectionError('Connection refused')

    set = _fail
    get = _fail
    delete = _fail
    has_key = _fail


@pytest.fixture
def session_store():
    """Session store over the test token cache."""
    return SessionStore(caches['auth_tokens'])


@pytest.fixture
def unreachable_store():
    """Session store whose backend cannot be reached."""
    return SessionStore(UnreachableCache())


@pytest.fixture
def basic():
    """Encode an ``email:password`` pair as Basic credentials."""
    def encode(email: str, password: str) -> str:
        return base64.b64encode(f'{email}:{password}'.encode()).decode('ascii')
    return encode
