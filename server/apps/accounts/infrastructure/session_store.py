"""Ephemeral key-value store backing session tokens."""

import logging
from typing import Final, final

from django.conf import settings
from django.core.cache import BaseCache, caches
from redis.exceptions import RedisError

from server.apps.accounts.exceptions import StoreUnavailableError

logger = logging.getLogger(__name__)

# Key read by availability checks
_PING_KEY: Final = 'session_store:ping'

# Errors raised by cache backends when the connection is down
_BACKEND_ERRORS: Final = (RedisError, OSError)


@final
class SessionStore:
    """Key-value store with per-key expiry on top of a Django cache.

    Expiry is enforced by the cache backend. Reading an absent or
    expired key is a normal outcome and returns None. Connection
    failures are reported as StoreUnavailableError so callers can
    fail closed.
    """

    def __init__(self, cache: BaseCache) -> None:
        """Initialize the store.

        Args:
            cache: Django cache backend holding the keys.
        """
        self._cache = cache

    def put(self, key: str, value: str, ttl_seconds: int) -> None:
        """Store a value that expires after ``ttl_seconds``.

        Args:
            key: Key to store.
            value: Value to store.
            ttl_seconds: Lifetime of the key in seconds.

        Raises:
            StoreUnavailableError: If the backend cannot be reached.
        """
        try:
            self._cache.set(key, value, timeout=ttl_seconds)
        except _BACKEND_ERRORS as error:
            logger.exception('Session store write failed')
            raise StoreUnavailableError() from error

    def get(self, key: str) -> str | None:
        """Read a value.

        Args:
            key: Key to read.

        Returns:
            Stored value, or None if the key is absent or expired.

        Raises:
            StoreUnavailableError: If the backend cannot be reached.
        """
        try:
            return self._cache.get(key)
        except _BACKEND_ERRORS as error:
            logger.exception('Session store read failed')
            raise StoreUnavailableError() from error

    def delete(self, key: str) -> None:
        """Remove a key. Removing an absent key is a no-op.

        Args:
            key: Key to remove.

        Raises:
            StoreUnavailableError: If the backend cannot be reached.
        """
        try:
            self._cache.delete(key)
        except _BACKEND_ERRORS as error:
            logger.exception('Session store delete failed')
            raise StoreUnavailableError() from error

    def is_available(self) -> bool:
        """Check that the backend answers.

        Returns:
            True if a round trip to the backend succeeded.
        """
        try:
            self._cache.has_key(_PING_KEY)
        except _BACKEND_ERRORS:
            logger.warning('Session store is not reachable')
            return False
        return True


def get_session_store() -> SessionStore:
    """Build the session store from settings.

    Returns:
        SessionStore over the ``AUTH_TOKEN_CACHE_ALIAS`` cache.
    """
    return SessionStore(caches[settings.AUTH_TOKEN_CACHE_ALIAS])
