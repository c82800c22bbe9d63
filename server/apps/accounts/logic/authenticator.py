"""Token-based authentication backed by the session store.

Clients log in with HTTP Basic style credentials and receive an opaque
token. Every later request presents the token, which is resolved back to
the user before any file operation runs.
"""

import base64
import binascii
import logging
import secrets
from typing import TYPE_CHECKING, Final, final

from django.conf import settings
from django.contrib.auth import get_user_model

from server.apps.accounts.exceptions import (
    StoreUnavailableError,
    UnauthorizedError,
)
from server.apps.accounts.infrastructure.session_store import (
    SessionStore,
    get_session_store,
)

if TYPE_CHECKING:
    from django.contrib.auth.models import User

logger = logging.getLogger(__name__)

# Token length in bytes (generates 64 hex chars)
_TOKEN_BYTES: Final = 32

# Prefix of session keys in the store
_TOKEN_KEY_PREFIX: Final = 'auth_'

# Characters of a token that may appear in logs
_TOKEN_LOG_CHARS: Final = 8


def decode_basic_credentials(encoded: str) -> tuple[str, str]:
    """Decode a base64 ``email:password`` pair.

    Only the first colon separates the parts, so passwords may contain
    colons.

    Args:
        encoded: Base64 text, without the ``Basic`` scheme prefix.

    Returns:
        Tuple of (email, password).

    Raises:
        UnauthorizedError: If the text is not valid base64 or does not
            hold a non-empty email and password.
    """
    try:
        decoded = base64.b64decode(encoded.strip(), validate=True).decode('utf-8')
    except (binascii.Error, UnicodeDecodeError, ValueError) as error:
        raise UnauthorizedError() from error

    email, separator, password = decoded.partition(':')
    if not separator or not email or not password:
        raise UnauthorizedError()
    return email, password


def _token_key(token: str) -> str:
    return f'{_TOKEN_KEY_PREFIX}{token}'


@final
class Authenticator:
    """Issues, resolves and revokes session tokens.

    Failures never say why they happened: an unknown email, a wrong
    password and a malformed credential string all raise the same
    UnauthorizedError. An unreachable session store is treated the same
    way, so authentication fails closed.
    """

    def __init__(self, session_store: SessionStore, token_ttl: int) -> None:
        """Initialize the authenticator.

        Args:
            session_store: Store holding token to user id mappings.
            token_ttl: Token lifetime in seconds.
        """
        self._session_store = session_store
        self._token_ttl = token_ttl

    def login(self, basic_credentials: str) -> str:
        """Validate credentials and issue a new session token.

        Args:
            basic_credentials: Base64 encoded ``email:password``.

        Returns:
            Fresh session token.

        Raises:
            UnauthorizedError: If the credentials are malformed or wrong,
                or the session store is unavailable.
        """
        email, password = decode_basic_credentials(basic_credentials)
        user_model = get_user_model()
        user = user_model.objects.filter(
            email__iexact=email,
            is_active=True,
        ).first()

        if user is None:
            # Run the hasher anyway so response time does not reveal
            # whether the email is registered
            user_model().set_password(password)
            logger.warning('Login rejected: unknown email')
            raise UnauthorizedError()

        if not user.check_password(password):
            logger.warning('Login rejected: wrong password for user %s', user.pk)
            raise UnauthorizedError()

        token = secrets.token_hex(_TOKEN_BYTES)
        try:
            self._session_store.put(
                _token_key(token),
                str(user.pk),
                self._token_ttl,
            )
        except StoreUnavailableError as error:
            raise UnauthorizedError() from error

        logger.info(
            'Session token issued for user %s: %s',
            user.pk,
            token[:_TOKEN_LOG_CHARS],
        )
        return token

    def resolve(self, token: str | None) -> 'User':
        """Resolve a session token to its user.

        Args:
            token: Session token presented by the client.

        Returns:
            The active user the token was issued to.

        Raises:
            UnauthorizedError: If the token is missing, expired or revoked,
                its user is gone, or the session store is unavailable.
        """
        if not token:
            raise UnauthorizedError()

        try:
            user_id = self._session_store.get(_token_key(token))
        except StoreUnavailableError as error:
            raise UnauthorizedError() from error

        if user_id is None:
            raise UnauthorizedError()

        user = get_user_model().objects.filter(
            pk=user_id,
            is_active=True,
        ).first()
        if user is None:
            logger.warning(
                'Token %s points at a missing user',
                token[:_TOKEN_LOG_CHARS],
            )
            raise UnauthorizedError()
        return user

    def resolve_optional(self, token: str | None) -> 'User | None':
        """Resolve a token where anonymous access is allowed.

        Args:
            token: Session token, possibly absent.

        Returns:
            The user, or None when the token does not resolve.
        """
        try:
            return self.resolve(token)
        except UnauthorizedError:
            return None

    def logout(self, token: str | None) -> None:
        """Revoke a session token.

        Args:
            token: Session token to revoke.

        Raises:
            UnauthorizedError: If the token does not resolve to a user,
                or the session store is unavailable.
        """
        if not token:
            raise UnauthorizedError()

        user = self.resolve(token)
        try:
            self._session_store.delete(_token_key(token))
        except StoreUnavailableError as error:
            raise UnauthorizedError() from error

        logger.info(
            'Session token revoked for user %s: %s',
            user.pk,
            token[:_TOKEN_LOG_CHARS],
        )


def build_authenticator() -> Authenticator:
    """Build an authenticator from settings.

    Returns:
        Authenticator over the configured session store.
    """
    return Authenticator(
        session_store=get_session_store(),
        token_ttl=settings.AUTH_TOKEN_TTL,
    )
