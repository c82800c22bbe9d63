"""Exceptions for accounts app."""

from typing import ClassVar


class AccountsError(Exception):
    """Base class for authentication and registration failures."""

    default_message: ClassVar[str] = 'Unauthorized'

    def __init__(self, message: str | None = None) -> None:
        """Initialize the error with a client-facing message.

        Args:
            message: Overrides the class default message.
        """
        self.message = message or self.default_message
        super().__init__(self.message)


class UnauthorizedError(AccountsError):
    """Raised for bad, missing or expired credentials and tokens.

    The message never says which check failed.
    """


class StoreUnavailableError(AccountsError):
    """Raised when the session store backend cannot be reached."""

    default_message = 'Session store unavailable'


class RegistrationError(AccountsError):
    """Raised when a user cannot be registered."""

    default_message = 'Invalid registration'


class MissingEmailError(RegistrationError):
    """Raised when registering without an email."""

    default_message = 'Missing email'


class MissingPasswordError(RegistrationError):
    """Raised when registering without a password."""

    default_message = 'Missing password'


class UserAlreadyExistsError(RegistrationError):
    """Raised when the email is already registered."""

    default_message = 'Already exists'
