"""Business logic for user registration."""

import logging
from typing import TYPE_CHECKING

from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction

from server.apps.accounts.exceptions import (
    MissingEmailError,
    MissingPasswordError,
    UserAlreadyExistsError,
)

if TYPE_CHECKING:
    from django.contrib.auth.models import User

logger = logging.getLogger(__name__)


def register_user(email: str | None, password: str | None) -> 'User':
    """Create a user identified by email.

    The email doubles as the username. The password is stored with
    Django's one-way password hasher.

    Args:
        email: Email address of the new user.
        password: Plaintext password.

    Returns:
        Created user.

    Raises:
        MissingEmailError: If email is empty.
        MissingPasswordError: If password is empty.
        UserAlreadyExistsError: If the email is already registered.
    """
    if not email:
        raise MissingEmailError()
    if not password:
        raise MissingPasswordError()

    user_model = get_user_model()
    email = user_model.objects.normalize_email(email)

    if user_model.objects.filter(email__iexact=email).exists():
        raise UserAlreadyExistsError()

    try:
        with transaction.atomic():
            user = user_model.objects.create_user(
                username=email,
                email=email,
                password=password,
            )
    except IntegrityError as error:
        # Lost a race with a concurrent registration of the same email
        raise UserAlreadyExistsError() from error

    logger.info('User registered: %s (ID: %d)', email, user.pk)
    return user


def count_users() -> int:
    """Count registered users.

    Returns:
        Number of users.
    """
    return get_user_model().objects.count()
