"""Mapping of domain errors to JSON error responses."""

import functools
import json
import logging
from collections.abc import Callable
from http import HTTPStatus
from typing import Any, Final

from django.http import HttpRequest, HttpResponse, JsonResponse
from django.views.decorators.csrf import csrf_exempt

from server.apps.accounts.exceptions import (
    RegistrationError,
    StoreUnavailableError,
    UnauthorizedError,
)
from server.apps.files.exceptions import (
    EntryNotFoundError,
    FilesError,
    FileValidationError,
    StorageWriteFailedError,
)

logger = logging.getLogger(__name__)

_ViewFunc = Callable[..., HttpResponse]

# First matching class wins, so subclasses come before their bases
_STATUS_BY_ERROR: Final[tuple[tuple[type[Exception], HTTPStatus], ...]] = (
    (UnauthorizedError, HTTPStatus.UNAUTHORIZED),
    (StoreUnavailableError, HTTPStatus.UNAUTHORIZED),
    (RegistrationError, HTTPStatus.BAD_REQUEST),
    (FileValidationError, HTTPStatus.BAD_REQUEST),
    (EntryNotFoundError, HTTPStatus.NOT_FOUND),
    (StorageWriteFailedError, HTTPStatus.INTERNAL_SERVER_ERROR),
)

_DOMAIN_ERRORS: Final = (
    FilesError,
    UnauthorizedError,
    StoreUnavailableError,
    RegistrationError,
)


class BadRequestError(Exception):
    """Raised when a request body cannot be understood."""

    def __init__(self, message: str = 'Invalid request body') -> None:
        """Initialize the error.

        Args:
            message: Client-facing message.
        """
        self.message = message
        super().__init__(message)


def error_response(message: str, status: int) -> JsonResponse:
    """Build an error response with an ``{"error": message}`` body."""
    return JsonResponse({'error': message}, status=status)


def parse_json_body(request: HttpRequest) -> dict[str, Any]:
    """Decode the JSON object sent as the request body.

    An empty body is an empty object.

    Raises:
        BadRequestError: If the body is not a JSON object.
    """
    if not request.body:
        return {}
    try:
        payload = json.loads(request.body)
    except (json.JSONDecodeError, UnicodeDecodeError) as error:
        raise BadRequestError('Invalid JSON') from error
    if not isinstance(payload, dict):
        raise BadRequestError('Request body must be a JSON object')
    return payload


def _status_for(error: Exception) -> HTTPStatus | None:
    for error_class, status in _STATUS_BY_ERROR:
        if isinstance(error, error_class):
            return status
    return None


def api_view(view: _ViewFunc) -> _ViewFunc:
    """Turn domain errors raised by a view into JSON error responses.

    Token authenticated views need no CSRF protection, so the wrapped
    view is CSRF exempt.

    Args:
        view: Django view function.

    Returns:
        Wrapped view.
    """
    @functools.wraps(view)
    def wrapper(request: HttpRequest, *args: Any, **kwargs: Any) -> HttpResponse:
        try:
            return view(request, *args, **kwargs)
        except BadRequestError as error:
            return error_response(error.message, HTTPStatus.BAD_REQUEST)
        except _DOMAIN_ERRORS as error:
            status = _status_for(error)
            if status is None:
                logger.exception('Unmapped error in %s', view.__name__)
                status = HTTPStatus.INTERNAL_SERVER_ERROR
            elif status >= HTTPStatus.INTERNAL_SERVER_ERROR:
                logger.error('Request failed: %s', error.message)
            return error_response(error.message, status)

    return csrf_exempt(wrapper)
