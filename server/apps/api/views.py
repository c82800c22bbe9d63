"""HTTP endpoints of the files manager API."""

import logging
from http import HTTPStatus

from django.db import DatabaseError, connection
from django.http import HttpRequest, HttpResponse, JsonResponse
from django.views.decorators.http import require_GET, require_http_methods

from server.apps.accounts.exceptions import UnauthorizedError
from server.apps.accounts.infrastructure.session_store import (
    get_session_store,
)
from server.apps.accounts.logic.authenticator import build_authenticator
from server.apps.accounts.logic.registration import (
    count_users,
    register_user,
)
from server.apps.api.errors import api_view, parse_json_body
from server.apps.api.serializers import serialize_entry, serialize_user
from server.apps.files.logic.catalog_operations import count_entries
from server.apps.files.logic.file_service import (
    UploadRequest,
    build_file_service,
)

logger = logging.getLogger(__name__)

_TOKEN_HEADER = 'X-Token'
_BASIC_SCHEME = 'basic'


def _session_token(request: HttpRequest) -> str | None:
    return request.headers.get(_TOKEN_HEADER)


def _basic_credentials(request: HttpRequest) -> str:
    """Extract the credentials of an ``Authorization: Basic`` header.

    Raises:
        UnauthorizedError: If the header is absent or uses another scheme.
    """
    scheme, _, credentials = request.headers.get('Authorization', '').partition(' ')
    if scheme.lower() != _BASIC_SCHEME or not credentials:
        raise UnauthorizedError()
    return credentials


def _database_available() -> bool:
    try:
        connection.ensure_connection()
    except DatabaseError:
        logger.exception('Database health check failed')
        return False
    return True


@require_GET
@api_view
def status(request: HttpRequest) -> HttpResponse:
    """Report whether the session store and the database respond."""
    return JsonResponse({
        'redis': get_session_store().is_available(),
        'db': _database_available(),
    })


@require_GET
@api_view
def stats(request: HttpRequest) -> HttpResponse:
    """Report the number of users and catalog entries."""
    return JsonResponse({'users': count_users(), 'files': count_entries()})


@require_http_methods(['POST'])
@api_view
def users(request: HttpRequest) -> HttpResponse:
    """Register a user from ``{"email", "password"}``."""
    payload = parse_json_body(request)
    user = register_user(payload.get('email'), payload.get('password'))
    return JsonResponse(serialize_user(user), status=HTTPStatus.CREATED)


@require_GET
@api_view
def connect(request: HttpRequest) -> HttpResponse:
    """Exchange Basic credentials for a session token."""
    token = build_authenticator().login(_basic_credentials(request))
    return JsonResponse({'token': token})


@require_GET
@api_view
def disconnect(request: HttpRequest) -> HttpResponse:
    """Revoke the presented session token."""
    build_authenticator().logout(_session_token(request))
    return HttpResponse(status=HTTPStatus.NO_CONTENT)


@require_GET
@api_view
def me(request: HttpRequest) -> HttpResponse:
    """Describe the user owning the session token."""
    user = build_authenticator().resolve(_session_token(request))
    return JsonResponse(serialize_user(user))


@require_http_methods(['GET', 'POST'])
@api_view
def files(request: HttpRequest) -> HttpResponse:
    """List entries (GET) or upload a new one (POST)."""
    user = build_authenticator().resolve(_session_token(request))
    service = build_file_service()

    if request.method == 'POST':
        payload = parse_json_body(request)
        entry = service.upload(user, UploadRequest(
            name=payload.get('name'),
            kind=payload.get('type'),
            parent_id=payload.get('parentId'),
            is_public=bool(payload.get('isPublic', False)),
            data=payload.get('data'),
        ))
        return JsonResponse(serialize_entry(entry), status=HTTPStatus.CREATED)

    entries = service.index(
        user,
        parent_id=request.GET.get('parentId'),
        page=request.GET.get('page', 0),
    )
    return JsonResponse([serialize_entry(entry) for entry in entries], safe=False)


@require_GET
@api_view
def file_detail(request: HttpRequest, entry_id: str) -> HttpResponse:
    """Show one of the user's entries."""
    user = build_authenticator().resolve(_session_token(request))
    entry = build_file_service().show(user, entry_id)
    return JsonResponse(serialize_entry(entry))


@require_http_methods(['PUT'])
@api_view
def publish(request: HttpRequest, entry_id: str) -> HttpResponse:
    """Make one of the user's entries public."""
    user = build_authenticator().resolve(_session_token(request))
    entry = build_file_service().publish(user, entry_id)
    return JsonResponse(serialize_entry(entry))


@require_http_methods(['PUT'])
@api_view
def unpublish(request: HttpRequest, entry_id: str) -> HttpResponse:
    """Make one of the user's entries private."""
    user = build_authenticator().resolve(_session_token(request))
    entry = build_file_service().unpublish(user, entry_id)
    return JsonResponse(serialize_entry(entry))


@require_GET
@api_view
def file_data(request: HttpRequest, entry_id: str) -> HttpResponse:
    """Serve the raw content of a public or owned entry.

    Anonymous requests only see public entries. ``size`` selects a
    thumbnail of an image.
    """
    requester = build_authenticator().resolve_optional(_session_token(request))
    content = build_file_service().fetch_content(
        requester,
        entry_id,
        size=request.GET.get('size'),
    )
    return HttpResponse(content.data, content_type=content.mime_type)
