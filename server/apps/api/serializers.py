"""JSON representations of API resources."""

from typing import Any

from django.contrib.auth.models import AbstractBaseUser

from server.apps.files.models import CatalogEntry


def serialize_entry(entry: CatalogEntry) -> dict[str, Any]:
    """Serialize a catalog entry.

    Top-level entries report ``parentId`` 0.
    """
    return {
        'id': entry.id,
        'userId': entry.owner_id,
        'name': entry.name,
        'type': entry.kind,
        'isPublic': entry.is_public,
        'parentId': entry.parent_id_or_root,
    }


def serialize_user(user: AbstractBaseUser) -> dict[str, Any]:
    """Serialize a user without any credential material."""
    return {'id': user.pk, 'email': user.email}  # type: ignore[attr-defined]
