"""Business logic for the hierarchical file catalog.

Every write is either one conditional statement or one transaction, so
concurrent requests never observe a half-created entry.
"""

import logging
from typing import Any, Final

from django.contrib.auth.models import AbstractBaseUser
from django.db import transaction

from server.apps.files.exceptions import (
    EntryNotFoundError,
    InvalidParentIdError,
    MissingNameError,
    ParentNotFolderError,
    ParentNotFoundError,
)
from server.apps.files.models import ROOT_PARENT_ID, CatalogEntry

logger = logging.getLogger(__name__)

# Number of entries per listing page
PAGE_SIZE: Final = 20

# Largest id or row offset the database can hold (signed 64-bit)
MAX_DB_INTEGER: Final = 2**63 - 1


def parse_db_integer(text: str) -> int | None:
    """Parse ASCII digits into an integer the database can store.

    Returns:
        The number, or None for anything else (signs, spaces, non-ASCII
        digits, values past MAX_DB_INTEGER).
    """
    if not (text.isascii() and text.isdecimal()):
        return None
    if len(text.lstrip('0')) > len(str(MAX_DB_INTEGER)):
        return None
    number = int(text)
    if number > MAX_DB_INTEGER:
        return None
    return number


def parse_parent_id(raw: Any) -> int:
    """Parse a client-supplied parent id.

    Args:
        raw: Value from the request; None or '' mean the root.

    Returns:
        Parsed id, ROOT_PARENT_ID for the root.

    Raises:
        InvalidParentIdError: If the value is not a non-negative integer.
    """
    if raw is None or raw == '':
        return ROOT_PARENT_ID
    if isinstance(raw, bool):
        raise InvalidParentIdError()
    if isinstance(raw, int):
        parent_id = raw
    elif isinstance(raw, str):
        parent_id = parse_db_integer(raw.strip())
    else:
        raise InvalidParentIdError()
    if parent_id is None or not 0 <= parent_id <= MAX_DB_INTEGER:
        raise InvalidParentIdError()
    return parent_id


def _lock_parent(owner: AbstractBaseUser, parent_id: int) -> CatalogEntry | None:
    """Lock and validate the parent folder of a new entry.

    Must run inside a transaction.

    Raises:
        ParentNotFoundError: If the owner has no entry with this id.
        ParentNotFolderError: If the entry is not a folder.
    """
    if parent_id == ROOT_PARENT_ID:
        return None
    parent = (
        CatalogEntry.objects.select_for_update()
        .filter(id=parent_id, owner=owner)
        .first()
    )
    if parent is None:
        raise ParentNotFoundError()
    if not parent.is_folder:
        raise ParentNotFolderError()
    return parent


def validate_parent(owner: AbstractBaseUser, parent_id: int) -> None:
    """Check a parent folder before any side effect happens.

    Args:
        owner: Owner of the new entry.
        parent_id: Parsed parent id.

    Raises:
        ParentNotFoundError: If the owner has no entry with this id.
        ParentNotFolderError: If the entry is not a folder.
    """
    with transaction.atomic():
        _lock_parent(owner, parent_id)


def _create_entry(  # noqa: WPS211
    owner: AbstractBaseUser,
    name: str,
    kind: str,
    parent_id: int,
    blob_ref: str,
    is_public: bool,
) -> CatalogEntry:
    if not name:
        raise MissingNameError()

    with transaction.atomic():
        parent = _lock_parent(owner, parent_id)
        entry = CatalogEntry.objects.create(
            owner=owner,
            name=name,
            kind=kind,
            parent=parent,
            is_public=is_public,
            blob_ref=blob_ref,
        )

    logger.info(
        'Catalog entry created: ID=%d, kind=%s, owner=%s',
        entry.id,
        kind,
        owner.pk,
    )
    return entry


def create_folder(
    owner: AbstractBaseUser,
    name: str,
    parent_id: int = ROOT_PARENT_ID,
    is_public: bool = False,
) -> CatalogEntry:
    """Create a folder.

    Args:
        owner: Owner of the folder.
        name: Folder name.
        parent_id: Parsed id of the containing folder.
        is_public: Initial visibility.

    Returns:
        Created entry.

    Raises:
        MissingNameError: If name is empty.
        ParentNotFoundError: If the parent is not the owner's entry.
        ParentNotFolderError: If the parent is not a folder.
    """
    return _create_entry(
        owner,
        name,
        CatalogEntry.Kind.FOLDER,
        parent_id,
        blob_ref='',
        is_public=is_public,
    )


def create_blob_entry(  # noqa: WPS211
    owner: AbstractBaseUser,
    name: str,
    kind: str,
    parent_id: int,
    blob_ref: str,
    is_public: bool = False,
) -> CatalogEntry:
    """Create a file or image entry pointing at stored content.

    Args:
        owner: Owner of the entry.
        name: Entry name.
        kind: 'file' or 'image'.
        parent_id: Parsed id of the containing folder.
        blob_ref: Reference returned by the blob store.
        is_public: Initial visibility.

    Returns:
        Created entry.

    Raises:
        ValueError: If kind is a folder or blob_ref is empty.
        MissingNameError: If name is empty.
        ParentNotFoundError: If the parent is not the owner's entry.
        ParentNotFolderError: If the parent is not a folder.
    """
    if kind not in {CatalogEntry.Kind.FILE, CatalogEntry.Kind.IMAGE}:
        raise ValueError(f'Blob entries must be files or images, got {kind!r}')
    if not blob_ref:
        raise ValueError('Blob entries require a blob reference')
    return _create_entry(owner, name, kind, parent_id, blob_ref, is_public)


def get_entry(entry_id: int, owner: AbstractBaseUser) -> CatalogEntry:
    """Get an entry owned by the given user.

    Raises:
        EntryNotFoundError: If absent or owned by someone else.
    """
    entry = CatalogEntry.objects.filter(id=entry_id, owner=owner).first()
    if entry is None:
        raise EntryNotFoundError()
    return entry


def get_public_or_owned(
    entry_id: int,
    requester: AbstractBaseUser | None,
) -> CatalogEntry:
    """Get an entry that is public or owned by the requester.

    Args:
        entry_id: Entry id.
        requester: Authenticated user, None for anonymous requests.

    Returns:
        Visible entry.

    Raises:
        EntryNotFoundError: If absent, or private and not owned.
    """
    entry = CatalogEntry.objects.filter(id=entry_id).first()
    if entry is None:
        raise EntryNotFoundError()
    if entry.is_public:
        return entry
    if requester is not None and entry.owner_id == requester.pk:
        return entry
    raise EntryNotFoundError()


def list_entries(
    owner: AbstractBaseUser,
    parent_id: int = ROOT_PARENT_ID,
    page: int = 0,
) -> list[CatalogEntry]:
    """List one page of the owner's entries under a folder.

    Entries come newest first; the order is stable across pages.

    Args:
        owner: Owner of the entries.
        parent_id: Parsed folder id, ROOT_PARENT_ID for the root.
        page: Zero-based page index.

    Returns:
        Up to PAGE_SIZE entries; empty for negative or past-the-end pages.
    """
    if page < 0:
        return []

    entries = CatalogEntry.objects.filter(owner=owner)
    if parent_id == ROOT_PARENT_ID:
        entries = entries.filter(parent__isnull=True)
    else:
        entries = entries.filter(parent_id=parent_id)

    start = page * PAGE_SIZE
    if start > MAX_DB_INTEGER - PAGE_SIZE:
        return []
    listing = list(entries.order_by('-id')[start:start + PAGE_SIZE])
    logger.debug(
        'Listed %d entries: owner=%s, parent=%d, page=%d',
        len(listing),
        owner.pk,
        parent_id,
        page,
    )
    return listing


def set_visibility(
    entry_id: int,
    owner: AbstractBaseUser,
    is_public: bool,
) -> CatalogEntry:
    """Set the public flag of an owned entry.

    Setting the current value again succeeds.

    Raises:
        EntryNotFoundError: If absent or owned by someone else.
    """
    updated = CatalogEntry.objects.filter(
        id=entry_id,
        owner=owner,
    ).update(is_public=is_public)
    if not updated:
        raise EntryNotFoundError()

    logger.info('Entry visibility changed: ID=%d, public=%s', entry_id, is_public)
    return CatalogEntry.objects.get(id=entry_id)


def count_entries() -> int:
    """Count all catalog entries, across users."""
    return CatalogEntry.objects.count()
