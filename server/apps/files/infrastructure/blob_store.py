"""Opaque byte storage addressed by generated references."""

import logging
import uuid
from typing import Final, final

from django.core.files.base import ContentFile
from django.core.files.storage import Storage, default_storage

from server.apps.files.exceptions import (
    BlobNotFoundError,
    StorageWriteFailedError,
)

logger = logging.getLogger(__name__)

# Storage folder holding every uploaded blob
_BLOB_PREFIX: Final = 'blobs'


@final
class BlobStore:
    """Writes and reads raw bytes through a Django storage backend.

    Callers only ever see the reference returned by ``write``; the
    storage medium behind it is a deployment detail.
    """

    def __init__(self, storage: Storage) -> None:
        """Initialize the blob store.

        Args:
            storage: Django storage backend holding the blobs.
        """
        self._storage = storage

    def write(self, data: bytes) -> str:
        """Persist bytes under a freshly generated reference.

        Args:
            data: Raw content.

        Returns:
            Reference of the stored blob.

        Raises:
            StorageWriteFailedError: If the backend rejects the write.
        """
        name = f'{_BLOB_PREFIX}/{uuid.uuid4().hex}'
        try:
            blob_ref = self._storage.save(name, ContentFile(data))
        except Exception as error:
            logger.exception('Blob write failed: %s', name)
            raise StorageWriteFailedError() from error

        logger.info('Blob stored: %s (%d bytes)', blob_ref, len(data))
        return blob_ref

    def write_at(self, blob_ref: str, data: bytes) -> None:
        """Persist bytes under a known reference, replacing old content.

        Used for derived blobs such as thumbnails, where rerunning the
        same job must produce the same reference.

        Args:
            blob_ref: Reference to write.
            data: Raw content.

        Raises:
            StorageWriteFailedError: If the backend rejects the write.
        """
        try:
            if self._storage.exists(blob_ref):
                self._storage.delete(blob_ref)
            saved_name = self._storage.save(blob_ref, ContentFile(data))
        except Exception as error:
            logger.exception('Blob write failed: %s', blob_ref)
            raise StorageWriteFailedError() from error

        if saved_name != blob_ref:
            logger.warning(
                'Blob %s was stored as %s after a concurrent write',
                blob_ref,
                saved_name,
            )

    def read(self, blob_ref: str) -> bytes:
        """Read the bytes of a blob.

        Args:
            blob_ref: Reference returned by ``write``.

        Returns:
            Raw content.

        Raises:
            BlobNotFoundError: If nothing is stored under the reference.
        """
        if not self.exists(blob_ref):
            raise BlobNotFoundError()
        try:
            with self._storage.open(blob_ref, 'rb') as blob:
                return blob.read()
        except FileNotFoundError as error:
            raise BlobNotFoundError() from error

    def exists(self, blob_ref: str) -> bool:
        """Check whether a blob is stored.

        Args:
            blob_ref: Reference to check.

        Returns:
            True if content is stored under the reference.
        """
        return bool(blob_ref) and self._storage.exists(blob_ref)

    def discard(self, blob_ref: str) -> None:
        """Delete a blob whose catalog write did not happen.

        Best-effort: failures are logged, since the catalog is already
        consistent and an orphaned blob is only wasted space.

        Args:
            blob_ref: Reference to delete.
        """
        try:
            logger.warning('Discarding blob without catalog entry: %s', blob_ref)
            self._storage.delete(blob_ref)
        except Exception:
            logger.exception('Failed to discard blob, orphaned: %s', blob_ref)


def get_blob_store() -> BlobStore:
    """Build the blob store over the default storage.

    Returns:
        BlobStore using the configured default storage backend.
    """
    return BlobStore(default_storage)
