"""File service: uploads, listings, visibility and content retrieval."""

import logging
from dataclasses import dataclass
from typing import Any, Final, final

from django.contrib.auth.models import AbstractBaseUser

from server.apps.files.exceptions import (
    BlobNotFoundError,
    EnqueueFailedError,
    EntryNotFoundError,
    FolderHasNoContentError,
    InvalidParentIdError,
    InvalidTypeError,
    MissingDataError,
    MissingNameError,
)
from server.apps.files.infrastructure.blob_store import (
    BlobStore,
    get_blob_store,
)
from server.apps.files.infrastructure.metadata import (
    decode_payload,
    detect_mime_type,
    thumbnail_ref,
)
from server.apps.files.infrastructure.processing_queue import (
    ProcessingQueue,
    ThumbnailJob,
    get_processing_queue,
)
from server.apps.files.logic import catalog_operations
from server.apps.files.models import CatalogEntry

logger = logging.getLogger(__name__)

# Widths rendered by the thumbnail worker, largest first
THUMBNAIL_WIDTHS: Final = (500, 250, 100)


@dataclass(frozen=True, slots=True)
class UploadRequest:
    """Upload as received from the client.

    ``parent_id`` is left raw so parsing errors surface as validation
    errors of the upload; ``data`` is base64 text.
    """

    name: str | None
    kind: str | None
    parent_id: Any = None
    is_public: bool = False
    data: str | None = None


@dataclass(frozen=True, slots=True)
class FileContent:
    """Raw content of an entry, ready to be served."""

    data: bytes
    mime_type: str
    name: str


def _parse_entry_id(raw: Any) -> int:
    try:
        entry_id = catalog_operations.parse_parent_id(raw)
    except InvalidParentIdError as error:
        raise EntryNotFoundError() from error
    if entry_id == 0:
        raise EntryNotFoundError()
    return entry_id


def _parse_page(raw: Any) -> int:
    if isinstance(raw, int) and not isinstance(raw, bool):
        return raw
    try:
        return int(str(raw).strip())
    except ValueError:
        return 0


@final
class FileService:
    """Coordinates the catalog, the blob store and the processing queue.

    Every operation takes an already authenticated user; ownership is
    always checked against that user.
    """

    def __init__(
        self,
        blob_store: BlobStore,
        processing_queue: ProcessingQueue,
    ) -> None:
        """Initialize the service.

        Args:
            blob_store: Storage for uploaded content.
            processing_queue: Queue receiving thumbnail jobs.
        """
        self._blob_store = blob_store
        self._processing_queue = processing_queue

    def upload(
        self,
        user: AbstractBaseUser,
        request: UploadRequest,
    ) -> CatalogEntry:
        """Create a folder, or store content and create a file or image.

        Every validation runs before content is written. If the catalog
        write fails after the content was stored, the content is
        discarded.

        Args:
            user: Uploading user, owner of the new entry.
            request: Upload parameters.

        Returns:
            Created entry.

        Raises:
            MissingNameError: If the name is missing.
            InvalidTypeError: If the kind is not folder, file or image.
            MissingDataError: If a file or image has no data.
            InvalidParentIdError: If the parent id is malformed.
            ParentNotFoundError: If the parent is not the user's entry.
            ParentNotFolderError: If the parent is not a folder.
            InvalidDataError: If the data is not valid base64.
            StorageWriteFailedError: If the content cannot be stored.
        """
        if not request.name:
            raise MissingNameError()
        if request.kind not in CatalogEntry.Kind.values:
            raise InvalidTypeError()
        is_folder = request.kind == CatalogEntry.Kind.FOLDER
        if not is_folder and not request.data:
            raise MissingDataError()

        parent_id = catalog_operations.parse_parent_id(request.parent_id)
        is_public = bool(request.is_public)

        if is_folder:
            return catalog_operations.create_folder(
                user,
                request.name,
                parent_id,
                is_public=is_public,
            )

        content = decode_payload(request.data or '')
        catalog_operations.validate_parent(user, parent_id)

        blob_ref = self._blob_store.write(content)
        try:
            entry = catalog_operations.create_blob_entry(
                user,
                request.name,
                request.kind or '',
                parent_id,
                blob_ref,
                is_public=is_public,
            )
        except Exception:
            logger.exception(
                'Catalog write failed, rolling back blob: %s',
                blob_ref,
            )
            self._blob_store.discard(blob_ref)
            raise

        if entry.kind == CatalogEntry.Kind.IMAGE:
            self._request_thumbnails(entry)
        return entry

    def show(self, user: AbstractBaseUser, entry_id: Any) -> CatalogEntry:
        """Get one of the user's entries.

        Raises:
            EntryNotFoundError: If absent, foreign or the id is malformed.
        """
        return catalog_operations.get_entry(_parse_entry_id(entry_id), user)

    def index(
        self,
        user: AbstractBaseUser,
        parent_id: Any = None,
        page: Any = 0,
    ) -> list[CatalogEntry]:
        """List one page of the user's entries under a folder.

        A malformed parent id lists nothing; a malformed page is page 0.
        """
        try:
            parsed_parent_id = catalog_operations.parse_parent_id(parent_id)
        except InvalidParentIdError:
            return []
        return catalog_operations.list_entries(
            user,
            parsed_parent_id,
            _parse_page(page),
        )

    def publish(self, user: AbstractBaseUser, entry_id: Any) -> CatalogEntry:
        """Make an entry public."""
        return catalog_operations.set_visibility(
            _parse_entry_id(entry_id),
            user,
            is_public=True,
        )

    def unpublish(self, user: AbstractBaseUser, entry_id: Any) -> CatalogEntry:
        """Make an entry private."""
        return catalog_operations.set_visibility(
            _parse_entry_id(entry_id),
            user,
            is_public=False,
        )

    def fetch_content(
        self,
        requester: AbstractBaseUser | None,
        entry_id: Any,
        size: Any = None,
    ) -> FileContent:
        """Read the content of a public or owned entry.

        Args:
            requester: Authenticated user, None for anonymous requests.
            entry_id: Entry id.
            size: Optional thumbnail width, one of THUMBNAIL_WIDTHS.

        Returns:
            Content with its MIME type.

        Raises:
            EntryNotFoundError: If the entry is not visible, the content
                or the requested thumbnail is missing, or size is unknown.
            FolderHasNoContentError: If the entry is a folder.
        """
        entry = catalog_operations.get_public_or_owned(
            _parse_entry_id(entry_id),
            requester,
        )
        if entry.is_folder:
            raise FolderHasNoContentError()

        blob_ref = entry.blob_ref
        if size not in {None, ''}:
            blob_ref = thumbnail_ref(blob_ref, self._parse_size(size))

        try:
            content = self._blob_store.read(blob_ref)
        except BlobNotFoundError as error:
            logger.warning(
                'Content missing for entry %d: %s',
                entry.id,
                blob_ref,
            )
            raise EntryNotFoundError() from error

        return FileContent(
            data=content,
            mime_type=detect_mime_type(entry.name),
            name=entry.name,
        )

    def _parse_size(self, size: Any) -> int:
        try:
            width = int(size)
        except (TypeError, ValueError) as error:
            raise EntryNotFoundError() from error
        if width not in THUMBNAIL_WIDTHS:
            raise EntryNotFoundError()
        return width

    def _request_thumbnails(self, entry: CatalogEntry) -> None:
        job = ThumbnailJob(user_id=str(entry.owner_id), file_id=str(entry.id))
        try:
            self._processing_queue.enqueue(job)
        except EnqueueFailedError:
            logger.exception(
                'Thumbnails will not be generated for entry %d',
                entry.id,
            )


def build_file_service() -> FileService:
    """Build the file service from settings.

    Returns:
        FileService over the default storage and the thumbnail queue.
    """
    return FileService(get_blob_store(), get_processing_queue())
