"""Exceptions for files app.

Each error carries a short client-facing message. The API layer maps
error classes to status codes, so subclasses inherit their parent's
status.
"""

from typing import ClassVar


class FilesError(Exception):
    """Base class for catalog and file service failures."""

    default_message: ClassVar[str] = 'File operation failed'

    def __init__(self, message: str | None = None) -> None:
        """Initialize the error with a client-facing message.

        Args:
            message: Overrides the class default message.
        """
        self.message = message or self.default_message
        super().__init__(self.message)


class FileValidationError(FilesError):
    """Raised for invalid caller input, before any side effect."""

    default_message = 'Invalid request'


class MissingNameError(FileValidationError):
    """Raised when an upload has no name."""

    default_message = 'Missing name'


class InvalidTypeError(FileValidationError):
    """Raised when an upload kind is not folder, file or image."""

    default_message = 'Missing type'


class MissingDataError(FileValidationError):
    """Raised when a file or image upload has no payload."""

    default_message = 'Missing data'


class InvalidDataError(FileValidationError):
    """Raised when an upload payload is not valid base64."""

    default_message = 'Invalid data'


class InvalidParentIdError(FileValidationError):
    """Raised when a parent id is not a valid identifier."""

    default_message = 'Invalid parentId'


class ParentNotFoundError(FileValidationError):
    """Raised when the parent folder does not exist for the owner."""

    default_message = 'Parent not found'


class ParentNotFolderError(FileValidationError):
    """Raised when the parent entry is a file or an image."""

    default_message = 'Parent is not a folder'


class EntryNotFoundError(FilesError):
    """Raised when an entry is absent or not visible to the requester.

    Absent and forbidden are deliberately the same error so the
    existence of other users' private entries is never revealed.
    """

    default_message = 'Not found'


class FolderHasNoContentError(EntryNotFoundError):
    """Raised when content is requested for a folder."""

    default_message = "A folder doesn't have content"


class StorageWriteFailedError(FilesError):
    """Raised when the blob store cannot persist an upload."""

    default_message = 'Unable to save the file'


class BlobNotFoundError(FilesError):
    """Raised when a blob reference has no content in storage."""

    default_message = 'Blob not found'


class EnqueueFailedError(FilesError):
    """Raised when a job cannot be handed to the processing queue."""

    default_message = 'Unable to enqueue job'


class InvalidJobError(FilesError):
    """Raised when a queued job payload is malformed."""

    default_message = 'Invalid job'
