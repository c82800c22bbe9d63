"""Payload and content metadata helpers."""

import base64
import binascii
import mimetypes
from typing import Final

from server.apps.files.exceptions import InvalidDataError

_DEFAULT_MIME_TYPE: Final = 'application/octet-stream'


def detect_mime_type(filename: str) -> str:
    """Guess the MIME type of an entry from its name.

    Args:
        filename: Entry name with extension.

    Returns:
        MIME type string (e.g., 'image/png', 'text/plain').
        Returns 'application/octet-stream' if type cannot be determined.
    """
    mime_type, _ = mimetypes.guess_type(filename)
    if mime_type is None:
        return _DEFAULT_MIME_TYPE
    return mime_type


def decode_payload(encoded: str) -> bytes:
    """Decode a base64 upload payload into raw bytes.

    Args:
        encoded: Base64 text as sent by the client.

    Returns:
        Decoded bytes.

    Raises:
        InvalidDataError: If the text is not valid base64.
    """
    try:
        return base64.b64decode(encoded, validate=True)
    except (binascii.Error, TypeError, ValueError) as error:
        raise InvalidDataError() from error


def thumbnail_ref(blob_ref: str, width: int) -> str:
    """Build the blob reference of a thumbnail.

    Example: 'blobs/3f2a' with width 250 -> 'blobs/3f2a_250'

    Args:
        blob_ref: Reference of the original image.
        width: Thumbnail width in pixels.

    Returns:
        Reference of the thumbnail blob.
    """
    return f'{blob_ref}_{width}'
