"""Thumbnail rendering for uploaded images."""

import io
import logging

from PIL import Image, UnidentifiedImageError

from server.apps.files.exceptions import EntryNotFoundError, InvalidJobError
from server.apps.files.infrastructure.blob_store import BlobStore
from server.apps.files.infrastructure.metadata import thumbnail_ref
from server.apps.files.infrastructure.processing_queue import ThumbnailJob
from server.apps.files.logic.catalog_operations import parse_db_integer
from server.apps.files.logic.file_service import THUMBNAIL_WIDTHS
from server.apps.files.models import CatalogEntry

logger = logging.getLogger(__name__)


def render_thumbnail(content: bytes, width: int) -> bytes:
    """Scale an image down to the given width.

    The aspect ratio and the image format are kept. Images narrower
    than ``width`` are not enlarged.

    Args:
        content: Encoded source image.
        width: Target width in pixels.

    Returns:
        Encoded thumbnail.

    Raises:
        InvalidJobError: If the content is not a readable image.
    """
    try:
        with Image.open(io.BytesIO(content)) as image:
            image_format = image.format
            thumbnail = image.copy()
    except (UnidentifiedImageError, OSError) as error:
        raise InvalidJobError('Content is not a readable image') from error

    thumbnail.thumbnail((width, thumbnail.height))
    buffer = io.BytesIO()
    thumbnail.save(buffer, format=image_format)
    return buffer.getvalue()


def _parse_job_id(raw: str, field: str) -> int:
    job_id = parse_db_integer(raw)
    if job_id is None:
        raise InvalidJobError(f'Invalid {field}')
    return job_id


def generate_thumbnails(job: ThumbnailJob, blob_store: BlobStore) -> list[str]:
    """Render and store every thumbnail width of an image entry.

    Running the same job twice overwrites the same blobs, so redelivered
    jobs are harmless.

    Args:
        job: Job received from the processing queue.
        blob_store: Store holding the original and the thumbnails.

    Returns:
        References of the written thumbnails.

    Raises:
        InvalidJobError: If the ids are malformed or the content is not
            an image.
        EntryNotFoundError: If the user has no image entry with this id.
    """
    file_id = _parse_job_id(job.file_id, 'fileId')
    user_id = _parse_job_id(job.user_id, 'userId')

    entry = CatalogEntry.objects.filter(
        id=file_id,
        owner_id=user_id,
        kind=CatalogEntry.Kind.IMAGE,
    ).first()
    if entry is None:
        raise EntryNotFoundError()

    content = blob_store.read(entry.blob_ref)
    written = []
    for width in THUMBNAIL_WIDTHS:
        ref = thumbnail_ref(entry.blob_ref, width)
        blob_store.write_at(ref, render_thumbnail(content, width))
        written.append(ref)

    logger.info(
        'Thumbnails generated for entry %d: %s',
        entry.id,
        ', '.join(written),
    )
    return written
