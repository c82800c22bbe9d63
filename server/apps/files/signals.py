"""Signal handlers for files app."""

import logging

from django.db.models.signals import post_delete
from django.dispatch import receiver

from server.apps.files.infrastructure.blob_store import get_blob_store
from server.apps.files.infrastructure.metadata import thumbnail_ref
from server.apps.files.logic.file_service import THUMBNAIL_WIDTHS
from server.apps.files.models import CatalogEntry

logger = logging.getLogger(__name__)


@receiver(post_delete, sender=CatalogEntry)
def delete_entry_content(
    sender: type[CatalogEntry],
    instance: CatalogEntry,
    **kwargs: object,
) -> None:
    """Delete stored content when a catalog entry is deleted.

    Entries are only ever deleted through the admin or the ORM (for
    example when their owner is removed). The content and every
    thumbnail of the entry go with it.

    Args:
        sender: The CatalogEntry model class.
        instance: The entry being deleted.
        **kwargs: Additional signal arguments.
    """
    if not instance.blob_ref:
        return

    blob_store = get_blob_store()
    refs = [instance.blob_ref]
    if instance.kind == CatalogEntry.Kind.IMAGE:
        refs.extend(
            thumbnail_ref(instance.blob_ref, width)
            for width in THUMBNAIL_WIDTHS
        )

    for ref in refs:
        try:
            exists = blob_store.exists(ref)
        except Exception:
            # DB delete already succeeded, the blob stays orphaned
            logger.exception('Failed to check blob after DB delete: %s', ref)
            continue
        if exists:
            blob_store.discard(ref)
        else:
            logger.debug('Blob not found in storage (already deleted?): %s', ref)
