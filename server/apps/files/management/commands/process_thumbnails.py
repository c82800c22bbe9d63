"""Management command running the thumbnail worker."""

import logging
from typing import Any, Final

from botocore.exceptions import BotoCoreError, ClientError
from django.core.management.base import BaseCommand

from server.apps.files.exceptions import (
    BlobNotFoundError,
    EntryNotFoundError,
    InvalidJobError,
)
from server.apps.files.infrastructure.blob_store import get_blob_store
from server.apps.files.infrastructure.processing_queue import (
    ProcessingQueue,
    QueueMessage,
    ThumbnailJob,
    get_processing_queue,
)
from server.apps.files.logic.thumbnail_operations import generate_thumbnails

_DEFAULT_WAIT_SECONDS: Final = 20
_DEFAULT_BATCH_SIZE: Final = 10

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    """Consume thumbnail jobs and render thumbnails for image entries."""

    help = 'Process thumbnail jobs from the processing queue'

    def add_arguments(self, parser: Any) -> None:
        """Add command line arguments.

        Args:
            parser: Argument parser.
        """
        parser.add_argument(
            '--once',
            action='store_true',
            help='Process a single batch and exit',
        )
        parser.add_argument(
            '--wait-seconds',
            type=int,
            default=_DEFAULT_WAIT_SECONDS,
            help=f'Long-polling wait (default: {_DEFAULT_WAIT_SECONDS})',
        )
        parser.add_argument(
            '--batch-size',
            type=int,
            default=_DEFAULT_BATCH_SIZE,
            help=f'Max jobs per batch (default: {_DEFAULT_BATCH_SIZE})',
        )

    def handle(self, *args: Any, **options: Any) -> None:
        """Execute the worker loop.

        Args:
            args: Positional arguments (unused).
            options: Command options.
        """
        queue = get_processing_queue()
        processed = 0

        while True:
            try:
                messages = queue.receive(
                    max_messages=options['batch_size'],
                    wait_seconds=options['wait_seconds'],
                )
            except (BotoCoreError, ClientError):
                logger.exception('Failed to receive thumbnail jobs')
                if options['once']:
                    raise
                continue

            for message in messages:
                processed += self._process(queue, message)

            if options['once']:
                break

        self.stdout.write(
            self.style.SUCCESS(f'Processed {processed} thumbnail jobs'),
        )

    def _process(self, queue: ProcessingQueue, message: QueueMessage) -> int:
        """Handle one message, acknowledging it unless it may succeed later.

        Returns:
            1 if thumbnails were written, 0 otherwise.
        """
        try:
            job = ThumbnailJob.from_payload(message.body)
            generate_thumbnails(job, get_blob_store())
        except (InvalidJobError, EntryNotFoundError, BlobNotFoundError) as exc:
            self.stderr.write(f'Dropping thumbnail job: {exc}')
            logger.warning('Dropping thumbnail job %s: %s', message.body, exc)
            queue.acknowledge(message)
            return 0
        except Exception as exc:
            # Storage or database trouble, the job may succeed later
            self.stderr.write(f'Thumbnail job failed: {exc}')
            logger.exception(
                'Thumbnail job left for redelivery: %s',
                message.body,
            )
            return 0

        queue.acknowledge(message)
        return 1
