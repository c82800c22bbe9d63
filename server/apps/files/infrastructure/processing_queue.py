"""SQS work queue that hands image uploads to the thumbnail worker.

Delivery is at-least-once: a job may be received again if the worker
dies before acknowledging it, so handlers must be idempotent.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Final, Self, final

import boto3
from botocore.client import BaseClient
from botocore.exceptions import BotoCoreError, ClientError
from django.conf import settings

from server.apps.files.exceptions import EnqueueFailedError, InvalidJobError

logger = logging.getLogger(__name__)

# SQS refuses to return more messages per call
_MAX_MESSAGES_PER_RECEIVE: Final = 10


@dataclass(frozen=True, slots=True)
class ThumbnailJob:
    """Request to render thumbnails for an uploaded image."""

    user_id: str
    file_id: str

    def to_payload(self) -> dict[str, str]:
        """Serialize to the wire format.

        Returns:
            Dict with ``userId`` and ``fileId``.
        """
        return {'userId': self.user_id, 'fileId': self.file_id}

    @classmethod
    def from_payload(cls, payload: Any) -> Self:
        """Parse the wire format.

        Args:
            payload: Decoded message body.

        Returns:
            Parsed job.

        Raises:
            InvalidJobError: If a field is missing or empty.
        """
        if not isinstance(payload, dict):
            raise InvalidJobError('Job payload must be an object')
        if not payload.get('fileId'):
            raise InvalidJobError('Missing fileId')
        if not payload.get('userId'):
            raise InvalidJobError('Missing userId')
        return cls(user_id=str(payload['userId']), file_id=str(payload['fileId']))


@dataclass(frozen=True, slots=True)
class QueueMessage:
    """Message received from the queue, pending acknowledgement."""

    body: Any
    receipt_handle: str


@final
class ProcessingQueue:
    """Producer and consumer side of the thumbnail queue."""

    def __init__(self, client: BaseClient, queue_url: str) -> None:
        """Initialize the queue.

        Args:
            client: boto3 SQS client.
            queue_url: URL of the SQS queue.
        """
        self._client = client
        self._queue_url = queue_url

    def enqueue(self, job: ThumbnailJob) -> str:
        """Submit a job without waiting for it to be processed.

        Args:
            job: Job to submit.

        Returns:
            Message id assigned by the queue (the acknowledgement).

        Raises:
            EnqueueFailedError: If the queue rejects the message.
        """
        try:
            response = self._client.send_message(
                QueueUrl=self._queue_url,
                MessageBody=json.dumps(job.to_payload()),
            )
        except (BotoCoreError, ClientError) as error:
            logger.exception('Failed to enqueue thumbnail job: %s', job)
            raise EnqueueFailedError() from error

        message_id = response['MessageId']
        logger.info(
            'Thumbnail job enqueued for file %s: %s',
            job.file_id,
            message_id,
        )
        return message_id

    def receive(
        self,
        max_messages: int = 1,
        wait_seconds: int = 0,
    ) -> list[QueueMessage]:
        """Receive pending messages.

        Bodies that are not valid JSON can never be processed; they are
        logged and deleted here instead of being redelivered forever.

        Args:
            max_messages: Upper bound on messages returned (at most 10).
            wait_seconds: Long-polling wait time.

        Returns:
            Received messages; empty if the queue is idle.
        """
        response = self._client.receive_message(
            QueueUrl=self._queue_url,
            MaxNumberOfMessages=min(max_messages, _MAX_MESSAGES_PER_RECEIVE),
            WaitTimeSeconds=wait_seconds,
        )

        messages = []
        for raw_message in response.get('Messages', []):
            receipt_handle = raw_message['ReceiptHandle']
            try:
                body = json.loads(raw_message['Body'])
            except json.JSONDecodeError:
                logger.error(
                    'Dropping undecodable message: %s',
                    raw_message.get('MessageId'),
                )
                self._delete(receipt_handle)
                continue
            messages.append(QueueMessage(body=body, receipt_handle=receipt_handle))
        return messages

    def acknowledge(self, message: QueueMessage) -> None:
        """Remove a handled message from the queue.

        Args:
            message: Message returned by ``receive``.
        """
        self._delete(message.receipt_handle)

    def _delete(self, receipt_handle: str) -> None:
        self._client.delete_message(
            QueueUrl=self._queue_url,
            ReceiptHandle=receipt_handle,
        )


def get_processing_queue() -> ProcessingQueue:
    """Build the thumbnail queue from settings.

    Returns:
        ProcessingQueue for ``settings.THUMBNAIL_QUEUE``.
    """
    options = settings.THUMBNAIL_QUEUE
    client = boto3.client(
        'sqs',
        region_name=options['region_name'],
        endpoint_url=options['endpoint_url'],
        aws_access_key_id=options['access_key'],
        aws_secret_access_key=options['secret_key'],
    )
    return ProcessingQueue(client, options['queue_url'])
