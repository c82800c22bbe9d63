"""Shared fixtures for all tests."""

import base64
import io

import boto3
import pytest
from django.contrib.auth import get_user_model
from django.core.cache import caches
from django.core.files.storage import FileSystemStorage
from moto import mock_aws
from PIL import Image

from server.apps.files.infrastructure.blob_store import BlobStore
from server.apps.files.infrastructure.processing_queue import (
    ProcessingQueue,
)

User = get_user_model()

_BUCKET_NAME = 'files-manager'
_QUEUE_NAME = 'thumbnails'
_REGION = 'us-east-1'


@pytest.fixture(autouse=True)
def _local_caches(settings):
    """Replace Redis with in-process caches for every test."""
    settings.CACHES = {
        'default': {
            'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
            'LOCATION': 'default',
        },
        'auth_tokens': {
            'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
            'LOCATION': 'auth-tokens',
        },
    }
    caches['auth_tokens'].clear()
    yield
    caches['auth_tokens'].clear()


@pytest.fixture
def user(db):
    """Create test user.

    Returns:
        User instance for testing.
    """
    return User.objects.create_user(
        username='test@example.com',
        password='testpass123',
        email='test@example.com',
    )


@pytest.fixture
def other_user(db):
    """Create second test user for isolation tests.

    Returns:
        Second user instance.
    """
    return User.objects.create_user(
        username='other@example.com',
        password='testpass123',
        email='other@example.com',
    )


@pytest.fixture
def mock_aws_services(settings):
    """Mock S3 and SQS with the files-manager bucket and thumbnail queue.

    Yields:
        boto3 SQS client bound to the mocked queue.
    """
    with mock_aws():
        s3 = boto3.resource('s3', region_name=_REGION)
        s3.create_bucket(Bucket=_BUCKET_NAME)

        sqs = boto3.client('sqs', region_name=_REGION)
        queue_url = sqs.create_queue(QueueName=_QUEUE_NAME)['QueueUrl']
        settings.THUMBNAIL_QUEUE = {
            **settings.THUMBNAIL_QUEUE,
            'queue_url': queue_url,
            'endpoint_url': None,
            'region_name': _REGION,
        }

        yield sqs


@pytest.fixture
def queue_url(settings, mock_aws_services):
    """URL of the mocked thumbnail queue."""
    return settings.THUMBNAIL_QUEUE['queue_url']


@pytest.fixture
def processing_queue(mock_aws_services, queue_url):
    """Processing queue over the mocked SQS queue."""
    return ProcessingQueue(mock_aws_services, queue_url)


@pytest.fixture
def local_storage(tmp_path):
    """Filesystem storage in a temporary directory."""
    return FileSystemStorage(location=tmp_path)


class FailingStorage(FileSystemStorage):
    """Filesystem storage that rejects every write and delete."""

    def _save(self, name, content):
        raise OSError('Disk full')

    def delete(self, name):
        raise OSError('Read-only filesystem')


@pytest.fixture
def failing_storage(tmp_path):
    """Filesystem storage whose writes and deletes fail."""
    return FailingStorage(location=tmp_path)


@pytest.fixture
def blob_store(local_storage):
    """Blob store over a temporary directory."""
    return BlobStore(local_storage)


@pytest.fixture
def png_bytes():
    """Encoded 800x400 PNG image.

    Returns:
        PNG file content.
    """
    buffer = io.BytesIO()
    Image.new('RGB', (800, 400), color=(200, 40, 40)).save(buffer, format='PNG')
    return buffer.getvalue()


@pytest.fixture
def b64():
    """Base64-encode bytes into the text sent by clients."""
    def encode(content: bytes) -> str:
        return base64.b64encode(content).decode('ascii')
    return encode
