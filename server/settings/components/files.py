"""Settings for file uploads and thumbnail processing."""

from typing import Any

from server.settings.components import config

# SQS queue consumed by the thumbnail worker
THUMBNAIL_QUEUE: dict[str, Any] = {
    'queue_url': config(
        'THUMBNAIL_QUEUE_URL',
        default='http://localhost:9324/000000000000/thumbnails',
    ),
    'endpoint_url': config('THUMBNAIL_QUEUE_ENDPOINT_URL', default=None),
    'region_name': config('AWS_S3_REGION_NAME', default='us-east-1'),
    'access_key': config('AWS_ACCESS_KEY_ID', default='minioadmin'),
    'secret_key': config('AWS_SECRET_ACCESS_KEY', default='minioadmin'),
}
