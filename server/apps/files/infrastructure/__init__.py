"""Infrastructure layer for files app.

This package contains integrations with external systems:
- S3-compatible storage backend and the blob store on top of it
- SQS processing queue for thumbnail jobs
- Payload decoding and MIME type detection

Keep infrastructure concerns separate from business logic.
"""
