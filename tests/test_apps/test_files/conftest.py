"""Shared fixtures for files app tests."""

import pytest

from server.apps.files.logic import catalog_operations


@pytest.fixture
def folder(user):
    """Top-level folder owned by the test user."""
    return catalog_operations.create_folder(user, 'documents')


@pytest.fixture
def stored_file(user, blob_store):
    """Top-level text file owned by the test user, with stored content."""
    blob_ref = blob_store.write(b'hello world')
    return catalog_operations.create_blob_entry(
        user,
        'hello.txt',
        'file',
        0,
        blob_ref,
    )
