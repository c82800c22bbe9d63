"""Tests for the file service."""

import boto3
import pytest
from django.db import IntegrityError

from server.apps.files.exceptions import (
    EntryNotFoundError,
    FolderHasNoContentError,
    InvalidDataError,
    InvalidParentIdError,
    InvalidTypeError,
    MissingDataError,
    MissingNameError,
    ParentNotFolderError,
    ParentNotFoundError,
    StorageWriteFailedError,
)
from server.apps.files.infrastructure.blob_store import BlobStore
from server.apps.files.infrastructure.processing_queue import ProcessingQueue
from server.apps.files.logic import catalog_operations
from server.apps.files.logic.file_service import (
    FileService,
    UploadRequest,
    build_file_service,
)
from server.apps.files.models import CatalogEntry


@pytest.fixture
def service(blob_store, processing_queue):
    """File service over local storage and the mocked queue."""
    return FileService(blob_store, processing_queue)


def _stored_blobs(storage):
    if not storage.exists('blobs'):
        return []
    return storage.listdir('blobs')[1]


@pytest.mark.django_db
class TestUpload:
    """Tests for FileService.upload."""

    def test_upload_folder(self, service, user):
        """Folders are created without content."""
        entry = service.upload(user, UploadRequest(name='images', kind='folder'))

        assert entry.kind == 'folder'
        assert entry.parent is None
        assert entry.blob_ref == ''

    def test_upload_file(self, service, user, folder, blob_store, b64):
        """File content is stored and referenced by the entry."""
        entry = service.upload(user, UploadRequest(
            name='hello.txt',
            kind='file',
            parent_id=str(folder.id),
            is_public=True,
            data=b64(b'Hello Webstack!\n'),
        ))

        assert entry.parent == folder
        assert entry.is_public
        assert blob_store.read(entry.blob_ref) == b'Hello Webstack!\n'

    def test_upload_image_enqueues_thumbnail_job(
        self,
        service,
        user,
        processing_queue,
        png_bytes,
        b64,
    ):
        """Image uploads hand a job to the thumbnail worker."""
        entry = service.upload(user, UploadRequest(
            name='image.png',
            kind='image',
            data=b64(png_bytes),
        ))

        messages = processing_queue.receive(max_messages=10)
        assert [message.body for message in messages] == [
            {'userId': str(user.pk), 'fileId': str(entry.id)},
        ]

    def test_upload_file_does_not_enqueue(self, service, user, processing_queue, b64):
        """Plain files need no thumbnails."""
        service.upload(user, UploadRequest(name='a.txt', kind='file', data=b64(b'a')))

        assert processing_queue.receive() == []

    @pytest.mark.parametrize(('request_kwargs', 'error'), [
        ({'name': None, 'kind': 'file', 'data': 'YQ=='}, MissingNameError),
        ({'name': 'a.txt', 'kind': None, 'data': 'YQ=='}, InvalidTypeError),
        ({'name': 'a.txt', 'kind': 'video', 'data': 'YQ=='}, InvalidTypeError),
        ({'name': 'a.txt', 'kind': 'file'}, MissingDataError),
        ({'name': 'a.png', 'kind': 'image', 'data': ''}, MissingDataError),
        (
            {'name': 'a.txt', 'kind': 'file', 'data': 'not base64!!'},
            InvalidDataError,
        ),
        (
            {'name': 'a.txt', 'kind': 'file', 'data': 'YQ==', 'parent_id': 'x'},
            InvalidParentIdError,
        ),
        (
            {'name': 'a.txt', 'kind': 'file', 'data': 'YQ==', 'parent_id': '²'},
            InvalidParentIdError,
        ),
        (
            {
                'name': 'a.txt',
                'kind': 'file',
                'data': 'YQ==',
                'parent_id': '9' * 30,
            },
            InvalidParentIdError,
        ),
        (
            {'name': 'a.txt', 'kind': 'file', 'data': 'YQ==', 'parent_id': 9999},
            ParentNotFoundError,
        ),
    ])
    def test_validation_leaves_no_state(
        self,
        service,
        user,
        local_storage,
        request_kwargs,
        error,
    ):
        """Rejected uploads write neither content nor catalog entries."""
        with pytest.raises(error):
            service.upload(user, UploadRequest(**request_kwargs))

        assert CatalogEntry.objects.count() == 0
        assert _stored_blobs(local_storage) == []

    def test_parent_not_folder(self, service, user, stored_file, b64):
        """Files cannot be used as parents."""
        with pytest.raises(ParentNotFolderError):
            service.upload(user, UploadRequest(
                name='b.txt',
                kind='file',
                parent_id=stored_file.id,
                data=b64(b'b'),
            ))

    def test_storage_failure(self, user, processing_queue, failing_storage, b64):
        """Storage failures surface and leave the catalog untouched."""
        service = FileService(
            BlobStore(failing_storage),
            processing_queue,
        )

        with pytest.raises(StorageWriteFailedError, match='Unable to save the file'):
            service.upload(user, UploadRequest(
                name='a.txt',
                kind='file',
                data=b64(b'content'),
            ))

        assert CatalogEntry.objects.count() == 0

    def test_catalog_failure_discards_blob(
        self,
        service,
        user,
        local_storage,
        monkeypatch,
        b64,
    ):
        """Stored content is rolled back when the catalog write fails."""
        def fail(*args, **kwargs):
            raise IntegrityError('constraint failed')

        monkeypatch.setattr(catalog_operations, 'create_blob_entry', fail)

        with pytest.raises(IntegrityError):
            service.upload(user, UploadRequest(
                name='a.txt',
                kind='file',
                data=b64(b'content'),
            ))

        assert _stored_blobs(local_storage) == []

    def test_queue_failure_keeps_upload(
        self,
        user,
        blob_store,
        mock_aws_services,
        png_bytes,
        b64,
    ):
        """An unreachable queue never fails the upload."""
        queue = ProcessingQueue(
            boto3.client('sqs', region_name='us-east-1'),
            'https://sqs.us-east-1.amazonaws.com/123456789012/missing',
        )
        service = FileService(blob_store, queue)

        entry = service.upload(user, UploadRequest(
            name='image.png',
            kind='image',
            data=b64(png_bytes),
        ))

        assert CatalogEntry.objects.filter(id=entry.id).exists()


@pytest.mark.django_db
class TestQueries:
    """Tests for show, index, publish and unpublish."""

    def test_show(self, service, user, folder):
        """Owners see their entries."""
        assert service.show(user, str(folder.id)) == folder

    @pytest.mark.parametrize('entry_id', ['abc', '', '0', '-1', '²', '9' * 30])
    def test_show_malformed_id(self, service, user, entry_id):
        """Malformed ids are not found."""
        with pytest.raises(EntryNotFoundError):
            service.show(user, entry_id)

    def test_show_other_users_entry(self, service, other_user, folder):
        """Other users' entries are not found."""
        with pytest.raises(EntryNotFoundError):
            service.show(other_user, folder.id)

    def test_index_defaults_to_root(self, service, user, folder, stored_file):
        """Without parameters the first root page is listed."""
        assert service.index(user) == [stored_file, folder]

    @pytest.mark.parametrize('parent_id', ['abc', '²', '9' * 30])
    def test_index_malformed_parent(self, service, user, folder, parent_id):
        """Malformed parent ids list nothing."""
        assert service.index(user, parent_id=parent_id) == []

    @pytest.mark.parametrize('page', ['abc', None, '', '1.5'])
    def test_index_malformed_page(self, service, user, folder, page):
        """Malformed pages are treated as the first page."""
        assert service.index(user, page=page) == [folder]

    def test_index_negative_page(self, service, user, folder):
        """Negative pages are empty."""
        assert service.index(user, page='-1') == []

    def test_index_page_past_database_range(self, service, user, folder):
        """Pages beyond any possible row offset are empty."""
        assert service.index(user, page='100000000000000000000') == []

    def test_publish_unpublish(self, service, user, folder):
        """Visibility follows publish and unpublish, idempotently."""
        assert service.publish(user, folder.id).is_public
        assert service.publish(user, folder.id).is_public
        assert not service.unpublish(user, folder.id).is_public
        assert not service.unpublish(user, folder.id).is_public

    def test_publish_other_users_entry(self, service, other_user, folder):
        """Other users cannot publish."""
        with pytest.raises(EntryNotFoundError):
            service.publish(other_user, folder.id)


@pytest.mark.django_db
class TestFetchContent:
    """Tests for FileService.fetch_content."""

    def test_owner_reads_private_file(self, service, user, stored_file):
        """Owners read their private content."""
        content = service.fetch_content(user, stored_file.id)

        assert content.data == b'hello world'
        assert content.mime_type == 'text/plain'
        assert content.name == 'hello.txt'

    @pytest.mark.parametrize('requester_name', ['other_user', None])
    def test_private_file_hidden(self, request, service, stored_file, requester_name):
        """Private content is hidden from everyone else."""
        requester = None
        if requester_name:
            requester = request.getfixturevalue(requester_name)

        with pytest.raises(EntryNotFoundError, match='Not found'):
            service.fetch_content(requester, stored_file.id)

    def test_public_file_readable_anonymously(self, service, user, stored_file):
        """Public content is readable without a user."""
        service.publish(user, stored_file.id)

        assert service.fetch_content(None, stored_file.id).data == b'hello world'

    def test_unpublish_hides_again(self, service, user, other_user, stored_file):
        """Unpublished content is hidden again."""
        service.publish(user, stored_file.id)
        service.unpublish(user, stored_file.id)

        with pytest.raises(EntryNotFoundError):
            service.fetch_content(other_user, stored_file.id)

    def test_folder_has_no_content(self, service, user, folder):
        """Folders have no content."""
        with pytest.raises(FolderHasNoContentError):
            service.fetch_content(user, folder.id)

    def test_missing_blob(self, service, user, stored_file, blob_store):
        """Entries whose content vanished are not found."""
        blob_store.discard(stored_file.blob_ref)

        with pytest.raises(EntryNotFoundError):
            service.fetch_content(user, stored_file.id)

    def test_thumbnail(self, service, user, blob_store):
        """Sizes select the matching thumbnail."""
        blob_ref = blob_store.write(b'original')
        blob_store.write_at(f'{blob_ref}_250', b'small')
        image = catalog_operations.create_blob_entry(
            user,
            'image.png',
            'image',
            0,
            blob_ref,
        )

        content = service.fetch_content(user, image.id, size='250')

        assert content.data == b'small'
        assert content.mime_type == 'image/png'

    @pytest.mark.parametrize('size', ['500', '42', 'big'])
    def test_missing_or_unknown_thumbnail(self, service, user, blob_store, size):
        """Unknown sizes and thumbnails not rendered yet are not found."""
        image = catalog_operations.create_blob_entry(
            user,
            'image.png',
            'image',
            0,
            blob_store.write(b'original'),
        )

        with pytest.raises(EntryNotFoundError):
            service.fetch_content(user, image.id, size=size)


def test_build_file_service(mock_aws_services):
    """The factory wires the default storage and the configured queue."""
    assert isinstance(build_file_service(), FileService)
