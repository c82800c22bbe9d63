"""Database models for files app."""

from typing import ClassVar, Final, final, override

from django.conf import settings
from django.db import models

# Constants for field max lengths
_NAME_MAX_LENGTH: Final = 255
_KIND_MAX_LENGTH: Final = 16
_BLOB_REF_MAX_LENGTH: Final = 255

# parentId exposed for top-level entries
ROOT_PARENT_ID: Final = 0


@final
class CatalogEntry(models.Model):
    """Folder, file or image in a user's hierarchical namespace.

    Top-level entries have no parent (exposed as parent id 0). Files
    and images point at their content through ``blob_ref``, an opaque
    locator in the blob store; folders never carry one.

    ``owner`` and ``kind`` never change after creation. Only the
    visibility flag is mutable.
    """

    class Kind(models.TextChoices):
        """Entry kinds."""

        FOLDER = 'folder', 'Folder'
        FILE = 'file', 'File'
        IMAGE = 'image', 'Image'

    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='catalog_entries',
        db_index=True,
    )

    name = models.CharField(
        max_length=_NAME_MAX_LENGTH,
    )

    kind = models.CharField(
        max_length=_KIND_MAX_LENGTH,
        choices=Kind.choices,
    )

    # Containing folder, NULL at the root. A folder with children only
    # goes away together with its owner
    parent = models.ForeignKey(
        'self',
        on_delete=models.RESTRICT,
        related_name='children',
        null=True,
        blank=True,
    )

    is_public = models.BooleanField(
        default=False,
        help_text='Whether anyone may fetch the content',
    )

    blob_ref = models.CharField(
        max_length=_BLOB_REF_MAX_LENGTH,
        blank=True,
        default='',
        help_text='Locator of the content in the blob store',
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        """Model metadata."""

        verbose_name = 'Catalog entry'  # type: ignore[mutable-override]
        verbose_name_plural = 'Catalog entries'  # type: ignore[mutable-override]
        ordering: ClassVar[list[str]] = ['-id']

        indexes: ClassVar[list[models.Index]] = [
            # Optimize folder listing queries
            models.Index(
                fields=['owner', 'parent', '-id'],
                name='catalog_owner_parent_idx',
            ),
        ]

        constraints: ClassVar[list[models.BaseConstraint]] = [
            # Folders have no content, files and images always do
            models.CheckConstraint(
                condition=(
                    models.Q(kind='folder', blob_ref='') |
                    (~models.Q(kind='folder') & ~models.Q(blob_ref=''))
                ),
                name='catalog_blob_ref_matches_kind',
            ),
        ]

    @override
    def __str__(self) -> str:
        """String representation."""
        return f'{self.owner_id}:{self.name} ({self.kind})'

    @property
    def is_folder(self) -> bool:
        """Whether this entry is a folder."""
        return self.kind == self.Kind.FOLDER

    @property
    def parent_id_or_root(self) -> int:
        """Parent id, or ROOT_PARENT_ID for top-level entries."""
        return self.parent_id or ROOT_PARENT_ID
