"""Django admin configuration for files app."""

from django.contrib import admin
from django.db.models import QuerySet
from django.http import HttpRequest

from server.apps.files.models import CatalogEntry


@admin.register(CatalogEntry)
class CatalogEntryAdmin(admin.ModelAdmin):
    """Admin interface for CatalogEntry model."""

    list_display = [
        'name',
        'owner',
        'kind',
        'parent_display',
        'is_public',
        'created_at',
    ]

    list_filter = [
        'kind',
        'is_public',
        'created_at',
    ]

    search_fields = [
        'name',
        'owner__email',
        'blob_ref',
    ]

    # Only visibility may change after creation
    readonly_fields = [
        'owner',
        'name',
        'kind',
        'parent',
        'blob_ref',
        'created_at',
    ]

    fieldsets = (
        ('Entry', {
            'fields': ('name', 'kind', 'owner', 'parent'),
        }),
        ('Visibility', {
            'fields': ('is_public',),
        }),
        ('Content', {
            'fields': ('blob_ref', 'created_at'),
        }),
    )

    def parent_display(self, obj: CatalogEntry) -> str:
        """Display the parent folder name.

        Args:
            obj: CatalogEntry instance.

        Returns:
            Parent name, or '/' for top-level entries.
        """
        if obj.parent is None:
            return '/'
        return obj.parent.name
    parent_display.short_description = 'Parent'  # type: ignore[attr-defined]

    def get_queryset(self, request: HttpRequest) -> QuerySet[CatalogEntry]:
        """Optimize queryset with select_related.

        Args:
            request: HTTP request.

        Returns:
            Optimized QuerySet.
        """
        return super().get_queryset(request).select_related('owner', 'parent')

    def has_add_permission(self, request: HttpRequest) -> bool:
        """Entries are created through the API only."""
        return False
