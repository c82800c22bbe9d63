"""API URL configuration."""

from django.urls import path

from server.apps.api import views

app_name = 'api'

urlpatterns = [
    # Health and counters
    path('status', views.status, name='status'),
    path('stats', views.stats, name='stats'),

    # Users and sessions
    path('users', views.users, name='users'),
    path('users/me', views.me, name='me'),
    path('connect', views.connect, name='connect'),
    path('disconnect', views.disconnect, name='disconnect'),

    # Catalog
    path('files', views.files, name='files'),
    path('files/<str:entry_id>', views.file_detail, name='file-detail'),
    path('files/<str:entry_id>/publish', views.publish, name='publish'),
    path('files/<str:entry_id>/unpublish', views.unpublish, name='unpublish'),
    path('files/<str:entry_id>/data', views.file_data, name='file-data'),
]
