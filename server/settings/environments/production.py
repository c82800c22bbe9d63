"""Settings for production.

Values that differ between deployments come from ``config/.env``.
"""

from server.settings.components import config

DEBUG = False

ALLOWED_HOSTS = config(
    'DJANGO_ALLOWED_HOSTS',
    cast=lambda hosts: [host.strip() for host in hosts.split(',')],
    default='localhost',
)

SECURE_CONTENT_TYPE_NOSNIFF = True
