"""Cache configuration.

Session tokens live in their own cache alias so they can be pointed at
a dedicated Redis database and never get evicted by unrelated caching.
"""

from server.settings.components import config

_REDIS_URL = config('REDIS_URL', default='redis://localhost:6379/0')

CACHES = {
    'default': {
        'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
    },
    'auth_tokens': {
        'BACKEND': 'django.core.cache.backends.redis.RedisCache',
        'LOCATION': _REDIS_URL,
        'KEY_PREFIX': 'files_manager',
    },
}

# Cache alias that backs the session store
AUTH_TOKEN_CACHE_ALIAS = 'auth_tokens'

# Session token lifetime in seconds (24 hours)
AUTH_TOKEN_TTL = config('AUTH_TOKEN_TTL', cast=int, default=60 * 60 * 24)
