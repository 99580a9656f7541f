"""
Test settings for the catalog sync platform.

SQLite en memoria, cache local y Celery en modo eager.
"""

import os

os.environ.setdefault('SECRET_KEY', 'test-secret-key-not-for-production')

from .base import *  # noqa

DEBUG = False

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

CACHES = {
    'default': {
        'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
        'LOCATION': 'catalog-sync-tests',
    }
}

PASSWORD_HASHERS = ['django.contrib.auth.hashers.MD5PasswordHasher']

CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = True
CELERY_BROKER_URL = 'memory://'
CELERY_RESULT_BACKEND = 'cache+memory://'

# Sin esperas entre páginas ni backoff real en los tests
WOOCOMMERCE_SYNC = {
    **WOOCOMMERCE_SYNC,
    'PAGE_DELAY_SECONDS': 0,
    'BACKOFF_BASE_SECONDS': 0,
    'MAX_ATTEMPTS': 2,
}

LOGGING['root']['level'] = 'WARNING'
LOGGING['loggers']['apps.catalog_sync']['level'] = 'CRITICAL'
