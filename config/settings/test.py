"""Test settings.

File-backed SQLite, eager Celery and a fast password hasher. SQLite has no
row locks, so write transactions start with ``BEGIN IMMEDIATE`` and wait on
the database lock instead; the threaded tests rely on that serialization.
Point ``TEST_DB_*`` at PostgreSQL to run them against real row locks.
"""

import os
import tempfile

from .base import *  # noqa: F401,F403

DEBUG = False

TEST_DB_ENGINE = os.environ.get('TEST_DB_ENGINE', 'django.db.backends.sqlite3')

DATABASES = {
    'default': {
        'ENGINE': TEST_DB_ENGINE,
        'NAME': os.environ.get('TEST_DB_NAME', os.path.join(tempfile.gettempdir(), 'spa_marketplace.sqlite3')),
        'USER': os.environ.get('TEST_DB_USER', ''),
        'PASSWORD': os.environ.get('TEST_DB_PASSWORD', ''),
        'HOST': os.environ.get('TEST_DB_HOST', ''),
        'PORT': os.environ.get('TEST_DB_PORT', ''),
    }
}

if TEST_DB_ENGINE.endswith('sqlite3'):
    # A named test database, so that threads share it and honour the busy timeout.
    DATABASES['default']['TEST'] = {
        'NAME': os.path.join(tempfile.gettempdir(), 'test_spa_marketplace.sqlite3'),
    }
    DATABASES['default']['OPTIONS'] = {'transaction_mode': 'IMMEDIATE', 'timeout': 20}

PASSWORD_HASHERS = ['django.contrib.auth.hashers.MD5PasswordHasher']

STORAGES = {
    'default': {'BACKEND': 'django.core.files.storage.FileSystemStorage'},
    'staticfiles': {'BACKEND': 'django.contrib.staticfiles.storage.StaticFilesStorage'},
}

CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = True
CELERY_BROKER_URL = 'memory://'
CELERY_RESULT_BACKEND = 'cache+memory://'

EMAIL_BACKEND = 'django.core.mail.backends.locmem.EmailBackend'

MARKETPLACE = {
    **MARKETPLACE,  # noqa: F405
    'commission_rate': '0.10',
    'allow_manual_completion': False,
    'auto_complete_after_hours': 24,
    'currency': 'VND',
}

NOTIFICATION_DISPATCHER = 'apps.notifications.dispatchers.LoggingDispatcher'
