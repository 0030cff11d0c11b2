"""Test settings for Nestly.

In-memory SQLite, eager Celery and the locmem email backend, so the test
suite needs neither a broker nor a mail server.
"""

from .base import *  # noqa: F401,F403

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = True
CELERY_BROKER_URL = 'memory://'
CELERY_RESULT_BACKEND = 'cache+memory://'

EMAIL_BACKEND = 'django.core.mail.backends.locmem.EmailBackend'

NESTLY_LOCK_TIMEOUT_SECONDS = 5.0
NESTLY_NOTIFICATIONS_ENABLED = True
