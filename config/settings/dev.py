"""Development settings for Nestly.

Local runs use the SQLite file from the base settings, print outgoing
email to the console and log the booking apps at DEBUG. SQLite has no
row locks, so admissions there rely on the in-process listing lock only.
"""

from .base import *  # noqa: F401,F403

DEBUG = True

ALLOWED_HOSTS = ['*']

EMAIL_BACKEND = 'django.core.mail.backends.console.EmailBackend'

# Run Celery tasks inline unless a broker is configured explicitly
CELERY_TASK_ALWAYS_EAGER = os.environ.get('CELERY_BROKER_URL') is None  # noqa: F405

LOGGING["loggers"]["apps"]["level"] = "DEBUG"  # noqa: F405
LOGGING["loggers"]["shared"]["level"] = "DEBUG"  # noqa: F405
