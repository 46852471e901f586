"""Local development settings for LocalGrid.

Mails print to the console and Celery tasks run inline, so neither SMTP
nor Redis is needed to click through a booking. Set
``CELERY_TASK_ALWAYS_EAGER=false`` to exercise a real worker and beat.
"""

from .base import *  # noqa: F401,F403

DEBUG = True
ALLOWED_HOSTS = ['*']

EMAIL_BACKEND = 'django.core.mail.backends.console.EmailBackend'

CELERY_TASK_ALWAYS_EAGER = os.environ.get('CELERY_TASK_ALWAYS_EAGER', 'true').lower() == 'true'  # noqa: F405
CELERY_TASK_EAGER_PROPAGATES = CELERY_TASK_ALWAYS_EAGER

CORS_ALLOW_ALL_ORIGINS = True
