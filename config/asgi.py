"""ASGI entry point for LocalGrid.

Deployments pick their settings through ``DJANGO_SETTINGS_MODULE``; the
fallback is the development configuration.
"""

import os

from django.core.asgi import get_asgi_application  # type: ignore

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings.dev')

application = get_asgi_application()
