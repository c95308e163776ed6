"""ASGI entry point for the spa marketplace (uvicorn, daphne)."""

import os

from django.core.asgi import get_asgi_application  # type: ignore

# Production servers set DJANGO_SETTINGS_MODULE explicitly.
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings.dev')

application = get_asgi_application()
