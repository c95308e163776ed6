"""Celery tasks for notifications."""

from __future__ import annotations

import logging
from typing import Any

from celery import shared_task  # type: ignore
from django.conf import settings  # type: ignore
from django.utils.module_loading import import_string  # type: ignore

logger = logging.getLogger(__name__)

DEFAULT_DISPATCHER = "apps.notifications.dispatchers.LoggingDispatcher"


def get_dispatcher():
    dispatcher_path = getattr(settings, "NOTIFICATION_DISPATCHER", DEFAULT_DISPATCHER)
    return import_string(dispatcher_path)()


@shared_task(name="notifications.dispatch_lifecycle_event", bind=True, max_retries=3, default_retry_delay=30)
def dispatch_lifecycle_event(self, payload: dict[str, Any]) -> None:
    """Deliver one serialized lifecycle event through the configured dispatcher."""
    event_type = payload.get("event_type", "unknown")
    try:
        get_dispatcher().dispatch(event_type, payload)
    except ConnectionError as exc:
        logger.warning(f"Dispatcher unavailable for {event_type}, retrying: {exc}")
        raise self.retry(exc=exc)
