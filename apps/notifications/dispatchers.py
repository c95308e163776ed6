"""Notification dispatchers.

A dispatcher receives the serialized form of a lifecycle event (see
``DomainEvent.to_dict``) and delivers it. Delivery channels live outside
this service; the default dispatcher only records what would be sent.
"""

from __future__ import annotations

from typing import Any, Protocol

import structlog

logger = structlog.get_logger(__name__)


class NotificationDispatcher(Protocol):
    def dispatch(self, event_type: str, payload: dict[str, Any]) -> None:
        ...


def recipients_of(payload: dict[str, Any]) -> list[int]:
    """Users an event concerns: the booking's customer and the spa owner (or payout owner)."""
    return [payload[key] for key in ("customer_id", "owner_id") if payload.get(key) is not None]


class LoggingDispatcher:
    """Writes every lifecycle event to the ``notifications`` log as a structured record."""

    def dispatch(self, event_type: str, payload: dict[str, Any]) -> None:
        logger.info(
            "lifecycle_notification",
            event_type=event_type,
            event_id=payload.get("event_id"),
            recipients=recipients_of(payload),
            booking_id=payload.get("booking_id"),
            payout_id=payload.get("payout_id"),
        )
