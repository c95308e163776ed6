"""Message bus subscribers that hand lifecycle events to Celery."""

from __future__ import annotations

import logging

from apps.bookings.domain.events import BookingCancelled, BookingCompleted, BookingConfirmed
from apps.finances.domain.events import PayoutApproved, PayoutCompleted
from shared.application.message_bus import MessageBus
from shared.domain.base import DomainEvent

from .tasks import dispatch_lifecycle_event

logger = logging.getLogger(__name__)

NOTIFIED_EVENTS = (
    BookingConfirmed,
    BookingCancelled,
    BookingCompleted,
    PayoutApproved,
    PayoutCompleted,
)


def forward_to_dispatcher(event: DomainEvent) -> None:
    logger.debug(f"Queueing notification for {event.__class__.__name__} {event.event_id}")
    dispatch_lifecycle_event.delay(event.to_dict())


def register_notification_handlers(bus: MessageBus) -> None:
    for event_type in NOTIFIED_EVENTS:
        bus.register_event_handler(event_type, forward_to_dispatcher)
