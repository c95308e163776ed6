"""Tests for lifecycle notifications: bus subscription, Celery task and dispatcher."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone as dt_timezone
from decimal import Decimal
from unittest import mock
from uuid import uuid4

import pytest
from django.utils import timezone

from apps.bookings.application.command_handlers import CreateBookingCommand
from apps.bookings.domain.events import BookingConfirmed, BookingCreated
from apps.finances.domain.events import PayoutApproved
from apps.notifications import dispatchers, tasks
from apps.notifications.dispatchers import LoggingDispatcher, recipients_of
from apps.notifications.handlers import NOTIFIED_EVENTS, forward_to_dispatcher
from shared.application.message_bus import message_bus
from shared.domain.exceptions import ValidationError
from shared.domain.value_objects import TimeSlot


class RecordingDispatcher:
    def __init__(self):
        self.sent: list[tuple[str, dict]] = []

    def dispatch(self, event_type, payload):
        self.sent.append((event_type, payload))


class FlakyDispatcher:
    def dispatch(self, event_type, payload):
        raise ConnectionError("gateway down")


@pytest.fixture
def recorder(monkeypatch):
    dispatcher = RecordingDispatcher()
    monkeypatch.setattr(tasks, "get_dispatcher", lambda: dispatcher)
    return dispatcher


def test_recipients_are_customer_and_owner():
    assert recipients_of({"customer_id": 3, "owner_id": 7}) == [3, 7]
    assert recipients_of({"owner_id": 7, "customer_id": None}) == [7]


def test_default_dispatcher_comes_from_settings():
    assert isinstance(tasks.get_dispatcher(), LoggingDispatcher)


def test_logging_dispatcher_writes_structured_record(monkeypatch):
    logger = mock.Mock()
    monkeypatch.setattr(dispatchers, "logger", logger)

    LoggingDispatcher().dispatch("BookingConfirmed", {"event_id": "e1", "customer_id": 1, "owner_id": 2})

    logger.info.assert_called_once_with(
        "lifecycle_notification",
        event_type="BookingConfirmed",
        event_id="e1",
        recipients=[1, 2],
        booking_id=None,
        payout_id=None,
    )


def test_created_event_is_not_notified():
    assert BookingCreated not in NOTIFIED_EVENTS
    assert BookingConfirmed in NOTIFIED_EVENTS


def test_forwarded_event_reaches_dispatcher(recorder):
    start = datetime(2026, 3, 1, 10, tzinfo=dt_timezone.utc)
    booking_id = uuid4()
    event = BookingConfirmed(
        aggregate_id=booking_id,
        booking_id=booking_id,
        spa_id=1,
        customer_id=2,
        owner_id=3,
        slot=TimeSlot(start, start + timedelta(hours=1)),
    )

    forward_to_dispatcher(event)

    event_type, payload = recorder.sent[0]
    assert event_type == "BookingConfirmed"
    assert payload["booking_id"] == str(booking_id)


def test_connection_errors_are_retried(monkeypatch):
    monkeypatch.setattr(tasks, "get_dispatcher", lambda: FlakyDispatcher())

    with pytest.raises(ConnectionError):
        tasks.dispatch_lifecycle_event.apply(args=[{"event_type": "BookingConfirmed"}], throw=True)


@pytest.mark.django_db
def test_confirmed_booking_is_notified_after_commit(
    recorder, django_capture_on_commit_callbacks, customer, spa, service, tomorrow_at_ten
):
    with django_capture_on_commit_callbacks(execute=True):
        message_bus.handle_command(
            CreateBookingCommand(
                principal=customer.as_principal(),
                spa_id=spa.id,
                service_id=service.id,
                scheduled_at=tomorrow_at_ten,
            )
        )

    assert [event_type for event_type, _ in recorder.sent] == ["BookingConfirmed"]
    assert recipients_of(recorder.sent[0][1]) == [customer.id, spa.owner_id]


@pytest.mark.django_db
def test_rolled_back_work_sends_nothing(recorder, django_capture_on_commit_callbacks, customer, spa, service):
    with django_capture_on_commit_callbacks(execute=True):
        with pytest.raises(ValidationError):
            message_bus.handle_command(
                CreateBookingCommand(
                    principal=customer.as_principal(),
                    spa_id=spa.id,
                    service_id=service.id,
                    scheduled_at=timezone.now() - timedelta(days=1),
                )
            )

    assert recorder.sent == []


def test_payout_events_reach_the_owner(recorder):
    forward_to_dispatcher(
        PayoutApproved(payout_id=uuid4(), owner_id=7, amount=Decimal("1000000.00"), reviewed_by=1)
    )

    event_type, payload = recorder.sent[0]
    assert event_type == "PayoutApproved"
    assert payload["amount"] == "1000000.00"
    assert recipients_of(payload) == [7]
