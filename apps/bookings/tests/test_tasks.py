"""Tests for the periodic booking tasks."""

from datetime import timedelta
from decimal import Decimal

import pytest
from django.utils import timezone

from apps.bookings.models import Booking
from apps.bookings.tasks import complete_finished_bookings
from apps.finances.models import Earning
from apps.loyalty.models import Loyalty


def _booking(spa, service, customer, start, status=Booking.Status.CONFIRMED) -> Booking:
    return Booking.objects.create(
        spa=spa,
        service=service,
        customer=customer,
        scheduled_at=start,
        ends_at=start + timedelta(minutes=service.duration_minutes),
        duration_minutes=service.duration_minutes,
        status=status,
        base_price=service.price,
        final_price=service.price,
        commission_rate=Decimal("0.10"),
        commission_amount=Decimal("50000"),
    )


@pytest.mark.django_db
def test_finished_bookings_are_completed(spa, service, customer):
    now = timezone.now()
    finished = _booking(spa, service, customer, now - timedelta(days=2))
    recent = _booking(spa, service, customer, now - timedelta(hours=3))
    pending = _booking(spa, service, customer, now - timedelta(days=3), status=Booking.Status.PENDING)

    result = complete_finished_bookings()

    assert result == {"completed": 1, "failed": 0}
    finished.refresh_from_db()
    assert finished.status == Booking.Status.COMPLETED
    assert Earning.objects.get(booking=finished).net_amount == Decimal("450000.00")
    assert Loyalty.objects.get(user=customer).points == 10
    recent.refresh_from_db()
    pending.refresh_from_db()
    assert recent.status == Booking.Status.CONFIRMED
    assert pending.status == Booking.Status.PENDING


@pytest.mark.django_db
def test_auto_completion_can_be_disabled(settings, spa, service, customer):
    settings.MARKETPLACE = {**settings.MARKETPLACE, "auto_complete_after_hours": None}
    booking = _booking(spa, service, customer, timezone.now() - timedelta(days=5))

    assert complete_finished_bookings() == {"completed": 0, "failed": 0}
    booking.refresh_from_db()
    assert booking.status == Booking.Status.CONFIRMED


@pytest.mark.django_db
def test_task_runs_through_celery(spa, service, customer):
    booking = _booking(spa, service, customer, timezone.now() - timedelta(days=2))

    result = complete_finished_bookings.delay().get()

    assert result["completed"] == 1
    booking.refresh_from_db()
    assert booking.status == Booking.Status.COMPLETED
