"""Repositories mapping booking aggregates and schedules to rows."""

from __future__ import annotations

from decimal import Decimal
from uuid import UUID

from apps.spas.registry import SpaRegistry
from shared.domain.value_objects import Money, TimeSlot

from .domain.entities import Booking, BookingStatus, CancellationSource
from .domain.schedule import Reservation, Schedule, ScheduleKey
from .models import Booking as BookingModel


class DjangoBookingRepository:
    def get(self, booking_id: UUID, lock: bool = False) -> Booking | None:
        queryset = BookingModel.objects.select_related("spa")
        if lock:
            queryset = queryset.select_for_update(of=("self",))
        row = queryset.filter(pk=booking_id).first()
        return self._to_entity(row) if row else None

    def save(self, booking: Booking) -> None:
        BookingModel.objects.update_or_create(
            pk=booking.id,
            defaults={
                "spa_id": booking.spa_id,
                "service_id": booking.service_id,
                "staff_id": booking.staff_id,
                "customer_id": booking.customer_id,
                "scheduled_at": booking.slot.start,
                "ends_at": booking.slot.end,
                "duration_minutes": booking.slot.duration_minutes,
                "status": booking.status.value,
                "base_price": booking.base_price.amount,
                "coupon_code": booking.coupon_code,
                "discount_percent": booking.discount_percent,
                "final_price": booking.final_price.amount,
                "commission_rate": booking.commission_rate,
                "commission_amount": booking.commission_amount.amount,
                "currency": booking.base_price.currency,
                "cancellation_reason": booking.cancellation_reason,
                "cancellation_source": booking.cancellation_source.value if booking.cancellation_source else "",
                "confirmed_at": booking.confirmed_at,
                "completed_at": booking.completed_at,
                "cancelled_at": booking.cancelled_at,
                "created_at": booking.created_at,
            },
        )

    @staticmethod
    def _to_entity(row: BookingModel) -> Booking:
        return Booking(
            id=row.id,
            created_at=row.created_at,
            updated_at=row.updated_at,
            spa_id=row.spa_id,
            service_id=row.service_id,
            staff_id=row.staff_id,
            customer_id=row.customer_id,
            owner_id=row.spa.owner_id,
            slot=TimeSlot(row.scheduled_at, row.ends_at),
            base_price=Money(row.base_price, row.currency),
            status=BookingStatus(row.status),
            coupon_code=row.coupon_code,
            discount_percent=Decimal(row.discount_percent),
            final_price=Money(row.final_price, row.currency),
            commission_rate=Decimal(row.commission_rate),
            commission_amount=Money(row.commission_amount, row.currency),
            cancellation_reason=row.cancellation_reason,
            cancellation_source=CancellationSource(row.cancellation_source) if row.cancellation_source else None,
            confirmed_at=row.confirmed_at,
            completed_at=row.completed_at,
            cancelled_at=row.cancelled_at,
        )


class DjangoScheduleRepository:
    """
    Loads the live reservations of a resource around a slot

    With ``lock`` the resource row (staff member, or spa for staffless
    bookings) is locked first, which serializes every writer of that
    calendar until the surrounding transaction ends.
    """

    def __init__(self, registry: SpaRegistry | None = None):
        self.registry = registry or SpaRegistry()

    def load(self, key: ScheduleKey, window: TimeSlot, lock: bool = True) -> Schedule:
        if lock:
            self.registry.lock_schedule_resource(key.spa_id, key.staff_id)
        rows = (
            BookingModel.objects.blocking()
            .for_resource(key.spa_id, key.staff_id)
            .overlapping(window.start, window.end)
            .values_list("id", "scheduled_at", "ends_at")
        )
        return Schedule(
            key=key,
            reservations=[
                Reservation(booking_id=booking_id, slot=TimeSlot(start, end))
                for booking_id, start, end in rows
            ],
        )
