"""
Booking Domain Events

Published on the message bus after the booking transaction commits.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from uuid import UUID

from shared.domain.base import DomainEvent
from shared.domain.value_objects import TimeSlot


@dataclass(kw_only=True)
class BookingCreated(DomainEvent):
    """
    Event: A customer booked a slot

    Emitted for both PENDING and auto-confirmed bookings.
    """
    booking_id: UUID
    spa_id: int
    customer_id: int
    owner_id: int
    slot: TimeSlot
    status: str
    final_price: Decimal
    coupon_code: str | None = None


@dataclass(kw_only=True)
class BookingConfirmed(DomainEvent):
    """
    Event: Booking is CONFIRMED

    Either on creation at a spa without manual acceptance, or when the
    owner accepts a PENDING booking.
    """
    booking_id: UUID
    spa_id: int
    customer_id: int
    owner_id: int
    slot: TimeSlot


@dataclass(kw_only=True)
class BookingRescheduled(DomainEvent):
    booking_id: UUID
    spa_id: int
    customer_id: int
    owner_id: int
    previous_start: datetime
    slot: TimeSlot


@dataclass(kw_only=True)
class BookingCancelled(DomainEvent):
    """
    Event: Booking was cancelled or rejected

    ``rejected`` is set when the owner declined a PENDING booking.
    """
    booking_id: UUID
    spa_id: int
    customer_id: int
    owner_id: int
    reason: str
    source: str
    rejected: bool = False


@dataclass(kw_only=True)
class BookingCompleted(DomainEvent):
    """
    Event: Service was delivered

    Commission and loyalty were already recorded in the same transaction;
    subscribers only inform people.
    """
    booking_id: UUID
    spa_id: int
    customer_id: int
    owner_id: int
    final_price: Decimal
    commission_amount: Decimal
    net_amount: Decimal
