"""
Booking Domain Entities

- BookingStatus: FSM states of an appointment
- CancellationSource: who ended a booking early
- Booking: aggregate root enforcing the lifecycle, pricing and actor rules
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Iterable
from uuid import UUID

from apps.finances.domain.ledger import Accrual, commission_for
from shared.domain.base import Aggregate, utcnow
from shared.domain.exceptions import AuthorizationError, StateError, ValidationError
from shared.domain.value_objects import Money, Principal, Role, TimeSlot

from .events import (
    BookingCancelled,
    BookingCompleted,
    BookingConfirmed,
    BookingCreated,
    BookingRescheduled,
)


class BookingStatus(Enum):
    """
    Booking Status Finite State Machine

    State transitions:
    - PENDING -> CONFIRMED (owner accepts, or spa auto-confirms)
    - PENDING -> CANCELLED (owner rejects, anyone involved cancels)
    - CONFIRMED -> COMPLETED (service delivered)
    - CONFIRMED -> CANCELLED
    COMPLETED and CANCELLED are terminal.
    """
    PENDING = 'pending'
    CONFIRMED = 'confirmed'
    COMPLETED = 'completed'
    CANCELLED = 'cancelled'


SCHEDULE_BLOCKING = (BookingStatus.PENDING, BookingStatus.CONFIRMED)


class CancellationSource(Enum):
    CUSTOMER = 'customer'
    OWNER = 'owner'
    ADMIN = 'admin'
    SYSTEM = 'system'


class SpaNotBookable(StateError):
    code = 'spa_not_bookable'


def quote_price(base_price: Money, discount_percent: Decimal) -> Money:
    """final price = base price x (1 - discount / 100)"""
    if not Decimal('0') <= Decimal(discount_percent) <= Decimal('100'):
        raise ValidationError("Discount percent must be between 0 and 100")
    return base_price.percent_off(discount_percent)


@dataclass(eq=False, kw_only=True)
class Booking(Aggregate):
    """
    Booking Aggregate Root

    A customer's appointment for one service at one spa, optionally with a
    specific staff member. Holds ids only; spa, service and staff details
    are resolved through the registry when the booking is created.

    Key invariants:
    - final_price = base_price x (1 - discount_percent / 100)
    - commission_amount = final_price x commission_rate, where the rate is
      captured again at completion and never recomputed afterwards
    - terminal once COMPLETED or CANCELLED
    """

    spa_id: int
    service_id: int
    customer_id: int
    owner_id: int
    slot: TimeSlot
    base_price: Money
    staff_id: int | None = None

    status: BookingStatus = BookingStatus.PENDING

    coupon_code: str | None = None
    discount_percent: Decimal = Decimal('0')
    final_price: Money | None = None
    commission_rate: Decimal = Decimal('0')
    commission_amount: Money | None = None

    cancellation_reason: str = ''
    cancellation_source: CancellationSource | None = None

    confirmed_at: datetime | None = None
    completed_at: datetime | None = None
    cancelled_at: datetime | None = None

    def __post_init__(self):
        if self.final_price is None:
            self.final_price = quote_price(self.base_price, self.discount_percent)
        if self.commission_amount is None:
            self.commission_amount = commission_for(self.final_price, self.commission_rate)

    # ----- creation -----

    @classmethod
    def create(
        cls,
        *,
        spa_id: int,
        service_id: int,
        customer_id: int,
        owner_id: int,
        slot: TimeSlot,
        base_price: Money,
        commission_rate: Decimal,
        requires_manual_acceptance: bool,
        staff_id: int | None = None,
        coupon_code: str | None = None,
        discount_percent: Decimal = Decimal('0'),
        now: datetime | None = None,
    ) -> 'Booking':
        now = now or utcnow()
        if slot.start <= now:
            raise ValidationError("Booking time must be in the future", field='scheduled_at')

        status = BookingStatus.PENDING if requires_manual_acceptance else BookingStatus.CONFIRMED
        booking = cls(
            spa_id=spa_id,
            service_id=service_id,
            customer_id=customer_id,
            owner_id=owner_id,
            staff_id=staff_id,
            slot=slot,
            base_price=base_price,
            coupon_code=coupon_code,
            discount_percent=Decimal(discount_percent),
            commission_rate=Decimal(commission_rate),
            status=status,
            confirmed_at=now if status == BookingStatus.CONFIRMED else None,
            created_at=now,
            updated_at=now,
        )
        booking.add_event(BookingCreated(
            aggregate_id=booking.id,
            booking_id=booking.id,
            spa_id=spa_id,
            customer_id=customer_id,
            owner_id=owner_id,
            slot=slot,
            status=status.value,
            final_price=booking.final_price.amount,
            coupon_code=coupon_code,
        ))
        if status == BookingStatus.CONFIRMED:
            booking._emit_confirmed()
        return booking

    # ----- actors -----

    def ensure_actor(self, principal: Principal, allowed: Iterable[Role]) -> None:
        """
        Raise AuthorizationError unless ``principal`` plays one of ``allowed``
        roles for this booking: its customer, its spa's owner, an admin or
        the system.
        """
        allowed = set(allowed)
        if principal.is_system and Role.SYSTEM in allowed:
            return
        if principal.is_admin and Role.ADMIN in allowed:
            return
        if principal.is_owner and Role.OWNER in allowed and principal.user_id == self.owner_id:
            return
        if principal.is_customer and Role.CUSTOMER in allowed and principal.user_id == self.customer_id:
            return
        raise AuthorizationError(
            f"{principal.role.value} {principal.user_id} may not act on booking {self.id}",
            booking_id=str(self.id),
        )

    def source_for(self, principal: Principal) -> CancellationSource:
        if principal.is_system:
            return CancellationSource.SYSTEM
        if principal.is_admin:
            return CancellationSource.ADMIN
        if principal.is_owner:
            return CancellationSource.OWNER
        return CancellationSource.CUSTOMER

    # ----- transitions -----

    def _ensure_status(self, allowed: Iterable[BookingStatus], action: str) -> None:
        if self.status not in allowed:
            raise StateError(
                f"Cannot {action} booking {self.id} in status {self.status.value}",
                status=self.status.value,
            )

    def accept(self, now: datetime | None = None):
        """PENDING -> CONFIRMED"""
        self._ensure_status((BookingStatus.PENDING,), 'accept')
        now = now or utcnow()
        self.status = BookingStatus.CONFIRMED
        self.confirmed_at = now
        self.updated_at = now
        self._emit_confirmed()

    def reject(self, reason: str = '', now: datetime | None = None):
        """PENDING -> CANCELLED by the spa owner"""
        self._ensure_status((BookingStatus.PENDING,), 'reject')
        self._cancel(reason, CancellationSource.OWNER, now or utcnow(), rejected=True)

    def cancel(self, reason: str, source: CancellationSource, now: datetime | None = None):
        """PENDING/CONFIRMED -> CANCELLED"""
        self._ensure_status(SCHEDULE_BLOCKING, 'cancel')
        self._cancel(reason, source, now or utcnow(), rejected=False)

    def reschedule(self, new_start: datetime, now: datetime | None = None):
        """
        Move the appointment to ``new_start``, keeping its duration; the
        caller must check the moved slot against the resource's schedule.
        """
        self._ensure_status(SCHEDULE_BLOCKING, 'reschedule')
        now = now or utcnow()
        new_slot = TimeSlot.starting_at(new_start, self.slot.duration_minutes)
        if new_slot.start <= now:
            raise ValidationError("Booking time must be in the future", field='scheduled_at')
        previous = self.slot
        self.slot = new_slot
        self.updated_at = now
        self.add_event(BookingRescheduled(
            aggregate_id=self.id,
            booking_id=self.id,
            spa_id=self.spa_id,
            customer_id=self.customer_id,
            owner_id=self.owner_id,
            previous_start=previous.start,
            slot=new_slot,
        ))

    def complete(
        self,
        commission_rate: Decimal,
        now: datetime | None = None,
        allow_manual_completion: bool = False,
    ) -> Accrual:
        """
        CONFIRMED -> COMPLETED

        Captures ``commission_rate`` into the booking and returns the
        accrual the ledger has to record in the same transaction.
        """
        self._ensure_status((BookingStatus.CONFIRMED,), 'complete')
        now = now or utcnow()
        if not allow_manual_completion and now < self.slot.start:
            raise StateError(
                f"Booking {self.id} cannot be completed before it starts",
                scheduled_at=self.slot.start.isoformat(),
            )
        accrual = Accrual.capture(self.final_price, commission_rate)
        self.commission_rate = accrual.commission_rate
        self.commission_amount = accrual.commission
        self.status = BookingStatus.COMPLETED
        self.completed_at = now
        self.updated_at = now
        self.add_event(BookingCompleted(
            aggregate_id=self.id,
            booking_id=self.id,
            spa_id=self.spa_id,
            customer_id=self.customer_id,
            owner_id=self.owner_id,
            final_price=accrual.gross.amount,
            commission_amount=accrual.commission.amount,
            net_amount=accrual.net.amount,
        ))
        return accrual

    def _cancel(self, reason: str, source: CancellationSource, now: datetime, rejected: bool):
        self.status = BookingStatus.CANCELLED
        self.cancellation_reason = reason or ''
        self.cancellation_source = source
        self.cancelled_at = now
        self.updated_at = now
        self.add_event(BookingCancelled(
            aggregate_id=self.id,
            booking_id=self.id,
            spa_id=self.spa_id,
            customer_id=self.customer_id,
            owner_id=self.owner_id,
            reason=self.cancellation_reason,
            source=source.value,
            rejected=rejected,
        ))

    def _emit_confirmed(self):
        self.add_event(BookingConfirmed(
            aggregate_id=self.id,
            booking_id=self.id,
            spa_id=self.spa_id,
            customer_id=self.customer_id,
            owner_id=self.owner_id,
            slot=self.slot,
        ))

    # ----- queries -----

    @property
    def blocks_schedule(self) -> bool:
        return self.status in SCHEDULE_BLOCKING

    @property
    def is_terminal(self) -> bool:
        return self.status in (BookingStatus.COMPLETED, BookingStatus.CANCELLED)

    def __str__(self):
        return f"Booking {self.id} ({self.status.value}) {self.slot}"
