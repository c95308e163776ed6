"""
Booking Command Handlers

Use cases of the booking lifecycle. Every handler runs its work in one
serializable unit of work (retried on transient storage errors) and takes a
fresh configuration snapshot for each command.

Commands:
- CreateBookingCommand: Book a service slot, optionally with a coupon
- AcceptBookingCommand / RejectBookingCommand: Owner decision on PENDING
- RescheduleBookingCommand: Move a live booking to another start time
- CancelBookingCommand: End a live booking early
- CompleteBookingCommand: Mark delivered, accrue commission and loyalty
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Callable
from uuid import UUID
import logging

from django.utils import timezone

from apps.coupons.services import DiscountEngine
from apps.finances.services import CommissionLedger
from apps.loyalty.services import LoyaltyService
from apps.spas.registry import SpaRegistry
from shared.application.config import MarketplaceConfig
from shared.application.uow import DjangoUnitOfWork, run_in_unit_of_work
from shared.domain.exceptions import AuthorizationError, NotFoundError
from shared.domain.value_objects import Money, Principal, Role, TimeSlot
from apps.bookings.domain.entities import Booking, SpaNotBookable
from apps.bookings.domain.schedule import ScheduleKey
from apps.bookings.repositories import DjangoBookingRepository, DjangoScheduleRepository

logger = logging.getLogger(__name__)


# ===== Commands =====

@dataclass
class CreateBookingCommand:
    principal: Principal
    spa_id: int
    service_id: int
    scheduled_at: datetime
    staff_id: int | None = None
    coupon_code: str | None = None


@dataclass
class AcceptBookingCommand:
    principal: Principal
    booking_id: UUID


@dataclass
class RejectBookingCommand:
    principal: Principal
    booking_id: UUID
    reason: str = ''


@dataclass
class RescheduleBookingCommand:
    principal: Principal
    booking_id: UUID
    scheduled_at: datetime


@dataclass
class CancelBookingCommand:
    principal: Principal
    booking_id: UUID
    reason: str = ''


@dataclass
class CompleteBookingCommand:
    principal: Principal
    booking_id: UUID


STAKEHOLDERS = (Role.CUSTOMER, Role.OWNER, Role.ADMIN)


# ===== Command Handlers =====

class BookingHandler:
    """Shared wiring: repositories, registry, config snapshot and clock."""

    def __init__(
        self,
        booking_repo: DjangoBookingRepository | None = None,
        schedule_repo: DjangoScheduleRepository | None = None,
        registry: SpaRegistry | None = None,
        config: MarketplaceConfig | None = None,
        clock: Callable[[], datetime] = timezone.now,
    ):
        self.registry = registry or SpaRegistry()
        self.booking_repo = booking_repo or DjangoBookingRepository()
        self.schedule_repo = schedule_repo or DjangoScheduleRepository(self.registry)
        self._config = config
        self.clock = clock

    def snapshot_config(self) -> MarketplaceConfig:
        return self._config or MarketplaceConfig.from_settings()

    def _run(self, operation: Callable[[DjangoUnitOfWork], Booking], config: MarketplaceConfig) -> Booking:
        return run_in_unit_of_work(operation, attempts=config.transaction_retries)

    def _load(self, booking_id: UUID) -> Booking:
        booking = self.booking_repo.get(booking_id, lock=True)
        if not booking:
            raise NotFoundError(f"Booking {booking_id} not found", booking_id=str(booking_id))
        return booking

    def __call__(self, command):
        return self.handle(command)


class CreateBookingHandler(BookingHandler):
    """
    Handler for CreateBooking command

    Inside one transaction:
    1. Resolve spa, service and staff through the registry
    2. Lock the schedule resource (staff row, or spa row when staffless)
    3. Check the slot against live bookings of that resource
    4. Redeem the coupon (atomic conditional increment)
    5. Create and save the Booking aggregate
    Events are published after commit.
    """

    def __init__(self, *args, discount_engine: DiscountEngine | None = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.discount_engine = discount_engine or DiscountEngine(self.registry)

    def handle(self, command: CreateBookingCommand) -> Booking:
        principal = command.principal
        if not principal.is_customer:
            raise AuthorizationError("Only customers can book services")

        config = self.snapshot_config()
        logger.info(
            f"Creating booking for spa {command.spa_id}, service {command.service_id}, "
            f"staff {command.staff_id}, customer {principal.user_id} at {command.scheduled_at}"
        )

        def operation(uow: DjangoUnitOfWork) -> Booking:
            now = self.clock()
            spa = self.registry.get_spa(command.spa_id)
            if not spa.is_approved:
                raise SpaNotBookable(f"Spa {spa.id} is not approved for bookings", spa_id=spa.id)
            service = self.registry.get_service(spa.id, command.service_id)
            if command.staff_id is not None:
                self.registry.get_staff(spa.id, command.staff_id)

            slot = TimeSlot.starting_at(command.scheduled_at, service.duration_minutes)
            schedule = self.schedule_repo.load(ScheduleKey(spa.id, command.staff_id), slot, lock=True)

            base_price = Money(service.price, config.currency)
            coupon_code = None
            discount_percent = 0
            if command.coupon_code:
                redemption = self.discount_engine.apply(command.coupon_code, base_price, spa.id)
                coupon_code = redemption.coupon.code
                discount_percent = redemption.coupon.discount_percent

            booking = Booking.create(
                spa_id=spa.id,
                service_id=service.id,
                customer_id=principal.user_id,
                owner_id=spa.owner_id,
                staff_id=command.staff_id,
                slot=slot,
                base_price=base_price,
                commission_rate=config.commission_rate,
                requires_manual_acceptance=spa.requires_manual_acceptance,
                coupon_code=coupon_code,
                discount_percent=discount_percent,
                now=now,
            )
            schedule.reserve(booking.id, slot)

            uow.collect_events(booking)
            self.booking_repo.save(booking)
            return booking

        booking = self._run(operation, config)
        logger.info(
            f"Booking {booking.id} created as {booking.status.value}: "
            f"base {booking.base_price.amount}, final {booking.final_price.amount}"
        )
        return booking


class AcceptBookingHandler(BookingHandler):
    def handle(self, command: AcceptBookingCommand) -> Booking:
        logger.info(f"Accepting booking {command.booking_id}")

        def operation(uow: DjangoUnitOfWork) -> Booking:
            booking = self._load(command.booking_id)
            booking.ensure_actor(command.principal, (Role.OWNER,))
            booking.accept(now=self.clock())
            uow.collect_events(booking)
            self.booking_repo.save(booking)
            return booking

        return self._run(operation, self.snapshot_config())


class RejectBookingHandler(BookingHandler):
    def handle(self, command: RejectBookingCommand) -> Booking:
        logger.info(f"Rejecting booking {command.booking_id}, reason: {command.reason}")

        def operation(uow: DjangoUnitOfWork) -> Booking:
            booking = self._load(command.booking_id)
            booking.ensure_actor(command.principal, (Role.OWNER,))
            booking.reject(command.reason, now=self.clock())
            uow.collect_events(booking)
            self.booking_repo.save(booking)
            return booking

        return self._run(operation, self.snapshot_config())


class RescheduleBookingHandler(BookingHandler):
    """Moves a live booking after re-checking its resource's schedule."""

    def handle(self, command: RescheduleBookingCommand) -> Booking:
        logger.info(f"Rescheduling booking {command.booking_id} to {command.scheduled_at}")

        def operation(uow: DjangoUnitOfWork) -> Booking:
            booking = self._load(command.booking_id)
            booking.ensure_actor(command.principal, STAKEHOLDERS)
            booking.reschedule(command.scheduled_at, now=self.clock())
            schedule = self.schedule_repo.load(
                ScheduleKey(booking.spa_id, booking.staff_id), booking.slot, lock=True
            )
            schedule.reserve(booking.id, booking.slot)
            uow.collect_events(booking)
            self.booking_repo.save(booking)
            return booking

        return self._run(operation, self.snapshot_config())


class CancelBookingHandler(BookingHandler):
    def handle(self, command: CancelBookingCommand) -> Booking:
        logger.info(f"Cancelling booking {command.booking_id}, reason: {command.reason}")

        def operation(uow: DjangoUnitOfWork) -> Booking:
            booking = self._load(command.booking_id)
            booking.ensure_actor(command.principal, STAKEHOLDERS + (Role.SYSTEM,))
            booking.cancel(command.reason, booking.source_for(command.principal), now=self.clock())
            uow.collect_events(booking)
            self.booking_repo.save(booking)
            return booking

        return self._run(operation, self.snapshot_config())


class CompleteBookingHandler(BookingHandler):
    """
    Handler for CompleteBooking command

    The status change, the ledger accrual and the loyalty award commit
    together or not at all. The commission rate comes from the config
    snapshot taken for this command.
    """

    def __init__(
        self,
        *args,
        ledger: CommissionLedger | None = None,
        loyalty: LoyaltyService | None = None,
        **kwargs,
    ):
        super().__init__(*args, **kwargs)
        self.ledger = ledger
        self.loyalty = loyalty

    def handle(self, command: CompleteBookingCommand) -> Booking:
        config = self.snapshot_config()
        ledger = self.ledger or CommissionLedger(config=config)
        loyalty = self.loyalty or LoyaltyService(config=config)
        logger.info(f"Completing booking {command.booking_id} at commission rate {config.commission_rate}")

        def operation(uow: DjangoUnitOfWork) -> Booking:
            booking = self._load(command.booking_id)
            booking.ensure_actor(command.principal, (Role.OWNER, Role.ADMIN, Role.SYSTEM))
            accrual = booking.complete(
                config.commission_rate,
                now=self.clock(),
                allow_manual_completion=config.allow_manual_completion,
            )
            self.booking_repo.save(booking)
            ledger.accrue(
                booking_id=booking.id,
                owner_id=booking.owner_id,
                spa_id=booking.spa_id,
                accrual=accrual,
            )
            loyalty.award(
                booking.customer_id,
                config.loyalty_points_per_booking,
                reason=f"Completed booking {booking.id}",
                booking_id=booking.id,
            )
            uow.collect_events(booking)
            return booking

        booking = self._run(operation, config)
        logger.info(
            f"Booking {booking.id} completed: commission {booking.commission_amount.amount}"
        )
        return booking
