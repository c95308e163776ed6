"""Tests for the booking command handlers against the database."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from datetime import timedelta
from decimal import Decimal

import pytest
from django.db import close_old_connections

from apps.bookings.application.command_handlers import (
    AcceptBookingCommand,
    AcceptBookingHandler,
    CancelBookingCommand,
    CancelBookingHandler,
    CompleteBookingCommand,
    CompleteBookingHandler,
    CreateBookingCommand,
    CreateBookingHandler,
    RejectBookingCommand,
    RejectBookingHandler,
    RescheduleBookingCommand,
    RescheduleBookingHandler,
)
from apps.bookings.domain.entities import BookingStatus, SpaNotBookable
from apps.bookings.domain.schedule import SlotConflict
from apps.bookings.models import Booking as BookingRow
from apps.coupons.models import Coupon
from apps.finances.models import Earning
from apps.finances.services import CommissionLedger
from apps.loyalty.models import Loyalty, LoyaltyHistory
from apps.spas.models import Spa, Staff
from shared.domain.exceptions import AuthorizationError, NotFoundError, StateError, ValidationError
from shared.domain.value_objects import Principal

pytestmark = pytest.mark.django_db


@pytest.fixture
def create(marketplace_config):
    return CreateBookingHandler(config=marketplace_config)


@pytest.fixture
def book(create, customer, spa, service):
    def _book(when, staff=None, coupon_code=None, who=None):
        return create(
            CreateBookingCommand(
                principal=(who or customer).as_principal(),
                spa_id=spa.id,
                service_id=service.id,
                scheduled_at=when,
                staff_id=staff.id if staff else None,
                coupon_code=coupon_code,
            )
        )

    return _book


def _completer(config, at):
    return CompleteBookingHandler(config=config, clock=lambda: at)


def test_booking_with_coupon_is_priced_and_confirmed(book, owner, spa, tomorrow_at_ten):
    Coupon.objects.create(
        code="SAVE10", spa=spa, issued_by=owner, issuer_role=Coupon.IssuerRole.OWNER, discount_percent=10
    )

    booking = book(tomorrow_at_ten, coupon_code="SAVE10")

    row = BookingRow.objects.get(pk=booking.id)
    assert row.status == BookingRow.Status.CONFIRMED
    assert row.base_price == Decimal("500000.00")
    assert row.final_price == Decimal("450000.00")
    assert row.coupon_code == "SAVE10"
    assert Coupon.objects.get(code="SAVE10").current_redemptions == 1


def test_only_customers_book(create, owner, spa, service, tomorrow_at_ten):
    with pytest.raises(AuthorizationError):
        create(
            CreateBookingCommand(
                principal=owner.as_principal(), spa_id=spa.id, service_id=service.id, scheduled_at=tomorrow_at_ten
            )
        )


def test_unapproved_spa_is_not_bookable(book, spa, tomorrow_at_ten):
    spa.is_approved = False
    spa.save()

    with pytest.raises(SpaNotBookable):
        book(tomorrow_at_ten)


def test_staff_of_another_spa_is_not_found(book, owner, tomorrow_at_ten):
    elsewhere = Spa.objects.create(owner=owner, name="Orchid", address="3 Hai Ba Trung", is_approved=True)
    stranger = Staff.objects.create(spa=elsewhere, name="Hoa")

    with pytest.raises(NotFoundError):
        book(tomorrow_at_ten, staff=stranger)


def test_past_slot_is_invalid(book, tomorrow_at_ten):
    with pytest.raises(ValidationError):
        book(tomorrow_at_ten - timedelta(days=3))


def test_overlapping_slot_conflicts(book, other_customer, staff, tomorrow_at_ten):
    book(tomorrow_at_ten, staff=staff)

    with pytest.raises(SlotConflict):
        book(tomorrow_at_ten + timedelta(minutes=30), staff=staff, who=other_customer)
    book(tomorrow_at_ten + timedelta(hours=1), staff=staff, who=other_customer)


def test_failed_booking_does_not_consume_coupon(book, owner, spa, staff, other_customer, tomorrow_at_ten):
    Coupon.objects.create(
        code="ONCE", spa=spa, issued_by=owner, issuer_role=Coupon.IssuerRole.OWNER, discount_percent=20
    )
    book(tomorrow_at_ten, staff=staff)

    with pytest.raises(SlotConflict):
        book(tomorrow_at_ten, staff=staff, coupon_code="ONCE", who=other_customer)

    assert Coupon.objects.get(code="ONCE").current_redemptions == 0


def test_staffless_bookings_share_the_spa_calendar(book, other_customer, staff, tomorrow_at_ten):
    book(tomorrow_at_ten)

    with pytest.raises(SlotConflict):
        book(tomorrow_at_ten, who=other_customer)
    book(tomorrow_at_ten, staff=staff, who=other_customer)


def test_cancelled_booking_frees_the_slot(book, customer, other_customer, marketplace_config, tomorrow_at_ten):
    booking = book(tomorrow_at_ten)
    CancelBookingHandler(config=marketplace_config)(
        CancelBookingCommand(principal=customer.as_principal(), booking_id=booking.id, reason="ill")
    )

    row = BookingRow.objects.get(pk=booking.id)
    assert row.status == BookingRow.Status.CANCELLED
    assert row.cancellation_source == "customer"
    book(tomorrow_at_ten, who=other_customer)


def test_manual_acceptance_flow(book, spa, owner, customer, marketplace_config, tomorrow_at_ten):
    spa.requires_manual_acceptance = True
    spa.save()
    pending = book(tomorrow_at_ten)
    assert pending.status == BookingStatus.PENDING

    with pytest.raises(AuthorizationError):
        AcceptBookingHandler(config=marketplace_config)(
            AcceptBookingCommand(principal=customer.as_principal(), booking_id=pending.id)
        )
    accepted = AcceptBookingHandler(config=marketplace_config)(
        AcceptBookingCommand(principal=owner.as_principal(), booking_id=pending.id)
    )
    assert accepted.status == BookingStatus.CONFIRMED


def test_reject_frees_pending_slot(book, spa, owner, other_customer, marketplace_config, tomorrow_at_ten):
    spa.requires_manual_acceptance = True
    spa.save()
    pending = book(tomorrow_at_ten)

    rejected = RejectBookingHandler(config=marketplace_config)(
        RejectBookingCommand(principal=owner.as_principal(), booking_id=pending.id, reason="closed")
    )

    assert rejected.status == BookingStatus.CANCELLED
    assert rejected.cancellation_reason == "closed"
    book(tomorrow_at_ten, who=other_customer)


def test_reschedule_ignores_own_slot_but_not_others(
    book, customer, other_customer, staff, marketplace_config, tomorrow_at_ten
):
    mine = book(tomorrow_at_ten, staff=staff)
    book(tomorrow_at_ten + timedelta(hours=2), staff=staff, who=other_customer)
    reschedule = RescheduleBookingHandler(config=marketplace_config)

    moved = reschedule(
        RescheduleBookingCommand(
            principal=customer.as_principal(),
            booking_id=mine.id,
            scheduled_at=tomorrow_at_ten + timedelta(minutes=30),
        )
    )
    assert moved.slot.start == tomorrow_at_ten + timedelta(minutes=30)

    with pytest.raises(SlotConflict):
        reschedule(
            RescheduleBookingCommand(
                principal=customer.as_principal(),
                booking_id=mine.id,
                scheduled_at=tomorrow_at_ten + timedelta(hours=1, minutes=30),
            )
        )


def test_strangers_cannot_cancel(book, other_customer, marketplace_config, tomorrow_at_ten):
    booking = book(tomorrow_at_ten)

    with pytest.raises(AuthorizationError):
        CancelBookingHandler(config=marketplace_config)(
            CancelBookingCommand(principal=other_customer.as_principal(), booking_id=booking.id)
        )


def test_completion_accrues_commission_and_loyalty(book, owner, spa, customer, marketplace_config, tomorrow_at_ten):
    Coupon.objects.create(
        code="SAVE10", spa=spa, issued_by=owner, issuer_role=Coupon.IssuerRole.OWNER, discount_percent=10
    )
    booking = book(tomorrow_at_ten, coupon_code="SAVE10")
    ledger = CommissionLedger(config=marketplace_config)
    assert ledger.available_profit(owner.id) == Decimal("0")

    completed = _completer(marketplace_config, tomorrow_at_ten + timedelta(hours=1))(
        CompleteBookingCommand(principal=owner.as_principal(), booking_id=booking.id)
    )

    assert completed.status == BookingStatus.COMPLETED
    earning = Earning.objects.get(booking_id=booking.id)
    assert earning.commission_amount == Decimal("45000.00")
    assert earning.net_amount == Decimal("405000.00")
    assert ledger.available_profit(owner.id) == Decimal("405000.00")
    assert Loyalty.objects.get(user=customer).points == 10
    assert LoyaltyHistory.objects.get(user=customer).booking_id == booking.id


def test_customer_cannot_complete(book, customer, marketplace_config, tomorrow_at_ten):
    booking = book(tomorrow_at_ten)

    with pytest.raises(AuthorizationError):
        _completer(marketplace_config, tomorrow_at_ten + timedelta(hours=1))(
            CompleteBookingCommand(principal=customer.as_principal(), booking_id=booking.id)
        )


def test_completion_before_start_is_refused_unless_allowed(book, owner, marketplace_config, tomorrow_at_ten):
    booking = book(tomorrow_at_ten)
    early = tomorrow_at_ten - timedelta(hours=1)

    with pytest.raises(StateError):
        _completer(marketplace_config, early)(
            CompleteBookingCommand(principal=owner.as_principal(), booking_id=booking.id)
        )
    assert not Earning.objects.filter(booking_id=booking.id).exists()

    lenient = marketplace_config.with_overrides(allow_manual_completion=True)
    _completer(lenient, early)(CompleteBookingCommand(principal=owner.as_principal(), booking_id=booking.id))
    assert Earning.objects.filter(booking_id=booking.id).exists()


def test_completing_twice_fails(book, owner, marketplace_config, tomorrow_at_ten):
    booking = book(tomorrow_at_ten)
    complete = _completer(marketplace_config, tomorrow_at_ten + timedelta(hours=1))
    complete(CompleteBookingCommand(principal=owner.as_principal(), booking_id=booking.id))

    with pytest.raises(StateError):
        complete(CompleteBookingCommand(principal=owner.as_principal(), booking_id=booking.id))
    assert Earning.objects.filter(booking_id=booking.id).count() == 1


def test_rate_change_does_not_rewrite_history(book, owner, other_customer, marketplace_config, tomorrow_at_ten):
    first = book(tomorrow_at_ten)
    second = book(tomorrow_at_ten + timedelta(hours=2), who=other_customer)
    later = tomorrow_at_ten + timedelta(hours=4)

    _completer(marketplace_config, later)(CompleteBookingCommand(principal=owner.as_principal(), booking_id=first.id))
    raised = marketplace_config.with_overrides(commission_rate=Decimal("0.20"))
    _completer(raised, later)(CompleteBookingCommand(principal=Principal.system(), booking_id=second.id))

    assert BookingRow.objects.get(pk=first.id).commission_amount == Decimal("50000.00")
    assert BookingRow.objects.get(pk=second.id).commission_amount == Decimal("100000.00")
    assert Earning.objects.get(booking_id=first.id).commission_rate == Decimal("0.1000")


@pytest.mark.django_db(transaction=True)
def test_concurrent_bookings_of_one_slot(customer, other_customer, spa, service, staff, tomorrow_at_ten):
    handler = CreateBookingHandler()

    def attempt(user):
        close_old_connections()
        try:
            handler(
                CreateBookingCommand(
                    principal=user.as_principal(),
                    spa_id=spa.id,
                    service_id=service.id,
                    staff_id=staff.id,
                    scheduled_at=tomorrow_at_ten,
                )
            )
            return True
        except SlotConflict:
            return False
        finally:
            close_old_connections()

    with ThreadPoolExecutor(max_workers=2) as pool:
        results = list(pool.map(attempt, [customer, other_customer]))

    assert sorted(results) == [False, True]
    assert BookingRow.objects.filter(staff=staff).count() == 1
