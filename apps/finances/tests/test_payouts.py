"""Tests for balances and the payout workflow against the database."""

from __future__ import annotations

import threading
from datetime import timedelta
from decimal import Decimal

import pytest
from django.db import close_old_connections
from django.urls import reverse
from django.utils import timezone

from apps.bookings.models import Booking
from apps.finances.domain.ledger import Accrual, InsufficientBalance, PayoutStatus
from apps.finances.models import Earning, Payout
from apps.finances.services import CommissionLedger
from apps.users.models import User
from shared.domain.exceptions import AuthorizationError, StateError, ValidationError
from shared.domain.value_objects import Money


def _completed_booking(spa, service, customer, final_price: Decimal) -> Booking:
    start = timezone.now() - timedelta(days=2)
    return Booking.objects.create(
        spa=spa,
        service=service,
        customer=customer,
        scheduled_at=start,
        ends_at=start + timedelta(minutes=service.duration_minutes),
        duration_minutes=service.duration_minutes,
        status=Booking.Status.COMPLETED,
        base_price=final_price,
        final_price=final_price,
        commission_rate=Decimal("0.10"),
        commission_amount=Decimal("0"),
        completed_at=timezone.now(),
    )


@pytest.fixture
def ledger():
    return CommissionLedger()


@pytest.fixture
def funded_owner(ledger, owner, spa, service, customer):
    """Owner with 3,000,000.00 of net earnings (3,333,333.33 gross at 10%)."""
    booking = _completed_booking(spa, service, customer, Decimal("3333333.33"))
    ledger.accrue(
        booking_id=booking.id,
        owner_id=owner.id,
        spa_id=spa.id,
        accrual=Accrual.capture(Money(Decimal("3333333.33")), Decimal("0.10")),
    )
    return owner


@pytest.mark.django_db
def test_accrual_is_recorded_once(ledger, owner, spa, service, customer):
    booking = _completed_booking(spa, service, customer, Decimal("450000"))
    accrual = Accrual.capture(Money(Decimal("450000")), Decimal("0.10"))

    earning = ledger.accrue(booking_id=booking.id, owner_id=owner.id, spa_id=spa.id, accrual=accrual)

    assert earning.net_amount == Decimal("405000.00")
    with pytest.raises(StateError):
        ledger.accrue(booking_id=booking.id, owner_id=owner.id, spa_id=spa.id, accrual=accrual)
    assert Earning.objects.count() == 1


@pytest.mark.django_db
def test_second_request_over_remaining_balance_fails(ledger, funded_owner):
    principal = funded_owner.as_principal()
    assert ledger.available_profit(funded_owner.id) == Decimal("3000000.00")

    ledger.request_payout(principal, Decimal("2000000"))
    with pytest.raises(InsufficientBalance):
        ledger.request_payout(principal, Decimal("2000000"))

    assert ledger.available_profit(funded_owner.id) == Decimal("1000000.00")
    assert Payout.objects.filter(owner=funded_owner).count() == 1


@pytest.mark.django_db(transaction=True)
def test_concurrent_requests_cannot_overdraw(ledger, funded_owner):
    principal = funded_owner.as_principal()
    barrier = threading.Barrier(2)
    outcomes = []

    def withdraw():
        try:
            barrier.wait()
            ledger.request_payout(principal, Decimal("2000000"))
            outcomes.append("requested")
        except InsufficientBalance:
            outcomes.append("refused")
        finally:
            close_old_connections()

    threads = [threading.Thread(target=withdraw) for _ in range(2)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert sorted(outcomes) == ["refused", "requested"]
    assert Payout.objects.filter(owner=funded_owner).count() == 1
    assert ledger.available_profit(funded_owner.id) == Decimal("1000000.00")


@pytest.mark.django_db
def test_rejected_payout_releases_funds(ledger, funded_owner, admin_user):
    payout = ledger.request_payout(funded_owner.as_principal(), Decimal("2500000"))
    assert ledger.available_profit(funded_owner.id) == Decimal("500000.00")

    ledger.review(admin_user.as_principal(), payout.id, approved=False, notes="details mismatch")

    assert ledger.available_profit(funded_owner.id) == Decimal("3000000.00")


@pytest.mark.django_db
def test_completed_payout_stays_deducted(ledger, funded_owner, admin_user):
    payout = ledger.request_payout(funded_owner.as_principal(), Decimal("1000000"))
    ledger.review(admin_user.as_principal(), payout.id, approved=True)
    completed = ledger.complete(admin_user.as_principal(), payout.id, notes="transfer #42")

    assert completed.status == PayoutStatus.COMPLETED
    assert ledger.available_profit(funded_owner.id) == Decimal("2000000.00")


@pytest.mark.django_db
def test_owner_without_bank_account_cannot_request(ledger, spa, service, customer):
    owner = User.objects.create_user(email="nobank@example.com", password="NoBankPass123", role=User.RoleChoices.OWNER)
    spa.owner = owner
    spa.save()
    booking = _completed_booking(spa, service, customer, Decimal("100000"))
    ledger.accrue(
        booking_id=booking.id,
        owner_id=owner.id,
        spa_id=spa.id,
        accrual=Accrual.capture(Money(Decimal("100000")), Decimal("0.10")),
    )

    with pytest.raises(ValidationError):
        ledger.request_payout(owner.as_principal(), Decimal("1000"))


@pytest.mark.django_db
def test_admin_without_bank_account_cannot_request(ledger, funded_owner, admin_user):
    assert ledger.platform_balance().available == Decimal("333333.33")

    with pytest.raises(ValidationError):
        ledger.request_payout(admin_user.as_principal(), Decimal("10000"))
    assert not Payout.objects.filter(owner=admin_user).exists()


@pytest.mark.django_db
def test_amount_must_be_positive(ledger, funded_owner):
    with pytest.raises(ValidationError):
        ledger.request_payout(funded_owner.as_principal(), Decimal("0"))
    with pytest.raises(ValidationError):
        ledger.request_payout(funded_owner.as_principal(), "-5")


@pytest.mark.django_db
def test_only_admins_review(ledger, funded_owner):
    payout = ledger.request_payout(funded_owner.as_principal(), Decimal("10"))

    with pytest.raises(AuthorizationError):
        ledger.review(funded_owner.as_principal(), payout.id, approved=True)


@pytest.mark.django_db
def test_platform_pool_is_the_commission(ledger, funded_owner, admin_user):
    admin_user.bank_name = "BIDV"
    admin_user.bank_account_number = "2151000987654"
    admin_user.bank_account_holder = "SPA MARKETPLACE JSC"
    admin_user.save()
    balance = ledger.balance_for(admin_user.as_principal())

    assert balance.earned == Decimal("333333.33")
    ledger.request_payout(admin_user.as_principal(), Decimal("333333.33"))
    assert ledger.platform_balance().available == Decimal("0.00")


@pytest.mark.django_db
def test_customers_have_no_balance(ledger, customer):
    with pytest.raises(AuthorizationError):
        ledger.balance_for(customer.as_principal())


@pytest.mark.django_db
def test_payout_api_flow(api_client, funded_owner, admin_user):
    api_client.force_authenticate(funded_owner)
    profit = api_client.get(reverse("available-profit"))
    assert profit.status_code == 200
    assert profit.data["available"] == "3000000.00"

    created = api_client.post(reverse("payout-list"), {"amount": "2000000", "notes": "monthly"}, format="json")
    assert created.status_code == 201, created.data
    conflict = api_client.post(reverse("payout-list"), {"amount": "2000000"}, format="json")
    assert conflict.status_code == 409
    assert conflict.data["error"] == "insufficient_balance"

    forbidden = api_client.post(reverse("payout-review", args=[created.data["id"]]), {"approved": True}, format="json")
    assert forbidden.status_code == 403

    api_client.force_authenticate(admin_user)
    reviewed = api_client.post(reverse("payout-review", args=[created.data["id"]]), {"approved": True}, format="json")
    assert reviewed.status_code == 200, reviewed.data
    assert reviewed.data["status"] == "approved"
    completed = api_client.post(reverse("payout-complete", args=[created.data["id"]]), {}, format="json")
    assert completed.data["status"] == "completed"
    again = api_client.post(reverse("payout-complete", args=[created.data["id"]]), {}, format="json")
    assert again.status_code == 409
