"""Tests for loyalty accounts, awards and the standing endpoints."""

from __future__ import annotations

import pytest
from django.urls import reverse

from apps.loyalty.domain.ranking import LoyaltyRank
from apps.loyalty.models import Loyalty, LoyaltyHistory
from apps.loyalty.services import LoyaltyService
from apps.users.models import User
from shared.application.config import MarketplaceConfig
from shared.domain.exceptions import ValidationError


@pytest.mark.django_db
def test_new_customer_gets_an_empty_account(customer):
    account = Loyalty.objects.get(user=customer)

    assert account.points == 0
    assert account.rank == LoyaltyRank.BRONZE


@pytest.mark.django_db
def test_owners_get_no_account(owner):
    assert not Loyalty.objects.filter(user=owner).exists()


@pytest.mark.django_db
def test_award_adds_points_and_history(customer):
    service = LoyaltyService()

    service.award(customer.pk, 60, reason="Completed booking A")
    result = service.award(customer.pk, 60, reason="Completed booking B")

    assert result.points == 120
    assert result.rank == LoyaltyRank.SILVER
    assert LoyaltyHistory.objects.filter(user=customer).count() == 2
    assert service.standing_for(customer.pk).points == 120


@pytest.mark.django_db
def test_award_uses_configured_thresholds(customer):
    config = MarketplaceConfig().with_overrides(loyalty_thresholds=((20, "GOLD"), (0, "BRONZE")))

    assert LoyaltyService(config=config).award(customer.pk, 25, reason="bonus").rank == LoyaltyRank.GOLD


@pytest.mark.django_db
def test_award_must_be_positive(customer):
    with pytest.raises(ValidationError):
        LoyaltyService().award(customer.pk, 0, reason="nothing")


@pytest.mark.django_db
def test_award_opens_missing_account():
    user = User.objects.create_user(email="legacy@example.com", password="LegacyPass123")
    Loyalty.objects.filter(user=user).delete()

    assert LoyaltyService().award(user.pk, 10, reason="backfill").points == 10


@pytest.mark.django_db
def test_me_and_history_endpoints(api_client, customer):
    LoyaltyService().award(customer.pk, 10, reason="Completed booking A")
    api_client.force_authenticate(customer)

    standing = api_client.get(reverse("loyalty-me"))
    history = api_client.get(reverse("loyalty-history"))

    assert standing.status_code == 200
    assert standing.data["points"] == 10
    assert standing.data["rank"] == "BRONZE"
    assert standing.data["points_to_next_rank"] == 90
    assert [entry["reason"] for entry in history.data] == ["Completed booking A"]


@pytest.mark.django_db
def test_only_admins_read_other_accounts(api_client, customer, other_customer, admin_user):
    api_client.force_authenticate(other_customer)
    assert api_client.get(reverse("loyalty-detail", args=[customer.pk])).status_code == 403

    api_client.force_authenticate(admin_user)
    response = api_client.get(reverse("loyalty-detail", args=[customer.pk]))
    assert response.status_code == 200
    assert response.data["points"] == 0


@pytest.mark.django_db
def test_account_rank_follows_configured_thresholds(settings, customer):
    settings.MARKETPLACE = {**settings.MARKETPLACE, "loyalty_thresholds": ((50, "PLATINUM"), (0, "BRONZE"))}

    standing = LoyaltyService().award(customer.pk, 60, reason="promotion")
    account = Loyalty.objects.get(user=customer)

    assert standing.rank == LoyaltyRank.PLATINUM
    assert account.rank == standing.rank
