"""Shared pytest fixtures: accounts, a bookable spa and an API client."""

from __future__ import annotations

from datetime import timedelta
from decimal import Decimal

import pytest
from django.utils import timezone
from rest_framework.test import APIClient

from apps.spas.models import Spa, SpaService, Staff
from apps.users.models import User
from shared.application.config import MarketplaceConfig


@pytest.fixture
def customer(db):
    return User.objects.create_user(email="customer@example.com", password="CustomerPass123", username="Customer")


@pytest.fixture
def other_customer(db):
    return User.objects.create_user(email="other@example.com", password="OtherPass123", username="Other")


@pytest.fixture
def owner(db):
    return User.objects.create_user(
        email="owner@example.com",
        password="OwnerPass123",
        username="Owner",
        role=User.RoleChoices.OWNER,
        bank_name="Vietcombank",
        bank_account_number="0071000123456",
        bank_account_holder="NGUYEN VAN A",
    )


@pytest.fixture
def admin_user(db):
    return User.objects.create_superuser(email="admin@example.com", password="AdminPass123", username="Admin")


@pytest.fixture
def spa(owner):
    return Spa.objects.create(
        owner=owner,
        name="Lotus Spa",
        address="12 Le Loi, District 1",
        latitude=Decimal("10.7769000"),
        longitude=Decimal("106.7009000"),
        is_approved=True,
    )


@pytest.fixture
def service(spa):
    return SpaService.objects.create(spa=spa, name="Hot stone massage", duration_minutes=60, price=Decimal("500000"))


@pytest.fixture
def staff(spa):
    return Staff.objects.create(spa=spa, name="Linh")


@pytest.fixture
def marketplace_config():
    return MarketplaceConfig.from_mapping({"commission_rate": "0.10", "currency": "VND"})


@pytest.fixture
def tomorrow_at_ten():
    now = timezone.now()
    return (now + timedelta(days=1)).replace(hour=10, minute=0, second=0, microsecond=0)


@pytest.fixture
def api_client():
    return APIClient()
