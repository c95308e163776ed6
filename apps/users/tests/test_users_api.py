"""Integration tests for registration and profile endpoints."""

from __future__ import annotations

from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.loyalty.models import Loyalty
from apps.users.models import User


class UserAPITests(APITestCase):
    def setUp(self) -> None:
        self.register_url = reverse("user-register")
        self.me_url = reverse("user-me")

    def test_customer_registration(self) -> None:
        response = self.client.post(
            self.register_url,
            {"email": "new@example.com", "password": "StrongPass123", "first_name": "An"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(response.data["role"], User.RoleChoices.CUSTOMER)
        self.assertNotIn("password", response.data)
        user = User.objects.get(email="new@example.com")
        self.assertTrue(user.check_password("StrongPass123"))
        self.assertTrue(Loyalty.objects.filter(user=user).exists())

    def test_owner_registration(self) -> None:
        response = self.client.post(
            self.register_url,
            {"email": "spa@example.com", "password": "StrongPass123", "role": "owner"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertTrue(User.objects.get(email="spa@example.com").is_owner())

    def test_admin_cannot_self_register(self) -> None:
        response = self.client.post(
            self.register_url,
            {"email": "boss@example.com", "password": "StrongPass123", "role": "admin"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_duplicate_email_and_short_password(self) -> None:
        User.objects.create_user(email="taken@example.com", password="StrongPass123")

        taken = self.client.post(
            self.register_url, {"email": "taken@example.com", "password": "StrongPass123"}, format="json"
        )
        short = self.client.post(self.register_url, {"email": "x@example.com", "password": "short"}, format="json")

        self.assertEqual(taken.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("email", taken.data)
        self.assertIn("password", short.data)

    def test_me_requires_authentication(self) -> None:
        self.assertEqual(self.client.get(self.me_url).status_code, status.HTTP_401_UNAUTHORIZED)

    def test_owner_updates_bank_details(self) -> None:
        owner = User.objects.create_user(
            email="owner@example.com", password="OwnerPass123", role=User.RoleChoices.OWNER
        )
        self.client.force_authenticate(owner)

        response = self.client.patch(
            self.me_url,
            {"bank_name": "ACB", "bank_account_number": "123456789", "bank_account_holder": "TRAN THI B", "role": "admin"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        owner.refresh_from_db()
        self.assertEqual(owner.bank_name, "ACB")
        self.assertTrue(owner.has_bank_account())
        self.assertEqual(owner.role, User.RoleChoices.OWNER)

