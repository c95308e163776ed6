"""Integration tests for the spa listing and nearby search endpoints."""

from __future__ import annotations

from decimal import Decimal

from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.spas.models import Spa
from apps.users.models import User


class NearbySpaAPITests(APITestCase):
    """Covers radius filtering, ordering, rounding and argument bounds."""

    def setUp(self) -> None:
        self.owner = User.objects.create_user(
            email="owner@example.com",
            password="OwnerPass123",
            role=User.RoleChoices.OWNER,
        )
        # latitude offsets north of (10.7769, 106.7009) for 1.2, 3.0 and 8.3 km
        self.near = self._spa("Near Spa", Decimal("10.7876918"))
        self.mid = self._spa("Mid Spa", Decimal("10.8038796"))
        self.far = self._spa("Far Spa", Decimal("10.8515437"))
        self._spa("Unapproved Spa", Decimal("10.7780000"), is_approved=False)
        Spa.objects.create(owner=self.owner, name="No Coordinates Spa", is_approved=True)
        self.url = reverse("spa-nearby")

    def _spa(self, name: str, latitude: Decimal, is_approved: bool = True) -> Spa:
        return Spa.objects.create(
            owner=self.owner,
            name=name,
            latitude=latitude,
            longitude=Decimal("106.7009000"),
            is_approved=is_approved,
        )

    def test_nearby_returns_spas_within_radius_nearest_first(self) -> None:
        response = self.client.get(self.url, {"lat": "10.7769", "lng": "106.7009", "radius": "5"})

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual([item["id"] for item in response.data], [self.near.id, self.mid.id])
        self.assertEqual([item["distance_km"] for item in response.data], ["1.20", "3.00"])
        self.assertEqual(response.data[0]["name"], "Near Spa")

    def test_default_radius_includes_spa_at_eight_km(self) -> None:
        response = self.client.get(self.url, {"lat": "10.7769", "lng": "106.7009"})

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(
            [item["id"] for item in response.data],
            [self.near.id, self.mid.id, self.far.id],
        )

    def test_out_of_range_latitude_is_rejected(self) -> None:
        response = self.client.get(self.url, {"lat": "95", "lng": "106.7009"})

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["error"], "invalid_argument")

    def test_radius_above_limit_is_rejected(self) -> None:
        response = self.client.get(self.url, {"lat": "10.7769", "lng": "106.7009", "radius": "101"})

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_missing_coordinates_are_rejected(self) -> None:
        response = self.client.get(self.url, {"lng": "106.7009"})

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_listing_shows_only_approved_spas(self) -> None:
        response = self.client.get(reverse("spa-list"), {"name": "spa"})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        names = {item["name"] for item in response.data}
        self.assertNotIn("Unapproved Spa", names)
        self.assertIn("Near Spa", names)
