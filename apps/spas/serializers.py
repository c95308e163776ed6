"""Serializers for the spa registry and nearby search."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import Spa, SpaService, Staff


class SpaServiceSerializer(serializers.ModelSerializer):
    class Meta:
        model = SpaService
        fields = ["id", "name", "description", "duration_minutes", "price"]


class StaffSerializer(serializers.ModelSerializer):
    class Meta:
        model = Staff
        fields = ["id", "name"]


class SpaSerializer(serializers.ModelSerializer):
    services = serializers.SerializerMethodField()
    staff = serializers.SerializerMethodField()

    class Meta:
        model = Spa
        fields = [
            "id",
            "owner",
            "name",
            "description",
            "address",
            "phone",
            "latitude",
            "longitude",
            "requires_manual_acceptance",
            "services",
            "staff",
        ]
        read_only_fields = fields

    def get_services(self, obj: Spa):  # type: ignore
        active = [service for service in obj.services.all() if service.is_active]
        return SpaServiceSerializer(active, many=True).data

    def get_staff(self, obj: Spa):  # type: ignore
        active = [member for member in obj.staff.all() if member.is_active]
        return StaffSerializer(active, many=True).data


class NearbyQuerySerializer(serializers.Serializer):
    """Parses query parameters; range checks live in the geo domain."""

    lat = serializers.FloatField()
    lng = serializers.FloatField()
    radius = serializers.FloatField(required=False)


class NearbySpaSerializer(serializers.Serializer):
    id = serializers.IntegerField(source="spa_id")
    name = serializers.CharField()
    latitude = serializers.FloatField()
    longitude = serializers.FloatField()
    distance_km = serializers.CharField(source="distance_display")
