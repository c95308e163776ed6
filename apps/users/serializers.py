"""Serializers for user-related API endpoints."""

from __future__ import annotations

from django.contrib.auth import get_user_model  # type: ignore
from rest_framework import serializers  # type: ignore

from .models import PHONE_VALIDATOR

User = get_user_model()


class UserSerializer(serializers.ModelSerializer):
    """Profile of the current user, including payout bank details."""

    class Meta:
        model = User
        fields = [
            "id",
            "email",
            "username",
            "first_name",
            "last_name",
            "phone",
            "role",
            "bank_name",
            "bank_account_number",
            "bank_account_holder",
            "created_at",
            "updated_at",
        ]
        read_only_fields = [
            "id",
            "email",
            "role",
            "created_at",
            "updated_at",
        ]


class RegisterSerializer(serializers.ModelSerializer):
    """Sign-up by email as a customer or a spa owner."""

    password = serializers.CharField(write_only=True, min_length=8)
    phone = serializers.CharField(validators=[PHONE_VALIDATOR], required=False, allow_null=True)
    role = serializers.ChoiceField(
        choices=[User.RoleChoices.CUSTOMER, User.RoleChoices.OWNER],
        default=User.RoleChoices.CUSTOMER,
    )

    class Meta:
        model = User
        fields = [
            "email",
            "password",
            "phone",
            "first_name",
            "last_name",
            "username",
            "role",
        ]
        extra_kwargs = {
            "first_name": {"required": False, "allow_blank": True},
            "last_name": {"required": False, "allow_blank": True},
            "username": {"required": False, "allow_blank": True},
        }

    def create(self, validated_data):  # type: ignore
        password = validated_data.pop("password")
        # administrators are created through the admin site only
        return User.objects.create_user(password=password, **validated_data)
