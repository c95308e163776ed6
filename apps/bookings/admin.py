"""Admin registration for bookings."""

from __future__ import annotations

from django.contrib import admin

from .models import Booking


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "spa",
        "service",
        "staff",
        "customer",
        "status",
        "scheduled_at",
        "final_price",
        "commission_amount",
        "created_at",
    )
    list_filter = ("status", "cancellation_source", "scheduled_at")
    search_fields = ("id", "spa__name", "customer__email", "coupon_code")
    readonly_fields = (
        "status",
        "base_price",
        "discount_percent",
        "final_price",
        "commission_rate",
        "commission_amount",
        "confirmed_at",
        "completed_at",
        "cancelled_at",
        "created_at",
        "updated_at",
    )
