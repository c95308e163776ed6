"""Admin registrations for coupons."""

from __future__ import annotations

from django.contrib import admin

from .models import Coupon


@admin.register(Coupon)
class CouponAdmin(admin.ModelAdmin):
    list_display = (
        "code",
        "spa",
        "issuer_role",
        "discount_percent",
        "current_redemptions",
        "max_redemptions",
        "expires_at",
        "is_active",
    )
    list_filter = ("issuer_role", "is_active")
    search_fields = ("code", "spa__name")
    readonly_fields = ("current_redemptions", "created_at", "updated_at")
