"""Admin registrations for loyalty."""

from __future__ import annotations

from django.contrib import admin

from .models import Loyalty, LoyaltyHistory


@admin.register(Loyalty)
class LoyaltyAdmin(admin.ModelAdmin):
    list_display = ("user", "points", "rank", "updated_at")
    search_fields = ("user__email",)
    readonly_fields = ("points", "created_at", "updated_at")


@admin.register(LoyaltyHistory)
class LoyaltyHistoryAdmin(admin.ModelAdmin):
    list_display = ("user", "points", "reason", "booking", "created_at")
    search_fields = ("user__email", "reason")
