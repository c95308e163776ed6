"""Admin registrations for the ledger."""

from __future__ import annotations

from django.contrib import admin

from .models import Earning, Payout


@admin.register(Earning)
class EarningAdmin(admin.ModelAdmin):
    list_display = ("booking", "owner", "gross_amount", "commission_rate", "commission_amount", "net_amount", "created_at")
    search_fields = ("owner__email", "booking__id")
    readonly_fields = [field.name for field in Earning._meta.fields]


@admin.register(Payout)
class PayoutAdmin(admin.ModelAdmin):
    list_display = ("id", "owner", "amount", "status", "requested_at", "approved_at", "completed_at")
    list_filter = ("status",)
    search_fields = ("owner__email",)
    readonly_fields = ("owner", "amount", "status", "reviewed_by", "requested_at", "approved_at", "rejected_at", "completed_at")
