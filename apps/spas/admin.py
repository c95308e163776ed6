"""Admin registrations for the spa registry."""

from __future__ import annotations

from django.contrib import admin

from .models import Spa, SpaService, Staff


class SpaServiceInline(admin.TabularInline):
    model = SpaService
    extra = 0
    fields = ("name", "duration_minutes", "price", "is_active")


class StaffInline(admin.TabularInline):
    model = Staff
    extra = 0
    fields = ("name", "is_active")


@admin.register(Spa)
class SpaAdmin(admin.ModelAdmin):
    list_display = ("name", "owner", "is_approved", "requires_manual_acceptance", "latitude", "longitude")
    list_filter = ("is_approved", "requires_manual_acceptance")
    search_fields = ("name", "address", "owner__email")
    inlines = [SpaServiceInline, StaffInline]
    actions = ["approve"]

    @admin.action(description="Approve selected spas")
    def approve(self, request, queryset):  # type: ignore
        queryset.update(is_approved=True)
