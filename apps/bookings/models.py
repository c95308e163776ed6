"""Booking persistence.

Rows are written only through ``apps.bookings.repositories``; the aggregate
in ``apps.bookings.domain.entities`` owns every state change.
"""

from __future__ import annotations

import uuid

from django.conf import settings  # type: ignore
from django.db import models  # type: ignore
from django.utils import timezone  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from .domain.entities import BookingStatus, CancellationSource


class BookingQuerySet(models.QuerySet):
    def active(self):
        """Everything except cancelled bookings (the soft-delete filter)."""
        return self.exclude(status=Booking.Status.CANCELLED)

    def blocking(self):
        return self.filter(status__in=[Booking.Status.PENDING, Booking.Status.CONFIRMED])

    def overlapping(self, start, end):
        return self.filter(scheduled_at__lt=end, ends_at__gt=start)

    def for_resource(self, spa_id: int, staff_id: int | None):
        if staff_id is None:
            return self.filter(spa_id=spa_id, staff__isnull=True)
        return self.filter(staff_id=staff_id)

    def visible_to(self, user):  # type: ignore
        if user.is_admin():
            return self
        if user.is_owner():
            return self.filter(spa__owner=user)
        return self.filter(customer=user)


class Booking(models.Model):
    """Appointment of a customer at a spa."""

    class Status(models.TextChoices):
        PENDING = BookingStatus.PENDING.value, _("Pending")
        CONFIRMED = BookingStatus.CONFIRMED.value, _("Confirmed")
        COMPLETED = BookingStatus.COMPLETED.value, _("Completed")
        CANCELLED = BookingStatus.CANCELLED.value, _("Cancelled")

    class CancellationSource(models.TextChoices):
        CUSTOMER = CancellationSource.CUSTOMER.value, _("Customer")
        OWNER = CancellationSource.OWNER.value, _("Spa owner")
        ADMIN = CancellationSource.ADMIN.value, _("Administrator")
        SYSTEM = CancellationSource.SYSTEM.value, _("System")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    spa = models.ForeignKey("spas.Spa", on_delete=models.PROTECT, related_name="bookings")
    service = models.ForeignKey("spas.SpaService", on_delete=models.PROTECT, related_name="bookings")
    staff = models.ForeignKey(
        "spas.Staff",
        null=True,
        blank=True,
        on_delete=models.PROTECT,
        related_name="bookings",
    )
    customer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="bookings",
    )
    scheduled_at = models.DateTimeField()
    ends_at = models.DateTimeField()
    duration_minutes = models.PositiveIntegerField()
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING)

    base_price = models.DecimalField(max_digits=12, decimal_places=2)
    coupon_code = models.CharField(max_length=50, blank=True, null=True)
    discount_percent = models.DecimalField(max_digits=5, decimal_places=2, default=0)
    final_price = models.DecimalField(max_digits=12, decimal_places=2)
    commission_rate = models.DecimalField(max_digits=5, decimal_places=4)
    commission_amount = models.DecimalField(max_digits=12, decimal_places=2)
    currency = models.CharField(max_length=3, default="VND")

    cancellation_reason = models.CharField(max_length=255, blank=True)
    cancellation_source = models.CharField(max_length=20, choices=CancellationSource.choices, blank=True)

    confirmed_at = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    objects = BookingQuerySet.as_manager()

    class Meta:
        verbose_name = _("Booking")
        verbose_name_plural = _("Bookings")
        ordering = ["-scheduled_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(ends_at__gt=models.F("scheduled_at")),
                name="booking_ends_after_start",
            ),
            models.CheckConstraint(
                condition=models.Q(discount_percent__gte=0) & models.Q(discount_percent__lte=100),
                name="booking_discount_percent_range",
            ),
        ]
        indexes = [
            models.Index(fields=["staff", "scheduled_at", "ends_at"]),
            models.Index(fields=["spa", "scheduled_at", "ends_at"]),
            models.Index(fields=["customer", "status"]),
            models.Index(fields=["status", "ends_at"]),
        ]

    def __str__(self) -> str:
        return f"Booking {self.id} at {self.spa_id} ({self.status})"
