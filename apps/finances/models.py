"""Ledger persistence: earnings accrued at completion and owner payouts."""

from __future__ import annotations

import uuid
from decimal import Decimal

from django.conf import settings  # type: ignore
from django.db import models  # type: ignore
from django.db.models import Q  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from .domain.ledger import PayoutStatus


class Earning(models.Model):
    """What one completed booking added to its owner's balance."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    booking = models.OneToOneField(
        "bookings.Booking",
        on_delete=models.PROTECT,
        related_name="earning",
    )
    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="earnings",
    )
    spa = models.ForeignKey("spas.Spa", on_delete=models.PROTECT, related_name="earnings")
    gross_amount = models.DecimalField(max_digits=12, decimal_places=2)
    commission_rate = models.DecimalField(max_digits=5, decimal_places=4)
    commission_amount = models.DecimalField(max_digits=12, decimal_places=2)
    net_amount = models.DecimalField(max_digits=12, decimal_places=2)
    currency = models.CharField(max_length=3, default="VND")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _("Earning")
        verbose_name_plural = _("Earnings")
        ordering = ["-created_at"]
        indexes = [models.Index(fields=["owner", "created_at"])]
        constraints = [
            models.CheckConstraint(condition=Q(net_amount__gte=0), name="earning_net_non_negative"),
            models.CheckConstraint(condition=Q(commission_amount__gte=0), name="earning_commission_non_negative"),
        ]

    def __str__(self) -> str:
        return f"{self.owner_id} +{self.net_amount} (booking {self.booking_id})"


class Payout(models.Model):
    """Withdrawal requested by an owner (or from the platform pool by an admin)."""

    class Status(models.TextChoices):
        REQUESTED = PayoutStatus.REQUESTED.value, _("Requested")
        APPROVED = PayoutStatus.APPROVED.value, _("Approved")
        COMPLETED = PayoutStatus.COMPLETED.value, _("Completed")
        REJECTED = PayoutStatus.REJECTED.value, _("Rejected")

    RESERVING = (Status.REQUESTED, Status.APPROVED, Status.COMPLETED)

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="payouts",
    )
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    currency = models.CharField(max_length=3, default="VND")
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.REQUESTED)
    notes = models.TextField(blank=True)
    reviewed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="reviewed_payouts",
    )
    requested_at = models.DateTimeField()
    approved_at = models.DateTimeField(null=True, blank=True)
    rejected_at = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Payout")
        verbose_name_plural = _("Payouts")
        ordering = ["-requested_at"]
        indexes = [models.Index(fields=["owner", "status"])]
        constraints = [
            models.CheckConstraint(condition=Q(amount__gt=Decimal("0")), name="payout_amount_positive"),
        ]

    def __str__(self) -> str:
        return f"Payout {self.id} {self.amount} ({self.status})"
