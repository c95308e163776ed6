"""Loyalty persistence."""

from __future__ import annotations

from django.conf import settings  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from shared.application.config import MarketplaceConfig

from .domain.ranking import LoyaltyRank, rank


class Loyalty(models.Model):
    """Points balance of a customer. Rank is computed, never stored."""

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="loyalty",
    )
    points = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Loyalty account")
        verbose_name_plural = _("Loyalty accounts")

    def __str__(self) -> str:
        return f"{self.user_id}: {self.points} ({self.rank.value})"

    @property
    def rank(self) -> LoyaltyRank:
        return rank(self.points, MarketplaceConfig.from_settings().loyalty_thresholds)


class LoyaltyHistory(models.Model):
    """One row per points award."""

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="loyalty_history",
    )
    points = models.PositiveIntegerField()
    reason = models.CharField(max_length=255)
    booking = models.ForeignKey(
        "bookings.Booking",
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="loyalty_awards",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _("Loyalty history entry")
        verbose_name_plural = _("Loyalty history")
        ordering = ["-created_at", "-id"]
        indexes = [models.Index(fields=["user", "created_at"])]

    def __str__(self) -> str:
        return f"+{self.points} for {self.user_id}: {self.reason}"
