"""Coupon persistence."""

from __future__ import annotations

from django.conf import settings  # type: ignore
from django.core.validators import MaxValueValidator, MinValueValidator  # type: ignore
from django.db import models  # type: ignore
from django.db.models import F, Q  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from shared.domain.value_objects import Role

from .domain.entities import CouponTerms


class Coupon(models.Model):
    """Discount code issued by a spa owner (spa-scoped) or an admin (global)."""

    class IssuerRole(models.TextChoices):
        OWNER = Role.OWNER.value, _("Spa owner")
        ADMIN = Role.ADMIN.value, _("Administrator")

    code = models.CharField(max_length=50, unique=True)
    spa = models.ForeignKey(
        "spas.Spa",
        null=True,
        blank=True,
        on_delete=models.CASCADE,
        related_name="coupons",
        help_text=_("Empty for global coupons issued by administrators."),
    )
    issued_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="issued_coupons",
    )
    issuer_role = models.CharField(max_length=10, choices=IssuerRole.choices)
    discount_percent = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        validators=[MinValueValidator(0), MaxValueValidator(100)],
    )
    expires_at = models.DateTimeField(null=True, blank=True)
    max_redemptions = models.PositiveIntegerField(
        null=True,
        blank=True,
        help_text=_("Empty means unlimited."),
    )
    current_redemptions = models.PositiveIntegerField(default=0)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Coupon")
        verbose_name_plural = _("Coupons")
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=Q(max_redemptions__isnull=True) | Q(current_redemptions__lte=F("max_redemptions")),
                name="coupon_redemptions_within_max",
            ),
            models.CheckConstraint(
                condition=Q(discount_percent__gt=0) & Q(discount_percent__lte=100),
                name="coupon_discount_percent_range",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.code} (-{self.discount_percent}%)"

    def save(self, *args, **kwargs):  # type: ignore
        self.code = (self.code or "").strip().upper()
        super().save(*args, **kwargs)

    def to_terms(self) -> CouponTerms:
        return CouponTerms(
            id=self.pk,
            code=self.code,
            discount_percent=self.discount_percent,
            issuer_role=Role(self.issuer_role),
            spa_id=self.spa_id,
            expires_at=self.expires_at,
            max_redemptions=self.max_redemptions,
            current_redemptions=self.current_redemptions,
            is_active=self.is_active,
        )
