"""Spa registry models.

A spa is run by one owner and offers services of a fixed duration and price.
Staff members are the schedulable resources; bookings without a staff member
share the spa as a single resource.
"""

from __future__ import annotations

from django.conf import settings  # type: ignore
from django.core.validators import MaxValueValidator, MinValueValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class SpaQuerySet(models.QuerySet):
    def approved(self):
        return self.filter(is_approved=True)

    def with_coordinates(self):
        return self.filter(latitude__isnull=False, longitude__isnull=False)


class Spa(models.Model):
    """A spa listed on the marketplace."""

    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="spas",
    )
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    address = models.CharField(max_length=255, blank=True)
    phone = models.CharField(max_length=20, blank=True)
    latitude = models.DecimalField(
        max_digits=10,
        decimal_places=7,
        null=True,
        blank=True,
        validators=[MinValueValidator(-90), MaxValueValidator(90)],
    )
    longitude = models.DecimalField(
        max_digits=10,
        decimal_places=7,
        null=True,
        blank=True,
        validators=[MinValueValidator(-180), MaxValueValidator(180)],
    )
    is_approved = models.BooleanField(
        default=False,
        help_text=_("Only approved spas are searchable and bookable."),
    )
    requires_manual_acceptance = models.BooleanField(
        default=False,
        help_text=_("New bookings wait in PENDING until the owner accepts them."),
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = SpaQuerySet.as_manager()

    class Meta:
        verbose_name = _("Spa")
        verbose_name_plural = _("Spas")
        ordering = ["name", "id"]
        indexes = [
            models.Index(fields=["is_approved", "latitude"]),
        ]

    def __str__(self) -> str:
        return self.name


class SpaService(models.Model):
    """A bookable treatment with fixed duration and list price."""

    spa = models.ForeignKey(Spa, on_delete=models.CASCADE, related_name="services")
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    duration_minutes = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    price = models.DecimalField(max_digits=12, decimal_places=2, validators=[MinValueValidator(0)])
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Spa service")
        verbose_name_plural = _("Spa services")
        ordering = ["spa", "name"]

    def __str__(self) -> str:
        return f"{self.name} ({self.duration_minutes} min)"


class Staff(models.Model):
    """A therapist whose time is booked; row is locked while checking conflicts."""

    spa = models.ForeignKey(Spa, on_delete=models.CASCADE, related_name="staff")
    name = models.CharField(max_length=255)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _("Staff member")
        verbose_name_plural = _("Staff")
        ordering = ["spa", "name"]

    def __str__(self) -> str:
        return self.name
