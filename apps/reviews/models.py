"""Models for the feedback domain.

``Feedback`` is a rating (1 to 5) with an optional comment that a customer
leaves for a booking that is not cancelled. One feedback per booking.
"""

from __future__ import annotations

from django.conf import settings  # type: ignore
from django.core.validators import MaxValueValidator, MinValueValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class FeedbackQuerySet(models.QuerySet):
    def visible(self):
        """Feedback whose booking has not been cancelled."""
        return self.exclude(booking__status="cancelled")


class Feedback(models.Model):
    """Represents a rating left by a customer for a spa visit."""

    booking = models.OneToOneField(
        'bookings.Booking',
        on_delete=models.CASCADE,
        related_name='feedback',
    )
    spa = models.ForeignKey('spas.Spa', on_delete=models.CASCADE, related_name='feedback')
    customer = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='feedback'
    )
    rating = models.PositiveSmallIntegerField(
        validators=[MinValueValidator(1), MaxValueValidator(5)],
        help_text=_('Rating from 1 to 5'),
    )
    comment = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = FeedbackQuerySet.as_manager()

    class Meta:
        verbose_name = _('Feedback')
        verbose_name_plural = _('Feedback')
        ordering = ['-created_at']
        constraints = [
            models.CheckConstraint(
                condition=models.Q(rating__gte=1) & models.Q(rating__lte=5),
                name='feedback_rating_range',
            ),
        ]
        indexes = [
            models.Index(fields=['spa', '-created_at']),
            models.Index(fields=['customer']),
        ]

    def __str__(self) -> str:
        return f"Feedback by {self.customer_id} for spa {self.spa_id} (Rating: {self.rating})"
