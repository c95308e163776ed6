"""Feedback submission rules."""

from __future__ import annotations

import logging
from uuid import UUID

from django.db import IntegrityError, transaction  # type: ignore

from apps.bookings.models import Booking
from shared.domain.exceptions import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    StateError,
    ValidationError,
)
from shared.domain.value_objects import Principal

from .models import Feedback

logger = logging.getLogger(__name__)


def submit_feedback(principal: Principal, booking_id: UUID, rating: int, comment: str = "") -> Feedback:
    """
    Leave feedback for a booking

    Only the booking's customer may do so, only once, and never for a
    cancelled booking.
    """
    if not 1 <= int(rating) <= 5:
        raise ValidationError("Rating must be between 1 and 5", field="rating")

    booking = Booking.objects.filter(pk=booking_id).first()
    if booking is None:
        raise NotFoundError(f"Booking {booking_id} not found", booking_id=str(booking_id))
    if not principal.is_customer or booking.customer_id != principal.user_id:
        raise AuthorizationError("Only the customer of a booking can leave feedback")
    if booking.status == Booking.Status.CANCELLED:
        raise StateError(
            f"Feedback cannot be left for cancelled booking {booking_id}",
            status=booking.status,
        )

    try:
        with transaction.atomic():
            feedback = Feedback.objects.create(
                booking=booking,
                spa_id=booking.spa_id,
                customer_id=principal.user_id,
                rating=rating,
                comment=comment,
            )
    except IntegrityError as exc:
        raise ConflictError(f"Feedback for booking {booking_id} already exists") from exc

    logger.info(f"Feedback {feedback.pk} ({rating}) left for spa {booking.spa_id} by customer {principal.user_id}")
    return feedback
