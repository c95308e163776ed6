"""Celery tasks for the booking domain."""

from __future__ import annotations

import logging
from datetime import timedelta

from celery import shared_task  # type: ignore
from django.utils import timezone  # type: ignore

from shared.application.config import MarketplaceConfig
from shared.application.message_bus import message_bus
from shared.domain.exceptions import DomainError
from shared.domain.value_objects import Principal

from .application.command_handlers import CompleteBookingCommand
from .models import Booking

logger = logging.getLogger(__name__)


# ============================================================================
# PERIODIC TASKS (run by Celery Beat)
# ============================================================================

@shared_task(name="bookings.complete_finished_bookings")
def complete_finished_bookings() -> dict[str, int]:
    """
    Complete CONFIRMED bookings that ended long enough ago.

    Each booking goes through the regular completion command as the system
    principal, so the ledger accrual and loyalty award happen exactly as
    for a manual completion. A booking that fails is logged and skipped.

    Returns:
        dict: {"completed": ..., "failed": ...}
    """
    config = MarketplaceConfig.from_settings()
    if config.auto_complete_after_hours is None:
        logger.debug("Automatic completion is disabled")
        return {"completed": 0, "failed": 0}

    cutoff = timezone.now() - timedelta(hours=config.auto_complete_after_hours)
    booking_ids = list(
        Booking.objects.filter(status=Booking.Status.CONFIRMED, ends_at__lte=cutoff)
        .order_by("ends_at")
        .values_list("id", flat=True)
    )

    completed = failed = 0
    system = Principal.system()
    for booking_id in booking_ids:
        try:
            message_bus.handle_command(CompleteBookingCommand(principal=system, booking_id=booking_id))
        except DomainError as e:
            failed += 1
            logger.warning(f"Could not auto-complete booking {booking_id}: {e.code}: {e.message}")
            continue
        completed += 1

    if completed or failed:
        logger.info(f"Auto-completed {completed} bookings, {failed} failed")
    return {"completed": completed, "failed": failed}
