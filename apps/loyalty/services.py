"""Loyalty services: point awards and standing queries."""

from __future__ import annotations

import logging
from uuid import UUID

from django.db import transaction  # type: ignore
from django.db.models import F  # type: ignore
from django.utils import timezone  # type: ignore

from shared.application.config import MarketplaceConfig
from shared.domain.exceptions import ValidationError

from .domain.ranking import LoyaltyStanding, standing
from .models import Loyalty, LoyaltyHistory

logger = logging.getLogger(__name__)


class LoyaltyService:
    def __init__(self, config: MarketplaceConfig | None = None):
        self._config = config

    @property
    def config(self) -> MarketplaceConfig:
        return self._config or MarketplaceConfig.from_settings()

    def open_account(self, user_id: int) -> Loyalty:
        account, created = Loyalty.objects.get_or_create(user_id=user_id)
        if created:
            logger.info(f"Opened loyalty account for user {user_id}")
        return account

    def award(
        self,
        customer_id: int,
        points: int,
        *,
        reason: str,
        booking_id: UUID | None = None,
    ) -> LoyaltyStanding:
        """
        Add points to a customer's balance and record why

        Runs in the caller's transaction when there is one, so a booking
        completion and its award commit or roll back together.
        """
        if points <= 0:
            raise ValidationError("Awarded points must be positive", points=points)

        config = self.config
        with transaction.atomic():
            account, _ = Loyalty.objects.select_for_update().get_or_create(user_id=customer_id)
            before = standing(account.points, config.loyalty_thresholds)
            Loyalty.objects.filter(pk=account.pk).update(
                points=F("points") + points,
                updated_at=timezone.now(),
            )
            LoyaltyHistory.objects.create(
                user_id=customer_id,
                points=points,
                reason=reason,
                booking_id=booking_id,
            )
            account.refresh_from_db(fields=["points"])

        after = standing(account.points, config.loyalty_thresholds)
        logger.info(f"Awarded {points} loyalty points to user {customer_id} ({reason}); total {after.points}")
        if after.rank != before.rank:
            logger.info(f"User {customer_id} promoted from {before.rank.value} to {after.rank.value}")
        return after

    def standing_for(self, user_id: int) -> LoyaltyStanding:
        points = Loyalty.objects.filter(user_id=user_id).values_list("points", flat=True).first() or 0
        return standing(points, self.config.loyalty_thresholds)

    def history_for(self, user_id: int):
        return LoyaltyHistory.objects.filter(user_id=user_id)
