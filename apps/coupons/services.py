"""Discount engine: coupon issuance, validation and redemption."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime

from django.db import IntegrityError, transaction  # type: ignore
from django.db.models import F, Q  # type: ignore
from django.utils import timezone  # type: ignore

from apps.spas.registry import SpaRegistry
from shared.application.config import MarketplaceConfig
from shared.domain.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from shared.domain.value_objects import Money, Principal

from .domain.entities import CouponTerms, check_discount_percent, normalize_code
from .domain.exceptions import CouponExhausted, CouponNotFound
from .models import Coupon

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Redemption:
    coupon: CouponTerms
    base_price: Money
    final_price: Money


class DiscountEngine:
    def __init__(self, registry: SpaRegistry | None = None, clock=timezone.now):
        self.registry = registry or SpaRegistry()
        self.clock = clock

    # --- issuance ---------------------------------------------------------

    def create_coupon(
        self,
        principal: Principal,
        *,
        code: str,
        discount_percent,
        spa_id: int | None = None,
        expires_at: datetime | None = None,
        max_redemptions: int | None = None,
        config: MarketplaceConfig | None = None,
    ) -> Coupon:
        """
        Issue a coupon

        Owners issue coupons for one of their own spas; administrators issue
        global coupons. The discount percent is checked against the issuer's
        cap here and never again at redemption time.
        """
        config = config or MarketplaceConfig.from_settings()
        if not (principal.is_owner or principal.is_admin):
            raise AuthorizationError("Only spa owners and administrators can issue coupons")
        normalized = normalize_code(code)
        percent = check_discount_percent(discount_percent, principal.role, config)

        if principal.is_owner:
            if spa_id is None:
                raise ValidationError("Owner coupons must be bound to a spa", field="spa")
            if not self.registry.owns_spa(principal.user_id, spa_id):
                raise AuthorizationError(f"Spa {spa_id} does not belong to the issuer")
        else:
            spa_id = None

        if max_redemptions is not None and max_redemptions < 1:
            raise ValidationError("Max redemptions must be at least 1", field="max_redemptions")
        if expires_at is not None and expires_at <= self.clock():
            raise ValidationError("Expiry must be in the future", field="expires_at")

        try:
            with transaction.atomic():
                coupon = Coupon.objects.create(
                    code=normalized,
                    spa_id=spa_id,
                    issued_by_id=principal.user_id,
                    issuer_role=principal.role.value,
                    discount_percent=percent,
                    expires_at=expires_at,
                    max_redemptions=max_redemptions,
                )
        except IntegrityError:
            raise ConflictError(f"Coupon code {normalized} already exists", code=normalized) from None

        logger.info(
            f"Coupon {coupon.code} issued by {principal.role.value} {principal.user_id}: "
            f"-{percent}% spa={spa_id} max={max_redemptions}"
        )
        return coupon

    def deactivate(self, principal: Principal, coupon_id: int) -> Coupon:
        coupon = Coupon.objects.filter(pk=coupon_id).first()
        if coupon is None:
            raise NotFoundError(f"Coupon {coupon_id} not found", coupon_id=coupon_id)
        if not principal.is_admin and coupon.issued_by_id != principal.user_id:
            raise AuthorizationError("Only the issuer or an administrator can deactivate a coupon")
        Coupon.objects.filter(pk=coupon.pk).update(is_active=False, updated_at=self.clock())
        coupon.refresh_from_db()
        logger.info(f"Coupon {coupon.code} deactivated by {principal.role.value} {principal.user_id}")
        return coupon

    def visible_to(self, principal: Principal):
        queryset = Coupon.objects.select_related("spa")
        if principal.is_admin:
            return queryset
        if principal.is_owner:
            return queryset.filter(issued_by_id=principal.user_id)
        return queryset.none()

    # --- redemption ---------------------------------------------------------

    def validate(self, code: str, spa_id: int | None = None) -> CouponTerms:
        """
        Check a code against the spa being booked

        Raises CouponNotFound, CouponInactive, CouponExpired or
        CouponExhausted, in that order of precedence.
        """
        normalized = normalize_code(code)
        coupon = Coupon.objects.filter(code=normalized).first()
        if coupon is None:
            raise CouponNotFound(f"Coupon {normalized} not found", code=normalized)
        terms = coupon.to_terms()
        terms.ensure_redeemable(self.clock(), spa_id)
        return terms

    def preview(self, code: str, base_price: Money, spa_id: int | None = None) -> Redemption:
        terms = self.validate(code, spa_id)
        return Redemption(coupon=terms, base_price=base_price, final_price=terms.discounted(base_price))

    def apply(self, code: str, base_price: Money, spa_id: int | None = None) -> Redemption:
        """
        Redeem a coupon once and price ``base_price``

        The increment is a single conditional UPDATE, so concurrent callers
        can never push the count past ``max_redemptions``. Callers that need
        the redemption to stand or fall with another write run this inside
        their own transaction.
        """
        terms = self.validate(code, spa_id)
        now = self.clock()
        updated = (
            Coupon.objects.filter(pk=terms.id, is_active=True)
            .filter(Q(expires_at__isnull=True) | Q(expires_at__gt=now))
            .filter(Q(max_redemptions__isnull=True) | Q(current_redemptions__lt=F("max_redemptions")))
            .update(current_redemptions=F("current_redemptions") + 1, updated_at=now)
        )
        if updated == 0:
            logger.info(f"Coupon {terms.code} lost the redemption race")
            raise CouponExhausted(f"Coupon {terms.code} has no redemptions left", code=terms.code)

        logger.info(f"Coupon {terms.code} redeemed for spa {spa_id}")
        return Redemption(coupon=terms, base_price=base_price, final_price=terms.discounted(base_price))
