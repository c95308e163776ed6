"""
Coupon Domain

Pure rules of the discount engine:
- normalize_code: case-normalized coupon codes
- discount_cap_for: issuer role caps (owner 40%, admin 70% by default)
- CouponTerms: snapshot of a coupon, able to tell whether it can be redeemed
  for a given spa and what a base price becomes after the discount
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, InvalidOperation

from shared.application.config import MarketplaceConfig
from shared.domain.exceptions import AuthorizationError, ValidationError
from shared.domain.value_objects import Money, Role, quantize_money

from .exceptions import CouponExhausted, CouponExpired, CouponInactive, CouponNotFound

MAX_CODE_LENGTH = 50


def normalize_code(code: str | None) -> str:
    normalized = (code or '').strip().upper()
    if not normalized:
        raise ValidationError("Coupon code is required", field='code')
    if len(normalized) > MAX_CODE_LENGTH:
        raise ValidationError(f"Coupon code is longer than {MAX_CODE_LENGTH} characters", field='code')
    return normalized


def discount_cap_for(role: Role, config: MarketplaceConfig) -> Decimal:
    if role == Role.OWNER:
        return config.owner_coupon_cap
    if role == Role.ADMIN:
        return config.admin_coupon_cap
    raise AuthorizationError(f"Role {role.value} cannot issue coupons")


def check_discount_percent(percent, role: Role, config: MarketplaceConfig) -> Decimal:
    """Validate a percent at creation time against the issuer's cap."""
    try:
        value = Decimal(str(percent))
    except (InvalidOperation, ValueError):
        raise ValidationError("Discount percent must be a number", field='discount_percent') from None
    cap = discount_cap_for(role, config)
    if not value.is_finite() or value <= 0:
        raise ValidationError("Discount percent must be positive", field='discount_percent')
    if value != quantize_money(value):
        raise ValidationError("Discount percent has more than two decimal places", field='discount_percent')
    if value > cap:
        raise ValidationError(
            f"{role.value.capitalize()} coupons are capped at {cap}%",
            field='discount_percent',
            cap=str(cap),
        )
    return value


@dataclass(frozen=True)
class CouponTerms:
    id: int
    code: str
    discount_percent: Decimal
    issuer_role: Role
    spa_id: int | None
    expires_at: datetime | None
    max_redemptions: int | None
    current_redemptions: int
    is_active: bool

    @property
    def is_global(self) -> bool:
        return self.spa_id is None

    @property
    def is_exhausted(self) -> bool:
        return self.max_redemptions is not None and self.current_redemptions >= self.max_redemptions

    @property
    def remaining_redemptions(self) -> int | None:
        if self.max_redemptions is None:
            return None
        return max(0, self.max_redemptions - self.current_redemptions)

    def applies_to(self, spa_id: int | None) -> bool:
        return self.is_global or spa_id is None or self.spa_id == spa_id

    def ensure_redeemable(self, now: datetime, spa_id: int | None = None) -> None:
        """Raise the first reason this coupon cannot be used right now."""
        if not self.applies_to(spa_id):
            # Another spa's coupon is indistinguishable from an unknown one.
            raise CouponNotFound(f"Coupon {self.code} not found", code=self.code)
        if not self.is_active:
            raise CouponInactive(f"Coupon {self.code} is no longer active", code=self.code)
        if self.expires_at is not None and self.expires_at <= now:
            raise CouponExpired(f"Coupon {self.code} expired", code=self.code)
        if self.is_exhausted:
            raise CouponExhausted(f"Coupon {self.code} has no redemptions left", code=self.code)

    def discounted(self, base_price: Money) -> Money:
        """finalPrice = basePrice x (1 - percent / 100), rounded half-up"""
        return base_price.percent_off(self.discount_percent)
