"""Coupon validation failures."""

from shared.domain.exceptions import ConflictError, NotFoundError, ValidationError


class CouponNotFound(NotFoundError):
    code = 'coupon_not_found'


class CouponInactive(ValidationError):
    code = 'coupon_inactive'


class CouponExpired(ValidationError):
    code = 'coupon_expired'


class CouponExhausted(ConflictError):
    code = 'coupon_exhausted'
