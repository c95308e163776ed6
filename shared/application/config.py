"""
Marketplace policy configuration.

Handlers never read ``settings.MARKETPLACE`` directly; they take a
``MarketplaceConfig`` snapshot at the moment of use so a value captured into a
booking (commission rate) cannot change under a running transaction.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from decimal import Decimal
from typing import Any, Mapping

DEFAULT_LOYALTY_THRESHOLDS: tuple[tuple[int, str], ...] = (
    (300, 'PLATINUM'),
    (200, 'GOLD'),
    (100, 'SILVER'),
    (0, 'BRONZE'),
)


@dataclass(frozen=True)
class MarketplaceConfig:
    commission_rate: Decimal = Decimal('0.10')
    loyalty_points_per_booking: int = 10
    loyalty_thresholds: tuple[tuple[int, str], ...] = field(default=DEFAULT_LOYALTY_THRESHOLDS)
    owner_coupon_cap: Decimal = Decimal('40')
    admin_coupon_cap: Decimal = Decimal('70')
    allow_manual_completion: bool = False
    auto_complete_after_hours: int | None = 24
    transaction_retries: int = 3
    currency: str = 'VND'

    def __post_init__(self):
        if not Decimal('0') <= self.commission_rate < Decimal('1'):
            raise ValueError(f"Commission rate must be in [0, 1), got {self.commission_rate}")
        if self.loyalty_points_per_booking <= 0:
            raise ValueError("Loyalty points per booking must be positive")
        if self.transaction_retries < 1:
            raise ValueError("At least one transaction attempt is required")

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> 'MarketplaceConfig':
        """Build a config from a settings-style mapping, ignoring unknown keys."""
        known = {name: values[name] for name in cls.__dataclass_fields__ if name in values}
        for name in ('commission_rate', 'owner_coupon_cap', 'admin_coupon_cap'):
            if name in known:
                known[name] = Decimal(str(known[name]))
        if 'loyalty_thresholds' in known:
            known['loyalty_thresholds'] = tuple(
                sorted(((int(points), str(rank)) for points, rank in known['loyalty_thresholds']), reverse=True)
            )
        return cls(**known)

    @classmethod
    def from_settings(cls) -> 'MarketplaceConfig':
        from django.conf import settings  # type: ignore

        return cls.from_mapping(getattr(settings, 'MARKETPLACE', {}))

    def with_overrides(self, **changes: Any) -> 'MarketplaceConfig':
        return replace(self, **changes)
