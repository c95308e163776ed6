"""
Payout Domain Events

Published after commit; notifications forward approvals and completions.
"""

from dataclasses import dataclass
from decimal import Decimal
from uuid import UUID

from shared.domain.base import DomainEvent


@dataclass(kw_only=True)
class PayoutRequested(DomainEvent):
    payout_id: UUID
    owner_id: int
    amount: Decimal


@dataclass(kw_only=True)
class PayoutApproved(DomainEvent):
    payout_id: UUID
    owner_id: int
    amount: Decimal
    reviewed_by: int


@dataclass(kw_only=True)
class PayoutRejected(DomainEvent):
    payout_id: UUID
    owner_id: int
    amount: Decimal
    reviewed_by: int
    notes: str = ''


@dataclass(kw_only=True)
class PayoutCompleted(DomainEvent):
    payout_id: UUID
    owner_id: int
    amount: Decimal
