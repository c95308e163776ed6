"""
Commission & Payout Ledger

- Accrual: what a completed booking contributes (gross, commission, net)
- available_profit: earned minus reserved, never negative
- Payout: aggregate with the REQUESTED -> APPROVED -> COMPLETED lifecycle

A payout reserves its amount from the moment it is REQUESTED. Rejection
releases the reservation; completion makes the deduction permanent.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum

from shared.domain.base import Aggregate, utcnow
from shared.domain.exceptions import ConflictError, StateError, ValidationError
from shared.domain.value_objects import Money, quantize_money

from .events import PayoutApproved, PayoutCompleted, PayoutRejected, PayoutRequested


class InsufficientBalance(ConflictError):
    code = 'insufficient_balance'


class PayoutStatus(Enum):
    """
    Payout Status FSM

    - REQUESTED -> APPROVED (admin review)
    - REQUESTED -> REJECTED (admin review, releases funds)
    - APPROVED -> COMPLETED (money sent)
    """
    REQUESTED = 'requested'
    APPROVED = 'approved'
    COMPLETED = 'completed'
    REJECTED = 'rejected'


RESERVING_STATUSES = (PayoutStatus.REQUESTED, PayoutStatus.APPROVED, PayoutStatus.COMPLETED)


def commission_for(final_price: Money, rate: Decimal) -> Money:
    """commission = final price x rate, rounded half-up to cents"""
    return final_price * Decimal(rate)


@dataclass(frozen=True)
class Accrual:
    gross: Money
    commission_rate: Decimal
    commission: Money
    net: Money

    @classmethod
    def capture(cls, final_price: Money, rate: Decimal) -> 'Accrual':
        commission = commission_for(final_price, rate)
        return cls(
            gross=final_price,
            commission_rate=Decimal(rate),
            commission=commission,
            net=final_price - commission,
        )


def available_profit(earned: Decimal, reserved: Decimal) -> Decimal:
    return max(Decimal('0.00'), quantize_money(Decimal(earned) - Decimal(reserved)))


@dataclass(eq=False, kw_only=True)
class Payout(Aggregate):
    owner_id: int
    amount: Money
    status: PayoutStatus = PayoutStatus.REQUESTED
    notes: str = ''
    requested_at: datetime | None = None
    approved_at: datetime | None = None
    rejected_at: datetime | None = None
    completed_at: datetime | None = None
    reviewed_by: int | None = None

    @classmethod
    def request(cls, owner_id: int, amount: Money, available: Decimal, notes: str = '') -> 'Payout':
        """
        Open a payout against an already-derived balance

        The caller must hold the per-owner lock from the moment ``available``
        was computed until the payout row is written.
        """
        if amount.amount <= 0:
            raise ValidationError("Payout amount must be positive", field='amount')
        if amount.amount > available:
            raise InsufficientBalance(
                f"Requested {amount.amount} exceeds available profit {available}",
                requested=str(amount.amount),
                available=str(available),
            )
        payout = cls(owner_id=owner_id, amount=amount, notes=notes, requested_at=utcnow())
        payout.add_event(PayoutRequested(
            aggregate_id=payout.id,
            payout_id=payout.id,
            owner_id=owner_id,
            amount=amount.amount,
        ))
        return payout

    def review(self, reviewer_id: int, approved: bool, notes: str = '', now: datetime | None = None):
        if self.status != PayoutStatus.REQUESTED:
            raise StateError(
                f"Payout {self.id} cannot be reviewed in status {self.status.value}",
                status=self.status.value,
            )
        now = now or utcnow()
        self.reviewed_by = reviewer_id
        if notes:
            self.notes = notes
        if approved:
            self.status = PayoutStatus.APPROVED
            self.approved_at = now
            self.add_event(PayoutApproved(
                aggregate_id=self.id,
                payout_id=self.id,
                owner_id=self.owner_id,
                amount=self.amount.amount,
                reviewed_by=reviewer_id,
            ))
        else:
            self.status = PayoutStatus.REJECTED
            self.rejected_at = now
            self.add_event(PayoutRejected(
                aggregate_id=self.id,
                payout_id=self.id,
                owner_id=self.owner_id,
                amount=self.amount.amount,
                reviewed_by=reviewer_id,
                notes=notes,
            ))
        self.updated_at = now

    def complete(self, notes: str = '', now: datetime | None = None):
        if self.status != PayoutStatus.APPROVED:
            raise StateError(
                f"Only approved payouts can be completed, payout {self.id} is {self.status.value}",
                status=self.status.value,
            )
        now = now or utcnow()
        self.status = PayoutStatus.COMPLETED
        self.completed_at = now
        if notes:
            self.notes = notes
        self.updated_at = now
        self.add_event(PayoutCompleted(
            aggregate_id=self.id,
            payout_id=self.id,
            owner_id=self.owner_id,
            amount=self.amount.amount,
        ))

    @property
    def reserves_funds(self) -> bool:
        return self.status in RESERVING_STATUSES
