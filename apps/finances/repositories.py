"""Mapping between Payout aggregates and rows."""

from __future__ import annotations

from uuid import UUID

from shared.domain.value_objects import Money

from .domain.ledger import Payout, PayoutStatus
from .models import Payout as PayoutModel


class DjangoPayoutRepository:
    def get(self, payout_id: UUID, lock: bool = False) -> Payout | None:
        queryset = PayoutModel.objects.all()
        if lock:
            queryset = queryset.select_for_update()
        row = queryset.filter(pk=payout_id).first()
        return self._to_entity(row) if row else None

    def save(self, payout: Payout) -> None:
        PayoutModel.objects.update_or_create(
            pk=payout.id,
            defaults={
                "owner_id": payout.owner_id,
                "amount": payout.amount.amount,
                "currency": payout.amount.currency,
                "status": payout.status.value,
                "notes": payout.notes,
                "reviewed_by_id": payout.reviewed_by,
                "requested_at": payout.requested_at,
                "approved_at": payout.approved_at,
                "rejected_at": payout.rejected_at,
                "completed_at": payout.completed_at,
            },
        )

    @staticmethod
    def _to_entity(row: PayoutModel) -> Payout:
        return Payout(
            id=row.id,
            created_at=row.created_at,
            updated_at=row.updated_at,
            owner_id=row.owner_id,
            amount=Money(row.amount, row.currency),
            status=PayoutStatus(row.status),
            notes=row.notes,
            requested_at=row.requested_at,
            approved_at=row.approved_at,
            rejected_at=row.rejected_at,
            completed_at=row.completed_at,
            reviewed_by=row.reviewed_by_id,
        )
