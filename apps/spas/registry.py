"""Lookup collaborator for spas, services and staff.

Bookings, coupons and the ledger never hold ORM instances of the registry;
they resolve ids into immutable snapshots here, inside their own transaction.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from shared.domain.exceptions import NotFoundError

from .models import Spa, SpaService, Staff


@dataclass(frozen=True)
class SpaInfo:
    id: int
    owner_id: int
    name: str
    is_approved: bool
    requires_manual_acceptance: bool


@dataclass(frozen=True)
class ServiceInfo:
    id: int
    spa_id: int
    name: str
    duration_minutes: int
    price: Decimal


@dataclass(frozen=True)
class StaffInfo:
    id: int
    spa_id: int
    is_active: bool


class SpaRegistry:
    """Resolves registry ids; raises ``NotFoundError`` when an id does not resolve."""

    def get_spa(self, spa_id: int) -> SpaInfo:
        row = (
            Spa.objects.filter(pk=spa_id)
            .values("id", "owner_id", "name", "is_approved", "requires_manual_acceptance")
            .first()
        )
        if row is None:
            raise NotFoundError(f"Spa {spa_id} not found", spa_id=spa_id)
        return SpaInfo(**row)

    def get_service(self, spa_id: int, service_id: int) -> ServiceInfo:
        row = (
            SpaService.objects.filter(pk=service_id, spa_id=spa_id, is_active=True)
            .values("id", "spa_id", "name", "duration_minutes", "price")
            .first()
        )
        if row is None:
            raise NotFoundError(
                f"Service {service_id} is not offered by spa {spa_id}",
                service_id=service_id,
            )
        return ServiceInfo(**row)

    def get_staff(self, spa_id: int, staff_id: int) -> StaffInfo:
        row = (
            Staff.objects.filter(pk=staff_id, spa_id=spa_id, is_active=True)
            .values("id", "spa_id", "is_active")
            .first()
        )
        if row is None:
            raise NotFoundError(
                f"Staff member {staff_id} is not available at spa {spa_id}",
                staff_id=staff_id,
            )
        return StaffInfo(**row)

    def owns_spa(self, owner_id: int | None, spa_id: int) -> bool:
        return owner_id is not None and Spa.objects.filter(pk=spa_id, owner_id=owner_id).exists()

    def lock_schedule_resource(self, spa_id: int, staff_id: int | None) -> None:
        """
        Take a row lock on the resource whose calendar is about to change

        The staff row when a staff member is booked, otherwise the spa row.
        Must be called inside a transaction; a no-op on backends without
        SELECT ... FOR UPDATE.
        """
        if staff_id is not None:
            locked = Staff.objects.select_for_update().filter(pk=staff_id, spa_id=spa_id)
        else:
            locked = Spa.objects.select_for_update().filter(pk=spa_id)
        if not list(locked.values_list("pk", flat=True)):
            raise NotFoundError(
                f"Schedule resource for spa {spa_id} / staff {staff_id} not found",
                spa_id=spa_id,
                staff_id=staff_id,
            )
