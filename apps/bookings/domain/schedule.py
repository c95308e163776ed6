"""
Resource Schedule

A schedule is the set of live reservations of one bookable resource: a staff
member, or the whole spa for bookings made without a staff member. It is
loaded under a row lock on that resource, so checking a slot and inserting
the booking happen as one unit.

Staffless bookings only compete with other staffless bookings of the same
spa; bookings pinned to staff members compete per staff member.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List
from uuid import UUID

from shared.domain.exceptions import ConflictError
from shared.domain.value_objects import TimeSlot


class SlotConflict(ConflictError):
    code = 'slot_conflict'


@dataclass(frozen=True)
class ScheduleKey:
    spa_id: int
    staff_id: int | None = None

    def __str__(self):
        if self.staff_id is None:
            return f"spa {self.spa_id}"
        return f"staff {self.staff_id} at spa {self.spa_id}"


@dataclass(frozen=True)
class Reservation:
    booking_id: UUID
    slot: TimeSlot


@dataclass
class Schedule:
    key: ScheduleKey
    reservations: List[Reservation] = field(default_factory=list)

    def conflicts(self, slot: TimeSlot, exclude_booking_id: UUID | None = None) -> List[Reservation]:
        return [
            reservation for reservation in self.reservations
            if reservation.booking_id != exclude_booking_id and reservation.slot.overlaps_with(slot)
        ]

    def can_reserve(self, slot: TimeSlot, exclude_booking_id: UUID | None = None) -> bool:
        return not self.conflicts(slot, exclude_booking_id)

    def reserve(self, booking_id: UUID, slot: TimeSlot) -> Reservation:
        """
        Claim ``slot`` for ``booking_id``

        A booking that already holds a reservation here (reschedule) is
        moved rather than duplicated.

        Raises:
            SlotConflict: If the slot overlaps another live booking
        """
        clashing = self.conflicts(slot, exclude_booking_id=booking_id)
        if clashing:
            raise SlotConflict(
                f"Slot {slot} is not available for {self.key}; "
                f"overlaps booking {clashing[0].booking_id}",
                conflicting_booking_id=str(clashing[0].booking_id),
            )
        self.reservations = [r for r in self.reservations if r.booking_id != booking_id]
        reservation = Reservation(booking_id=booking_id, slot=slot)
        self.reservations.append(reservation)
        return reservation

    def __len__(self) -> int:
        return len(self.reservations)
