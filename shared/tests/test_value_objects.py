"""Tests for the shared value objects."""

from datetime import datetime, timedelta, timezone as dt_timezone
from decimal import Decimal

import pytest

from shared.domain.value_objects import Money, Principal, Role, TimeSlot

T0 = datetime(2030, 5, 1, 10, 0, tzinfo=dt_timezone.utc)


def test_money_rejects_negative_amounts():
    with pytest.raises(ValueError):
        Money(Decimal("-1"))


def test_money_percent_off_rounds_half_up_to_cents():
    assert Money(Decimal("500000")).percent_off(Decimal("10")).amount == Decimal("450000.00")
    assert Money(Decimal("0.05")).percent_off(Decimal("50")).amount == Decimal("0.03")


def test_money_arithmetic_requires_same_currency():
    with pytest.raises(ValueError):
        Money(Decimal("1"), "VND") + Money(Decimal("1"), "USD")
    assert (Money(Decimal("3")) - Money(Decimal("1"))).amount == Decimal("2")


def test_adjacent_slots_do_not_overlap():
    first = TimeSlot.starting_at(T0, 60)
    second = TimeSlot.starting_at(T0 + timedelta(minutes=60), 30)

    assert not first.overlaps_with(second)
    assert not second.overlaps_with(first)


def test_overlapping_slots():
    first = TimeSlot.starting_at(T0, 90)
    second = TimeSlot.starting_at(T0 + timedelta(minutes=60), 60)

    assert first.overlaps_with(second)
    assert first.duration_minutes == 90


def test_slot_requires_positive_duration():
    with pytest.raises(ValueError):
        TimeSlot(T0, T0)
    with pytest.raises(ValueError):
        TimeSlot.starting_at(T0, 0)


def test_system_principal():
    system = Principal.system()
    assert system.is_system
    assert system.user_id is None
    assert not Principal(user_id=1, role=Role.OWNER).is_admin
