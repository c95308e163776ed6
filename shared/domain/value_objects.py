"""
Common Value Objects

Value objects used across multiple domains:
- Money: Monetary amount with currency, rounded half-up to cents
- TimeSlot: Half-open [start, end) interval occupied by an appointment
- Role / Principal: The authenticated actor passed into every mutation
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum

from shared.domain.base import ValueObject

CENTS = Decimal('0.01')
SUPPORTED_CURRENCIES = ('VND', 'USD')


def quantize_money(value: Decimal) -> Decimal:
    """Round a monetary amount half-up to two decimal places."""
    return Decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class Money(ValueObject):
    """
    Money value object

    Represents a non-negative monetary amount with currency.
    Arithmetic results are rounded half-up to two decimal places.
    """
    amount: Decimal
    currency: str = 'VND'

    def __post_init__(self):
        if not isinstance(self.amount, Decimal):
            object.__setattr__(self, 'amount', Decimal(str(self.amount)))
        if self.amount < 0:
            raise ValueError("Amount cannot be negative")
        if self.currency not in SUPPORTED_CURRENCIES:
            raise ValueError(f"Unsupported currency: {self.currency}")

    @classmethod
    def zero(cls, currency: str = 'VND') -> 'Money':
        return cls(Decimal('0'), currency)

    def _same_currency(self, other: object, verb: str) -> None:
        if not isinstance(other, Money):
            raise TypeError(f"Cannot {verb} {type(other).__name__} and Money")
        if other.currency != self.currency:
            raise ValueError(f"Cannot {verb} {self.currency} and {other.currency}")

    def __add__(self, other: 'Money') -> 'Money':
        self._same_currency(other, 'add')
        return Money(self.amount + other.amount, self.currency)

    def __sub__(self, other: 'Money') -> 'Money':
        """Difference; raises ValueError if it would go below zero."""
        self._same_currency(other, 'subtract')
        return Money(self.amount - other.amount, self.currency)

    def __mul__(self, factor) -> 'Money':
        """Multiply money by a factor, rounding to cents"""
        if not isinstance(factor, (int, Decimal)):
            raise TypeError("Can only multiply Money by int or Decimal")
        return Money(quantize_money(self.amount * Decimal(factor)), self.currency)

    def percent_off(self, percent: Decimal) -> 'Money':
        """Price after removing ``percent`` percent: amount x (100 - percent) / 100"""
        return self * ((Decimal('100') - Decimal(percent)) / Decimal('100'))

    def to_primitive(self) -> str:
        return str(quantize_money(self.amount))

    def __str__(self):
        return f"{self.amount:,.2f} {self.currency}"

    def __repr__(self):
        return f"Money('{self.to_primitive()}', '{self.currency}')"


@dataclass(frozen=True)
class TimeSlot(ValueObject):
    """
    Appointment interval

    Represents [start, end): the end is exclusive, so back-to-back
    appointments do not overlap.
    """
    start: datetime
    end: datetime

    def __post_init__(self):
        if self.start >= self.end:
            raise ValueError(f"Slot start ({self.start}) must be before end ({self.end})")

    @classmethod
    def starting_at(cls, start: datetime, duration_minutes: int) -> 'TimeSlot':
        if duration_minutes <= 0:
            raise ValueError("Duration must be positive")
        return cls(start, start + timedelta(minutes=duration_minutes))

    def overlaps_with(self, other: 'TimeSlot') -> bool:
        """
        Check if this slot overlaps with another

        Examples:
            - 10:00-11:30 overlaps with 11:00-12:00 -> True
            - 10:00-11:30 overlaps with 11:30-12:00 -> False (adjacent)
        """
        if not isinstance(other, TimeSlot):
            raise TypeError("Can only check overlap with another TimeSlot")
        return self.start < other.end and self.end > other.start

    @property
    def duration_minutes(self) -> int:
        return int((self.end - self.start).total_seconds() // 60)

    def to_primitive(self) -> dict:
        return {'start': self.start.isoformat(), 'end': self.end.isoformat()}

    def __str__(self):
        return f"{self.start.isoformat()} - {self.end.isoformat()}"

    def __repr__(self):
        return f"TimeSlot({self.start!r}, {self.end!r})"


class Role(str, Enum):
    CUSTOMER = 'customer'
    OWNER = 'owner'
    ADMIN = 'admin'
    SYSTEM = 'system'


@dataclass(frozen=True)
class Principal(ValueObject):
    """Authenticated actor: who is calling and in which role."""
    user_id: int | None
    role: Role

    @classmethod
    def system(cls) -> 'Principal':
        return cls(user_id=None, role=Role.SYSTEM)

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    @property
    def is_owner(self) -> bool:
        return self.role == Role.OWNER

    @property
    def is_customer(self) -> bool:
        return self.role == Role.CUSTOMER

    @property
    def is_system(self) -> bool:
        return self.role == Role.SYSTEM
