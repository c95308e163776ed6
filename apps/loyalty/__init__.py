"""Loyalty app package.

Customers earn points for completed bookings; their rank is always derived
from points, never stored.
"""
