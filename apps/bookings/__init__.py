"""Bookings app package.

The booking state machine: appointment creation against a staff member's
(or a whole spa's) schedule, owner acceptance, rescheduling, cancellation
and completion. Completion accrues the commission ledger and awards
loyalty points in the same transaction.
"""
