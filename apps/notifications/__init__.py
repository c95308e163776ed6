"""Notifications app package.

Forwards booking and payout lifecycle events to a delivery backend. Events
are handed to Celery after the originating transaction commits; the backend
is the class named by ``settings.NOTIFICATION_DISPATCHER``.
"""
