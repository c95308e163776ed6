"""Reviews app package.

Customer feedback on bookings. Feedback of bookings that were
cancelled later is hidden at query time rather than deleted.
"""
