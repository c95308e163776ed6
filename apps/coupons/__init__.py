"""Coupons app package.

The discount engine: coupon issuance within role caps, validation against
the spa being booked and the atomic redemption counter.
"""
