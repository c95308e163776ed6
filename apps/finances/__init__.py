"""Finance app package.

Commission and payout ledger: an Earning row is accrued for every completed
booking, and owners withdraw their post-commission balance through payouts
reviewed by administrators.
"""
