"""Credits app.

Holds the append-only credit ledger. ``CustomUser.credits`` is a cached
balance that only ``apps.credits.ledger`` writes, always in the same
transaction as the ledger rows that explain the change.
"""
