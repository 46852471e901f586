"""Listings app.

A listing is a skill offered by a provider: what they do, where, for how
long and at what price. Listings are never physically deleted; they are
deactivated so existing bookings keep their reference.
"""
