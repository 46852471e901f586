"""Bookings app package.

This app encapsulates the booking lifecycle: the status state machine,
conflict detection against confirmed sessions, credit settlement on
completion and the keyed reminder queue. Conflicts are re-checked under
row locks inside the transaction that confirms a booking.
"""
