"""Bookings app package.

This app encapsulates the booking domain: room availability, nightly
pricing with peak-season rates and the booking lifecycle from creation
through payment, cancellation and expiry. Double booking is prevented
by locking the room row inside the creation transaction.
"""
