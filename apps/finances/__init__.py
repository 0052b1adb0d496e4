"""Finances app package.

Payments for bookings: the Midtrans Snap adapter, processing of its
HTTP notifications and manual completion of bank transfers.
"""
