"""Notifications app package.

Booking e-mails (invoice on confirmation, notice on cancellation) are
queued as ``EmailNotification`` rows and delivered by domain event
handlers once the booking transaction has committed.
"""
