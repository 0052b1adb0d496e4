"""Admin registration for notifications."""

from __future__ import annotations

from django.contrib import admin

from .models import EmailNotification


@admin.register(EmailNotification)
class EmailNotificationAdmin(admin.ModelAdmin):
    list_display = ("id", "booking", "type", "recipient_email", "status", "sent_at", "created_at")
    list_filter = ("type", "status")
    search_fields = ("recipient_email", "booking__id")
    readonly_fields = ("payload", "error", "sent_at", "created_at")
