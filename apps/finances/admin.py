"""Admin registration for payments."""

from __future__ import annotations

from django.contrib import admin

from .models import Payment, PaymentTransaction


class PaymentTransactionInline(admin.TabularInline):
    model = PaymentTransaction
    extra = 0
    readonly_fields = ("event", "status", "payload", "created_at")
    can_delete = False


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "booking",
        "user",
        "amount_idr",
        "payment_status",
        "payment_method",
        "requested_at",
        "paid_at",
    )
    list_filter = ("payment_status", "payment_method")
    search_fields = ("booking__id", "user__email", "provider_tx_id")
    readonly_fields = ("requested_at", "updated_at", "paid_at", "failed_at")
    inlines = [PaymentTransactionInline]
