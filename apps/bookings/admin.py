"""Admin registration for bookings."""

from __future__ import annotations

from django.contrib import admin

from .models import Booking, NightlyRate


class NightlyRateInline(admin.TabularInline):
    model = NightlyRate
    extra = 0
    readonly_fields = ("date", "price_per_night_idr", "peak_season_rate")
    can_delete = False


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "property",
        "room",
        "user",
        "status",
        "payment_method",
        "check_in_date",
        "check_out_date",
        "total_price_idr",
        "created_at",
    )
    list_filter = ("status", "payment_method", "check_in_date")
    search_fields = ("id", "property__title", "user__email")
    readonly_fields = (
        "nights",
        "nightly_subtotal_idr",
        "cleaning_fee_idr",
        "service_fee_idr",
        "discount_idr",
        "total_price_idr",
        "confirmed_at",
        "cancelled_at",
        "created_at",
        "updated_at",
    )
    inlines = [NightlyRateInline]
