"""Admin registrations for the catalog domain."""

from __future__ import annotations

from django.contrib import admin

from .models import Facility, Location, PeakSeasonRate, Property, PropertyType, Room


@admin.register(Facility)
class FacilityAdmin(admin.ModelAdmin):
    list_display = ("name", "icon", "deleted_at")
    search_fields = ("name",)


@admin.register(PropertyType)
class PropertyTypeAdmin(admin.ModelAdmin):
    list_display = ("name", "deleted_at")
    search_fields = ("name",)


@admin.register(Location)
class LocationAdmin(admin.ModelAdmin):
    list_display = ("name", "city", "country", "deleted_at")
    list_filter = ("country", "city")
    search_fields = ("name", "city", "address")


class RoomInline(admin.TabularInline):
    model = Room
    extra = 0
    fields = ("name", "max_guests", "base_price_per_night_idr", "deleted_at")


@admin.register(Property)
class PropertyAdmin(admin.ModelAdmin):
    list_display = ("title", "location", "property_type", "owner", "created_at", "deleted_at")
    list_filter = ("property_type", "location__city")
    search_fields = ("title", "description", "owner__email")
    inlines = [RoomInline]
    readonly_fields = ("slug", "created_at", "updated_at")


class PeakSeasonRateInline(admin.TabularInline):
    model = PeakSeasonRate
    extra = 0
    fields = ("start_date", "end_date", "adjustment_type", "adjustment_value", "note", "is_active", "deleted_at")


@admin.register(Room)
class RoomAdmin(admin.ModelAdmin):
    list_display = ("name", "property", "max_guests", "base_price_per_night_idr", "deleted_at")
    list_filter = ("property",)
    search_fields = ("name", "property__title")
    inlines = [PeakSeasonRateInline]
