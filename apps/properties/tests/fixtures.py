"""Catalog objects shared by the test suites."""

from __future__ import annotations

from apps.properties.models import Location, Property, Room
from apps.users.models import User


def create_admin(email: str = "admin@example.com") -> User:
    return User.objects.create_user(
        email=email,
        password="AdminPass123",
        username="Villa Manager",
        role=User.RoleChoices.ADMIN,
    )


def create_guest(email: str = "guest@example.com") -> User:
    return User.objects.create_user(
        email=email,
        password="GuestPass123",
        username="Budi",
        role=User.RoleChoices.GUEST,
    )


def create_property(owner: User, title: str = "Villa Seminyak") -> Property:
    location = Location.objects.create(name="Seminyak", city="Bali", address="Jl. Kayu Aya 1")
    return Property.objects.create(owner=owner, title=title, description="Private pool villa", location=location)


def create_room(
    property_obj: Property,
    *,
    name: str = "Deluxe",
    base_price: int = 750_000,
    max_guests: int = 2,
) -> Room:
    return Room.objects.create(
        property=property_obj,
        name=name,
        max_guests=max_guests,
        base_price_per_night_idr=base_price,
    )
