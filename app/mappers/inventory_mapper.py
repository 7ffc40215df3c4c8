"""Normalize raw inventory hotels into the canonical ``Hotel`` shape.

Field precedence (first non-null wins):

    id            id, hotelId
    name          name, hotelName
    star_rating   starRating, category
    review_score  reviewScore, rating
    review_count  reviewCount, numberOfReviews
    price.amount  price.total, totalPrice
    price.per_night  price.perNight, pricePerNight
    price.currency   price.currency, <default currency>
    amenities     amenities, facilities, []
    images        images, photos, []
    description   description, hotelDescription
    availability  availability, "available"
"""

from typing import TypeVar

from app.schemas.hotel import (
    Coordinates,
    Hotel,
    HotelContact,
    HotelLocation,
    HotelPolicies,
    HotelPrice,
)
from app.schemas.inventory import InventoryHotel

T = TypeVar("T")

DEFAULT_CURRENCY = "EUR"


def coalesce(*values: T | None) -> T | None:
    for value in values:
        if value is not None:
            return value
    return None


def _location(raw: InventoryHotel) -> HotelLocation:
    return HotelLocation(
        address=raw.address,
        city=raw.city,
        country=raw.country,
        coordinates=Coordinates(latitude=raw.latitude, longitude=raw.longitude),
    )


def _price(raw: InventoryHotel, currency: str) -> HotelPrice:
    nested = raw.price
    return HotelPrice(
        amount=coalesce(nested.total if nested else None, raw.totalPrice),
        currency=coalesce(nested.currency if nested else None, currency),
        per_night=coalesce(nested.perNight if nested else None, raw.pricePerNight),
    )


def map_inventory_hotel(raw: InventoryHotel, currency: str = DEFAULT_CURRENCY) -> Hotel:
    """Search-result shape: identity, location, ratings, price and media."""
    return Hotel(
        id=coalesce(raw.id, raw.hotelId),
        name=coalesce(raw.name, raw.hotelName),
        location=_location(raw),
        star_rating=coalesce(raw.starRating, raw.category),
        review_score=coalesce(raw.reviewScore, raw.rating),
        review_count=coalesce(raw.reviewCount, raw.numberOfReviews),
        price=_price(raw, currency),
        amenities=coalesce(raw.amenities, raw.facilities) or [],
        images=coalesce(raw.images, raw.photos) or [],
        description=coalesce(raw.description, raw.hotelDescription),
        distance=raw.distance,
        availability=coalesce(raw.availability, "available"),
    )


def map_inventory_hotels(
    raw_hotels: list[InventoryHotel], currency: str = DEFAULT_CURRENCY
) -> list[Hotel]:
    return [map_inventory_hotel(raw, currency) for raw in raw_hotels]


def map_inventory_hotel_details(
    raw: InventoryHotel, currency: str = DEFAULT_CURRENCY
) -> Hotel:
    """Detail shape: the search shape plus rooms, policies and contact."""
    hotel = map_inventory_hotel(raw, currency)
    if raw.price is None and raw.totalPrice is None and raw.pricePerNight is None:
        hotel.price = None
    hotel.rooms = raw.rooms or []
    hotel.policies = HotelPolicies(
        check_in=coalesce(raw.checkInTime, "15:00"),
        check_out=coalesce(raw.checkOutTime, "11:00"),
        cancellation=raw.cancellationPolicy,
        children=raw.childPolicy,
        pets=raw.petPolicy,
    )
    hotel.contact = HotelContact(phone=raw.phone, email=raw.email, website=raw.website)
    return hotel
