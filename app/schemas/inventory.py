from pydantic import BaseModel, ConfigDict


class InventoryPrice(BaseModel):
    total: float | None = None
    currency: str | None = None
    perNight: float | None = None


class InventoryHotel(BaseModel):
    """Raw hotel as sent by the inventory API.

    Field names vary between endpoints and suppliers, so every known alias is
    declared here and coalesced by ``app.mappers.inventory_mapper``.
    """

    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)

    id: str | None = None
    hotelId: str | None = None
    name: str | None = None
    hotelName: str | None = None
    address: str | None = None
    city: str | None = None
    country: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    starRating: float | None = None
    category: float | None = None
    reviewScore: float | None = None
    rating: float | None = None
    reviewCount: int | None = None
    numberOfReviews: int | None = None
    price: InventoryPrice | None = None
    totalPrice: float | None = None
    pricePerNight: float | None = None
    amenities: list[str] | None = None
    facilities: list[str] | None = None
    images: list[str] | None = None
    photos: list[str] | None = None
    description: str | None = None
    hotelDescription: str | None = None
    distance: float | None = None
    availability: str | None = None
    rooms: list[dict] | None = None
    checkInTime: str | None = None
    checkOutTime: str | None = None
    cancellationPolicy: str | None = None
    childPolicy: str | None = None
    petPolicy: str | None = None
    phone: str | None = None
    email: str | None = None
    website: str | None = None


class InventorySearchResponse(BaseModel):
    hotels: list[InventoryHotel] | None = None
    totalResults: int | None = None


class InventoryHotelResponse(BaseModel):
    hotel: InventoryHotel | None = None


class InventoryAvailabilityResponse(BaseModel):
    available: bool | None = None
    availableRooms: list[dict] | None = None
    pricing: dict | None = None
    restrictions: dict | None = None
