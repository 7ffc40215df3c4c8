from pydantic import BaseModel


class Coordinates(BaseModel):
    latitude: float | None = None
    longitude: float | None = None


class HotelLocation(BaseModel):
    address: str | None = None
    city: str | None = None
    country: str | None = None
    coordinates: Coordinates = Coordinates()


class HotelPrice(BaseModel):
    amount: float | None = None
    currency: str = "EUR"
    per_night: float | None = None


class HotelPolicies(BaseModel):
    check_in: str = "15:00"
    check_out: str = "11:00"
    cancellation: str | None = None
    children: str | None = None
    pets: str | None = None


class HotelContact(BaseModel):
    phone: str | None = None
    email: str | None = None
    website: str | None = None


class Hotel(BaseModel):
    """Canonical hotel shape returned by every search, lookup and verification."""

    id: str | None = None
    name: str | None = None
    location: HotelLocation = HotelLocation()
    star_rating: float | None = None
    review_score: float | None = None
    review_count: int | None = None
    price: HotelPrice | None = None
    amenities: list[str] = []
    images: list[str] = []
    description: str | None = None
    distance: float | None = None
    availability: str = "available"
    rooms: list[dict] = []
    policies: HotelPolicies | None = None
    contact: HotelContact | None = None


class Availability(BaseModel):
    available: bool = False
    rooms: list[dict] = []
    pricing: dict = {}
    restrictions: dict = {}
