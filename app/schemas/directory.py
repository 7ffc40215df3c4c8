from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel

from app.schemas.hotel import HotelContact, HotelLocation, HotelPolicies


class HotelStatus(StrEnum):
    active = "active"
    inactive = "inactive"
    pending = "pending"
    suspended = "suspended"


class AmenityCategory(StrEnum):
    general = "general"
    business = "business"
    connectivity = "connectivity"
    food_drink = "food_drink"
    transportation = "transportation"
    activities = "activities"
    services = "services"
    accessibility = "accessibility"


class Amenity(BaseModel):
    name: str
    category: AmenityCategory = AmenityCategory.general
    available: bool = True


class PriceRange(BaseModel):
    min: float | None = None
    max: float | None = None
    currency: str = "EUR"


class VerificationRecord(BaseModel):
    date: datetime
    original_query: str
    confidence: float
    verified: bool
    method: str = "fuzzy_match"  # exact_match | partial_match | fuzzy_match | manual


class HotelRecord(BaseModel):
    hotel_id: str
    name: str
    description: str | None = None
    location: HotelLocation = HotelLocation()
    star_rating: float | None = None
    review_score: float | None = None
    review_count: int = 0
    price_range: PriceRange | None = None
    amenities: list[Amenity] = []
    images: list[str] = []
    policies: HotelPolicies = HotelPolicies()
    contact: HotelContact = HotelContact()
    verification_history: list[VerificationRecord] = []
    popularity_score: int = 0
    status: HotelStatus = HotelStatus.active
    is_verified: bool = False
    is_featured: bool = False
    created_at: datetime
    updated_at: datetime
    last_synced: datetime | None = None

    @property
    def verification_success_rate(self) -> float:
        if not self.verification_history:
            return 0.0
        verified = sum(1 for record in self.verification_history if record.verified)
        return verified / len(self.verification_history)


class StatusUpdate(BaseModel):
    status: HotelStatus
