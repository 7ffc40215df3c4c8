from datetime import date
from enum import StrEnum

from pydantic import BaseModel, Field

from app.schemas.hotel import Hotel


class ResultSource(StrEnum):
    cache = "cache"
    api = "api"
    fallback = "fallback"


class SearchResult(BaseModel):
    hotels: list[Hotel] = []
    total: int = 0
    source: ResultSource
    response_time_ms: int | None = None


class NameMatch(BaseModel):
    found: bool
    hotel: Hotel | None = None
    confidence: float = 0.0
    method: str | None = None  # exact_match | partial_match


class RecommendedHotel(BaseModel):
    name: str = Field(min_length=1)
    location: str | None = None
    star_rating: float | None = None
    check_in: date | None = None
    check_out: date | None = None
    reason: str | None = None


class TripContext(BaseModel):
    location: str | None = None
    check_in: date
    check_out: date
    rooms: int = Field(default=1, ge=1, le=10)
    guests: int = Field(default=1, ge=1, le=20)


class VerificationStatus(StrEnum):
    verified = "verified"
    alternatives_found = "alternatives_found"
    unavailable = "unavailable"


class VerifiedHotel(BaseModel):
    original: RecommendedHotel
    verified: Hotel
    status: VerificationStatus = VerificationStatus.verified
    confidence: float


class HotelWithAlternatives(BaseModel):
    original: RecommendedHotel
    alternatives: list[Hotel]
    status: VerificationStatus = VerificationStatus.alternatives_found


class UnavailableHotel(BaseModel):
    original: RecommendedHotel
    status: VerificationStatus = VerificationStatus.unavailable
    reason: str


class VerificationResponse(BaseModel):
    verified: list[VerifiedHotel] = []
    alternatives: list[HotelWithAlternatives] = []
    unavailable: list[UnavailableHotel] = []


class AlternativesCriteria(BaseModel):
    original_hotel_name: str = ""
    original_hotel_id: str | None = None
    location: str
    check_in: date
    check_out: date
    rooms: int = 1
    guests: int = 1
    star_rating: float | None = None
    price_min: float | None = None
    price_max: float | None = None
    exclude_hotel_ids: list[str] = []
    limit: int = 5


class BatchError(BaseModel):
    hotel_id: str
    reason: str


class BatchResult(BaseModel):
    hotels: list[Hotel] = []
    requested: int
    found: int
    errors: list[BatchError] = []
