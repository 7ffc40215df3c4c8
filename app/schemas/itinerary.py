from datetime import date

from pydantic import BaseModel, Field

from app.schemas.search import RecommendedHotel, VerificationResponse


class TripDetails(BaseModel):
    start_date: date
    from_location: str = Field(min_length=2, max_length=100)
    to_destination: str = Field(min_length=2, max_length=100)
    stops: list[str] = []
    max_driving_distance: int = Field(default=500, gt=0)
    ev_range: int = Field(default=300, gt=0)
    hotel_required: bool = True
    travelers: int = Field(default=2, ge=1, le=20)
    rooms: int = Field(default=1, ge=1, le=10)


class ChargingStation(BaseModel):
    name: str | None = None
    location: str | None = None
    connector_types: list[str] = []


class Waypoint(BaseModel):
    location: str | None = None
    purpose: str | None = None


class Itinerary(BaseModel):
    total_distance: float = 0
    total_duration: float = 0
    waypoints: list[Waypoint] = []
    hotels: list[RecommendedHotel] = []
    charging_stations: list[ChargingStation] = []
    raw_response: dict | str | None = None


class ItineraryResponse(BaseModel):
    trip: TripDetails
    itinerary: Itinerary
    hotel_verification: VerificationResponse | None = None
