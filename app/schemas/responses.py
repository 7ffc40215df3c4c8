from pydantic import BaseModel

from app.schemas.directory import HotelRecord
from app.schemas.hotel import Availability


class HotelListResponse(BaseModel):
    hotels: list[HotelRecord]
    count: int


class AvailabilityResponse(BaseModel):
    hotel_id: str
    availability: Availability


class PurgeResponse(BaseModel):
    deleted: int
