import logging
from datetime import date
from typing import Annotated

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel, Field, field_validator, model_validator

from app.dependencies import HotelDirectoryDep, HotelSearchDep, SearchCacheDep
from app.schemas.cache import CacheStats, SearchFilters, SearchParams
from app.schemas.directory import HotelRecord, StatusUpdate
from app.schemas.hotel import Hotel
from app.schemas.responses import AvailabilityResponse, HotelListResponse, PurgeResponse
from app.schemas.search import (
    AlternativesCriteria,
    BatchResult,
    RecommendedHotel,
    SearchResult,
    TripContext,
    VerificationResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/hotels", tags=["hotels"])


class StayRequest(BaseModel):
    check_in: date
    check_out: date
    guests: int = Field(default=2, ge=1, le=20)
    rooms: int = Field(default=1, ge=1, le=10)

    @model_validator(mode="after")
    def check_dates(self):
        if self.check_out <= self.check_in:
            raise ValueError("check_out must be after check_in")
        return self


class SearchRequest(StayRequest):
    location: str = Field(min_length=2, max_length=100)
    min_rating: float | None = Field(default=None, ge=0, le=5)
    max_price: float | None = Field(default=None, ge=0)
    hotel_chain: str | None = None
    amenities: list[str] = []

    def to_params(self) -> SearchParams:
        filters = None
        if self.min_rating or self.max_price or self.hotel_chain or self.amenities:
            filters = SearchFilters(
                min_rating=self.min_rating,
                max_price=self.max_price,
                hotel_chain=self.hotel_chain,
                amenities=self.amenities,
            )
        return SearchParams(
            location=self.location,
            check_in=self.check_in,
            check_out=self.check_out,
            rooms=self.rooms,
            guests=self.guests,
            filters=filters,
        )


class VerifyRequest(BaseModel):
    hotels: list[RecommendedHotel] = Field(min_length=1)
    trip_context: TripContext


class BatchRequest(BaseModel):
    ids: list[str] = Field(min_length=1)

    @field_validator("ids")
    @classmethod
    def non_empty_ids(cls, ids: list[str]) -> list[str]:
        if not all(i.strip() for i in ids):
            raise ValueError("All hotel IDs must be non-empty strings")
        return ids


@router.post("/search", response_model=SearchResult)
async def search_hotels(request: SearchRequest, service: HotelSearchDep) -> SearchResult:
    return await service.search_hotels(request.to_params())


@router.get("/search/{name}", response_model=HotelListResponse)
async def search_hotels_by_name(
    name: str,
    directory: HotelDirectoryDep,
    location: str | None = None,
    limit: Annotated[int | None, Query(ge=1, le=50)] = None,
) -> HotelListResponse:
    hotels = directory.search_by_name(name, location=location, limit=limit)
    return HotelListResponse(hotels=hotels, count=len(hotels))


@router.get("/location/{city}/{country}", response_model=HotelListResponse)
async def hotels_by_location(
    city: str,
    country: str,
    directory: HotelDirectoryDep,
    min_rating: Annotated[float | None, Query(ge=0, le=5)] = None,
    max_price: Annotated[float | None, Query(ge=0)] = None,
    limit: Annotated[int, Query(ge=1, le=50)] = 20,
) -> HotelListResponse:
    hotels = directory.find_by_location(
        city, country, min_rating=min_rating, max_price=max_price, limit=limit
    )
    return HotelListResponse(hotels=hotels, count=len(hotels))


@router.get("/alternatives", response_model=list[Hotel])
async def alternative_hotels(
    service: HotelSearchDep,
    location: Annotated[str, Query(min_length=2)],
    check_in: date,
    check_out: date,
    guests: Annotated[int, Query(ge=1, le=20)] = 2,
    rooms: Annotated[int, Query(ge=1, le=10)] = 1,
    original_hotel_name: str = "",
    original_hotel_id: str | None = None,
    star_rating: Annotated[float | None, Query(ge=1, le=5)] = None,
    price_min: Annotated[float | None, Query(ge=0)] = None,
    price_max: Annotated[float | None, Query(ge=0)] = None,
    exclude_hotel_ids: Annotated[list[str], Query()] = [],
    limit: Annotated[int, Query(ge=1, le=20)] = 5,
) -> list[Hotel]:
    if check_out <= check_in:
        raise HTTPException(status_code=422, detail="check_out must be after check_in")

    return await service.get_alternative_hotels(
        AlternativesCriteria(
            original_hotel_name=original_hotel_name,
            original_hotel_id=original_hotel_id,
            location=location,
            check_in=check_in,
            check_out=check_out,
            rooms=rooms,
            guests=guests,
            star_rating=star_rating,
            price_min=price_min,
            price_max=price_max,
            exclude_hotel_ids=exclude_hotel_ids,
            limit=limit,
        )
    )


@router.post("/verify", response_model=VerificationResponse)
async def verify_hotels(request: VerifyRequest, service: HotelSearchDep) -> VerificationResponse:
    return await service.verify_recommended_hotels(request.hotels, request.trip_context)


@router.post("/batch", response_model=BatchResult)
async def hotels_by_ids(request: BatchRequest, service: HotelSearchDep) -> BatchResult:
    return await service.get_hotels_by_ids(request.ids)


@router.get("/cache/stats", response_model=CacheStats)
async def cache_stats(cache: SearchCacheDep) -> CacheStats:
    return cache.stats()


@router.delete("/cache/expired", response_model=PurgeResponse)
async def purge_expired_cache(cache: SearchCacheDep) -> PurgeResponse:
    return PurgeResponse(deleted=cache.purge_expired())


@router.get("/{hotel_id}", response_model=Hotel)
async def get_hotel(hotel_id: str, service: HotelSearchDep) -> Hotel:
    return await service.get_hotel_by_id(hotel_id)


@router.post("/{hotel_id}/availability", response_model=AvailabilityResponse)
async def check_availability(
    hotel_id: str, request: StayRequest, service: HotelSearchDep
) -> AvailabilityResponse:
    availability = await service.check_availability(
        hotel_id,
        request.check_in,
        request.check_out,
        rooms=request.rooms,
        guests=request.guests,
    )
    return AvailabilityResponse(hotel_id=hotel_id, availability=availability)


@router.patch("/{hotel_id}/status", response_model=HotelRecord)
async def update_hotel_status(
    hotel_id: str, update: StatusUpdate, directory: HotelDirectoryDep
) -> HotelRecord:
    record = directory.set_status(hotel_id, update.status)
    if record is None:
        raise HTTPException(status_code=404, detail="Hotel not found")
    logger.info("Hotel %s set to %s", hotel_id, update.status)
    return record
