from typing import Annotated

from fastapi import Depends, Request

from app.cache import SearchCache
from app.directory import HotelDirectory
from app.services.hotel_search import HotelSearchService
from app.services.itinerary import ItineraryService


def get_hotel_search_service(request: Request) -> HotelSearchService:
    return request.app.state.hotel_search_service


def get_search_cache(request: Request) -> SearchCache:
    return request.app.state.search_cache


def get_hotel_directory(request: Request) -> HotelDirectory:
    return request.app.state.hotel_directory


def get_itinerary_service(request: Request) -> ItineraryService | None:
    return getattr(request.app.state, "itinerary_service", None)


HotelSearchDep = Annotated[HotelSearchService, Depends(get_hotel_search_service)]
SearchCacheDep = Annotated[SearchCache, Depends(get_search_cache)]
HotelDirectoryDep = Annotated[HotelDirectory, Depends(get_hotel_directory)]
ItineraryDep = Annotated[ItineraryService | None, Depends(get_itinerary_service)]
