import logging
from datetime import timedelta

from fastapi import APIRouter, HTTPException

from app.dependencies import HotelSearchDep, ItineraryDep
from app.schemas.itinerary import ItineraryResponse, TripDetails
from app.schemas.search import TripContext
from app.services.hotel_search import HotelSearchService
from app.services.itinerary import ItineraryService

logger = logging.getLogger(__name__)

router = APIRouter()


async def plan_trip(
    trip: TripDetails,
    itineraries: ItineraryService,
    hotel_search: HotelSearchService,
) -> ItineraryResponse:
    itinerary = await itineraries.generate(trip)

    verification = None
    if trip.hotel_required and itinerary.hotels:
        context = TripContext(
            location=trip.to_destination,
            check_in=trip.start_date,
            check_out=trip.start_date + timedelta(days=1),
            rooms=trip.rooms,
            guests=trip.travelers,
        )
        verification = await hotel_search.verify_recommended_hotels(itinerary.hotels, context)
        logger.info(
            "Trip to %s: %d recommended hotels verified",
            trip.to_destination,
            len(verification.verified),
        )

    return ItineraryResponse(trip=trip, itinerary=itinerary, hotel_verification=verification)


@router.post("/trips/itinerary", response_model=ItineraryResponse)
async def generate_itinerary(
    trip: TripDetails,
    itineraries: ItineraryDep,
    hotel_search: HotelSearchDep,
) -> ItineraryResponse:
    if itineraries is None:
        raise HTTPException(status_code=503, detail="Itinerary generation not configured")
    return await plan_trip(trip, itineraries, hotel_search)
