import logging

from fastapi import Request
from fastapi.responses import JSONResponse

from .custom import (
    HotelNotFoundError,
    InventoryError,
    InventoryUnavailableError,
    ItineraryError,
    RateLimitError,
)

logger = logging.getLogger(__name__)


async def inventory_error_handler(_request: Request, exc: InventoryError) -> JSONResponse:
    logger.error("Inventory error: %s (status=%s)", exc.message, exc.status_code)
    return JSONResponse(
        status_code=502,
        content={"detail": f"Inventory error: {exc.message}"},
    )


async def inventory_unavailable_handler(
    _request: Request, exc: InventoryUnavailableError
) -> JSONResponse:
    logger.error("No inventory or fallback results for %s", exc.location)
    return JSONResponse(status_code=503, content={"detail": exc.message})


async def hotel_not_found_handler(_request: Request, exc: HotelNotFoundError) -> JSONResponse:
    logger.info("Hotel not found: %s", exc.hotel_id)
    return JSONResponse(status_code=404, content={"detail": exc.message})


async def itinerary_error_handler(_request: Request, exc: ItineraryError) -> JSONResponse:
    logger.error("Itinerary error: %s", exc.message)
    return JSONResponse(
        status_code=502,
        content={"detail": f"Itinerary error: {exc.message}"},
    )


async def rate_limit_error_handler(_request: Request, exc: RateLimitError) -> JSONResponse:
    logger.warning("Rate limit hit for %s", exc.service)
    return JSONResponse(
        status_code=429,
        content={"detail": f"Rate limit exceeded for {exc.service}"},
    )
