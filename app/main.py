import asyncio
import contextlib
import logging
import sys
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI

from app.cache import SearchCache
from app.config import Settings
from app.directory import HotelDirectory
from app.exceptions.custom import (
    HotelNotFoundError,
    InventoryError,
    InventoryUnavailableError,
    ItineraryError,
    RateLimitError,
)
from app.exceptions.handlers import (
    hotel_not_found_handler,
    inventory_error_handler,
    inventory_unavailable_handler,
    itinerary_error_handler,
    rate_limit_error_handler,
)
from app.routers.hotels import router as hotels_router
from app.routers.trips import router as trips_router
from app.services.hotel_search import HotelSearchService
from app.services.inventory import InventoryService
from app.services.itinerary import ItineraryService

logger = logging.getLogger(__name__)


async def purge_cache_periodically(cache: SearchCache, interval_seconds: float) -> None:
    while True:
        await asyncio.sleep(interval_seconds)
        try:
            cache.purge_expired()
        except Exception:
            logger.exception("Cache purge failed")


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = Settings()

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stdout,
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)

    async with httpx.AsyncClient(timeout=settings.inventory_timeout) as client:
        inventory = InventoryService(
            client,
            settings.inventory_api_key,
            base_url=settings.inventory_api_url,
            currency=settings.inventory_currency,
            nationality=settings.inventory_nationality,
        )
        cache = SearchCache(
            ttl_hours=settings.cache_ttl_hours,
            refresh_threshold_hours=settings.cache_refresh_threshold_hours,
        )
        directory = HotelDirectory()

        app.state.search_cache = cache
        app.state.hotel_directory = directory
        app.state.hotel_search_service = HotelSearchService(
            inventory,
            cache,
            directory,
            cache_ttl_hours=settings.cache_ttl_hours,
            alternatives_limit=settings.verification_alternatives_limit,
        )

        # Itinerary endpoints answer 503 without an Anthropic key
        if settings.anthropic_api_key:
            app.state.itinerary_service = ItineraryService(settings.anthropic_api_key)
        else:
            app.state.itinerary_service = None

        purge_task: asyncio.Task | None = None
        if settings.cache_purge_interval_minutes > 0:
            purge_task = asyncio.create_task(
                purge_cache_periodically(cache, settings.cache_purge_interval_minutes * 60)
            )

        try:
            yield
        finally:
            if purge_task is not None:
                purge_task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await purge_task


app = FastAPI(title="Hotel Search", lifespan=lifespan)

app.add_exception_handler(InventoryError, inventory_error_handler)
app.add_exception_handler(InventoryUnavailableError, inventory_unavailable_handler)
app.add_exception_handler(HotelNotFoundError, hotel_not_found_handler)
app.add_exception_handler(ItineraryError, itinerary_error_handler)
app.add_exception_handler(RateLimitError, rate_limit_error_handler)

app.include_router(hotels_router)
app.include_router(trips_router)
