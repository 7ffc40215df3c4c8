import logging
import time
from datetime import date
from typing import TypeVar
from urllib.parse import quote

import httpx
from pydantic import BaseModel

from app.exceptions.custom import InventoryError, RateLimitError
from app.mappers.inventory_mapper import map_inventory_hotel_details, map_inventory_hotels
from app.schemas.hotel import Availability, Hotel
from app.schemas.inventory import (
    InventoryAvailabilityResponse,
    InventoryHotelResponse,
    InventorySearchResponse,
)

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)

DEFAULT_BASE_URL = "https://api.tsstravelsoft.com"
USER_AGENT = "EVF-Trip-Planner/1.0"


class InventorySearchResult(BaseModel):
    hotels: list[Hotel] = []
    total: int = 0
    response_time_ms: int = 0
    # False when the API answered without a hotels list at all
    has_results: bool = True


def _room_payload(guests: int) -> list[dict]:
    return [{"adults": guests, "children": 0}]


class InventoryService:
    """Client for the hotel inventory API. Never retries; callers decide on fallback."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        currency: str = "EUR",
        nationality: str = "DE",
    ):
        self._client = client
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._currency = currency
        self._nationality = nationality

    def _headers(self) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self._api_key}",
            "User-Agent": USER_AGENT,
        }

    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        try:
            return await self._client.request(
                method, f"{self._base_url}{path}", headers=self._headers(), **kwargs
            )
        except httpx.HTTPError as exc:
            logger.warning("Inventory %s %s failed: %s", method, path, exc)
            raise InventoryError(f"{type(exc).__name__}: {exc}") from exc

    @staticmethod
    def _parse(resp: httpx.Response, model: type[T]) -> T:
        try:
            return model.model_validate(resp.json())
        except ValueError as exc:
            raise InventoryError(
                f"Unexpected inventory response: {exc}", status_code=resp.status_code
            ) from exc

    @staticmethod
    def _raise_for_status(resp: httpx.Response) -> None:
        if resp.status_code == 429:
            raise RateLimitError("Hotel inventory")
        if resp.status_code >= 400:
            raise InventoryError(resp.text, status_code=resp.status_code)

    async def search(
        self,
        location: str,
        check_in: date,
        check_out: date,
        rooms: int = 1,
        guests: int = 1,
        filters: dict | None = None,
    ) -> InventorySearchResult:
        payload = {
            "destination": location,
            "checkInDate": check_in.isoformat(),
            "checkOutDate": check_out.isoformat(),
            "numberOfRooms": rooms,
            "rooms": _room_payload(guests),
            "currency": self._currency,
            "nationality": self._nationality,
        }
        if filters:
            payload["filters"] = filters

        started = time.perf_counter()
        resp = await self._request("POST", "/hotels/search", json=payload)
        response_time_ms = int((time.perf_counter() - started) * 1000)
        self._raise_for_status(resp)

        data = self._parse(resp, InventorySearchResponse)
        if data.hotels is None:
            logger.info("Inventory search for %s returned no hotel list", location)
            return InventorySearchResult(response_time_ms=response_time_ms, has_results=False)

        hotels = map_inventory_hotels(data.hotels, self._currency)
        return InventorySearchResult(
            hotels=hotels,
            total=data.totalResults or len(hotels),
            response_time_ms=response_time_ms,
        )

    async def get_by_id(self, hotel_id: str) -> Hotel | None:
        """Hotel details, or None when the API does not know the id."""
        resp = await self._request("GET", f"/hotels/{quote(hotel_id, safe='')}")
        if resp.status_code == 404:
            return None
        self._raise_for_status(resp)

        data = self._parse(resp, InventoryHotelResponse)
        if data.hotel is None:
            return None
        return map_inventory_hotel_details(data.hotel, self._currency)

    async def check_availability(
        self,
        hotel_id: str,
        check_in: date,
        check_out: date,
        rooms: int = 1,
        guests: int = 1,
    ) -> Availability:
        payload = {
            "hotelId": hotel_id,
            "checkInDate": check_in.isoformat(),
            "checkOutDate": check_out.isoformat(),
            "numberOfRooms": rooms,
            "rooms": _room_payload(guests),
        }
        resp = await self._request("POST", "/hotels/availability", json=payload)
        self._raise_for_status(resp)

        data = self._parse(resp, InventoryAvailabilityResponse)
        return Availability(
            available=data.available or False,
            rooms=data.availableRooms or [],
            pricing=data.pricing or {},
            restrictions=data.restrictions or {},
        )
