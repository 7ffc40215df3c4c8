import json
from datetime import date

import httpx
import pytest
import respx
from httpx import Response

from app.exceptions.custom import InventoryError, RateLimitError
from app.services.inventory import DEFAULT_BASE_URL, USER_AGENT, InventoryService

SEARCH_URL = f"{DEFAULT_BASE_URL}/hotels/search"
AVAILABILITY_URL = f"{DEFAULT_BASE_URL}/hotels/availability"

CHECK_IN = date(2030, 6, 1)
CHECK_OUT = date(2030, 6, 3)


@respx.mock
@pytest.mark.asyncio
async def test_search_success():
    route = respx.post(SEARCH_URL).mock(
        return_value=Response(
            200,
            json={
                "hotels": [
                    {"id": "H1", "name": "Hotel Lumière", "city": "Paris", "starRating": 4,
                     "price": {"total": 240, "currency": "EUR"}},
                    {"hotelId": "H2", "hotelName": "Le Petit", "category": 3, "totalPrice": 150},
                ],
                "totalResults": 42,
            },
        )
    )

    async with httpx.AsyncClient() as client:
        service = InventoryService(client, "test-key")
        result = await service.search("Paris", CHECK_IN, CHECK_OUT, rooms=1, guests=2)

    assert result.has_results
    assert result.total == 42
    assert [h.id for h in result.hotels] == ["H1", "H2"]
    assert result.hotels[1].name == "Le Petit"
    assert result.hotels[1].price.amount == 150

    request = route.calls.last.request
    assert request.headers["Authorization"] == "Bearer test-key"
    assert request.headers["User-Agent"] == USER_AGENT
    body = json.loads(request.content)
    assert body == {
        "destination": "Paris",
        "checkInDate": "2030-06-01",
        "checkOutDate": "2030-06-03",
        "numberOfRooms": 1,
        "rooms": [{"adults": 2, "children": 0}],
        "currency": "EUR",
        "nationality": "DE",
    }


@respx.mock
@pytest.mark.asyncio
async def test_search_sends_filters():
    route = respx.post(SEARCH_URL).mock(return_value=Response(200, json={"hotels": []}))

    async with httpx.AsyncClient() as client:
        service = InventoryService(client, "test-key", currency="USD", nationality="US")
        result = await service.search("Paris", CHECK_IN, CHECK_OUT, filters={"min_rating": 4})

    assert result.has_results
    assert result.hotels == []
    assert result.total == 0
    body = json.loads(route.calls.last.request.content)
    assert body["filters"] == {"min_rating": 4}
    assert body["currency"] == "USD"
    assert body["nationality"] == "US"


@respx.mock
@pytest.mark.asyncio
async def test_search_missing_hotel_list():
    respx.post(SEARCH_URL).mock(return_value=Response(200, json={"message": "ok"}))

    async with httpx.AsyncClient() as client:
        service = InventoryService(client, "test-key")
        result = await service.search("Paris", CHECK_IN, CHECK_OUT)

    assert not result.has_results
    assert result.hotels == []


@respx.mock
@pytest.mark.asyncio
async def test_search_rate_limit():
    respx.post(SEARCH_URL).mock(return_value=Response(429, text="slow down"))

    async with httpx.AsyncClient() as client:
        service = InventoryService(client, "test-key")
        with pytest.raises(RateLimitError):
            await service.search("Paris", CHECK_IN, CHECK_OUT)


@respx.mock
@pytest.mark.asyncio
async def test_search_server_error():
    respx.post(SEARCH_URL).mock(return_value=Response(500, text="upstream down"))

    async with httpx.AsyncClient() as client:
        service = InventoryService(client, "test-key")
        with pytest.raises(InventoryError) as exc_info:
            await service.search("Paris", CHECK_IN, CHECK_OUT)

    assert exc_info.value.status_code == 500


@respx.mock
@pytest.mark.asyncio
async def test_search_transport_error():
    respx.post(SEARCH_URL).mock(side_effect=httpx.ConnectTimeout("timed out"))

    async with httpx.AsyncClient() as client:
        service = InventoryService(client, "test-key")
        with pytest.raises(InventoryError):
            await service.search("Paris", CHECK_IN, CHECK_OUT)


@respx.mock
@pytest.mark.asyncio
async def test_search_invalid_json():
    respx.post(SEARCH_URL).mock(return_value=Response(200, text="<html>oops</html>"))

    async with httpx.AsyncClient() as client:
        service = InventoryService(client, "test-key")
        with pytest.raises(InventoryError):
            await service.search("Paris", CHECK_IN, CHECK_OUT)


@respx.mock
@pytest.mark.asyncio
async def test_get_by_id_success():
    respx.get(f"{DEFAULT_BASE_URL}/hotels/H1").mock(
        return_value=Response(
            200,
            json={
                "hotel": {
                    "id": "H1",
                    "name": "Hotel Lumière",
                    "checkOutTime": "12:00",
                    "email": "info@lumiere.example",
                }
            },
        )
    )

    async with httpx.AsyncClient() as client:
        service = InventoryService(client, "test-key")
        hotel = await service.get_by_id("H1")

    assert hotel is not None
    assert hotel.name == "Hotel Lumière"
    assert hotel.policies.check_out == "12:00"
    assert hotel.contact.email == "info@lumiere.example"


@respx.mock
@pytest.mark.asyncio
async def test_get_by_id_not_found():
    respx.get(f"{DEFAULT_BASE_URL}/hotels/missing").mock(return_value=Response(404))

    async with httpx.AsyncClient() as client:
        service = InventoryService(client, "test-key")
        assert await service.get_by_id("missing") is None


@respx.mock
@pytest.mark.asyncio
async def test_get_by_id_empty_body():
    respx.get(f"{DEFAULT_BASE_URL}/hotels/H9").mock(return_value=Response(200, json={}))

    async with httpx.AsyncClient() as client:
        service = InventoryService(client, "test-key")
        assert await service.get_by_id("H9") is None


@respx.mock
@pytest.mark.asyncio
async def test_check_availability():
    route = respx.post(AVAILABILITY_URL).mock(
        return_value=Response(
            200,
            json={
                "available": True,
                "availableRooms": [{"type": "double", "count": 3}],
                "pricing": {"total": 300},
            },
        )
    )

    async with httpx.AsyncClient() as client:
        service = InventoryService(client, "test-key")
        availability = await service.check_availability(
            "H1", CHECK_IN, CHECK_OUT, rooms=2, guests=3
        )

    assert availability.available
    assert availability.rooms == [{"type": "double", "count": 3}]
    assert availability.pricing == {"total": 300}
    assert availability.restrictions == {}
    body = json.loads(route.calls.last.request.content)
    assert body["hotelId"] == "H1"
    assert body["numberOfRooms"] == 2
    assert body["rooms"] == [{"adults": 3, "children": 0}]


@respx.mock
@pytest.mark.asyncio
async def test_check_availability_error():
    respx.post(AVAILABILITY_URL).mock(return_value=Response(503, text="maintenance"))

    async with httpx.AsyncClient() as client:
        service = InventoryService(client, "test-key")
        with pytest.raises(InventoryError):
            await service.check_availability("H1", CHECK_IN, CHECK_OUT)
