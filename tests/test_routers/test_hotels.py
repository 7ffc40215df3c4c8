import json
from datetime import date, timedelta

import respx
from httpx import Response

INVENTORY_URL = "https://api.tsstravelsoft.com"
SEARCH_URL = f"{INVENTORY_URL}/hotels/search"

CHECK_IN = date.today() + timedelta(days=30)
CHECK_OUT = CHECK_IN + timedelta(days=2)

SEARCH_BODY = {
    "location": "Paris",
    "check_in": CHECK_IN.isoformat(),
    "check_out": CHECK_OUT.isoformat(),
    "guests": 2,
}


def _mock_search(hotels=None, status=200):
    if hotels is None:
        hotels = [
            {"id": "H1", "name": "Hotel Lumière", "city": "Paris", "country": "France",
             "starRating": 4, "reviewScore": 8.0, "price": {"total": 240}},
            {"id": "H2", "name": "Le Grand Paris", "city": "Paris", "country": "France",
             "starRating": 5, "reviewScore": 9.0, "price": {"total": 520}},
            {"id": "H3", "name": "Budget Stay", "city": "Paris", "country": "France",
             "starRating": 3, "reviewScore": 7.0, "price": {"total": 120}},
        ]
    if status != 200:
        return respx.post(SEARCH_URL).mock(return_value=Response(status, text="error"))
    return respx.post(SEARCH_URL).mock(
        return_value=Response(200, json={"hotels": hotels, "totalResults": len(hotels)})
    )


@respx.mock
async def test_search_then_cache(client):
    route = _mock_search()

    resp = await client.post("/hotels/search", json=SEARCH_BODY)
    assert resp.status_code == 200
    data = resp.json()
    assert data["source"] == "api"
    assert data["total"] == 3
    assert [h["id"] for h in data["hotels"]] == ["H1", "H2", "H3"]

    resp = await client.post("/hotels/search", json={**SEARCH_BODY, "location": "paris"})
    assert resp.json()["source"] == "cache"
    assert route.call_count == 1

    sent = json.loads(route.calls.last.request.content)
    assert sent["destination"] == "Paris"
    assert sent["rooms"] == [{"adults": 2, "children": 0}]


@respx.mock
async def test_search_with_filters(client):
    _mock_search()

    resp = await client.post("/hotels/search", json={**SEARCH_BODY, "min_rating": 4})

    assert [h["id"] for h in resp.json()["hotels"]] == ["H1", "H2"]


async def test_search_rejects_bad_dates(client):
    body = {**SEARCH_BODY, "check_out": CHECK_IN.isoformat()}
    resp = await client.post("/hotels/search", json=body)
    assert resp.status_code == 422


async def test_search_rejects_short_location(client):
    resp = await client.post("/hotels/search", json={**SEARCH_BODY, "location": "P"})
    assert resp.status_code == 422


@respx.mock
async def test_search_inventory_down_without_fallback(client):
    _mock_search(status=500)

    resp = await client.post("/hotels/search", json=SEARCH_BODY)

    assert resp.status_code == 503
    assert resp.json()["detail"] == "Hotel inventory unavailable for Paris"


@respx.mock
async def test_search_falls_back_to_directory(client):
    route = _mock_search()
    await client.post("/hotels/search", json=SEARCH_BODY)

    route.mock(return_value=Response(500, text="down"))
    later = {**SEARCH_BODY, "check_in": CHECK_OUT.isoformat(),
             "check_out": (CHECK_OUT + timedelta(days=1)).isoformat()}
    resp = await client.post("/hotels/search", json=later)

    assert resp.status_code == 200
    data = resp.json()
    assert data["source"] == "fallback"
    assert [h["id"] for h in data["hotels"]] == ["H2", "H1", "H3"]


@respx.mock
async def test_get_hotel_from_directory_after_search(client):
    _mock_search()
    await client.post("/hotels/search", json=SEARCH_BODY)

    resp = await client.get("/hotels/H1")

    assert resp.status_code == 200
    assert resp.json()["name"] == "Hotel Lumière"
    assert resp.json()["price"]["amount"] == 240


@respx.mock
async def test_get_hotel_not_found(client):
    respx.get(f"{INVENTORY_URL}/hotels/missing").mock(return_value=Response(404))

    resp = await client.get("/hotels/missing")

    assert resp.status_code == 404
    assert resp.json()["detail"] == "Hotel missing not found"


@respx.mock
async def test_get_hotel_upstream_errors(client):
    respx.get(f"{INVENTORY_URL}/hotels/broken").mock(return_value=Response(500, text="boom"))
    respx.get(f"{INVENTORY_URL}/hotels/busy").mock(return_value=Response(429))

    resp = await client.get("/hotels/broken")
    assert resp.status_code == 502
    assert resp.json()["detail"].startswith("Inventory error")

    resp = await client.get("/hotels/busy")
    assert resp.status_code == 429


@respx.mock
async def test_directory_queries(client):
    _mock_search()
    await client.post("/hotels/search", json=SEARCH_BODY)

    resp = await client.get("/hotels/location/paris/france", params={"min_rating": 4})
    assert resp.status_code == 200
    assert [h["hotel_id"] for h in resp.json()["hotels"]] == ["H2", "H1"]

    resp = await client.get("/hotels/search/budget")
    assert resp.json()["count"] == 1
    assert resp.json()["hotels"][0]["hotel_id"] == "H3"


async def test_location_limit_capped(client):
    resp = await client.get("/hotels/location/paris/france", params={"limit": 51})
    assert resp.status_code == 422


@respx.mock
async def test_batch(client):
    _mock_search()
    await client.post("/hotels/search", json=SEARCH_BODY)
    respx.get(f"{INVENTORY_URL}/hotels/nope").mock(return_value=Response(404))

    resp = await client.post("/hotels/batch", json={"ids": ["H1", "nope"]})

    data = resp.json()
    assert data["requested"] == 2
    assert data["found"] == 1
    assert data["errors"] == [{"hotel_id": "nope", "reason": "Hotel nope not found"}]


async def test_batch_rejects_blank_ids(client):
    resp = await client.post("/hotels/batch", json={"ids": ["H1", "  "]})
    assert resp.status_code == 422

    resp = await client.post("/hotels/batch", json={"ids": []})
    assert resp.status_code == 422


@respx.mock
async def test_cache_stats_and_purge(client):
    _mock_search()
    await client.post("/hotels/search", json=SEARCH_BODY)
    await client.post("/hotels/search", json=SEARCH_BODY)

    stats = (await client.get("/hotels/cache/stats")).json()
    assert stats["total_entries"] == 1
    assert stats["overall_hits"] == 2
    assert stats["status_breakdown"][0]["status"] == "active"

    resp = await client.delete("/hotels/cache/expired")
    assert resp.json() == {"deleted": 0}


@respx.mock
async def test_status_update_hides_hotel(client):
    _mock_search()
    await client.post("/hotels/search", json=SEARCH_BODY)
    respx.get(f"{INVENTORY_URL}/hotels/H3").mock(return_value=Response(404))

    resp = await client.patch("/hotels/H3/status", json={"status": "inactive"})
    assert resp.status_code == 200
    assert resp.json()["status"] == "inactive"

    assert (await client.get("/hotels/H3")).status_code == 404

    resp = await client.patch("/hotels/unknown/status", json={"status": "inactive"})
    assert resp.status_code == 404


@respx.mock
async def test_availability(client):
    route = respx.post(f"{INVENTORY_URL}/hotels/availability").mock(
        return_value=Response(200, json={"available": True, "availableRooms": [{"type": "twin"}]})
    )

    resp = await client.post(
        "/hotels/H1/availability",
        json={"check_in": CHECK_IN.isoformat(), "check_out": CHECK_OUT.isoformat(), "rooms": 2},
    )

    assert resp.status_code == 200
    data = resp.json()
    assert data["hotel_id"] == "H1"
    assert data["availability"]["available"] is True
    assert json.loads(route.calls.last.request.content)["numberOfRooms"] == 2


@respx.mock
async def test_alternatives(client):
    _mock_search()

    resp = await client.get(
        "/hotels/alternatives",
        params={
            "location": "Paris",
            "check_in": CHECK_IN.isoformat(),
            "check_out": CHECK_OUT.isoformat(),
            "original_hotel_name": "Le Grand Paris",
            "exclude_hotel_ids": ["H3"],
        },
    )

    assert resp.status_code == 200
    assert [h["id"] for h in resp.json()] == ["H1"]


@respx.mock
async def test_verify(client):
    respx.post(SEARCH_URL, json__destination="Moon").mock(return_value=Response(500))
    _mock_search()

    resp = await client.post(
        "/hotels/verify",
        json={
            "hotels": [
                {"name": "Lumière"},
                {"name": "The Ritz", "star_rating": 5},
                {"name": "Moon Hotel", "location": "Moon"},
            ],
            "trip_context": {
                "location": "Paris",
                "check_in": CHECK_IN.isoformat(),
                "check_out": CHECK_OUT.isoformat(),
                "guests": 2,
            },
        },
    )

    assert resp.status_code == 200
    data = resp.json()
    assert data["verified"][0]["verified"]["id"] == "H1"
    assert data["verified"][0]["confidence"] == 0.8
    assert [h["id"] for h in data["alternatives"][0]["alternatives"]] == ["H2", "H1"]
    assert data["unavailable"][0]["original"]["name"] == "Moon Hotel"


async def test_verify_requires_hotels(client):
    resp = await client.post(
        "/hotels/verify",
        json={
            "hotels": [],
            "trip_context": {"check_in": CHECK_IN.isoformat(), "check_out": CHECK_OUT.isoformat()},
        },
    )
    assert resp.status_code == 422
