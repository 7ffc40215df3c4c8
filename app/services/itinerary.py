import json
import logging
import re
from datetime import date, timedelta

from anthropic import AsyncAnthropic

from app.exceptions.custom import ItineraryError
from app.schemas.itinerary import ChargingStation, Itinerary, TripDetails, Waypoint
from app.schemas.search import RecommendedHotel

logger = logging.getLogger(__name__)

MODEL = "claude-sonnet-4-20250514"

SYSTEM_PROMPT = (
    "You are a travel planning assistant specializing in EV road trips. "
    "Provide detailed itineraries with hotel recommendations, charging stations, "
    "and route optimization."
)

RESPONSE_SCHEMA = """{
  "totalDistance": number,
  "totalDuration": number,
  "dayByDay": [
    {
      "day": number,
      "date": "YYYY-MM-DD",
      "from": "location",
      "to": "location",
      "distance": number,
      "hotels": [
        {"name": "hotel name", "city": "city name", "reason": "why recommended"}
      ],
      "chargingStations": [
        {"name": "station name", "location": "location", "connectorTypes": ["Type2", "CCS"]}
      ]
    }
  ],
  "waypoints": [
    {"location": "location name", "purpose": "charging/hotel/attraction"}
  ]
}"""

# Greedy: the itinerary object nests, so take the outermost braces
_JSON_OBJECT_RE = re.compile(r"\{[\s\S]*\}")


def build_itinerary_prompt(trip: TripDetails) -> str:
    lines = [
        "Plan an EV road trip with the following details:",
        "",
        f"Start Date: {trip.start_date.isoformat()}",
        f"From: {trip.from_location}",
        f"To: {trip.to_destination}",
        f"Maximum driving distance per day: {trip.max_driving_distance} km",
        f"EV Range: {trip.ev_range} km",
        f"Travelers: {trip.travelers}",
        f"Rooms needed: {trip.rooms}",
        f"Hotel required: {'Yes' if trip.hotel_required else 'No'}",
    ]
    if trip.stops:
        lines.append(f"Stops en route: {', '.join(trip.stops)}")

    lines += [
        "",
        "Please provide:",
        "1. A day-by-day itinerary",
        "2. Recommended hotels for each overnight stop (include hotel name and city)",
        "3. Suggested EV charging stations along the route",
        "4. Total distance and estimated travel time",
        "5. Key waypoints and attractions",
        "",
        "Format the response as a structured JSON with the following structure:",
        RESPONSE_SCHEMA,
    ]
    return "\n".join(lines)


def _extract_json(text: str) -> dict | None:
    stripped = re.sub(r"```(?:json)?\s*", "", text).strip().rstrip("`")
    try:
        obj = json.loads(stripped)
        if isinstance(obj, dict):
            return obj
    except (json.JSONDecodeError, ValueError):
        pass

    match = _JSON_OBJECT_RE.search(stripped)
    if match:
        try:
            obj = json.loads(match.group(0))
            if isinstance(obj, dict):
                return obj
        except (json.JSONDecodeError, ValueError):
            pass
    return None


def _parse_day(value) -> date | None:
    if not isinstance(value, str):
        return None
    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        return None


def _number(value) -> float:
    return value if isinstance(value, (int, float)) else 0


def parse_itinerary_response(text: str) -> Itinerary:
    """Pull hotels, charging stations and totals out of the model's answer.

    Unparseable answers yield an empty itinerary that keeps the raw text.
    """
    parsed = _extract_json(text)
    if parsed is None:
        logger.warning("No valid JSON found in itinerary response")
        return Itinerary(raw_response=text)

    hotels: list[RecommendedHotel] = []
    stations: list[ChargingStation] = []
    for day in parsed.get("dayByDay") or []:
        if not isinstance(day, dict):
            continue
        check_in = _parse_day(day.get("date"))
        check_out = check_in + timedelta(days=1) if check_in else None

        for hotel in day.get("hotels") or []:
            if not isinstance(hotel, dict) or not hotel.get("name"):
                continue
            hotels.append(
                RecommendedHotel(
                    name=hotel["name"],
                    location=hotel.get("city"),
                    check_in=check_in,
                    check_out=check_out,
                    reason=hotel.get("reason"),
                )
            )

        for station in day.get("chargingStations") or []:
            if not isinstance(station, dict):
                continue
            stations.append(
                ChargingStation(
                    name=station.get("name"),
                    location=station.get("location"),
                    connector_types=station.get("connectorTypes") or [],
                )
            )

    waypoints = [
        Waypoint(location=w.get("location"), purpose=w.get("purpose"))
        for w in parsed.get("waypoints") or []
        if isinstance(w, dict)
    ]

    return Itinerary(
        total_distance=_number(parsed.get("totalDistance")),
        total_duration=_number(parsed.get("totalDuration")),
        waypoints=waypoints,
        hotels=hotels,
        charging_stations=stations,
        raw_response=parsed,
    )


class ItineraryService:
    def __init__(self, api_key: str):
        self._client = AsyncAnthropic(api_key=api_key)

    async def generate(self, trip: TripDetails) -> Itinerary:
        try:
            response = await self._client.messages.create(
                model=MODEL,
                max_tokens=2000,
                temperature=0.7,
                system=SYSTEM_PROMPT,
                messages=[{"role": "user", "content": build_itinerary_prompt(trip)}],
            )
            text = response.content[0].text
        except Exception as exc:
            logger.exception("Itinerary generation failed")
            raise ItineraryError("Failed to generate trip itinerary") from exc

        return parse_itinerary_response(text)
