from __future__ import annotations

import logging
import re
from datetime import datetime, timezone

from app.mappers.amenity_mapper import map_amenities
from app.mappers.popularity import compute_popularity_score
from app.schemas.directory import (
    HotelRecord,
    HotelStatus,
    PriceRange,
    VerificationRecord,
)
from app.schemas.hotel import Hotel, HotelContact, HotelPolicies, HotelPrice

logger = logging.getLogger(__name__)

MAX_VERIFICATION_HISTORY = 50

_TOKEN_RE = re.compile(r"\w+", re.UNICODE)
_TEXT_STOP_WORDS = frozenset({"a", "an", "and", "at", "in", "of", "on", "the", "to"})


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _contains(haystack: str | None, needle: str) -> bool:
    return bool(haystack) and needle.lower() in haystack.lower()


def _tokens(text: str | None) -> list[str]:
    if not text:
        return []
    return [t for t in _TOKEN_RE.findall(text.lower()) if t not in _TEXT_STOP_WORDS]


def _ranking_key(record: HotelRecord) -> tuple[float, float, int]:
    return (
        -(record.star_rating or 0),
        -(record.review_score or 0),
        -record.popularity_score,
    )


def _widen_price_range(current: PriceRange | None, price: HotelPrice | None) -> PriceRange | None:
    if price is None or price.amount is None:
        return current
    if current is None:
        return PriceRange(min=price.amount, max=price.amount, currency=price.currency)
    return PriceRange(
        min=price.amount if current.min is None else min(current.min, price.amount),
        max=price.amount if current.max is None else max(current.max, price.amount),
        currency=current.currency,
    )


def record_to_hotel(record: HotelRecord) -> Hotel:
    """Directory record back into the canonical hotel shape."""
    price = None
    if record.price_range and record.price_range.min is not None:
        price = HotelPrice(amount=record.price_range.min, currency=record.price_range.currency)
    return Hotel(
        id=record.hotel_id,
        name=record.name,
        location=record.location.model_copy(deep=True),
        star_rating=record.star_rating,
        review_score=record.review_score,
        review_count=record.review_count,
        price=price,
        amenities=[a.name for a in record.amenities if a.available],
        images=list(record.images),
        description=record.description,
        policies=record.policies,
        contact=record.contact,
    )


class HotelDirectory:
    """Hotels seen through search and verification, keyed by external id."""

    def __init__(self) -> None:
        self._hotels: dict[str, HotelRecord] = {}

    def __len__(self) -> int:
        return len(self._hotels)

    def get(self, hotel_id: str, active_only: bool = True) -> HotelRecord | None:
        record = self._hotels.get(hotel_id)
        if record is None:
            return None
        if active_only and record.status != HotelStatus.active:
            return None
        return record

    def upsert(self, hotel: Hotel) -> HotelRecord:
        if not hotel.id or not hotel.name:
            raise ValueError("Hotel needs an id and a name to be stored")

        now = _now()
        existing = self._hotels.get(hotel.id)
        record = HotelRecord(
            hotel_id=hotel.id,
            name=hotel.name.strip(),
            description=hotel.description,
            location=hotel.location.model_copy(deep=True),
            star_rating=hotel.star_rating,
            review_score=hotel.review_score,
            review_count=hotel.review_count or 0,
            price_range=_widen_price_range(
                existing.price_range if existing else None, hotel.price
            ),
            amenities=map_amenities(hotel.amenities),
            images=list(hotel.images),
            policies=hotel.policies or (existing.policies if existing else HotelPolicies()),
            contact=hotel.contact or (existing.contact if existing else HotelContact()),
            verification_history=existing.verification_history if existing else [],
            is_verified=existing.is_verified if existing else False,
            is_featured=existing.is_featured if existing else False,
            created_at=existing.created_at if existing else now,
            updated_at=now,
            last_synced=now,
        )
        self._save(record)
        return record

    def _save(self, record: HotelRecord) -> None:
        record.popularity_score = compute_popularity_score(
            record.star_rating,
            record.review_score,
            record.review_count,
            record.verification_success_rate,
            record.is_featured,
        )
        self._hotels[record.hotel_id] = record
        logger.debug("Saved hotel %s (%s)", record.name, record.hotel_id)

    def set_status(self, hotel_id: str, status: HotelStatus) -> HotelRecord | None:
        record = self._hotels.get(hotel_id)
        if record is None:
            return None
        record.status = status
        record.updated_at = _now()
        self._save(record)
        return record

    def set_featured(self, hotel_id: str, featured: bool = True) -> HotelRecord | None:
        record = self._hotels.get(hotel_id)
        if record is None:
            return None
        record.is_featured = featured
        record.updated_at = _now()
        self._save(record)
        return record

    def record_verification(
        self,
        hotel_id: str,
        query: str,
        confidence: float,
        verified: bool,
        method: str = "fuzzy_match",
    ) -> HotelRecord | None:
        record = self._hotels.get(hotel_id)
        if record is None:
            return None
        record.verification_history.append(
            VerificationRecord(
                date=_now(),
                original_query=query,
                confidence=confidence,
                verified=verified,
                method=method,
            )
        )
        record.verification_history = record.verification_history[-MAX_VERIFICATION_HISTORY:]
        if verified:
            record.is_verified = True
        record.updated_at = _now()
        self._save(record)
        return record

    def find_by_location(
        self,
        city: str,
        country: str | None = None,
        min_rating: float | None = None,
        max_price: float | None = None,
        limit: int = 50,
    ) -> list[HotelRecord]:
        matches = []
        for record in self._hotels.values():
            if record.status != HotelStatus.active:
                continue
            if not _contains(record.location.city, city):
                continue
            if country and not _contains(record.location.country, country):
                continue
            if min_rating is not None and (record.star_rating or 0) < min_rating:
                continue
            if max_price is not None:
                if record.price_range is None or record.price_range.max is None:
                    continue
                if record.price_range.max > max_price:
                    continue
            matches.append(record)

        matches.sort(key=_ranking_key)
        return matches[:limit]

    def search_by_location(self, location: str, limit: int = 20) -> list[HotelRecord]:
        """Fallback lookup: ``location`` matched against city or street address."""
        matches = [
            record
            for record in self._hotels.values()
            if record.status == HotelStatus.active
            and (
                _contains(record.location.city, location)
                or _contains(record.location.address, location)
            )
        ]
        matches.sort(key=_ranking_key)
        return matches[:limit]

    def search_by_name(
        self,
        name: str,
        location: str | None = None,
        limit: int | None = None,
    ) -> list[HotelRecord]:
        """Text search over name, description, city, address and amenity names.

        Relevance is the number of query-term occurrences across those fields;
        records with no occurrence are left out.
        """
        terms = set(_tokens(name))
        if not terms:
            return []

        scored: list[tuple[int, HotelRecord]] = []
        for record in self._hotels.values():
            if record.status != HotelStatus.active:
                continue
            if location and not (
                _contains(record.location.city, location)
                or _contains(record.location.country, location)
            ):
                continue

            words = (
                _tokens(record.name)
                + _tokens(record.description)
                + _tokens(record.location.city)
                + _tokens(record.location.address)
            )
            for amenity in record.amenities:
                words.extend(_tokens(amenity.name))

            relevance = sum(1 for word in words if word in terms)
            if relevance:
                scored.append((relevance, record))

        scored.sort(key=lambda item: (-item[0], -(item[1].star_rating or 0)))
        results = [record for _, record in scored]
        return results[:limit] if limit else results

    def find_alternatives(
        self,
        original: HotelRecord,
        price_min: float | None = None,
        price_max: float | None = None,
        limit: int = 5,
    ) -> list[HotelRecord]:
        """Same-city hotels within one star of ``original``, best first."""
        low = high = None
        if original.star_rating:
            low = max(1.0, original.star_rating - 1)
            high = min(5.0, original.star_rating + 1)

        def _same(a: str | None, b: str | None) -> bool:
            return (a or "").strip().lower() == (b or "").strip().lower()

        matches = []
        for record in self._hotels.values():
            if record.hotel_id == original.hotel_id:
                continue
            if record.status != HotelStatus.active:
                continue
            if not _same(record.location.city, original.location.city):
                continue
            if not _same(record.location.country, original.location.country):
                continue
            if low is not None:
                if record.star_rating is None or not low <= record.star_rating <= high:
                    continue
            if price_min is not None or price_max is not None:
                price_range = record.price_range
                if price_range is None or price_range.min is None or price_range.max is None:
                    continue
                if price_min is not None and price_range.min < price_min:
                    continue
                if price_max is not None and price_range.max > price_max:
                    continue
            matches.append(record)

        matches.sort(key=_ranking_key)
        return matches[:limit]
