import logging
from datetime import date, timedelta

from app.cache import SearchCache, search_key_for
from app.directory import HotelDirectory, record_to_hotel
from app.exceptions.custom import (
    HotelNotFoundError,
    InventoryError,
    InventoryUnavailableError,
    RateLimitError,
)
from app.schemas.cache import SearchFilters, SearchParams
from app.schemas.hotel import Availability, Hotel
from app.schemas.search import (
    AlternativesCriteria,
    BatchError,
    BatchResult,
    HotelWithAlternatives,
    NameMatch,
    RecommendedHotel,
    ResultSource,
    SearchResult,
    TripContext,
    UnavailableHotel,
    VerificationResponse,
    VerifiedHotel,
)
from app.services.inventory import InventoryService

logger = logging.getLogger(__name__)

EXACT_MATCH_CONFIDENCE = 1.0
PARTIAL_MATCH_CONFIDENCE = 0.8
STAR_TOLERANCE = 1.0


def _norm(text: str | None) -> str:
    return (text or "").strip().lower()


def _alternative_score(hotel: Hotel) -> float:
    return (hotel.star_rating or 0) * 0.7 + (hotel.review_score or 0) * 0.3


def _price_amount(hotel: Hotel) -> float | None:
    return hotel.price.amount if hotel.price else None


def apply_filters(hotels: list[Hotel], filters: SearchFilters | None) -> list[Hotel]:
    """Client-side search filters. A hotel missing the filtered value is dropped."""
    if filters is None:
        return hotels

    results = hotels
    if filters.min_rating:
        results = [h for h in results if (h.star_rating or 0) >= filters.min_rating]
    if filters.max_price:
        results = [
            h for h in results
            if _price_amount(h) is not None and _price_amount(h) <= filters.max_price
        ]
    if filters.hotel_chain and filters.hotel_chain.strip():
        chain = _norm(filters.hotel_chain)
        results = [h for h in results if chain in _norm(h.name)]
    if filters.amenities:
        wanted = {_norm(a) for a in filters.amenities if a.strip()}
        results = [h for h in results if wanted <= {_norm(a) for a in h.amenities}]
    return results


def match_hotel_name(name: str, hotels: list[Hotel]) -> NameMatch:
    """Exact case-insensitive match first, then substring in either direction."""
    wanted = _norm(name)
    if not wanted:
        return NameMatch(found=False)

    for hotel in hotels:
        if _norm(hotel.name) == wanted:
            return NameMatch(
                found=True, hotel=hotel, confidence=EXACT_MATCH_CONFIDENCE, method="exact_match"
            )

    for hotel in hotels:
        candidate = _norm(hotel.name)
        if candidate and (wanted in candidate or candidate in wanted):
            return NameMatch(
                found=True, hotel=hotel, confidence=PARTIAL_MATCH_CONFIDENCE, method="partial_match"
            )

    return NameMatch(found=False)


class HotelSearchService:
    """Sequences cache, inventory API and directory for hotel search and verification.

    Holds no state of its own; the cache and directory are injected.
    """

    def __init__(
        self,
        inventory: InventoryService,
        cache: SearchCache,
        directory: HotelDirectory,
        cache_ttl_hours: int = 2,
        alternatives_limit: int = 3,
    ):
        self._inventory = inventory
        self._cache = cache
        self._directory = directory
        self._cache_ttl_hours = cache_ttl_hours
        self._alternatives_limit = alternatives_limit

    # --- Search ---

    async def search_hotels(self, params: SearchParams) -> SearchResult:
        """First source with an answer wins: cache, then inventory API, then directory."""
        search_key = search_key_for(params)
        for source in (self._from_cache, self._from_inventory, self._from_directory):
            result = await source(params, search_key)
            if result is not None:
                return result
        raise InventoryUnavailableError(params.location)

    async def _from_cache(self, params: SearchParams, search_key: str) -> SearchResult | None:
        entry = self._cache.lookup(search_key)
        if entry is None:
            logger.debug("Cache miss for %s", search_key)
            return None

        self._cache.record_hit(entry)
        logger.info("Cache hit for %s (hits=%d)", search_key, entry.metadata.hit_count)
        return SearchResult(
            hotels=entry.results.hotels,
            total=entry.results.total_results,
            source=ResultSource.cache,
        )

    async def _from_inventory(self, params: SearchParams, search_key: str) -> SearchResult | None:
        filters = params.filters.model_dump(exclude_defaults=True) if params.filters else None
        try:
            found = await self._inventory.search(
                params.location,
                params.check_in,
                params.check_out,
                rooms=params.rooms,
                guests=params.guests,
                filters=filters,
            )
        except (InventoryError, RateLimitError) as exc:
            logger.warning(
                "Inventory search failed for %s, falling back to directory: %s",
                search_key, exc.message,
            )
            return None

        if not found.has_results:
            return SearchResult(
                source=ResultSource.api, response_time_ms=found.response_time_ms
            )

        hotels = apply_filters(found.hotels, params.filters)
        total = found.total if len(hotels) == len(found.hotels) else len(hotels)

        self._persist_hotels(found.hotels)
        try:
            self._cache.store(
                params,
                hotels,
                total_results=total,
                ttl_hours=self._cache_ttl_hours,
                response_time_ms=found.response_time_ms,
            )
        except Exception:
            logger.exception("Failed to cache search results for %s", search_key)

        return SearchResult(
            hotels=hotels,
            total=total,
            source=ResultSource.api,
            response_time_ms=found.response_time_ms,
        )

    async def _from_directory(self, params: SearchParams, search_key: str) -> SearchResult | None:
        records = self._directory.search_by_location(params.location)
        hotels = apply_filters([record_to_hotel(r) for r in records], params.filters)
        if not hotels:
            logger.warning("Directory fallback found nothing for %s", search_key)
            return None

        logger.info("Serving %d hotels for %s from directory fallback", len(hotels), search_key)
        return SearchResult(hotels=hotels, total=len(hotels), source=ResultSource.fallback)

    def _persist_hotels(self, hotels: list[Hotel]) -> None:
        for hotel in hotels:
            try:
                self._directory.upsert(hotel)
            except Exception:
                logger.exception("Failed to save hotel %s to directory", hotel.id)

    # --- Single hotel ---

    async def get_hotel_by_id(self, hotel_id: str) -> Hotel:
        record = self._directory.get(hotel_id)
        if record is not None:
            return record_to_hotel(record)

        hotel = await self._inventory.get_by_id(hotel_id)
        if hotel is None:
            raise HotelNotFoundError(hotel_id)

        if hotel.id is None:
            hotel.id = hotel_id
        self._persist_hotels([hotel])
        return hotel

    async def get_hotels_by_ids(self, hotel_ids: list[str]) -> BatchResult:
        hotels: list[Hotel] = []
        errors: list[BatchError] = []
        for hotel_id in hotel_ids:
            try:
                hotels.append(await self.get_hotel_by_id(hotel_id))
            except Exception as exc:
                logger.warning("Batch lookup failed for hotel %s: %s", hotel_id, exc)
                errors.append(BatchError(hotel_id=hotel_id, reason=str(exc)))

        return BatchResult(
            hotels=hotels,
            requested=len(hotel_ids),
            found=len(hotels),
            errors=errors,
        )

    async def check_availability(
        self,
        hotel_id: str,
        check_in: date,
        check_out: date,
        rooms: int = 1,
        guests: int = 1,
    ) -> Availability:
        return await self._inventory.check_availability(
            hotel_id, check_in, check_out, rooms=rooms, guests=guests
        )

    # --- Verification ---

    async def search_hotel_by_name(self, hotel_name: str, params: SearchParams) -> NameMatch:
        result = await self.search_hotels(params)
        return match_hotel_name(hotel_name, result.hotels)

    async def get_alternative_hotels(self, criteria: AlternativesCriteria) -> list[Hotel]:
        """Ranked by 0.7 * stars + 0.3 * review score; ties keep search order."""
        result = await self.search_hotels(
            SearchParams(
                location=criteria.location,
                check_in=criteria.check_in,
                check_out=criteria.check_out,
                rooms=criteria.rooms,
                guests=criteria.guests,
            )
        )

        original_name = _norm(criteria.original_hotel_name)
        excluded = set(criteria.exclude_hotel_ids)
        if criteria.original_hotel_id:
            excluded.add(criteria.original_hotel_id)

        candidates = [
            h for h in result.hotels
            if _norm(h.name) != original_name and h.id not in excluded
        ]
        if criteria.star_rating:
            candidates = [
                h for h in candidates
                if h.star_rating is not None
                and abs(h.star_rating - criteria.star_rating) <= STAR_TOLERANCE
            ]
        if criteria.price_min is not None or criteria.price_max is not None:
            low = criteria.price_min if criteria.price_min is not None else 0
            high = criteria.price_max if criteria.price_max is not None else float("inf")
            candidates = [
                h for h in candidates
                if _price_amount(h) is not None and low <= _price_amount(h) <= high
            ]

        alternatives = sorted(candidates, key=_alternative_score, reverse=True)[: criteria.limit]

        if len(alternatives) < criteria.limit and criteria.original_hotel_id:
            alternatives += self._directory_alternatives(criteria, alternatives, excluded)

        return alternatives

    def _directory_alternatives(
        self,
        criteria: AlternativesCriteria,
        already: list[Hotel],
        excluded: set[str],
    ) -> list[Hotel]:
        original = self._directory.get(criteria.original_hotel_id)
        if original is None:
            return []

        seen = {h.id for h in already} | excluded
        extra = []
        for record in self._directory.find_alternatives(
            original,
            price_min=criteria.price_min,
            price_max=criteria.price_max,
            limit=criteria.limit,
        ):
            if record.hotel_id in seen:
                continue
            extra.append(record_to_hotel(record))
            if len(already) + len(extra) >= criteria.limit:
                break
        return extra

    async def verify_recommended_hotels(
        self,
        hotels: list[RecommendedHotel],
        context: TripContext,
    ) -> VerificationResponse:
        """Check each recommended hotel against live search results.

        Hotels are processed one at a time and a failure on one is recorded as
        unavailable without stopping the rest.
        """
        response = VerificationResponse()

        for recommended in hotels:
            try:
                params = self._params_for(recommended, context)
                match = await self.search_hotel_by_name(recommended.name, params)

                if match.found and match.hotel is not None:
                    self._record_verification(recommended.name, match)
                    response.verified.append(
                        VerifiedHotel(
                            original=recommended,
                            verified=match.hotel,
                            confidence=match.confidence,
                        )
                    )
                    continue

                alternatives = await self.get_alternative_hotels(
                    AlternativesCriteria(
                        original_hotel_name=recommended.name,
                        location=params.location,
                        check_in=params.check_in,
                        check_out=params.check_out,
                        rooms=params.rooms,
                        guests=params.guests,
                        star_rating=recommended.star_rating,
                        limit=self._alternatives_limit,
                    )
                )
                if alternatives:
                    response.alternatives.append(
                        HotelWithAlternatives(original=recommended, alternatives=alternatives)
                    )
                else:
                    response.unavailable.append(
                        UnavailableHotel(
                            original=recommended, reason="No suitable alternatives found"
                        )
                    )
            except Exception as exc:
                logger.exception("Error verifying hotel %s", recommended.name)
                response.unavailable.append(
                    UnavailableHotel(original=recommended, reason=str(exc))
                )

        logger.info(
            "Verified %d hotels: %d verified, %d with alternatives, %d unavailable",
            len(hotels),
            len(response.verified),
            len(response.alternatives),
            len(response.unavailable),
        )
        return response

    @staticmethod
    def _params_for(recommended: RecommendedHotel, context: TripContext) -> SearchParams:
        location = recommended.location or context.location
        if not location:
            raise ValueError(f"No location to search for {recommended.name}")
        # A hotel's own check-in means one night unless it also gives check-out
        if recommended.check_in:
            check_in = recommended.check_in
            check_out = recommended.check_out or check_in + timedelta(days=1)
        else:
            check_in = context.check_in
            check_out = recommended.check_out or context.check_out
        return SearchParams(
            location=location,
            check_in=check_in,
            check_out=check_out,
            rooms=context.rooms,
            guests=context.guests,
        )

    def _record_verification(self, query: str, match: NameMatch) -> None:
        if match.hotel is None or not match.hotel.id:
            return
        try:
            self._directory.record_verification(
                match.hotel.id,
                query,
                match.confidence,
                verified=True,
                method=match.method or "fuzzy_match",
            )
        except Exception:
            logger.exception("Failed to record verification for hotel %s", match.hotel.id)
