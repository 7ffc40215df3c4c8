from __future__ import annotations

import logging
from collections import defaultdict
from datetime import datetime, timedelta, timezone

from app.mappers.search_key import build_search_key
from app.schemas.cache import (
    CachedResults,
    CacheEntry,
    CacheMetadata,
    CacheStats,
    CacheStatus,
    CacheStatusBreakdown,
    SearchParams,
)
from app.schemas.hotel import Hotel

logger = logging.getLogger(__name__)

DEFAULT_TTL_HOURS = 2


def _now() -> datetime:
    return datetime.now(timezone.utc)


def search_key_for(params: SearchParams) -> str:
    return build_search_key(
        params.location,
        params.check_in,
        params.check_out,
        rooms=params.rooms,
        guests=params.guests,
        filters=params.filters,
    )


class SearchCache:
    """Search results keyed by search signature, expiring on time only."""

    def __init__(
        self,
        ttl_hours: int = DEFAULT_TTL_HOURS,
        refresh_threshold_hours: int = 1,
    ) -> None:
        self._entries: dict[str, CacheEntry] = {}
        self._ttl_hours = ttl_hours
        self._refresh_threshold_hours = refresh_threshold_hours

    def __len__(self) -> int:
        return len(self._entries)

    def lookup(self, search_key: str) -> CacheEntry | None:
        entry = self._entries.get(search_key)
        if entry is None or not entry.is_valid(_now()):
            return None
        return entry

    def lookup_params(self, params: SearchParams) -> CacheEntry | None:
        return self.lookup(search_key_for(params))

    def store(
        self,
        params: SearchParams,
        hotels: list[Hotel],
        total_results: int | None = None,
        ttl_hours: int | None = None,
        response_time_ms: int = 0,
    ) -> CacheEntry:
        """Upsert the results for ``params``.

        The write itself counts as a hit, so a fresh entry starts at
        ``hit_count == 1``.
        """
        now = _now()
        search_key = search_key_for(params)
        ttl = self._ttl_hours if ttl_hours is None else ttl_hours
        existing = self._entries.get(search_key)

        hit_count = existing.metadata.hit_count + 1 if existing else 1
        entry = CacheEntry(
            search_key=search_key,
            search_params=params,
            results=CachedResults(
                hotels=hotels,
                total_results=len(hotels) if total_results is None else total_results,
                search_timestamp=now,
            ),
            metadata=CacheMetadata(
                response_time_ms=response_time_ms,
                hit_count=hit_count,
                last_accessed=now,
            ),
            expires_at=now + timedelta(hours=ttl),
            created_at=existing.created_at if existing else now,
            updated_at=now,
        )

        if params.check_out < now.date():
            logger.debug("Search %s is past-dated, storing as expired", search_key)
            entry.status = CacheStatus.expired
            entry.is_expired = True

        self._entries[search_key] = entry
        logger.info("Cached %d hotels under %s", len(hotels), search_key)
        return entry

    def record_hit(self, entry: CacheEntry) -> None:
        entry.metadata.hit_count += 1
        entry.metadata.last_accessed = _now()

    def purge_expired(self) -> int:
        now = _now()
        expired = [
            key
            for key, entry in self._entries.items()
            if entry.expires_at < now
            or entry.status == CacheStatus.expired
            or entry.is_expired
        ]
        for key in expired:
            del self._entries[key]
        if expired:
            logger.info("Purged %d expired cache entries", len(expired))
        return len(expired)

    def stats(self) -> CacheStats:
        now = _now()
        by_status: dict[CacheStatus, list[CacheEntry]] = defaultdict(list)
        for entry in self._entries.values():
            by_status[entry.status].append(entry)

        breakdown = []
        for status, entries in by_status.items():
            hits = sum(e.metadata.hit_count for e in entries)
            breakdown.append(
                CacheStatusBreakdown(
                    status=status,
                    count=len(entries),
                    total_hits=hits,
                    avg_hit_count=hits / len(entries),
                )
            )

        return CacheStats(
            total_entries=len(self._entries),
            overall_hits=sum(b.total_hits for b in breakdown),
            needs_refresh=sum(
                1
                for e in self._entries.values()
                if e.needs_refresh(self._refresh_threshold_hours, now)
            ),
            status_breakdown=breakdown,
        )
