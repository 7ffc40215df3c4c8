from datetime import date, datetime, timedelta, timezone
from enum import StrEnum

from pydantic import BaseModel, Field

from app.schemas.hotel import Hotel


class SearchFilters(BaseModel):
    min_rating: float | None = None
    max_price: float | None = None
    hotel_chain: str | None = None
    amenities: list[str] = []


class SearchParams(BaseModel):
    location: str
    check_in: date
    check_out: date
    rooms: int = 1
    guests: int = 1
    filters: SearchFilters | None = None


class CachedResults(BaseModel):
    hotels: list[Hotel] = []
    total_results: int = 0
    search_timestamp: datetime


class CacheStatus(StrEnum):
    active = "active"
    expired = "expired"
    invalid = "invalid"


class CacheMetadata(BaseModel):
    source: str = "inventory_api"
    response_time_ms: int = 0
    hit_count: int = 0
    last_accessed: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class CacheEntry(BaseModel):
    search_key: str
    search_params: SearchParams
    results: CachedResults
    metadata: CacheMetadata = Field(default_factory=CacheMetadata)
    expires_at: datetime
    is_expired: bool = False
    status: CacheStatus = CacheStatus.active
    created_at: datetime
    updated_at: datetime

    def is_valid(self, now: datetime | None = None) -> bool:
        now = now or datetime.now(timezone.utc)
        return (
            self.status == CacheStatus.active
            and not self.is_expired
            and now < self.expires_at
            and self.search_params.check_out >= now.date()
        )

    def needs_refresh(self, threshold_hours: int = 1, now: datetime | None = None) -> bool:
        """Advisory staleness signal. Nothing refreshes entries automatically."""
        cutoff = (now or datetime.now(timezone.utc)) - timedelta(hours=threshold_hours)
        return self.metadata.last_accessed < cutoff or self.updated_at < cutoff


class CacheStatusBreakdown(BaseModel):
    status: CacheStatus
    count: int
    total_hits: int
    avg_hit_count: float


class CacheStats(BaseModel):
    total_entries: int
    overall_hits: int
    needs_refresh: int
    status_breakdown: list[CacheStatusBreakdown] = []
