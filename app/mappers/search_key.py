import re
from datetime import date, datetime

from app.schemas.cache import SearchFilters

_WHITESPACE_RE = re.compile(r"\s+")


def _day(value: date | datetime) -> str:
    if isinstance(value, datetime):
        value = value.date()
    return value.isoformat()


def _number(value: float) -> str:
    # 4.0 and 4 must produce the same key
    return str(int(value)) if float(value).is_integer() else str(value)


def normalize_location(location: str) -> str:
    return _WHITESPACE_RE.sub("-", location.strip().lower())


def build_search_key(
    location: str,
    check_in: date | datetime,
    check_out: date | datetime,
    rooms: int = 1,
    guests: int = 1,
    filters: SearchFilters | None = None,
) -> str:
    """Deterministic cache key for one search.

    Example: ``paris_2025-06-01_2025-06-03_r1_g2_minr4_amenspa,wifi``.
    """
    parts = [
        normalize_location(location),
        _day(check_in),
        _day(check_out),
        f"r{rooms or 1}",
        f"g{guests or 1}",
    ]

    if filters:
        if filters.min_rating:
            parts.append(f"minr{_number(filters.min_rating)}")
        if filters.max_price:
            parts.append(f"maxp{_number(filters.max_price)}")
        if filters.hotel_chain and filters.hotel_chain.strip():
            parts.append(f"chain{normalize_location(filters.hotel_chain)}")
        amenities = sorted({normalize_location(a) for a in filters.amenities if a.strip()})
        if amenities:
            parts.append(f"amen{','.join(amenities)}")

    return "_".join(parts)
