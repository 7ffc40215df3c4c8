import re

from app.schemas.directory import Amenity, AmenityCategory

_CATEGORY_KEYWORDS: list[tuple[AmenityCategory, tuple[str, ...]]] = [
    (AmenityCategory.connectivity, ("wifi", "wi-fi", "internet", "wireless")),
    (AmenityCategory.transportation, ("parking", "shuttle", "charging", "ev", "garage", "car rental")),
    (AmenityCategory.food_drink, ("restaurant", "bar", "breakfast", "cafe", "minibar", "kitchen")),
    (AmenityCategory.activities, ("pool", "gym", "fitness", "spa", "sauna", "tennis", "golf")),
    (AmenityCategory.business, ("business", "meeting", "conference")),
    (
        AmenityCategory.accessibility,
        ("wheelchair", "accessible", "barrier-free", "step-free", "elevator", "lift"),
    ),
    (AmenityCategory.services, ("laundry", "room service", "concierge", "reception", "housekeeping")),
]

# Whole words only, plural allowed: "bar" must not match "barrier"
_CATEGORY_PATTERNS = [
    (
        category,
        re.compile(r"\b(?:" + "|".join(re.escape(k) for k in keywords) + r")(?:s|es)?\b"),
    )
    for category, keywords in _CATEGORY_KEYWORDS
]


def categorize_amenity(name: str) -> AmenityCategory:
    text = name.lower()
    for category, pattern in _CATEGORY_PATTERNS:
        if pattern.search(text):
            return category
    return AmenityCategory.general


def map_amenities(names: list[str]) -> list[Amenity]:
    """Turn inventory amenity strings into categorized, de-duplicated amenities."""
    seen: set[str] = set()
    amenities: list[Amenity] = []
    for raw in names:
        name = raw.strip()
        if not name or name.lower() in seen:
            continue
        seen.add(name.lower())
        amenities.append(Amenity(name=name, category=categorize_amenity(name)))
    return amenities
