# =============================================================================
# core/attractions.py  -  Attraction Catalog
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Holds the static catalog of attractions the advisor can plan visits for,
#   the lookups the tool layer exposes (by id, by search text, by
#   category) and a similarity ranking for suggesting alternatives.
#
# In a real deployment this would be a database table.  The interface
# (get_attraction(id) -> Attraction | None) is what the rest of the system
# depends on, so swapping the storage only touches this module.
#
# Lookups are pure reads: calling them repeatedly returns the same records,
# which makes them safe for the agent to retry.
# =============================================================================

from typing import Optional

from core.models import AlternativeAttraction, Attraction

_WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday")


def _hours(weekday: str, weekend: str, monday: Optional[str] = None,
           friday: Optional[str] = None) -> tuple[tuple[str, str], ...]:
    """Build an open_hours table from the common weekday/weekend split."""
    table = {day: weekday for day in _WEEKDAYS}
    if monday is not None:
        table["monday"] = monday
    if friday is not None:
        table["friday"] = friday
    table["saturday"] = weekend
    table["sunday"] = weekend
    return tuple(table.items())


# -----------------------------------------------------------------------------
# Catalog (Jakarta)
# -----------------------------------------------------------------------------
# Capacities vary over more than an order of magnitude (3,000 for a small
# museum to 100,000 for a beach park) so the crowd forecaster gets very
# different absolute numbers for the same relative pattern.
# -----------------------------------------------------------------------------
_CATALOG: tuple[Attraction, ...] = (
    Attraction(
        id="attr_001", name="Dufan (Dunia Fantasi)", category="theme_park",
        city="Jakarta", latitude=-6.1247, longitude=106.8420,
        capacity=25000, base_price=200000, rating=4.3,
        description="Jakarta's largest theme park with rides, family attractions and shows at Ancol",
        tags=("family-friendly", "outdoor", "entertainment", "rides", "waterfront"),
        open_hours=_hours("10:00-18:00", "09:00-20:00", friday="10:00-20:00"),
    ),
    Attraction(
        id="attr_002", name="Taman Mini Indonesia Indah (TMII)", category="cultural",
        city="Jakarta", latitude=-6.3025, longitude=106.8953,
        capacity=30000, base_price=25000, rating=4.4,
        description="Cultural park with pavilions representing every province, museums and gardens",
        tags=("cultural", "educational", "outdoor", "family-friendly", "museum"),
        open_hours=_hours("07:00-22:00", "07:00-22:00"),
    ),
    Attraction(
        id="attr_003", name="Jakarta Aquarium & Safari", category="aquarium",
        city="Jakarta", latitude=-6.2254, longitude=106.8209,
        capacity=8000, base_price=150000, rating=4.5,
        description="Modern aquarium with diverse marine life and interactive exhibits",
        tags=("family-friendly", "indoor", "educational", "marine-life", "interactive"),
        open_hours=_hours("10:00-20:00", "09:00-21:00", friday="10:00-21:00"),
    ),
    Attraction(
        id="attr_004", name="Ragunan Zoo", category="nature",
        city="Jakarta", latitude=-6.3106, longitude=106.8201,
        capacity=35000, base_price=5000, rating=4.2,
        description="One of the oldest and largest zoos in Southeast Asia",
        tags=("family-friendly", "outdoor", "nature", "educational", "wildlife"),
        open_hours=_hours("06:00-16:00", "06:00-16:30", monday="Closed"),
    ),
    Attraction(
        id="attr_005", name="Museum Nasional Indonesia", category="museum",
        city="Jakarta", latitude=-6.1762, longitude=106.8227,
        capacity=5000, base_price=10000, rating=4.6,
        description="National museum of Indonesian history, art and archaeology",
        tags=("cultural", "educational", "indoor", "history", "art"),
        open_hours=_hours("08:00-16:00", "08:00-16:00", monday="Closed"),
    ),
    Attraction(
        id="attr_006", name="Trans Studio Cibubur", category="theme_park",
        city="Jakarta", latitude=-6.3716, longitude=106.8945,
        capacity=18000, base_price=175000, rating=4.4,
        description="Indoor theme park with rides and entertainment zones for all ages",
        tags=("family-friendly", "indoor", "entertainment", "rides", "climate-controlled"),
        open_hours=_hours("10:00-18:00", "09:00-20:00"),
    ),
    Attraction(
        id="attr_007", name="Kota Tua Jakarta", category="cultural",
        city="Jakarta", latitude=-6.1351, longitude=106.8133,
        capacity=50000, base_price=0, rating=4.3,
        description="Historic old town with colonial architecture, museums and cafes",
        tags=("cultural", "outdoor", "history", "photography", "architecture"),
        open_hours=_hours("07:00-22:00", "07:00-23:00"),
    ),
    Attraction(
        id="attr_008", name="Waterbom Jakarta", category="theme_park",
        city="Jakarta", latitude=-6.2346, longitude=106.8042,
        capacity=15000, base_price=250000, rating=4.5,
        description="Water park with slides, a lazy river and family pools",
        tags=("family-friendly", "outdoor", "water-park", "summer", "slides"),
        open_hours=_hours("10:00-18:00", "09:00-19:00"),
    ),
    Attraction(
        id="attr_009", name="Kidzania Jakarta", category="entertainment",
        city="Jakarta", latitude=-6.2254, longitude=106.8209,
        capacity=5000, base_price=150000, rating=4.7,
        description="Edutainment center where children role-play professions in a mini city",
        tags=("family-friendly", "indoor", "educational", "children", "interactive"),
        open_hours=_hours("09:00-19:00", "09:00-20:00"),
    ),
    Attraction(
        id="attr_010", name="Sea World Ancol", category="aquarium",
        city="Jakarta", latitude=-6.1237, longitude=106.8485,
        capacity=10000, base_price=120000, rating=4.4,
        description="Oceanarium with an underwater tunnel and Indonesian marine species",
        tags=("family-friendly", "indoor", "educational", "marine-life", "aquarium"),
        open_hours=_hours("09:00-18:00", "09:00-18:00"),
    ),
    Attraction(
        id="attr_011", name="Museum Macan", category="museum",
        city="Jakarta", latitude=-6.1701, longitude=106.7950,
        capacity=3000, base_price=100000, rating=4.8,
        description="Modern and contemporary art museum with rotating exhibitions",
        tags=("cultural", "indoor", "art", "modern", "photography"),
        open_hours=_hours("10:00-18:00", "10:00-20:00", monday="Closed"),
    ),
    Attraction(
        id="attr_012", name="Taman Impian Jaya Ancol", category="entertainment",
        city="Jakarta", latitude=-6.1239, longitude=106.8396,
        capacity=100000, base_price=25000, rating=4.2,
        description="Beachfront recreation area with attractions and restaurants by the sea",
        tags=("family-friendly", "outdoor", "beach", "entertainment", "waterfront"),
        open_hours=_hours("06:00-18:00", "06:00-18:00"),
    ),
)

_BY_ID: dict[str, Attraction] = {a.id: a for a in _CATALOG}


def get_attraction(attraction_id: str) -> Attraction | None:
    """Look up an attraction by id ("attr_001"); case-insensitive."""
    return _BY_ID.get(attraction_id.strip().lower())


def list_attractions() -> list[Attraction]:
    return list(_CATALOG)


def search_attractions(query: str) -> list[Attraction]:
    """Match the query against names, descriptions and tags."""
    needle = query.strip().lower()
    if not needle:
        return list_attractions()
    return [
        a for a in _CATALOG
        if needle in a.name.lower()
        or needle in a.description.lower()
        or any(needle in tag for tag in a.tags)
    ]


def attractions_by_category(category: str) -> list[Attraction]:
    return [a for a in _CATALOG if a.category == category]


# -----------------------------------------------------------------------------
# Alternatives
# -----------------------------------------------------------------------------
# Similarity out of 100: 60 for the same category plus up to 40 for tag
# overlap (shared tags / all tags of the pair).
# -----------------------------------------------------------------------------
CATEGORY_SIMILARITY = 60
TAG_SIMILARITY = 40


def similarity(a: Attraction, b: Attraction) -> int:
    score = CATEGORY_SIMILARITY if a.category == b.category else 0
    tags_a, tags_b = set(a.tags), set(b.tags)
    if tags_a or tags_b:
        score += round(TAG_SIMILARITY * len(tags_a & tags_b) / len(tags_a | tags_b))
    return score


def _alternative_reason(current: Attraction, other: Attraction) -> str:
    shared = sorted(set(current.tags) & set(other.tags))
    parts = []
    if other.category == current.category:
        parts.append(f"Another {current.category.replace('_', ' ')}")
    if shared:
        parts.append(f"shares {', '.join(shared)}")
    return (" that ".join(parts) if len(parts) == 2 else parts[0].capitalize()) + "."


def suggest_alternatives(attraction: Attraction, limit: int = 3) -> list[AlternativeAttraction]:
    """Most similar other attractions, best first (ties: higher rating, then id).

    Attractions with nothing in common are never suggested.
    """
    scored = [
        (similarity(attraction, other), other)
        for other in _CATALOG
        if other.id != attraction.id
    ]
    scored = [(score, other) for score, other in scored if score > 0]
    scored.sort(key=lambda pair: (-pair[0], -pair[1].rating, pair[1].id))
    return [
        AlternativeAttraction(
            attraction=other,
            similarity_score=score,
            reason=_alternative_reason(attraction, other),
        )
        for score, other in scored[: max(0, limit)]
    ]


def format_price(price: int, currency: str = "IDR") -> str:
    """'Rp 200.000' for rupiah, '<CUR> 1,234' otherwise."""
    if currency == "IDR":
        return "Rp " + f"{price:,}".replace(",", ".")
    return f"{currency} {price:,}"
