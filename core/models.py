# =============================================================================
# core/models.py  -  Data Models (the "nouns" of the system)
# =============================================================================
#
# These dataclasses define the shape of every piece of information that
# flows through the advisor:
#
#   Attraction ──► CrowdDay[]      (core/crowds.py)
#   Attraction ──► WeatherDay[]    (core/weather.py)
#   {WeatherDay, CrowdDay, Attraction, VisitPreferences}
#              ──► RecommendationSet (core/scoring.py or the LLM oracle)
#   Attraction ──► AlternativeAttraction[] (core/attractions.py)
#
# All of them are transient: they are computed fresh per request and never
# persisted.  Attraction is the one piece of reference data and is frozen.
#
# DESIGN PRINCIPLE - "No Phantom Fields":
#   If a field exists in a model, something downstream reads it.
# =============================================================================

from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from core.errors import InvalidArgument


# -----------------------------------------------------------------------------
# Attraction - a bookable venue with fixed capacity and pricing
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class Attraction:
    """Static reference data for one venue, loaded from the catalog."""

    id: str                            # "attr_001"
    name: str                          # "Dufan (Dunia Fantasi)"
    category: str                      # theme_park, museum, nature, ...
    city: str                          # "Jakarta"
    capacity: int                      # Max daily visitors, always > 0
    base_price: int                    # Ticket price in `currency`
    currency: str = "IDR"
    country: str = "Indonesia"
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    description: str = ""
    rating: float = 0.0
    tags: tuple[str, ...] = ()
    open_hours: tuple[tuple[str, str], ...] = ()
    # open_hours is a tuple of (weekday, "HH:MM-HH:MM" | "Closed") pairs so
    # the record stays hashable.

    @property
    def location(self) -> str:
        return f"{self.city}, {self.country}"

    def hours_on(self, weekday: str) -> str:
        """Opening hours for a lowercase weekday name, "" when unknown."""
        return dict(self.open_hours).get(weekday.lower(), "")


# -----------------------------------------------------------------------------
# AlternativeAttraction - a similar venue to suggest instead
# -----------------------------------------------------------------------------
@dataclass
class AlternativeAttraction:
    """A catalog attraction ranked by how much it resembles another one."""

    attraction: Attraction
    similarity_score: int              # 0-100
    reason: str


# -----------------------------------------------------------------------------
# WeatherDay - one day of forecast
# -----------------------------------------------------------------------------
@dataclass
class WeatherDay:
    """Daily forecast, already reduced to what the scorer reads."""

    date: date
    temperature: int                   # Daily representative temperature (°C)
    condition: str                     # Normalized slug: "clear", "partly-cloudy", "rain"
    precipitation: int                 # Chance of rain (0-100)


# -----------------------------------------------------------------------------
# CrowdDay - one day of crowd prediction
# -----------------------------------------------------------------------------
@dataclass
class CrowdDay:
    """Predicted attendance for one date at one attraction."""

    date: date
    expected_visitors: int             # May exceed capacity (over-capacity signal)
    capacity_percentage: int           # round(visitors / capacity * 100), clamped to 100
    level: str                         # "low" | "moderate" | "high" | "very-high"
    factors: list[str] = field(default_factory=list)


# -----------------------------------------------------------------------------
# ScoreBreakdown - the four parts of the 0-100 suitability score
# -----------------------------------------------------------------------------
WEATHER_MAX = 40
CROWD_MAX = 35
PRICE_MAX = 15
EVENTS_MAX = 10

_COMPONENT_MAXIMA = {
    "weather": WEATHER_MAX,
    "crowd": CROWD_MAX,
    "price": PRICE_MAX,
    "events": EVENTS_MAX,
}


@dataclass(frozen=True)
class ScoreBreakdown:
    """Per-factor points.  Each component is bounded by its own maximum."""

    weather: int = 0
    crowd: int = 0
    price: int = 0
    events: int = 0

    def __post_init__(self):
        for name, maximum in _COMPONENT_MAXIMA.items():
            value = getattr(self, name)
            if not 0 <= value <= maximum:
                raise InvalidArgument(
                    f"{name} component must be within 0..{maximum}, got {value}"
                )

    @property
    def total(self) -> int:
        return max(0, min(100, self.weather + self.crowd + self.price + self.events))

    @staticmethod
    def maximum(component: str) -> int:
        return _COMPONENT_MAXIMA[component]


@dataclass
class PricingInfo:
    """The synthetic ticket price for a date and the policy that produced it."""

    dynamic_price: int
    reason: str                        # "Weekday discount", "Standard pricing", ...


# -----------------------------------------------------------------------------
# VisitPreferences - what the visitor cares about
# -----------------------------------------------------------------------------
@dataclass
class VisitPreferences:
    """Preferences forwarded to the scorer (reasons/insights) and the oracle."""

    budget_range: str = "medium"       # "low" | "medium" | "high"
    group_size: int = 2
    interests: list[str] = field(default_factory=list)
    avoid_crowds: bool = True


# -----------------------------------------------------------------------------
# RecommendedDate / Insight / RecommendationSet - the deliverable
# -----------------------------------------------------------------------------
@dataclass
class RecommendedDate:
    """One scored candidate date with everything needed to explain it."""

    date: date
    day_of_week: str                   # "Tuesday"
    score: int                         # breakdown.total
    breakdown: ScoreBreakdown
    weather: WeatherDay
    crowd: CrowdDay
    pricing: PricingInfo
    reasons: list[str] = field(default_factory=list)
    badges: list[str] = field(default_factory=list)


@dataclass
class Insight:
    """A summary observation over the whole ranked list."""

    type: str                          # "tip" | "warning" | "info"
    title: str
    message: str


@dataclass
class RecommendationSet:
    """Ranked recommendations: score descending, ties broken by earliest date."""

    recommended_dates: list[RecommendedDate] = field(default_factory=list)
    insights: list[Insight] = field(default_factory=list)
    source: str = "deterministic"      # "deterministic" | "oracle"

    @property
    def best(self) -> Optional[RecommendedDate]:
        """The best choice (index 0), or None for an empty set."""
        return self.recommended_dates[0] if self.recommended_dates else None


def rank_key(recommendation: RecommendedDate) -> tuple[int, date]:
    """Sort key implementing the canonical ordering."""
    return (-recommendation.score, recommendation.date)
