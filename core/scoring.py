# =============================================================================
# core/scoring.py  -  Date Scorer / Recommender
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Takes date-aligned weather and crowd series for one attraction and turns
#   them into a RecommendationSet: every date scored 0-100 with a breakdown,
#   badges and reasons, ranked best-first, plus a few summary insights.
#
# THE SCORE (100 pts):
#
#   weather  40  temperature 20  full inside 26-30 °C, -3 per degree outside
#                precipitation 15  <20% 15, <40% 10, <60% 5, else 0
#                condition  5  clear/sunny 5, partly-cloudy 3
#   crowd    35  <40% capacity 35, 40-60% 25, above 60% 10
#   price    15  below base price 15, at base 10, above base 5
#   events   10  from an EventCalendar; 0 without event data
#
#   Price and events come from named, swappable policies (PricingPolicy,
#   EventCalendar) rather than inline constants.  The default calendar has
#   no events, so the events component is 0 until real event data exists.
#
# This is the deterministic path.  The LLM oracle in agent/oracle.py
# produces the same RecommendationSet shape and falls back to this module.
# =============================================================================

from datetime import date
from typing import Mapping, Optional, Protocol, Sequence

from core.attractions import format_price
from core.crowds import LOW, crowd_level_text
from core.dates import day_of_week, format_short_date
from core.errors import DataMismatch
from core.models import (
    CROWD_MAX,
    EVENTS_MAX,
    PRICE_MAX,
    WEATHER_MAX,
    Attraction,
    CrowdDay,
    Insight,
    PricingInfo,
    RecommendationSet,
    RecommendedDate,
    ScoreBreakdown,
    VisitPreferences,
    WeatherDay,
    rank_key,
)
from core.weather import normalize_condition

IDEAL_TEMP_MIN = 26
IDEAL_TEMP_MAX = 30
TEMPERATURE_POINTS = 20
TEMPERATURE_PENALTY_PER_DEGREE = 3
CONDITION_BONUS = {"clear": 5, "sunny": 5, "partly-cloudy": 3}

BEST_WEATHER_THRESHOLD = 35
GOOD_CROWD_THRESHOLD = 25
RAIN_RISK_PRECIPITATION = 60
MAX_REASONS = 3


# =============================================================================
# Component scores
# =============================================================================
def temperature_points(temperature: float) -> int:
    if IDEAL_TEMP_MIN <= temperature <= IDEAL_TEMP_MAX:
        return TEMPERATURE_POINTS
    if temperature < IDEAL_TEMP_MIN:
        deviation = IDEAL_TEMP_MIN - temperature
    else:
        deviation = temperature - IDEAL_TEMP_MAX
    return max(0, round(TEMPERATURE_POINTS - TEMPERATURE_PENALTY_PER_DEGREE * deviation))


def precipitation_points(precipitation: float) -> int:
    if precipitation < 20:
        return 15
    if precipitation < 40:
        return 10
    if precipitation < 60:
        return 5
    return 0


def weather_points(weather: WeatherDay) -> int:
    """0..40 for a single day's forecast."""
    points = (
        temperature_points(weather.temperature)
        + precipitation_points(weather.precipitation)
        + CONDITION_BONUS.get(normalize_condition(weather.condition), 0)
    )
    return max(0, min(WEATHER_MAX, points))


def crowd_points(capacity_percentage: int) -> int:
    """0..35; never increases as the capacity percentage rises."""
    if capacity_percentage < 40:
        return CROWD_MAX
    if capacity_percentage <= 60:
        return 25
    return 10


# =============================================================================
# Pricing policy
# =============================================================================
class PricingPolicy(Protocol):
    def quote(self, attraction: Attraction, crowd: CrowdDay) -> PricingInfo: ...


class DynamicPricingPolicy:
    """Weekend premium, weekday discount on quiet days, base price otherwise."""

    def __init__(self, discount: float = 0.9, premium: float = 1.1,
                 discount_below_percentage: int = 40):
        self.discount = discount
        self.premium = premium
        self.discount_below_percentage = discount_below_percentage

    def quote(self, attraction: Attraction, crowd: CrowdDay) -> PricingInfo:
        base = attraction.base_price
        if base <= 0:
            return PricingInfo(dynamic_price=0, reason="Free entry")
        if crowd.date.weekday() >= 5:
            return PricingInfo(dynamic_price=round(base * self.premium), reason="Weekend premium")
        if crowd.capacity_percentage < self.discount_below_percentage:
            return PricingInfo(dynamic_price=round(base * self.discount), reason="Weekday discount")
        return PricingInfo(dynamic_price=base, reason="Standard pricing")


class FlatPricingPolicy:
    """Always the base price."""

    def quote(self, attraction: Attraction, crowd: CrowdDay) -> PricingInfo:
        if attraction.base_price <= 0:
            return PricingInfo(dynamic_price=0, reason="Free entry")
        return PricingInfo(dynamic_price=attraction.base_price, reason="Standard pricing")


def price_points(pricing: PricingInfo, base_price: int) -> int:
    """0..15: discounted or free 15, at base 10, above base 5."""
    if pricing.dynamic_price <= 0 or pricing.dynamic_price < base_price:
        return PRICE_MAX
    if pricing.dynamic_price == base_price:
        return 10
    return 5


# =============================================================================
# Events extension point
# =============================================================================
class EventCalendar:
    """Special events per date.  Any event on a date earns the events points."""

    def __init__(self, events: Optional[Mapping[date, Sequence[str]]] = None,
                 points_per_event_day: int = EVENTS_MAX):
        self._events = {d: list(names) for d, names in (events or {}).items()}
        self.points_per_event_day = max(0, min(EVENTS_MAX, points_per_event_day))

    def events_on(self, d: date) -> list[str]:
        return list(self._events.get(d, []))

    def points(self, d: date) -> int:
        return self.points_per_event_day if self._events.get(d) else 0


NO_EVENTS = EventCalendar()


# =============================================================================
# Badges & reasons
# =============================================================================
def badges_for(breakdown: ScoreBreakdown) -> list[str]:
    badges = []
    if breakdown.weather >= BEST_WEATHER_THRESHOLD:
        badges.append("Best Weather")
    if breakdown.crowd >= GOOD_CROWD_THRESHOLD:
        badges.append("Good Crowd")
    if breakdown.price >= PRICE_MAX:
        badges.append("Best Value")
    if breakdown.events > 0:
        badges.append("Special Event")
    return badges


def _weather_reason(weather: WeatherDay) -> str:
    condition = normalize_condition(weather.condition).replace("-", " ")
    t, p = weather.temperature, weather.precipitation
    if IDEAL_TEMP_MIN <= t <= IDEAL_TEMP_MAX and p < 20:
        return f"Ideal weather: {t}°C and {condition} with only {p}% chance of rain."
    if t < IDEAL_TEMP_MIN:
        feel = "slightly cooler than ideal" if t >= IDEAL_TEMP_MIN - 3 else "cool"
    elif t > IDEAL_TEMP_MAX:
        feel = "slightly warmer than ideal" if t <= IDEAL_TEMP_MAX + 3 else "hot"
    else:
        feel = "comfortable"
    return f"{t}°C ({feel}), {condition}, {p}% chance of rain."


def _crowd_reason(crowd: CrowdDay) -> str:
    return (
        f"{crowd_level_text(crowd.level)}: about {crowd.expected_visitors:,} visitors "
        f"({crowd.capacity_percentage}% of capacity)."
    )


def _price_reason(pricing: PricingInfo, currency: str) -> str:
    if pricing.dynamic_price <= 0:
        return "Free entry."
    return f"{pricing.reason}: {format_price(pricing.dynamic_price, currency)} per ticket."


def _share(breakdown: ScoreBreakdown, component: str) -> float:
    return getattr(breakdown, component) / ScoreBreakdown.maximum(component)


def is_closed(attraction: Attraction, d: date) -> bool:
    """True when the catalog lists the attraction as closed on that weekday."""
    return attraction.hours_on(day_of_week(d)) == "Closed"


def reasons_for(
    breakdown: ScoreBreakdown,
    weather: WeatherDay,
    crowd: CrowdDay,
    pricing: PricingInfo,
    attraction: Attraction,
    preferences: VisitPreferences,
    event_names: Sequence[str] = (),
) -> list[str]:
    """Up to three sentences for the components that carried the score."""
    crowd_text = _crowd_reason(crowd)
    candidates = [
        (_share(breakdown, "weather"), _weather_reason(weather)),
        (_share(breakdown, "crowd"), crowd_text),
        (_share(breakdown, "price"), _price_reason(pricing, attraction.currency)),
    ]
    if breakdown.events > 0 and event_names:
        candidates.append(
            (_share(breakdown, "events"), f"Special events: {', '.join(event_names)}.")
        )

    # sorted() is stable, so equal shares keep weather > crowd > price order.
    ranked = sorted(candidates, key=lambda c: c[0], reverse=True)
    reasons = [text for share, text in ranked if share >= 0.5][:MAX_REASONS]
    if not reasons:
        reasons = [ranked[0][1]]

    if preferences.avoid_crowds and crowd_text not in reasons and len(reasons) < MAX_REASONS:
        reasons.append(crowd_text)

    if is_closed(attraction, crowd.date):
        closed_text = f"{attraction.name} is closed on {day_of_week(crowd.date)}s."
        reasons = [closed_text] + reasons[: MAX_REASONS - 1]
    return reasons


# =============================================================================
# PUBLIC API
# =============================================================================
def score_date(
    attraction: Attraction,
    weather: WeatherDay,
    crowd: CrowdDay,
    preferences: Optional[VisitPreferences] = None,
    *,
    pricing_policy: Optional[PricingPolicy] = None,
    events: Optional[EventCalendar] = None,
) -> RecommendedDate:
    """Score one date.  `weather` and `crowd` must describe the same date."""
    if weather.date != crowd.date:
        raise DataMismatch(
            f"weather is for {weather.date.isoformat()} but crowd is for {crowd.date.isoformat()}"
        )
    preferences = preferences or VisitPreferences()
    pricing_policy = pricing_policy or DynamicPricingPolicy()
    events = events or NO_EVENTS

    pricing = pricing_policy.quote(attraction, crowd)
    breakdown = ScoreBreakdown(
        weather=weather_points(weather),
        crowd=crowd_points(crowd.capacity_percentage),
        price=price_points(pricing, attraction.base_price),
        events=events.points(crowd.date),
    )
    return RecommendedDate(
        date=crowd.date,
        day_of_week=day_of_week(crowd.date),
        score=breakdown.total,
        breakdown=breakdown,
        weather=weather,
        crowd=crowd,
        pricing=pricing,
        reasons=reasons_for(breakdown, weather, crowd, pricing, attraction,
                            preferences, events.events_on(crowd.date)),
        badges=badges_for(breakdown),
    )


def align_series(
    weather_days: Sequence[WeatherDay], crowd_days: Sequence[CrowdDay]
) -> list[tuple[WeatherDay, CrowdDay]]:
    """Pair weather and crowd records by date, in date order.

    Raises:
        DataMismatch: a date repeats within a series, or appears in only one.
    """
    weather_by_date = {w.date: w for w in weather_days}
    crowd_by_date = {c.date: c for c in crowd_days}
    if len(weather_by_date) != len(weather_days):
        raise DataMismatch("weather forecast contains duplicate dates")
    if len(crowd_by_date) != len(crowd_days):
        raise DataMismatch("crowd forecast contains duplicate dates")

    weather_only = sorted(weather_by_date.keys() - crowd_by_date.keys())
    crowd_only = sorted(crowd_by_date.keys() - weather_by_date.keys())
    if weather_only or crowd_only:
        raise DataMismatch(
            "weather and crowd forecasts cover different dates "
            f"(weather only: {[d.isoformat() for d in weather_only]}, "
            f"crowd only: {[d.isoformat() for d in crowd_only]})"
        )
    return [(weather_by_date[d], crowd_by_date[d]) for d in sorted(weather_by_date)]


def score_dates(
    attraction: Attraction,
    weather_days: Sequence[WeatherDay],
    crowd_days: Sequence[CrowdDay],
    preferences: Optional[VisitPreferences] = None,
    *,
    pricing_policy: Optional[PricingPolicy] = None,
    events: Optional[EventCalendar] = None,
) -> RecommendationSet:
    """Score and rank every date (score descending, earliest date first on ties)."""
    preferences = preferences or VisitPreferences()
    scored = [
        score_date(attraction, w, c, preferences,
                   pricing_policy=pricing_policy, events=events)
        for w, c in align_series(weather_days, crowd_days)
    ]
    scored.sort(key=rank_key)
    return RecommendationSet(
        recommended_dates=scored,
        insights=generate_insights(scored, preferences, attraction),
        source="deterministic",
    )


# =============================================================================
# Insights
# =============================================================================
def _date_list(dates: Sequence[date]) -> str:
    return ", ".join(f"{day_of_week(d, short=True)} {format_short_date(d)}" for d in dates)


def generate_insights(
    ranked: Sequence[RecommendedDate],
    preferences: Optional[VisitPreferences] = None,
    attraction: Optional[Attraction] = None,
) -> list[Insight]:
    """Summary observations over a ranked list; empty when nothing stands out."""
    preferences = preferences or VisitPreferences()
    insights: list[Insight] = []
    if not ranked:
        return insights

    top = list(ranked[:3])
    if len(top) >= 2:
        weekend_flags = {r.date.weekday() >= 5 for r in top}
        names = ", ".join(r.day_of_week for r in top)
        if weekend_flags == {False}:
            insights.append(Insight(
                type="tip",
                title="Best Time to Visit",
                message=(
                    f"Weekdays come out on top ({names}). Expect lighter crowds and "
                    f"standard or discounted tickets compared to the weekend."
                ),
            ))
        elif weekend_flags == {True}:
            insights.append(Insight(
                type="tip",
                title="Best Time to Visit",
                message=(
                    f"The weekend scores best this time ({names}), mostly on weather. "
                    f"Arrive at opening to beat the peak hours."
                ),
            ))

    rainy = sorted(r.date for r in ranked if r.weather.precipitation >= RAIN_RISK_PRECIPITATION)
    if rainy:
        insights.append(Insight(
            type="warning",
            title="Rain Risk",
            message=f"Rain is likely on {_date_list(rainy)}. Plan indoor time or pick another day.",
        ))

    holidays = sorted(
        r.date for r in ranked
        if any(f.startswith("Public holiday") for f in r.crowd.factors)
    )
    if holidays:
        insights.append(Insight(
            type="info",
            title="Holiday Crowds",
            message=f"Public holidays on {_date_list(holidays)} bring much larger crowds.",
        ))

    if preferences.avoid_crowds:
        quiet = sorted(r.date for r in ranked if r.crowd.level == LOW)
        if quiet:
            insights.append(Insight(
                type="tip",
                title="Crowd-Free Window",
                message=f"For the smallest crowds go on {_date_list(quiet)}.",
            ))

    if attraction is not None:
        closed = sorted(r.date for r in ranked if is_closed(attraction, r.date))
        if closed:
            insights.append(Insight(
                type="warning",
                title="Closed Days",
                message=f"{attraction.name} is closed on {_date_list(closed)}.",
            ))

    return insights
