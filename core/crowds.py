# =============================================================================
# core/crowds.py  -  Crowd Forecaster
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Produces a synthetic, calendar-aware crowd forecast for an attraction:
#   one CrowdDay per consecutive date, starting today.
#
# THE HEURISTIC:
#   expected = capacity × 0.5                     baseline: half full
#            × weekday multiplier                  Sat/Sun 1.5, Fri 1.3, Mon 0.85
#            × 1.8 on a public holiday
#            × 1.4 during school holidays          June, July, Dec 15-31
#            × jitter in [0.85, 1.15]
#
#   The weekday sets are disjoint, so at most one weekday multiplier applies.
#   Every adjustment appends a human-readable factor in application order.
#
# RANDOMNESS:
#   The jitter is the only non-deterministic step.  It is drawn from an
#   injected random source (anything with a random() method, normally
#   random.Random(seed)).  The module-level `random` functions are never
#   used, so two forecasts with the same seed are identical.
# =============================================================================

from datetime import date
import math
import random
from typing import Optional, Protocol

from core.dates import DateLike, date_range
from core.errors import InvalidArgument
from core.models import Attraction, CrowdDay


class RandomSource(Protocol):
    def random(self) -> float: ...


BASELINE_RATIO = 0.5
WEEKEND_MULTIPLIER = 1.5
FRIDAY_MULTIPLIER = 1.3
MONDAY_MULTIPLIER = 0.85
HOLIDAY_MULTIPLIER = 1.8
SCHOOL_HOLIDAY_MULTIPLIER = 1.4
JITTER_LOW = 0.85
JITTER_SPAN = 0.30

# Crowd levels, lowest first.  crowd_level() is the only place a level is
# derived, and it reads nothing but the capacity percentage.
LOW = "low"
MODERATE = "moderate"
HIGH = "high"
VERY_HIGH = "very-high"
CROWD_LEVELS = (LOW, MODERATE, HIGH, VERY_HIGH)

# Fixed-date public holidays, keyed by (month, day).
_PUBLIC_HOLIDAYS: dict[tuple[int, int], str] = {
    (1, 1): "New Year's Day",
    (3, 29): "Isra Mi'raj",
    (3, 31): "Nyepi (Day of Silence)",
    (4, 18): "Good Friday",
    (5, 1): "Labour Day",
    (5, 29): "Ascension Day",
    (6, 1): "Pancasila Day",
    (8, 17): "Independence Day",
    (12, 25): "Christmas Day",
}

_CROWD_LEVEL_TEXT = {
    LOW: "Quiet - the best time to visit",
    MODERATE: "Moderately busy - still comfortable",
    HIGH: "Busy - expect queues",
    VERY_HIGH: "Very crowded - avoid if you can",
}


def holiday_name(d: date) -> Optional[str]:
    """Name of the fixed public holiday on `d`, or None."""
    return _PUBLIC_HOLIDAYS.get((d.month, d.day))


def is_school_holiday(d: date) -> bool:
    return d.month in (6, 7) or (d.month == 12 and d.day >= 15)


def crowd_level(capacity_percentage: int) -> str:
    """Map a capacity percentage onto the 4-level scale.

    <40 low, 40-69 moderate, 70-89 high, >=90 very-high.
    """
    if capacity_percentage < 40:
        return LOW
    if capacity_percentage < 70:
        return MODERATE
    if capacity_percentage < 90:
        return HIGH
    return VERY_HIGH


def crowd_level_text(level: str) -> str:
    return _CROWD_LEVEL_TEXT.get(level, level)


def peak_hours(d: date) -> list[str]:
    """Busiest time slots: late morning on weekends, after work on weekdays."""
    if d.weekday() >= 5:
        return ["10:00-12:00", "13:00-15:00"]
    return ["15:00-17:00", "18:00-20:00"]


def _round_half_up(value: float) -> int:
    # round() would send 402.5 to 402
    return math.floor(value + 0.5)


def _weekday_adjustment(d: date) -> tuple[float, str]:
    weekday = d.weekday()  # Monday=0 ... Sunday=6
    if weekday >= 5:
        return WEEKEND_MULTIPLIER, "Weekend peak"
    if weekday == 4:
        return FRIDAY_MULTIPLIER, "Friday - pre-weekend rush"
    if weekday == 0:
        return MONDAY_MULTIPLIER, "Monday - quieter start of the week"
    return 1.0, "Weekday normal pattern"


def predict_day(d: date, capacity: int, rng: RandomSource) -> CrowdDay:
    """Forecast a single date.  `capacity` must already be validated."""
    factors: list[str] = []
    expected = capacity * BASELINE_RATIO

    multiplier, note = _weekday_adjustment(d)
    expected *= multiplier
    factors.append(note)

    holiday = holiday_name(d)
    if holiday:
        expected *= HOLIDAY_MULTIPLIER
        factors.append(f"Public holiday: {holiday}")

    if is_school_holiday(d):
        expected *= SCHOOL_HOLIDAY_MULTIPLIER
        factors.append("School holiday - family season")

    expected *= JITTER_LOW + rng.random() * JITTER_SPAN
    visitors = max(0, _round_half_up(expected))

    percentage = min(100, _round_half_up(visitors / capacity * 100))
    return CrowdDay(
        date=d,
        expected_visitors=visitors,
        capacity_percentage=percentage,
        level=crowd_level(percentage),
        factors=factors,
    )


def generate_crowd_predictions(
    attraction_id: str,
    capacity: int,
    days: int = 14,
    *,
    start: Optional[DateLike] = None,
    rng: Optional[RandomSource] = None,
) -> list[CrowdDay]:
    """Forecast `days` consecutive dates beginning at `start` (default today).

    Args:
        attraction_id: Identifies the attraction.  Reserved for
            per-attraction variance; it does not change the output today.
        capacity: Maximum daily visitors.  Must be > 0.
        days: Forecast length.  Zero or negative returns an empty list.
        start: First forecast date.
        rng: Random source for the jitter term.  Pass random.Random(seed)
            for reproducible output.

    Raises:
        InvalidArgument: capacity is not a positive integer.
    """
    if isinstance(capacity, bool) or not isinstance(capacity, int) or capacity <= 0:
        raise InvalidArgument(
            f"capacity for {attraction_id!r} must be a positive integer, got {capacity!r}"
        )
    if rng is None:
        rng = random.Random()
    return [predict_day(d, capacity, rng) for d in date_range(days, start)]


def forecast_for(
    attraction: Attraction,
    days: int = 14,
    *,
    start: Optional[DateLike] = None,
    rng: Optional[RandomSource] = None,
) -> list[CrowdDay]:
    """generate_crowd_predictions() for a catalog Attraction."""
    return generate_crowd_predictions(
        attraction.id, attraction.capacity, days, start=start, rng=rng
    )
