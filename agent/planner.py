# =============================================================================
# agent/planner.py  -  Recommendation Pipeline
# =============================================================================
#
# HOW A REQUEST FLOWS:
#
#            ┌─ weather source ─┐   (thread)   UpstreamDataUnavailable
#   start ──►│                  │──── join ──►  -> synthetic series
#            └─ crowd forecast ─┘   (thread)
#                                      │
#                                      ▼
#                 oracle configured? ──yes──► cache hit? ─► cached result
#                        │                       │ miss
#                        no                      ▼
#                        │                 LLM oracle ── OracleError ──┐
#                        ▼                       │ ok                  │
#                 core.scoring.score_dates ◄─────┼─────────────────────┘
#                                                ▼
#                                         cache + return
#
# The weather fetch and the crowd forecast are independent, so they run
# concurrently; the scorer needs both, so they are joined first.
#
# ERROR POLICY:
#   InvalidArgument, DataMismatch   propagate (contract violations)
#   UpstreamDataUnavailable         synthetic weather, same dates
#   OracleError (any subclass)      deterministic scorer
# =============================================================================

import asyncio
import logging
import random
from typing import Callable, Optional, Protocol, Sequence

from core.cache import TTLCache, recommendation_key, weather_key
from core.config import Settings
from core.crowds import forecast_for
from core.dates import DateLike, date_range
from core.errors import InvalidArgument, OracleError, UpstreamDataUnavailable
from core.models import Attraction, CrowdDay, RecommendationSet, VisitPreferences, WeatherDay
from core.scoring import align_series, score_dates
from core.weather import get_forecast, synthetic_forecast

logger = logging.getLogger(__name__)

WeatherSource = Callable[[Attraction, int, DateLike], list[WeatherDay]]


class RecommendationOracle(Protocol):
    async def recommend(
        self,
        attraction: Attraction,
        weather_days: Sequence[WeatherDay],
        crowd_days: Sequence[CrowdDay],
        preferences: Optional[VisitPreferences] = None,
    ) -> RecommendationSet: ...


def build_oracle(settings: Settings) -> Optional[RecommendationOracle]:
    """The configured LLM oracle, or None when USE_LLM_ORACLE is off."""
    if not settings.use_llm_oracle:
        return None
    from agent.oracle import LLMRecommendationOracle

    return LLMRecommendationOracle(
        settings.oracle_models,
        max_attempts=settings.oracle_max_attempts,
        base_delay=settings.oracle_base_delay,
    )


def _default_weather_source(settings: Settings) -> WeatherSource:
    def source(attraction: Attraction, days: int, start: DateLike) -> list[WeatherDay]:
        return get_forecast(attraction, days, start, live=settings.use_live_weather)
    return source


def fetch_weather(
    attraction: Attraction,
    days: int,
    start: DateLike,
    weather_source: WeatherSource,
    cache: Optional[TTLCache] = None,
    ttl: float = 0.0,
) -> list[WeatherDay]:
    """Weather for the window, falling back to a synthetic series on failure."""
    key = weather_key(attraction.id, date_range(1, start)[0], days)
    if cache is not None:
        cached = cache.get(key)
        if cached is not None:
            return cached

    try:
        forecast = weather_source(attraction, days, start)
    except UpstreamDataUnavailable as exc:
        logger.warning("Weather unavailable for %s (%s); using synthetic forecast",
                       attraction.name, exc)
        return synthetic_forecast(days, start)

    if cache is not None:
        cache.set(key, forecast, ttl)
    return forecast


async def recommend_visit_dates(
    attraction: Attraction,
    days: Optional[int] = None,
    preferences: Optional[VisitPreferences] = None,
    *,
    start: Optional[DateLike] = None,
    weather_source: Optional[WeatherSource] = None,
    oracle: Optional[RecommendationOracle] = None,
    cache: Optional[TTLCache] = None,
    rng: Optional[random.Random] = None,
    settings: Optional[Settings] = None,
) -> RecommendationSet:
    """Full recommendation for one attraction over the next `days` days.

    Raises:
        InvalidArgument: bad attraction capacity or day count.
        DataMismatch: the weather source returned dates that do not line up
            with the crowd forecast.
    """
    settings = settings or Settings()
    days = settings.forecast_days if days is None else days
    if days <= 0:
        raise InvalidArgument(f"days must be positive, got {days}")
    preferences = preferences or VisitPreferences()
    first_day = date_range(1, start)[0]
    weather_source = weather_source or _default_weather_source(settings)

    weather_days, crowd_days = await asyncio.gather(
        asyncio.to_thread(
            fetch_weather, attraction, days, first_day, weather_source,
            cache, settings.recommendation_cache_ttl,
        ),
        asyncio.to_thread(forecast_for, attraction, days, start=first_day, rng=rng),
    )
    logger.info("Joined %d weather days and %d crowd days for %s",
                len(weather_days), len(crowd_days), attraction.name)
    # Fail fast on misaligned series whichever scorer runs next.
    align_series(weather_days, crowd_days)

    if oracle is not None:
        key = recommendation_key(attraction.id, first_day, days, preferences)
        cached = cache.get(key) if cache is not None else None
        if cached is not None:
            return cached
        try:
            result = await oracle.recommend(attraction, weather_days, crowd_days, preferences)
        except OracleError as exc:
            logger.warning("Oracle failed (%s); using deterministic scorer", exc)
        else:
            if cache is not None:
                cache.set(key, result, settings.recommendation_cache_ttl)
            return result

    return score_dates(attraction, weather_days, crowd_days, preferences)
