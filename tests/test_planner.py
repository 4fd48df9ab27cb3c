import asyncio
from datetime import timedelta

import pytest

from conftest import TUESDAY, FixedRandom, make_weather
from agent.oracle import LLMRecommendationOracle
from agent.planner import build_oracle, fetch_weather, recommend_visit_dates
from core.cache import TTLCache
from core.config import Settings
from core.crowds import forecast_for
from core.dates import date_range
from core.errors import DataMismatch, InvalidArgument, OracleUnavailable, UpstreamDataUnavailable
from core.models import VisitPreferences
from core.scoring import score_dates
from core.weather import synthetic_forecast

DAYS = 5


def sunny_source(attraction, days, start):
    return [make_weather(d) for d in date_range(days, start)]


def failing_source(attraction, days, start):
    raise UpstreamDataUnavailable("provider down")


class StubOracle:
    def __init__(self, result=None, error=None):
        self.result = result
        self.error = error
        self.calls = 0

    async def recommend(self, attraction, weather_days, crowd_days, preferences=None):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.result


def expected_crowds(park):
    return forecast_for(park, DAYS, start=TUESDAY, rng=FixedRandom())


def run(park, **kwargs):
    kwargs.setdefault("start", TUESDAY)
    kwargs.setdefault("rng", FixedRandom())
    kwargs.setdefault("weather_source", sunny_source)
    return asyncio.run(recommend_visit_dates(park, DAYS, **kwargs))


def test_deterministic_path_without_oracle(park):
    result = run(park)

    expected = score_dates(park, sunny_source(park, DAYS, TUESDAY), expected_crowds(park))
    assert result == expected
    assert len(result.recommended_dates) == DAYS
    assert result.source == "deterministic"


def test_invalid_oracle_json_falls_back_to_scorer(park):
    async def completion(model, messages, **kwargs):
        from types import SimpleNamespace

        message = SimpleNamespace(content="{ this is not json")
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])

    oracle = LLMRecommendationOracle(["model-a"], completion=completion)

    result = run(park, oracle=oracle)

    assert result == score_dates(park, sunny_source(park, DAYS, TUESDAY), expected_crowds(park))
    assert result.source == "deterministic"


def test_unavailable_oracle_falls_back_to_scorer(park):
    oracle = StubOracle(error=OracleUnavailable("all busy"))
    result = run(park, oracle=oracle)
    assert result.source == "deterministic"
    assert oracle.calls == 1


def test_oracle_result_is_cached(park):
    oracle_result = score_dates(park, sunny_source(park, DAYS, TUESDAY), expected_crowds(park))
    oracle_result.source = "oracle"
    oracle = StubOracle(result=oracle_result)
    cache = TTLCache()

    first = run(park, oracle=oracle, cache=cache)
    second = run(park, oracle=oracle, cache=cache)

    assert first is oracle_result
    assert second is oracle_result
    assert oracle.calls == 1


def test_weather_outage_uses_synthetic_series(park):
    result = run(park, weather_source=failing_source)

    expected = score_dates(park, synthetic_forecast(DAYS, TUESDAY), expected_crowds(park))
    assert result == expected


def test_misaligned_weather_is_rejected(park):
    def shifted_source(attraction, days, start):
        return [make_weather(d + timedelta(days=1)) for d in date_range(days, start)]

    with pytest.raises(DataMismatch):
        run(park, weather_source=shifted_source)

    with pytest.raises(DataMismatch):
        run(park, weather_source=shifted_source, oracle=StubOracle())


@pytest.mark.parametrize("days", [0, -1])
def test_non_positive_days_rejected(park, days):
    with pytest.raises(InvalidArgument):
        asyncio.run(recommend_visit_dates(park, days, start=TUESDAY, weather_source=sunny_source))


def test_days_default_from_settings(park):
    result = asyncio.run(recommend_visit_dates(
        park, start=TUESDAY, weather_source=sunny_source, rng=FixedRandom(),
        settings=Settings(forecast_days=3),
    ))
    assert [r.date for r in sorted(result.recommended_dates, key=lambda r: r.date)] == \
        date_range(3, TUESDAY)


def test_preferences_do_not_change_scores(park):
    quiet = run(park, preferences=VisitPreferences(avoid_crowds=True))
    any_crowd = run(park, preferences=VisitPreferences(avoid_crowds=False))
    assert [(r.date, r.score) for r in quiet.recommended_dates] == \
        [(r.date, r.score) for r in any_crowd.recommended_dates]


def test_fetch_weather_caches_successful_forecasts(park):
    calls = []

    def counting_source(attraction, days, start):
        calls.append(start)
        return sunny_source(attraction, days, start)

    cache = TTLCache()
    first = fetch_weather(park, 3, TUESDAY, counting_source, cache, ttl=60)
    second = fetch_weather(park, 3, TUESDAY, counting_source, cache, ttl=60)

    assert first == second
    assert len(calls) == 1


def test_fetch_weather_does_not_cache_fallback(park):
    cache = TTLCache()
    fetch_weather(park, 3, TUESDAY, failing_source, cache, ttl=60)
    assert len(cache) == 0


def test_build_oracle_follows_settings():
    assert build_oracle(Settings()) is None
    oracle = build_oracle(Settings(use_llm_oracle=True, oracle_models=("m1", "m2"),
                                   oracle_max_attempts=2, oracle_base_delay=0.5))
    assert isinstance(oracle, LLMRecommendationOracle)
    assert oracle.models == ["m1", "m2"]
    assert oracle.max_attempts == 2
    assert oracle.base_delay == 0.5


class ScoringOracle:
    """Oracle that scores whatever window it is given."""

    def __init__(self):
        self.calls = 0

    async def recommend(self, attraction, weather_days, crowd_days, preferences=None):
        self.calls += 1
        result = score_dates(attraction, weather_days, crowd_days, preferences)
        result.source = "oracle"
        return result


def test_cached_oracle_result_is_scoped_to_window_and_preferences(park):
    oracle = ScoringOracle()
    cache = TTLCache()

    def recommend(days, preferences=None):
        return asyncio.run(recommend_visit_dates(
            park, days, preferences, start=TUESDAY, weather_source=sunny_source,
            rng=FixedRandom(), oracle=oracle, cache=cache,
        ))

    short = recommend(3)
    longer = recommend(10)
    assert len(short.recommended_dates) == 3
    assert len(longer.recommended_dates) == 10
    assert longer.source == "oracle"

    recommend(10, VisitPreferences(avoid_crowds=False))
    assert oracle.calls == 3

    recommend(10)
    assert oracle.calls == 3
