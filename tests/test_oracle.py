import asyncio
import json
from datetime import timedelta
from types import SimpleNamespace

import pytest

from conftest import TUESDAY, make_crowd, make_weather
from agent.oracle import LLMRecommendationOracle, is_unavailable
from agent.schemas import from_payload, to_payload
from core.errors import OracleError, OracleMalformed, OracleUnavailable
from core.scoring import score_dates

MODELS = ["model-a", "model-b", "model-c"]


class ProviderError(Exception):
    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.status_code = status_code


def reply(text):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=text))])


class FakeCompletion:
    """Plays back a scripted sequence of replies or exceptions."""

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.models = []

    async def __call__(self, model, messages, **kwargs):
        self.models.append(model)
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return reply(outcome)


class RecordingSleep:
    def __init__(self):
        self.delays = []

    async def __call__(self, delay):
        self.delays.append(delay)


@pytest.fixture
def series():
    dates = [TUESDAY + timedelta(days=i) for i in range(3)]
    return [make_weather(d) for d in dates], [make_crowd(d, 30 + 20 * i) for i, d in enumerate(dates)]


@pytest.fixture
def payload(park, series):
    weather, crowds = series
    return to_payload(score_dates(park, weather, crowds))


def make_oracle(completion, sleep, **kwargs):
    return LLMRecommendationOracle(MODELS, base_delay=1.0, completion=completion, sleep=sleep, **kwargs)


def test_overloaded_model_retries_with_alternate(park, series, payload):
    completion = FakeCompletion(ProviderError("model overloaded", status_code=503), json.dumps(payload))
    sleep = RecordingSleep()

    result = asyncio.run(make_oracle(completion, sleep).recommend(park, *series))

    assert result == from_payload(payload)
    assert result.source == "oracle"
    assert completion.models == ["model-a", "model-b"]
    assert sleep.delays == [1.0]


def test_non_retryable_error_fails_fast(park, series):
    completion = FakeCompletion(ProviderError("invalid api key", status_code=401))
    sleep = RecordingSleep()

    with pytest.raises(OracleError) as info:
        asyncio.run(make_oracle(completion, sleep).recommend(park, *series))

    assert not isinstance(info.value, OracleUnavailable)
    assert completion.models == ["model-a"]
    assert sleep.delays == []


def test_exhausted_attempts_raise_unavailable(park, series):
    completion = FakeCompletion(*[ProviderError("busy", status_code=429) for _ in MODELS])
    sleep = RecordingSleep()

    with pytest.raises(OracleUnavailable):
        asyncio.run(make_oracle(completion, sleep).recommend(park, *series))

    assert completion.models == MODELS
    assert sleep.delays == [1.0, 2.0]


def test_max_attempts_bounds_the_schedule(park, series):
    completion = FakeCompletion(*[ProviderError("unavailable") for _ in MODELS])
    sleep = RecordingSleep()

    with pytest.raises(OracleUnavailable):
        asyncio.run(make_oracle(completion, sleep, max_attempts=2).recommend(park, *series))

    assert completion.models == ["model-a", "model-b"]


def test_malformed_reply_is_not_retried(park, series):
    completion = FakeCompletion("I think Tuesday looks nice!")
    sleep = RecordingSleep()

    with pytest.raises(OracleMalformed):
        asyncio.run(make_oracle(completion, sleep).recommend(park, *series))

    assert completion.models == ["model-a"]


def test_invented_dates_are_rejected(park, series, payload):
    payload["recommendedDates"][0]["date"] = (TUESDAY + timedelta(days=30)).isoformat()
    completion = FakeCompletion(json.dumps(payload))

    with pytest.raises(OracleMalformed):
        asyncio.run(make_oracle(completion, RecordingSleep()).recommend(park, *series))


def test_result_carries_input_records(park, series, payload):
    weather, crowds = series
    for item in payload["recommendedDates"]:
        item["weather"]["temperature"] = 99
    completion = FakeCompletion(json.dumps(payload))

    result = asyncio.run(make_oracle(completion, RecordingSleep()).recommend(park, weather, crowds))

    assert {r.weather.temperature for r in result.recommended_dates} == {28}


def test_is_unavailable():
    assert is_unavailable(ProviderError("x", status_code=502))
    assert is_unavailable(ProviderError("The model is overloaded"))
    assert not is_unavailable(ProviderError("bad request", status_code=400))


def test_requires_a_model():
    with pytest.raises(ValueError):
        LLMRecommendationOracle([])
