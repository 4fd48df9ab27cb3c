import io
import json
import urllib.error
from dataclasses import replace

import pytest

from conftest import TUESDAY
from core.dates import date_range
from core.errors import UpstreamDataUnavailable
from core.weather import (
    get_forecast,
    get_forecast_live,
    normalize_condition,
    parse_open_meteo,
    synthetic_forecast,
)


def open_meteo_payload(dates, codes=None):
    return {
        "daily": {
            "time": [d.isoformat() for d in dates],
            "temperature_2m_max": [31.4] * len(dates),
            "temperature_2m_min": [24.6] * len(dates),
            "precipitation_probability_max": [35] * len(dates),
            "weather_code": codes or [2] * len(dates),
        }
    }


@pytest.mark.parametrize("raw, slug", [
    ("Partly Cloudy", "partly-cloudy"),
    ("partly_cloudy", "partly-cloudy"),
    ("PARTLY-CLOUDY", "partly-cloudy"),
    ("Sunny", "sunny"),
    ("overcast", "cloudy"),
    ("  ", "unknown"),
])
def test_normalize_condition(raw, slug):
    assert normalize_condition(raw) == slug


def test_parse_open_meteo():
    dates = date_range(3, TUESDAY)
    days = parse_open_meteo(open_meteo_payload(dates, codes=[0, 63, 95]), dates)

    assert [d.date for d in days] == dates
    assert {d.temperature for d in days} == {28}
    assert [d.condition for d in days] == ["clear", "rain", "thunderstorm"]
    assert {d.precipitation for d in days} == {35}


def test_parse_open_meteo_rejects_other_window():
    dates = date_range(3, TUESDAY)
    with pytest.raises(UpstreamDataUnavailable):
        parse_open_meteo(open_meteo_payload(dates[1:]), dates)


def test_parse_open_meteo_rejects_missing_fields():
    with pytest.raises(UpstreamDataUnavailable):
        parse_open_meteo({"daily": {"time": []}}, [])


def test_synthetic_forecast_is_repeatable_and_plausible():
    first = synthetic_forecast(14, TUESDAY)
    assert first == synthetic_forecast(14, TUESDAY)
    assert [d.date for d in first] == date_range(14, TUESDAY)
    for day in first:
        assert 24 <= day.temperature <= 32
        assert 0 <= day.precipitation <= 100


def test_get_forecast_offline_uses_synthetic(park):
    assert get_forecast(park, 5, TUESDAY, live=False) == synthetic_forecast(5, TUESDAY)


def test_live_forecast_requires_coordinates(park):
    with pytest.raises(UpstreamDataUnavailable):
        get_forecast_live(replace(park, latitude=None), 3, TUESDAY)


def test_live_forecast_window_is_limited(park):
    with pytest.raises(UpstreamDataUnavailable):
        get_forecast_live(park, 17, TUESDAY)


def test_live_forecast_network_error(park, monkeypatch):
    def refuse(*args, **kwargs):
        raise urllib.error.URLError("connection refused")

    monkeypatch.setattr("urllib.request.urlopen", refuse)
    with pytest.raises(UpstreamDataUnavailable):
        get_forecast_live(park, 3, TUESDAY)


def test_live_forecast_success(park, monkeypatch):
    dates = date_range(3, TUESDAY)
    requested = []

    def respond(request, timeout):
        requested.append(request.full_url)
        return io.BytesIO(json.dumps(open_meteo_payload(dates)).encode())

    monkeypatch.setattr("urllib.request.urlopen", respond)
    days = get_forecast_live(park, 3, TUESDAY)

    assert [d.date for d in days] == dates
    assert "start_date=2026-10-20" in requested[0]
    assert "end_date=2026-10-22" in requested[0]
