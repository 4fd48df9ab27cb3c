# =============================================================================
# core/weather.py  -  Weather Data
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Provides the daily forecast for an attraction, either from the LIVE
#   Open-Meteo API or from a SYNTHETIC series.  Both return the same
#   list[WeatherDay] over the same dates (core.dates.date_range), so the
#   scorer never knows which one it got.
#
# DATA SOURCE TOGGLE:
#   USE_LIVE_WEATHER=true   -> Open-Meteo (free, no API key, max 16 days)
#   USE_LIVE_WEATHER=false  -> synthetic series (seeded, offline)
#
# FAILURE CONTRACT:
#   The live provider raises UpstreamDataUnavailable on any network, HTTP or
#   parse problem.  It does NOT fall back by itself: the recommendation
#   pipeline catches the error and substitutes synthetic_forecast() with the
#   same length and dates, so a weather outage never blocks a recommendation.
# =============================================================================

from datetime import date
import json
import logging
import os
import random
from typing import Optional
import urllib.error
import urllib.parse
import urllib.request

from core.dates import DateLike, date_range
from core.errors import UpstreamDataUnavailable
from core.models import Attraction, WeatherDay

logger = logging.getLogger(__name__)

OPEN_METEO_URL = "https://api.open-meteo.com/v1/forecast"
OPEN_METEO_MAX_DAYS = 16
REQUEST_TIMEOUT_SECONDS = 10


# =============================================================================
# WMO Weather Code Mapping
# =============================================================================
# Open-Meteo reports WMO weather codes.  The scorer works on a small set of
# condition slugs, so each code maps onto one of them.
# =============================================================================
_WMO_CODE_TO_CONDITION: dict[int, str] = {
    0: "clear",
    1: "sunny",
    2: "partly-cloudy",
    3: "cloudy",
    45: "fog",
    48: "fog",
    51: "drizzle",
    53: "drizzle",
    55: "drizzle",
    56: "drizzle",
    57: "drizzle",
    61: "rain",
    63: "rain",
    65: "heavy-rain",
    66: "rain",
    67: "heavy-rain",
    71: "snow",
    73: "snow",
    75: "snow",
    77: "snow",
    80: "showers",
    81: "showers",
    82: "heavy-rain",
    85: "snow",
    86: "snow",
    95: "thunderstorm",
    96: "thunderstorm",
    99: "thunderstorm",
}

# Provider spellings that do not survive plain slugification.
_CONDITION_ALIASES = {
    "clouds": "cloudy",
    "overcast": "cloudy",
    "mainly-clear": "sunny",
    "thunderstorms": "thunderstorm",
    "scattered-showers": "showers",
    "mist": "fog",
    "haze": "fog",
}


def normalize_condition(text: str) -> str:
    """'Partly Cloudy' / 'partly_cloudy' / 'PARTLY-CLOUDY' -> 'partly-cloudy'."""
    slug = "-".join(text.strip().lower().replace("_", " ").replace("-", " ").split())
    return _CONDITION_ALIASES.get(slug, slug or "unknown")


# =============================================================================
# PUBLIC API: get_forecast (dispatcher)
# =============================================================================
def get_forecast(
    attraction: Attraction,
    days: int = 7,
    start: Optional[DateLike] = None,
    *,
    live: Optional[bool] = None,
) -> list[WeatherDay]:
    """Forecast for the attraction's location over date_range(days, start).

    `live` overrides the USE_LIVE_WEATHER environment toggle.

    Raises:
        UpstreamDataUnavailable: the live provider failed.
    """
    if live is None:
        live = os.environ.get("USE_LIVE_WEATHER", "false").lower() == "true"

    if live:
        return get_forecast_live(attraction, days, start)
    return synthetic_forecast(days, start)


# =============================================================================
# LIVE PROVIDER: Open-Meteo API
# =============================================================================
def get_forecast_live(
    attraction: Attraction,
    days: int = 7,
    start: Optional[DateLike] = None,
) -> list[WeatherDay]:
    """Fetch the daily forecast for the attraction's coordinates.

    The request names explicit start/end dates so the returned series lines
    up with the crowd forecast.  The representative temperature is the mean
    of the daily max and min.
    """
    dates = date_range(days, start)
    if not dates:
        return []
    if attraction.latitude is None or attraction.longitude is None:
        raise UpstreamDataUnavailable(f"{attraction.name} has no coordinates")
    if len(dates) > OPEN_METEO_MAX_DAYS:
        raise UpstreamDataUnavailable(
            f"Open-Meteo forecasts at most {OPEN_METEO_MAX_DAYS} days, asked for {len(dates)}"
        )

    query = urllib.parse.urlencode({
        "latitude": attraction.latitude,
        "longitude": attraction.longitude,
        "daily": "temperature_2m_max,temperature_2m_min,"
                 "precipitation_probability_max,weather_code",
        "start_date": dates[0].isoformat(),
        "end_date": dates[-1].isoformat(),
        "timezone": "auto",
    })

    try:
        req = urllib.request.Request(f"{OPEN_METEO_URL}?{query}")
        with urllib.request.urlopen(req, timeout=REQUEST_TIMEOUT_SECONDS) as response:
            data = json.loads(response.read().decode())
    except (urllib.error.URLError, TimeoutError, OSError, ValueError) as exc:
        raise UpstreamDataUnavailable(f"Open-Meteo request failed: {exc}") from exc

    forecasts = parse_open_meteo(data, dates)
    logger.info("Open-Meteo: %d days for %s", len(forecasts), attraction.name)
    return forecasts


def parse_open_meteo(data: dict, expected_dates: list[date]) -> list[WeatherDay]:
    """Turn an Open-Meteo daily payload into WeatherDays for `expected_dates`."""
    daily = data.get("daily") or {}
    try:
        times = [date.fromisoformat(t) for t in daily["time"]]
        highs = daily["temperature_2m_max"]
        lows = daily["temperature_2m_min"]
        precips = daily.get("precipitation_probability_max") or [None] * len(times)
        codes = daily.get("weather_code") or [None] * len(times)
    except (KeyError, TypeError, ValueError) as exc:
        raise UpstreamDataUnavailable(f"Unexpected Open-Meteo payload: {exc}") from exc

    if times != expected_dates:
        raise UpstreamDataUnavailable(
            f"Open-Meteo returned {len(times)} days not matching the requested window"
        )

    forecasts = []
    for i, day in enumerate(times):
        high, low = highs[i], lows[i]
        if high is None or low is None:
            raise UpstreamDataUnavailable(f"Missing temperature for {day.isoformat()}")
        code = codes[i]
        forecasts.append(WeatherDay(
            date=day,
            temperature=round((high + low) / 2),
            condition=_WMO_CODE_TO_CONDITION.get(code, "unknown") if code is not None else "unknown",
            precipitation=max(0, min(100, round(precips[i] or 0))),
        ))
    return forecasts


# =============================================================================
# SYNTHETIC PROVIDER (offline mode and fallback)
# =============================================================================
# Tropical pattern: 24-32 °C, mostly fair with afternoon storms.  Each
# condition carries its own precipitation band so the numbers stay coherent.
# =============================================================================
_SYNTHETIC_CONDITIONS: tuple[tuple[str, int, int], ...] = (
    ("sunny", 0, 15),
    ("clear", 0, 10),
    ("partly-cloudy", 5, 25),
    ("partly-cloudy", 5, 25),
    ("cloudy", 15, 40),
    ("rain", 55, 85),
    ("thunderstorm", 65, 95),
)


def synthetic_forecast(
    days: int = 7,
    start: Optional[DateLike] = None,
    rng: Optional[random.Random] = None,
) -> list[WeatherDay]:
    """Deterministic stand-in forecast (seed 42 unless an rng is given)."""
    rng = rng or random.Random(42)
    forecasts = []
    for day in date_range(days, start):
        condition, precip_low, precip_high = rng.choice(_SYNTHETIC_CONDITIONS)
        forecasts.append(WeatherDay(
            date=day,
            temperature=rng.randint(24, 32),
            condition=condition,
            precipitation=rng.randint(precip_low, precip_high),
        ))
    return forecasts
