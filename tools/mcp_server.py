# =============================================================================
# tools/mcp_server.py  -  FastMCP Tool Server
# =============================================================================
#
# WHAT THIS FILE DOES:
#   Exposes the core operations as MCP tools the advisor agent can call.
#   Each tool is a thin wrapper: it looks up the attraction, calls core/ or
#   the pipeline in agent/planner.py, and returns a lean, JSON-ready dict.
#
#   list_attractions       catalog ids, names, categories, capacities
#   get_crowd_forecast     CrowdDay series for an attraction
#   get_weather_forecast   WeatherDay series (live or synthetic)
#   recommend_visit_dates  ranked RecommendationSet (oracle or deterministic)
#   suggest_alternatives   similar attractions by category and tags
#
# All tools are read-only and idempotent for a given day, so the agent can
# retry them freely.
#
# RUNNING THIS SERVER:
#   python -m tools.mcp_server      (stdio transport, spawned by the agent)
# =============================================================================

import json
import logging
import sys

from dotenv import load_dotenv
from fastmcp import FastMCP

from agent.planner import build_oracle, fetch_weather
from agent.planner import recommend_visit_dates as run_recommendation
from agent.schemas import to_payload
from core.attractions import (
    attractions_by_category,
    format_price,
    get_attraction,
    list_attractions as catalog,
)
from core.attractions import suggest_alternatives as rank_alternatives
from core.cache import TTLCache
from core.config import Settings
from core.crowds import forecast_for, peak_hours
from core.dates import date_range
from core.errors import InvalidArgument
from core.models import Attraction, VisitPreferences
from core.weather import get_forecast

load_dotenv()

# =============================================================================
# Logging Setup
# =============================================================================
# STDOUT carries the MCP protocol, so logs go to STDERR.
#   CYAN   incoming tool calls
#   YELLOW intermediate status
#   GREEN  responses
# =============================================================================
_CYAN = "\033[36m"
_GREEN = "\033[32m"
_YELLOW = "\033[33m"
_RESET = "\033[0m"

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [MCP] %(message)s",
    datefmt="%H:%M:%S",
    stream=sys.stderr,
)


def _log_request(tool_name: str, **params) -> None:
    param_str = ", ".join(f"{k}={v!r}" for k, v in params.items())
    logging.info(f"{_CYAN}{tool_name} called with: {param_str}{_RESET}")


def _log_status(message: str) -> None:
    logging.info(f"{_YELLOW}  → {message}{_RESET}")


def _log_response(tool_name: str, result: dict) -> dict:
    logging.info(f"{_GREEN}  ← {tool_name} response: {json.dumps(result, separators=(',', ':'))}{_RESET}")
    return result


mcp = FastMCP("visit-date-advisor")

_settings = Settings.from_env()
_cache = TTLCache()
_oracle = build_oracle(_settings)


def _unknown_attraction(tool_name: str, attraction_id: str) -> dict:
    available = [a.id for a in catalog()]
    _log_status(f"Attraction not found. Available: {available}")
    return _log_response(tool_name, {
        "error": f"Attraction '{attraction_id}' not found.",
        "available_attractions": available,
        "hint": "Call list_attractions to see names and ids.",
    })


def _window(days: int) -> int:
    if days < 1:
        raise InvalidArgument(f"days must be at least 1, got {days}")
    return min(days, 16)


def _attraction_summary(a: Attraction) -> dict:
    return {
        "id": a.id,
        "name": a.name,
        "category": a.category,
        "city": a.city,
        "capacity": a.capacity,
        "base_price": format_price(a.base_price, a.currency),
        "rating": a.rating,
    }


# =============================================================================
# TOOL 1: list_attractions
# =============================================================================
@mcp.tool()
def list_attractions(category: str = "") -> dict:
    """List the attractions the advisor can plan visits for.

    WHEN TO CALL THIS: when the user has not named an attraction, or named
    one you cannot map to an id.

    Args:
        category: Optional filter (theme_park, museum, nature,
                  entertainment, cultural, aquarium).

    Returns:
        {"attractions": [{id, name, category, city, capacity, base_price, rating}]}
    """
    _log_request("list_attractions", category=category)
    items = attractions_by_category(category) if category else catalog()
    _log_status(f"{len(items)} attractions")
    return _log_response("list_attractions", {
        "attractions": [_attraction_summary(a) for a in items],
    })


# =============================================================================
# TOOL 2: get_crowd_forecast
# =============================================================================
@mcp.tool()
def get_crowd_forecast(attraction_id: str, days: int = 7) -> dict:
    """Predict daily crowd levels for an attraction, starting today.

    Args:
        attraction_id: Catalog id, e.g. "attr_001".
        days: Number of days (1-16).

    Returns:
        {"attraction", "days": [{date, level, expected_visitors,
        capacity_percentage, factors, peak_hours}]}
    """
    _log_request("get_crowd_forecast", attraction_id=attraction_id, days=days)
    attraction = get_attraction(attraction_id)
    if attraction is None:
        return _unknown_attraction("get_crowd_forecast", attraction_id)

    crowds = forecast_for(attraction, _window(days))
    return _log_response("get_crowd_forecast", {
        "attraction": attraction.name,
        "days": [
            {
                "date": c.date.isoformat(),
                "level": c.level,
                "expected_visitors": c.expected_visitors,
                "capacity_percentage": c.capacity_percentage,
                "factors": c.factors,
                "peak_hours": peak_hours(c.date),
            }
            for c in crowds
        ],
    })


# =============================================================================
# TOOL 3: get_weather_forecast
# =============================================================================
@mcp.tool()
def get_weather_forecast(attraction_id: str, days: int = 7) -> dict:
    """Daily weather at the attraction's location, starting today.

    "source" names the configured provider.  When the live provider is down
    the days come from the synthetic forecast instead.

    Args:
        attraction_id: Catalog id, e.g. "attr_001".
        days: Number of days (1-16).

    Returns:
        {"attraction", "source", "days": [{date, temperature_c, condition, precipitation_pct}]}
    """
    _log_request("get_weather_forecast", attraction_id=attraction_id, days=days)
    attraction = get_attraction(attraction_id)
    if attraction is None:
        return _unknown_attraction("get_weather_forecast", attraction_id)

    def source(a, n, start):
        return get_forecast(a, n, start, live=_settings.use_live_weather)

    window = _window(days)
    forecast = fetch_weather(attraction, window, date_range(1)[0], source, _cache,
                             _settings.recommendation_cache_ttl)
    return _log_response("get_weather_forecast", {
        "attraction": attraction.name,
        "source": "live" if _settings.use_live_weather else "synthetic",
        "days": [
            {
                "date": w.date.isoformat(),
                "temperature_c": w.temperature,
                "condition": w.condition,
                "precipitation_pct": w.precipitation,
            }
            for w in forecast
        ],
    })


# =============================================================================
# TOOL 4: recommend_visit_dates
# =============================================================================
@mcp.tool()
async def recommend_visit_dates(
    attraction_id: str,
    days: int = 7,
    avoid_crowds: bool = True,
    group_size: int = 2,
    budget_range: str = "medium",
) -> dict:
    """Rank the upcoming dates for visiting an attraction.

    WHEN TO CALL THIS: once you know the attraction.  This is the main
    tool; it combines weather, crowds and dynamic pricing into a 0-100
    score per date.

    Args:
        attraction_id: Catalog id, e.g. "attr_001".
        days: How many days ahead to consider (1-16).
        avoid_crowds: Whether the visitor prefers quiet days.
        group_size: Number of people visiting.
        budget_range: "low", "medium" or "high".

    Returns:
        {"recommendedDates": [...], "insights": [...], "source": ...}
        recommendedDates is sorted best-first.
    """
    _log_request("recommend_visit_dates", attraction_id=attraction_id, days=days,
                 avoid_crowds=avoid_crowds, group_size=group_size, budget_range=budget_range)
    attraction = get_attraction(attraction_id)
    if attraction is None:
        return _unknown_attraction("recommend_visit_dates", attraction_id)

    preferences = VisitPreferences(
        budget_range=budget_range,
        group_size=group_size,
        interests=list(attraction.tags),
        avoid_crowds=avoid_crowds,
    )
    result = await run_recommendation(
        attraction, _window(days), preferences,
        oracle=_oracle, cache=_cache, settings=_settings,
    )
    if result.best is not None:
        _log_status(f"Best: {result.best.date.isoformat()} ({result.best.score}/100, {result.source})")
    payload = to_payload(result)
    payload["source"] = result.source
    return _log_response("recommend_visit_dates", payload)


# =============================================================================
# TOOL 5: suggest_alternatives
# =============================================================================
@mcp.tool()
def suggest_alternatives(attraction_id: str, limit: int = 3) -> dict:
    """Suggest similar attractions, e.g. when every upcoming date scores poorly.

    Args:
        attraction_id: Catalog id, e.g. "attr_001".
        limit: Maximum number of suggestions.

    Returns:
        {"attraction", "alternatives": [{id, name, category, similarity_score, reason}]}
    """
    _log_request("suggest_alternatives", attraction_id=attraction_id, limit=limit)
    attraction = get_attraction(attraction_id)
    if attraction is None:
        return _unknown_attraction("suggest_alternatives", attraction_id)

    alternatives = rank_alternatives(attraction, limit)
    return _log_response("suggest_alternatives", {
        "attraction": attraction.name,
        "alternatives": [
            {
                "id": alt.attraction.id,
                "name": alt.attraction.name,
                "category": alt.attraction.category,
                "similarity_score": alt.similarity_score,
                "reason": alt.reason,
            }
            for alt in alternatives
        ],
    })


if __name__ == "__main__":
    mcp.run()
