# =============================================================================
# agent/schemas.py  -  Oracle Wire Schema
# =============================================================================
#
# The LLM oracle is asked to reply with JSON in exactly this shape:
#
#   {
#     "recommendedDates": [{
#       "date": "YYYY-MM-DD", "dayOfWeek": "Tuesday", "score": 75,
#       "scoreBreakdown": {"weather": 40, "crowd": 25, "price": 10, "events": 0},
#       "weather": {"temperature": 27, "condition": "partly-cloudy", "precipitation": 18},
#       "crowd": {"level": "moderate", "expectedVisitors": 12778,
#                 "capacityPercentage": 51, "factors": [...]},
#       "pricing": {"dynamicPrice": 200000, "reason": "Standard pricing"},
#       "reasons": [...], "badges": [...]
#     }],
#     "insights": [{"type": "tip", "title": "...", "message": "..."}]
#   }
#
# The pydantic models below validate a reply before it is trusted:
# component bounds, score == sum of the breakdown, known crowd levels, at
# least one date.  Anything that fails becomes OracleMalformed and the
# pipeline uses the deterministic scorer instead.
#
# to_payload()/from_payload() convert between this shape and the core
# dataclasses and round-trip field for field.
# =============================================================================

import datetime
import json
import re

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator
from pydantic.alias_generators import to_camel

from core.crowds import CROWD_LEVELS
from core.errors import OracleMalformed
from core.models import (
    CROWD_MAX,
    EVENTS_MAX,
    PRICE_MAX,
    WEATHER_MAX,
    CrowdDay,
    Insight,
    PricingInfo,
    RecommendationSet,
    RecommendedDate,
    ScoreBreakdown,
    WeatherDay,
    rank_key,
)

_LEVEL_ALIASES = {"medium": "moderate", "very high": "very-high", "very_high": "very-high"}


class _Payload(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ScoreBreakdownPayload(_Payload):
    weather: int = Field(ge=0, le=WEATHER_MAX)
    crowd: int = Field(ge=0, le=CROWD_MAX)
    price: int = Field(ge=0, le=PRICE_MAX)
    events: int = Field(ge=0, le=EVENTS_MAX)


class WeatherPayload(_Payload):
    temperature: int
    condition: str
    precipitation: int = Field(ge=0, le=100)


class CrowdPayload(_Payload):
    level: str
    expected_visitors: int = Field(ge=0)
    capacity_percentage: int = Field(ge=0, le=100)
    factors: list[str] = Field(default_factory=list)

    @field_validator("level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.strip().lower()
        level = _LEVEL_ALIASES.get(level, level)
        if level not in CROWD_LEVELS:
            raise ValueError(f"unknown crowd level {value!r}")
        return level


class PricingPayload(_Payload):
    dynamic_price: int = Field(ge=0)
    reason: str


class RecommendedDatePayload(_Payload):
    date: datetime.date
    day_of_week: str
    score: int = Field(ge=0, le=100)
    score_breakdown: ScoreBreakdownPayload
    weather: WeatherPayload
    crowd: CrowdPayload
    pricing: PricingPayload
    reasons: list[str] = Field(default_factory=list)
    badges: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def _score_matches_breakdown(self):
        b = self.score_breakdown
        expected = min(100, b.weather + b.crowd + b.price + b.events)
        if self.score != expected:
            raise ValueError(f"score {self.score} does not equal breakdown sum {expected}")
        return self


class InsightPayload(_Payload):
    type: str
    title: str
    message: str


class RecommendationPayload(_Payload):
    recommended_dates: list[RecommendedDatePayload] = Field(min_length=1)
    insights: list[InsightPayload] = Field(default_factory=list)


# =============================================================================
# Conversions
# =============================================================================
def to_payload(recommendations: RecommendationSet) -> dict:
    """RecommendationSet -> JSON-ready dict in the oracle's camelCase shape."""
    return {
        "recommendedDates": [
            {
                "date": r.date.isoformat(),
                "dayOfWeek": r.day_of_week,
                "score": r.score,
                "scoreBreakdown": {
                    "weather": r.breakdown.weather,
                    "crowd": r.breakdown.crowd,
                    "price": r.breakdown.price,
                    "events": r.breakdown.events,
                },
                "weather": {
                    "temperature": r.weather.temperature,
                    "condition": r.weather.condition,
                    "precipitation": r.weather.precipitation,
                },
                "crowd": {
                    "level": r.crowd.level,
                    "expectedVisitors": r.crowd.expected_visitors,
                    "capacityPercentage": r.crowd.capacity_percentage,
                    "factors": list(r.crowd.factors),
                },
                "pricing": {
                    "dynamicPrice": r.pricing.dynamic_price,
                    "reason": r.pricing.reason,
                },
                "reasons": list(r.reasons),
                "badges": list(r.badges),
            }
            for r in recommendations.recommended_dates
        ],
        "insights": [
            {"type": i.type, "title": i.title, "message": i.message}
            for i in recommendations.insights
        ],
    }


def _to_recommended_date(item: RecommendedDatePayload) -> RecommendedDate:
    b = item.score_breakdown
    return RecommendedDate(
        date=item.date,
        day_of_week=item.day_of_week,
        score=item.score,
        breakdown=ScoreBreakdown(weather=b.weather, crowd=b.crowd, price=b.price, events=b.events),
        weather=WeatherDay(
            date=item.date,
            temperature=item.weather.temperature,
            condition=item.weather.condition,
            precipitation=item.weather.precipitation,
        ),
        crowd=CrowdDay(
            date=item.date,
            expected_visitors=item.crowd.expected_visitors,
            capacity_percentage=item.crowd.capacity_percentage,
            level=item.crowd.level,
            factors=list(item.crowd.factors),
        ),
        pricing=PricingInfo(dynamic_price=item.pricing.dynamic_price, reason=item.pricing.reason),
        reasons=list(item.reasons),
        badges=list(item.badges),
    )


def from_payload(data: dict, source: str = "oracle") -> RecommendationSet:
    """Validate an oracle-shaped dict and build a ranked RecommendationSet.

    Raises:
        OracleMalformed: the dict does not match the schema.
    """
    try:
        payload = RecommendationPayload.model_validate(data)
    except ValidationError as exc:
        raise OracleMalformed(f"oracle reply failed validation: {exc.error_count()} errors") from exc

    dates = [_to_recommended_date(item) for item in payload.recommended_dates]
    if len({r.date for r in dates}) != len(dates):
        raise OracleMalformed("oracle reply repeats a date")
    dates.sort(key=rank_key)
    return RecommendationSet(
        recommended_dates=dates,
        insights=[Insight(type=i.type, title=i.title, message=i.message) for i in payload.insights],
        source=source,
    )


_CODE_BLOCK = re.compile(r"```(?:json)?\s*([\s\S]*?)```")


def extract_json_object(text: str) -> str:
    """Pull the JSON object out of an LLM reply (fenced block or outer braces)."""
    match = _CODE_BLOCK.search(text)
    if match:
        text = match.group(1)
    start, end = text.find("{"), text.rfind("}")
    if start == -1 or end <= start:
        raise OracleMalformed("no JSON object in oracle reply")
    return text[start:end + 1]


def parse_oracle_text(text: str) -> RecommendationSet:
    """Raw LLM text -> validated RecommendationSet, or OracleMalformed."""
    if not text or not text.strip():
        raise OracleMalformed("empty oracle reply")
    try:
        data = json.loads(extract_json_object(text))
    except json.JSONDecodeError as exc:
        raise OracleMalformed(f"oracle reply is not valid JSON: {exc.msg}") from exc
    if not isinstance(data, dict):
        raise OracleMalformed("oracle reply is not a JSON object")
    return from_payload(data)
