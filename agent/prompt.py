# =============================================================================
# agent/prompt.py  -  Prompts
# =============================================================================
#
# Two prompts live here:
#
#   1. get_visit_advisor_prompt()   system prompt for the conversational
#                                   ADK agent (agent/visit_agent.py)
#   2. build_recommendation_prompt() the one-shot request sent to the LLM
#                                   recommendation oracle (agent/oracle.py)
#
# Both inject today's date at call time.  The oracle prompt carries the same
# scoring rubric as core/scoring.py so the two paths produce comparable
# numbers, and it spells out the exact JSON shape agent/schemas.py accepts.
# =============================================================================

from datetime import date
from typing import Optional, Sequence

from core.models import Attraction, CrowdDay, VisitPreferences, WeatherDay
from core.scoring import IDEAL_TEMP_MAX, IDEAL_TEMP_MIN


def get_visit_advisor_prompt(today: Optional[date] = None) -> str:
    """System prompt for the advisor agent, grounded in today's date."""
    today_iso = (today or date.today()).isoformat()

    return f"""You are a friendly, precise visit planner for attractions in Jakarta.
You help people pick the best upcoming day to visit an attraction.

TODAY'S DATE: {today_iso}
Every date you mention must be {today_iso} or later.

PROCESS (follow in order):

1. IDENTIFY THE ATTRACTION
   If the user has not named one clearly, call list_attractions and ask
   them to choose.  Always work with the attraction id (e.g. "attr_001").

2. CHECK THE INPUTS
   You may call get_weather_forecast and get_crowd_forecast to look at the
   raw signals, but this is optional.

3. RECOMMEND
   Call recommend_visit_dates with the attraction id.  Pass avoid_crowds,
   group_size and budget_range if the user mentioned them.

4. PRESENT
   - Lead with the best date, its score out of 100 and its badges.
   - Explain the score breakdown (weather /40, crowd /35, price /15,
     events /10) in plain words.
   - Offer one or two runner-up dates.
   - Pass on any warnings from the insights (rain, holiday crowds,
     closed days).
   - If even the best date scores below 50, call suggest_alternatives
     and offer one or two similar attractions.

DO NOT:
  - invent dates, prices or crowd numbers that the tools did not return
  - recommend a date without saying why
  - dump raw tool output; interpret it
"""


def _weather_lines(weather_days: Sequence[WeatherDay]) -> str:
    return "\n".join(
        f"{w.date.isoformat()}|{w.temperature}°C|{w.condition}|{w.precipitation}%"
        for w in weather_days
    )


def _crowd_lines(crowd_days: Sequence[CrowdDay]) -> str:
    return "\n".join(
        f"{c.date.isoformat()}|{c.expected_visitors}|{c.capacity_percentage}%|{c.level}|"
        f"{'; '.join(c.factors)}"
        for c in crowd_days
    )


def build_recommendation_prompt(
    attraction: Attraction,
    weather_days: Sequence[WeatherDay],
    crowd_days: Sequence[CrowdDay],
    preferences: VisitPreferences,
) -> str:
    """Serialize the scoring inputs into the oracle request."""
    crowds = "avoid crowds" if preferences.avoid_crowds else "crowds OK"
    interests = ", ".join(preferences.interests) or "none given"
    closed = [day.capitalize() for day, hours in attraction.open_hours if hours == "Closed"]

    return f"""Score every date below for a visit to {attraction.name} and rank them.

ATTRACTION: {attraction.name} ({attraction.category}) in {attraction.location}
About: {attraction.description or "no description"}
Capacity: {attraction.capacity} visitors/day | Base price: {attraction.currency} {attraction.base_price}
VISITOR: {preferences.budget_range} budget, {preferences.group_size} people, {crowds}, interests: {interests}

SCORING (100 pts total, integers only):
- weather (0-40): {IDEAL_TEMP_MIN}-{IDEAL_TEMP_MAX}°C and low precipitation is best; clear/sunny is a bonus.
- crowd (0-35): <40% capacity = 35; 40-60% = 25; >60% = 10.
- price (0-15): weekday discount on low-crowd days = 15; standard price = 10; weekend premium = 5.
- events (0-10): no event data is available, use 0.
- closed on: {", ".join(closed) or "never"}. Say so in the reasons for those dates.
- score MUST equal weather + crowd + price + events.

WEATHER (date|temp|condition|precip%):
{_weather_lines(weather_days)}

CROWDS (date|visitors|capacity%|level|factors):
{_crowd_lines(crowd_days)}

Return ONLY a JSON object, one entry per date above, using exactly the dates listed:
{{
  "recommendedDates": [
    {{
      "date": "YYYY-MM-DD",
      "dayOfWeek": "Tuesday",
      "score": 0,
      "scoreBreakdown": {{"weather": 0, "crowd": 0, "price": 0, "events": 0}},
      "weather": {{"temperature": 0, "condition": "string", "precipitation": 0}},
      "crowd": {{"level": "low|moderate|high|very-high", "expectedVisitors": 0, "capacityPercentage": 0, "factors": ["string"]}},
      "pricing": {{"dynamicPrice": 0, "reason": "string"}},
      "reasons": ["string"],
      "badges": ["string"]
    }}
  ],
  "insights": [
    {{"type": "tip", "title": "Best Time to Visit", "message": "string"}}
  ]
}}"""
