# =============================================================================
# agent/oracle.py  -  LLM Recommendation Oracle
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   An alternative to core.scoring.score_dates(): the same inputs are
#   serialized into a prompt (agent/prompt.py), sent to an LLM through
#   LiteLLM, and the JSON reply is validated against the RecommendationSet
#   schema (agent/schemas.py).
#
# RETRY WITH ALTERNATES:
#   The oracle holds an ORDERED list of LiteLLM model ids.  Each attempt uses
#   the next model:
#
#     attempt 1 -> models[0]
#        overloaded / unavailable?  sleep(base_delay)      -> models[1]
#        overloaded / unavailable?  sleep(base_delay * 2)  -> models[2]
#        ...
#
#   - "Overloaded/unavailable" means LiteLLM's ServiceUnavailableError,
#     InternalServerError, RateLimitError, Timeout or APIConnectionError, an
#     HTTP status of 429/500/502/503/504, or a message saying so.  These
#     move on to the next model.
#   - Any other error (bad request, auth, unknown model) fails fast with
#     OracleError without trying the rest of the list.
#   - A reply that does not validate raises OracleMalformed immediately;
#     asking again is not expected to fix it.
#   - Running out of attempts raises OracleUnavailable.
#
#   No partial result is ever accepted mid-retry.  The caller
#   (agent/planner.py) turns every OracleError into the deterministic
#   scorer's result.
# =============================================================================

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional, Sequence

import litellm

from agent.prompt import build_recommendation_prompt
from agent.schemas import parse_oracle_text
from core.errors import OracleError, OracleMalformed, OracleUnavailable
from core.models import Attraction, CrowdDay, RecommendationSet, VisitPreferences, WeatherDay

logger = logging.getLogger(__name__)

RETRYABLE_STATUS_CODES = frozenset({429, 500, 502, 503, 504})
_RETRYABLE_EXCEPTIONS = (
    litellm.ServiceUnavailableError,
    litellm.InternalServerError,
    litellm.RateLimitError,
    litellm.Timeout,
    litellm.APIConnectionError,
)
_UNAVAILABLE_MARKERS = ("overloaded", "unavailable")

SYSTEM_INSTRUCTION = "Respond directly without extended reasoning. Analyze the data and return JSON only."

Completion = Callable[..., Awaitable[Any]]
Sleep = Callable[[float], Awaitable[None]]


def is_unavailable(exc: BaseException) -> bool:
    """True for failures worth retrying against another model."""
    if isinstance(exc, _RETRYABLE_EXCEPTIONS):
        return True
    if getattr(exc, "status_code", None) in RETRYABLE_STATUS_CODES:
        return True
    message = str(exc).lower()
    return any(marker in message for marker in _UNAVAILABLE_MARKERS)


def _reply_text(response: Any) -> str:
    try:
        return response.choices[0].message.content or ""
    except (AttributeError, IndexError, KeyError, TypeError) as exc:
        raise OracleMalformed("oracle response has no message content") from exc


class LLMRecommendationOracle:
    """Asks an LLM to score the dates, trying alternate models when overloaded."""

    def __init__(
        self,
        models: Sequence[str],
        max_attempts: int = 3,
        base_delay: float = 1.0,
        *,
        completion: Optional[Completion] = None,
        sleep: Sleep = asyncio.sleep,
        temperature: float = 0.7,
        timeout: float = 60.0,
    ):
        if not models:
            raise ValueError("at least one oracle model is required")
        self.models = list(models)
        self.max_attempts = max(1, max_attempts)
        self.base_delay = base_delay
        self._completion = completion
        self._sleep = sleep
        self.temperature = temperature
        self.timeout = timeout

    def _schedule(self) -> list[str]:
        # One attempt per model, bounded by max_attempts.
        return self.models[: self.max_attempts]

    async def _call(self, model: str, prompt: str) -> Any:
        completion = self._completion or litellm.acompletion
        return await completion(
            model=model,
            messages=[
                {"role": "system", "content": SYSTEM_INSTRUCTION},
                {"role": "user", "content": prompt},
            ],
            temperature=self.temperature,
            timeout=self.timeout,
        )

    async def recommend(
        self,
        attraction: Attraction,
        weather_days: Sequence[WeatherDay],
        crowd_days: Sequence[CrowdDay],
        preferences: Optional[VisitPreferences] = None,
    ) -> RecommendationSet:
        preferences = preferences or VisitPreferences()
        prompt = build_recommendation_prompt(attraction, weather_days, crowd_days, preferences)

        last_error: Optional[BaseException] = None
        for attempt, model in enumerate(self._schedule()):
            if attempt > 0:
                delay = self.base_delay * (2 ** (attempt - 1))
                logger.info("Retrying oracle with %s in %.1fs", model, delay)
                await self._sleep(delay)
            try:
                response = await self._call(model, prompt)
            except Exception as exc:
                if not is_unavailable(exc):
                    raise OracleError(f"oracle {model} failed: {exc}") from exc
                logger.warning("Oracle %s unavailable (attempt %d): %s", model, attempt + 1, exc)
                last_error = exc
                continue

            result = parse_oracle_text(_reply_text(response))
            return self._ground(result, weather_days, crowd_days)

        raise OracleUnavailable(
            f"all {len(self._schedule())} oracle attempts were unavailable"
        ) from last_error

    @staticmethod
    def _ground(
        result: RecommendationSet,
        weather_days: Sequence[WeatherDay],
        crowd_days: Sequence[CrowdDay],
    ) -> RecommendationSet:
        """Reject invented dates and attach the input records to each date."""
        weather_by_date = {w.date: w for w in weather_days}
        crowd_by_date = {c.date: c for c in crowd_days}
        for rec in result.recommended_dates:
            if rec.date not in weather_by_date or rec.date not in crowd_by_date:
                raise OracleMalformed(f"oracle recommended unknown date {rec.date.isoformat()}")
            rec.weather = weather_by_date[rec.date]
            rec.crowd = crowd_by_date[rec.date]
        return result
