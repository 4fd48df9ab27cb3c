# =============================================================================
# core/config.py  -  Runtime Configuration
# =============================================================================
#
# All knobs come from environment variables.  The entry points (main.py and
# tools/mcp_server.py) call load_dotenv() first, so a local .env file works
# the same as exported variables.
#
#   USE_LIVE_WEATHER          true -> Open-Meteo, false -> synthetic series
#   USE_LLM_ORACLE            true -> ask an LLM first, deterministic fallback
#   ORACLE_MODELS             comma-separated LiteLLM model ids, in preference order
#   ORACLE_MAX_ATTEMPTS       max oracle calls per recommendation
#   ORACLE_BASE_DELAY         seconds before the first retry (doubles each time)
#   RECOMMENDATION_CACHE_TTL  seconds an oracle result stays fresh
#   FORECAST_DAYS             default forecast window
#   AGENT_MODEL               LiteLLM model id for the conversational agent
# =============================================================================

from dataclasses import dataclass
import os
from typing import Mapping, Optional

from core.errors import InvalidArgument

DEFAULT_ORACLE_MODELS = (
    "openrouter/google/gemini-2.5-flash",
    "openrouter/openai/gpt-4o-mini",
)


def _env_bool(env: Mapping[str, str], key: str, default: bool) -> bool:
    raw = env.get(key)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_int(env: Mapping[str, str], key: str, default: int) -> int:
    raw = env.get(key)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise InvalidArgument(f"{key} must be an integer, got {raw!r}") from exc


def _env_float(env: Mapping[str, str], key: str, default: float) -> float:
    raw = env.get(key)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise InvalidArgument(f"{key} must be a number, got {raw!r}") from exc


@dataclass(frozen=True)
class Settings:
    """Snapshot of the environment-driven configuration."""

    use_live_weather: bool = False
    use_llm_oracle: bool = False
    oracle_models: tuple[str, ...] = DEFAULT_ORACLE_MODELS
    oracle_max_attempts: int = 3
    oracle_base_delay: float = 1.0
    recommendation_cache_ttl: float = 1800.0
    forecast_days: int = 7
    agent_model: str = "openrouter/openai/gpt-4o"

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if env is None else env

        models_raw = env.get("ORACLE_MODELS", "")
        models = tuple(m.strip() for m in models_raw.split(",") if m.strip())

        settings = cls(
            use_live_weather=_env_bool(env, "USE_LIVE_WEATHER", False),
            use_llm_oracle=_env_bool(env, "USE_LLM_ORACLE", False),
            oracle_models=models or DEFAULT_ORACLE_MODELS,
            oracle_max_attempts=_env_int(env, "ORACLE_MAX_ATTEMPTS", 3),
            oracle_base_delay=_env_float(env, "ORACLE_BASE_DELAY", 1.0),
            recommendation_cache_ttl=_env_float(env, "RECOMMENDATION_CACHE_TTL", 1800.0),
            forecast_days=_env_int(env, "FORECAST_DAYS", 7),
            agent_model=env.get("AGENT_MODEL", "").strip() or "openrouter/openai/gpt-4o",
        )
        if settings.oracle_max_attempts < 1:
            raise InvalidArgument("ORACLE_MAX_ATTEMPTS must be at least 1")
        if settings.forecast_days < 1:
            raise InvalidArgument("FORECAST_DAYS must be at least 1")
        return settings
