# =============================================================================
# core/__init__.py
# =============================================================================
# This package contains ALL business logic for the visit-date advisor:
# crowd forecasting, weather data, date scoring and the attraction catalog.
#
# ARCHITECTURAL RULE:
#   Nothing in this package imports Google ADK, FastMCP, LiteLLM or any
#   orchestration framework.  Every module here is pure Python and can be
#   imported in a bare REPL with no network access.
#
#   The agent/ and tools/ layers wire these functions to the outside world.
# =============================================================================
