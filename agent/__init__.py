# =============================================================================
# agent/__init__.py
# =============================================================================
# This package holds everything that talks to an LLM or orchestrates calls:
#
#   visit_agent.py  Google ADK agent (LiteLlm model + MCP tools)
#   prompt.py       advisor system prompt and the oracle request prompt
#   oracle.py       LLM recommendation oracle with retry-with-alternates
#   schemas.py      pydantic schema for the oracle's JSON reply
#   planner.py      async pipeline: weather + crowds -> oracle or scorer
#
# It depends on core/ for every piece of business logic; core/ never
# imports from here.
# =============================================================================
