# =============================================================================
# tools/__init__.py
# =============================================================================
# FastMCP tool wrappers around core/ and agent/planner.py.
#
# Each tool:
#   1. looks up the attraction by id
#   2. calls a core function or the recommendation pipeline
#   3. converts dataclasses to lean JSON-ready dicts
#
# Tools hold no business logic.  Their docstrings are what the agent's LLM
# reads to decide when and how to call them, so they state inputs and
# outputs precisely.
# =============================================================================
