# =============================================================================
# agent/visit_agent.py  -  Google ADK Agent Configuration
# =============================================================================
#
# WHAT THIS FILE DOES:
#   Builds the conversational advisor: a Google ADK Agent whose reasoning
#   model is reached through LiteLlm and whose tools come from the FastMCP
#   server in tools/mcp_server.py.
#
#   ┌─────────────────────── Google ADK Agent ───────────────────────┐
#   │  system prompt ──► LiteLlm(model) ──► MCPToolset (stdio)        │
#   └───────────────────────────────────────────┬────────────────────┘
#                                               ▼
#                                   tools/mcp_server.py (FastMCP)
#                                     list_attractions
#                                     get_crowd_forecast
#                                     get_weather_forecast
#                                     recommend_visit_dates
#                                               ▼
#                                   agent/planner.py + core/
#
# MODEL:
#   AGENT_MODEL is any LiteLLM model id, "openrouter/openai/gpt-4o" by
#   default.  LiteLlm reads the provider key (e.g. OPENROUTER_API_KEY) from
#   the environment.
#
# MCP CONNECTION:
#   ADK starts the tool server as a subprocess with the current interpreter
#   (`python -m tools.mcp_server`) from the project root and talks to it
#   over stdin/stdout.
# =============================================================================

import os
import sys
from typing import Optional

from google.adk.agents import Agent
from google.adk.models.lite_llm import LiteLlm
from google.adk.tools.mcp_tool import MCPToolset, StdioServerParameters

from agent.prompt import get_visit_advisor_prompt
from core.config import Settings


def create_agent(settings: Optional[Settings] = None) -> Agent:
    """Create the visit-date advisor agent wired to the MCP tool server."""
    settings = settings or Settings.from_env()

    project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
    mcp_tools = MCPToolset(
        connection_params=StdioServerParameters(
            command=sys.executable,
            args=["-m", "tools.mcp_server"],
            cwd=project_root,
        ),
    )

    return Agent(
        name="visit_date_advisor",
        model=LiteLlm(model=settings.agent_model),
        instruction=get_visit_advisor_prompt(),
        tools=[mcp_tools],
    )
