# =============================================================================
# main.py  -  Entry Point for the Visit Date Advisor
# =============================================================================
#
# HOW TO RUN:
#   python main.py
#
# WHAT HAPPENS:
#   1. Creates the Google ADK agent (agent/visit_agent.py)
#   2. Opens an in-memory session
#   3. Reads questions from the terminal ("When should I visit Ragunan Zoo?")
#   4. Streams the agent's tool calls and prints its final answer
#
# The agent decides which MCP tools to call (list_attractions,
# get_weather_forecast, get_crowd_forecast, recommend_visit_dates).
# =============================================================================

import asyncio

from dotenv import load_dotenv

# Must run before the agent is created: LiteLlm and core.config read the
# environment at construction time.
load_dotenv()

from google.adk.runners import Runner
from google.adk.sessions import InMemorySessionService
from google.genai import types

from agent.visit_agent import create_agent

APP_NAME = "visit_date_advisor"
USER_ID = "demo_user"


async def run_agent():
    """Run the advisor interactively until the user quits."""
    print("=" * 70)
    print("  VISIT DATE ADVISOR")
    print("  Weather + crowds + dynamic pricing -> best day to go")
    print("=" * 70)
    print("\n🔧 Initializing agent...")
    agent = create_agent()

    session_service = InMemorySessionService()
    runner = Runner(
        agent=agent,
        app_name=APP_NAME,
        session_service=session_service,
    )
    session = await session_service.create_session(app_name=APP_NAME, user_id=USER_ID)

    print("✅ Agent ready!\n")
    print("💬 Ask when to visit an attraction (type 'quit' to exit)")
    print("-" * 70)

    while True:
        try:
            user_input = input("\n🧑 You: ").strip()
        except (EOFError, KeyboardInterrupt):
            print("\n\n👋 Goodbye!")
            break

        if user_input.lower() in ("quit", "exit", "q"):
            print("\n👋 Goodbye!")
            break
        if not user_input:
            continue

        user_message = types.Content(role="user", parts=[types.Part(text=user_input)])

        print("\n🤖 Agent is thinking...\n")
        print("-" * 70)

        final_response = ""
        async for event in runner.run_async(
            user_id=USER_ID,
            session_id=session.id,
            new_message=user_message,
        ):
            if event.content and event.content.parts:
                for part in event.content.parts:
                    if getattr(part, "text", None):
                        final_response = part.text
                    if getattr(part, "function_call", None):
                        print(f"  🔧 Calling tool: {part.function_call.name}")

        print("-" * 70)
        if final_response:
            print(f"\n🤖 Agent:\n\n{final_response}")
        else:
            print("\n⚠️  No response generated. The agent may have encountered an error.")
        print("\n" + "=" * 70)


if __name__ == "__main__":
    asyncio.run(run_agent())
