"""
Console entry point for the farmer agent.
Runs the checkpointed conversation graph in an interactive loop.
"""

import uuid
import asyncio
from langchain_core.messages import HumanMessage, AIMessage

from farmer_agent import config
from farmer_agent.graph.builder import build_graph
from farmer_agent.models.domain import ConversationContext
from farmer_agent.utils.rules import frozen_table
from farmer_agent.utils.logger import configure_logging, get_logger, set_conversation_id

logger = get_logger(__name__)

HELP_TEXT = """Commands:
  /location <place>   set your farm location (enables live weather)
  /soil <type>        set your soil type
  /context            show what the assistant knows about your farm
  exit | quit         leave"""


def _apply_command(line: str, context: ConversationContext) -> ConversationContext | None:
    """
    Handles a slash command.

    Returns:
        Updated context, or None if the line is not a known command
    """
    command, _, argument = line.partition(" ")
    argument = argument.strip()

    if command == "/location" and argument:
        print(f"-> Location set to {argument}")
        return context.model_copy(update={"location": argument})
    if command == "/soil" and argument:
        print(f"-> Soil type set to {argument}")
        return context.model_copy(update={"soil_type": argument})
    if command == "/context":
        print(context.model_dump_json(indent=2))
        return context
    return None


async def run_console_chat():
    """Async main loop for console chat interaction."""
    logger.info("console_mode_started")
    config.check_env_vars()

    console_app = build_graph(with_checkpointer=True)
    constants = frozen_table("responses")["constants"]

    thread_id = str(uuid.uuid4())
    set_conversation_id(thread_id)
    logger.info("conversation_started", thread_id=thread_id)

    run_config = {"configurable": {"thread_id": thread_id}}
    context = ConversationContext()

    print("\n" + "=" * 60)
    print("Farmer Agent - Type 'exit' or 'quit' to stop, '/help' for commands")
    print("=" * 60)
    print(f"\n{constants['greeting']}")

    while True:
        try:
            question = input("\nYour question: ").strip()
            if question.lower() in ["exit", "quit"]:
                break
            if not question:
                continue
            if question == "/help":
                print(HELP_TEXT)
                continue
            if question.startswith("/"):
                updated = _apply_command(question, context)
                if updated is None:
                    print(HELP_TEXT)
                else:
                    context = updated
                continue

            inputs = {"messages": [HumanMessage(content=question)], "context": context}

            print("\n--- Processing... ---")
            final_state = {}
            async for event in console_app.astream(
                inputs, config=run_config, stream_mode="values"
            ):
                final_state = event

            context = final_state.get("context", context)
            print(f"-> Intent: {final_state.get('intent')}")

            last_message = final_state["messages"][-1]
            if isinstance(last_message, AIMessage):
                print(f"\nAssistant:\n{last_message.content}")

            weather = final_state.get("weather_data")
            if weather:
                print(
                    f"\nWeather in {weather['location']}: {weather['condition']}, "
                    f"{weather['temperature']}°C, humidity {weather['humidity']}%"
                )
            market = final_state.get("market_data")
            if market:
                print(
                    f"\nMarket price for {market['crop']}: {market['price']} "
                    f"{market['currency']}/{market['unit']} at {market['market']} "
                    f"(trend: {market['trend']})"
                )
            if final_state.get("offline"):
                print(f"\n{constants['offline_notice']}")

            suggestions = final_state.get("suggestions") or []
            if suggestions:
                print("\nYou could also ask about: " + ", ".join(suggestions))

        except KeyboardInterrupt:
            logger.info("conversation_interrupted_by_user")
            break
        except Exception as e:
            logger.error("conversation_error", exc_info=True, error=str(e))
            print(f"\nError: {e}")
            break

    logger.info("conversation_ended", thread_id=thread_id)
    print("\nGoodbye! Happy farming.")


def main() -> None:
    """Entry point of the farmer-agent console script."""
    configure_logging(level="WARNING", use_structured=False)
    asyncio.run(run_console_chat())


if __name__ == "__main__":
    main()
