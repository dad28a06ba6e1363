"""
Graph edge conditions for routing between nodes.
"""

from farmer_agent.models.domain import ChatState, Intent
from farmer_agent.utils.logger import get_logger

logger = get_logger(__name__)


def route_after_assistant(state: ChatState) -> str:
    """
    Routes to a data collaborator when the intent needs one.

    Weather is fetched only when the context knows a location; market data
    only when a crop was mentioned.

    Args:
        state: Current chat state

    Returns:
        Next node name: "weather", "market" or "merge_context"
    """
    intent = state.get("intent")
    if not intent:
        logger.warning("no_intent_in_state", fallback="merge_context")
        return "merge_context"

    context = state.get("context")
    if intent == Intent.WEATHER.value and context is not None and context.location:
        return "weather"

    if intent == Intent.MARKET.value and state.get("entities", {}).get("crops"):
        return "market"

    return "merge_context"
