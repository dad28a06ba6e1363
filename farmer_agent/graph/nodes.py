"""
Graph nodes implementing the conversation workflow.
Each node is thin and delegates to services.
"""

from langchain_core.messages import AIMessage, HumanMessage

from farmer_agent.models.domain import ChatState, ConversationContext, Intent
from farmer_agent.models.schemas import ContextDelta
from farmer_agent.services.assistant_service import AssistantService
from farmer_agent.services.collaborator_service import (
    CollaboratorError,
    CollaboratorService,
    MarketProvider,
    WeatherProvider,
)
from farmer_agent.services.context_service import ContextService
from farmer_agent.services.suggestion_service import suggestions_for
from farmer_agent.utils.rules import frozen_table
from farmer_agent.utils.logger import get_logger

logger = get_logger(__name__)


def _context(state: ChatState) -> ConversationContext:
    return state.get("context") or ConversationContext()


class GraphNodes:
    """
    Container for all graph node functions.
    """

    def __init__(
        self,
        assistant_service: AssistantService,
        collaborator_service: CollaboratorService,
        weather_provider: WeatherProvider,
        market_provider: MarketProvider,
    ):
        """
        Initialize graph nodes with required services.

        Args:
            assistant_service: Rule pipeline for chat messages
            collaborator_service: Retry/timeout guard for data sources
            weather_provider: Weather data source
            market_provider: Market price source
        """
        self.assistant_service = assistant_service
        self.collaborator_service = collaborator_service
        self.weather_provider = weather_provider
        self.market_provider = market_provider

    def assistant_node(self, state: ChatState) -> dict:
        """
        Entry node: runs the rule pipeline on the latest user message.
        Resets per-turn fields so nothing leaks from the previous turn.
        """
        logger.info("node_started", node="assistant")
        messages = state.get("messages", [])
        context = _context(state)

        if not messages or not isinstance(messages[-1], HumanMessage):
            logger.warning("no_user_message_in_state", fallback="greeting")
            greeting = frozen_table("responses")["constants"]["greeting"]
            return {
                "messages": [AIMessage(content=greeting)],
                "context": context,
                "intent": Intent.GENERAL.value,
                "entities": {},
                "suggestions": suggestions_for(Intent.GENERAL),
                "context_delta": None,
                "weather_data": None,
                "market_data": None,
                "offline": False,
            }

        history = ContextService.history_from_messages(
            messages[:-1], window=self.assistant_service.history_window
        )
        result = self.assistant_service.process_chat_turn(
            str(messages[-1].content), context, history
        )

        return {
            "messages": [AIMessage(content=result.reply)],
            "context": context,
            "intent": result.intent.value,
            "entities": result.entities,
            "suggestions": result.suggestions,
            "context_delta": (
                result.context_delta.model_dump() if result.context_delta else None
            ),
            "weather_data": None,
            "market_data": None,
            "offline": False,
        }

    async def weather_node(self, state: ChatState) -> dict:
        """Fetches weather for the known location and stamps the check time."""
        logger.info("node_started", node="weather")
        context = _context(state)

        try:
            snapshot = await self.collaborator_service.call(
                "weather", self.weather_provider.current, context.location
            )
        except CollaboratorError as e:
            logger.warning("weather_unavailable", error=str(e), fallback="offline_mode")
            return {"offline": True}

        return {
            "weather_data": snapshot.model_dump(),
            "context": ContextService.record_weather_check(context),
        }

    async def market_node(self, state: ChatState) -> dict:
        """Fetches a market quote for the first crop mentioned."""
        logger.info("node_started", node="market")
        crop = state["entities"]["crops"][0]

        try:
            quote = await self.collaborator_service.call(
                "market", self.market_provider.quote, crop
            )
        except CollaboratorError as e:
            logger.warning("market_unavailable", error=str(e), fallback="offline_mode")
            return {"offline": True}

        return {"market_data": quote.model_dump(mode="json")}

    def merge_context_node(self, state: ChatState) -> dict:
        """Applies the turn's context delta to the conversation context."""
        logger.info("node_started", node="merge_context")
        delta = state.get("context_delta")
        if not delta:
            return {}

        context = ContextService.apply_context_delta(
            _context(state), ContextDelta.model_validate(delta)
        )
        return {"context": context}
