"""
Context service handling the caller side of the conversation context contract.
Merges proposed deltas and windows the conversation history.
"""

from datetime import datetime, timezone
from typing import Iterable, Sequence

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage

from farmer_agent import config
from farmer_agent.models.domain import ConversationContext, ConversationTurn
from farmer_agent.models.schemas import ContextDelta
from farmer_agent.utils.logger import get_logger

logger = get_logger(__name__)


class ContextService:
    """
    Operations a caller uses to maintain its ConversationContext and history.
    All methods return new objects; inputs are never modified.
    """

    @staticmethod
    def apply_context_delta(
        context: ConversationContext, delta: ContextDelta | None
    ) -> ConversationContext:
        """
        Merges a proposed delta, appending only crops not already known.

        Args:
            context: Current context
            delta: Proposal returned by the engine (None means no change)

        Returns:
            The same context when nothing is new, otherwise an updated copy
        """
        if delta is None or not delta.known_crops:
            return context

        merged = list(context.known_crops)
        for crop in delta.known_crops:
            if crop not in merged:
                merged.append(crop)

        if len(merged) == len(context.known_crops):
            return context

        logger.info(
            "context_merged",
            added_crops=merged[len(context.known_crops):],
            known_crops=len(merged),
        )
        return context.model_copy(update={"known_crops": merged})

    @staticmethod
    def record_weather_check(
        context: ConversationContext, checked_at: datetime | None = None
    ) -> ConversationContext:
        """
        Stamps the time weather data was last fetched for this context.

        Args:
            context: Current context
            checked_at: Timestamp (defaults to now, UTC)

        Returns:
            Updated copy of the context
        """
        checked_at = checked_at or datetime.now(timezone.utc)
        return context.model_copy(update={"last_weather_check": checked_at})

    @staticmethod
    def recent_history(
        history: Sequence[ConversationTurn],
        window: int = config.HISTORY_WINDOW,
    ) -> list[ConversationTurn]:
        """
        Most recent turns, oldest first, bounded to the window size.
        """
        if window <= 0:
            return []
        return list(history)[-window:]

    @staticmethod
    def history_from_messages(
        messages: Iterable[BaseMessage],
        window: int = config.HISTORY_WINDOW,
    ) -> list[ConversationTurn]:
        """
        Converts chat messages to turns, skipping tool and system messages.

        Args:
            messages: Conversation messages, oldest first
            window: Number of most recent turns to keep

        Returns:
            Windowed list of ConversationTurn
        """
        turns = []
        for message in messages:
            if isinstance(message, HumanMessage):
                turns.append(ConversationTurn(speaker="user", text=str(message.content)))
            elif isinstance(message, AIMessage) and not message.tool_calls:
                turns.append(
                    ConversationTurn(speaker="assistant", text=str(message.content))
                )
        return ContextService.recent_history(turns, window)
