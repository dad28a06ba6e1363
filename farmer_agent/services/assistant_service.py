"""
Assistant service running one chat message through the rule pipeline:
classifier -> response composer -> suggestion table.
"""

from typing import Sequence

from farmer_agent import config
from farmer_agent.models.domain import ConversationContext, ConversationTurn
from farmer_agent.models.schemas import ChatTurnResult
from farmer_agent.services.classifier_service import ClassifierService
from farmer_agent.services.response_service import ResponseService
from farmer_agent.services.suggestion_service import suggestions_for
from farmer_agent.utils.logger import get_logger

logger = get_logger(__name__)


class AssistantService:
    """
    Stateless facade over the classifier and composer.
    Safe to share between concurrent requests.
    """

    def __init__(
        self,
        classifier: ClassifierService | None = None,
        composer: ResponseService | None = None,
        history_window: int = config.HISTORY_WINDOW,
    ):
        """
        Initialize assistant service.

        Args:
            classifier: Intent/entity classifier
            composer: Reply composer
            history_window: Number of most recent turns passed to the composer
        """
        self.classifier = classifier or ClassifierService()
        self.composer = composer or ResponseService(history_window=history_window)
        self.history_window = history_window

    def process_chat_turn(
        self,
        message: str,
        context: ConversationContext | None = None,
        history: Sequence[ConversationTurn] = (),
    ) -> ChatTurnResult:
        """
        Classifies a message and composes the reply and follow-up suggestions.

        The context is only read. Callers merge the returned context_delta and
        fetch weather/market data themselves when the intent asks for it.

        Args:
            message: Farmer's message
            context: Caller-owned conversation context
            history: Prior turns, oldest first

        Returns:
            ChatTurnResult
        """
        context = context or ConversationContext()
        recent = list(history)[-self.history_window:]

        intent, entities = self.classifier.classify(message)
        composed = self.composer.compose(intent, entities, context, recent)
        suggestions = suggestions_for(intent)

        logger.info(
            "chat_turn_processed",
            intent=intent.value,
            entities={category: len(terms) for category, terms in entities.items()},
            suggestions=len(suggestions),
            context_delta=composed.context_delta is not None,
        )

        return ChatTurnResult(
            intent=intent,
            entities=entities,
            reply=composed.text,
            suggestions=suggestions,
            context_delta=composed.context_delta,
        )


def process_chat_turn(
    message: str,
    context: ConversationContext | None = None,
    history: Sequence[ConversationTurn] = (),
) -> ChatTurnResult:
    """Processes a chat message with the default rule tables."""
    return AssistantService().process_chat_turn(message, context, history)
