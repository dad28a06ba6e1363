"""
Response composer selecting an intent-specific reply template.
Templates live in config/responses.yaml; no I/O happens at compose time.
"""

from typing import Callable, Mapping, Sequence

from farmer_agent import config
from farmer_agent.models.domain import (
    ConversationContext,
    ConversationTurn,
    EntityBag,
    Intent,
)
from farmer_agent.models.schemas import ComposedReply, ContextDelta
from farmer_agent.utils.rules import frozen_table
from farmer_agent.utils.logger import get_logger

logger = get_logger(__name__)


def _default_templates() -> Mapping[str, Mapping[str, str]]:
    return frozen_table("responses")["templates"]


def _first(entities: EntityBag, category: str) -> str | None:
    values = entities.get(category)
    return values[0] if values else None


class ResponseService:
    """
    Maps (intent, entities, context, history) to a reply and a context proposal.
    Every Intent has a handler; advice and general share the overview reply.
    """

    def __init__(
        self,
        templates: Mapping[str, Mapping[str, str]] | None = None,
        history_window: int = config.HISTORY_WINDOW,
    ):
        """
        Initialize response composer.

        Args:
            templates: Template table (defaults to config/responses.yaml)
            history_window: Number of most recent turns read from history
        """
        self.templates = templates or _default_templates()
        self.history_window = history_window
        self._handlers: dict[Intent, Callable[[EntityBag, ConversationContext], str]] = {
            Intent.WEATHER: self._weather,
            Intent.PEST: self._pest,
            Intent.SOIL: self._soil,
            Intent.CROP: self._crop,
            Intent.IRRIGATION: self._irrigation,
            Intent.MARKET: self._market,
            Intent.ADVICE: self._overview,
            Intent.GENERAL: self._overview,
        }

    def compose(
        self,
        intent: Intent,
        entities: EntityBag,
        context: ConversationContext,
        history: Sequence[ConversationTurn] = (),
    ) -> ComposedReply:
        """
        Composes the reply for a classified message.

        Args:
            intent: Classified intent
            entities: Extracted entities
            context: Caller-owned conversation context (read only)
            history: Prior turns, oldest first

        Returns:
            ComposedReply with text and, when crops were mentioned, a context delta
        """
        recent = list(history)[-self.history_window:]
        handler = self._handlers.get(intent, self._overview)
        text = handler(entities, context)

        crops = entities.get("crops")
        delta = ContextDelta(known_crops=list(crops)) if crops else None

        logger.debug(
            "reply_composed",
            intent=intent.value,
            history_turns=len(recent),
            context_delta=delta is not None,
        )
        return ComposedReply(text=text, context_delta=delta)

    def _template(self, intent: Intent, variant: str = "default") -> str:
        return self.templates[intent.value][variant]

    def _weather(self, entities: EntityBag, context: ConversationContext) -> str:
        if context.location:
            return self._template(Intent.WEATHER, "with_location").format(
                location=context.location
            )
        return self._template(Intent.WEATHER)

    def _pest(self, entities: EntityBag, context: ConversationContext) -> str:
        crop = _first(entities, "crops")
        if crop:
            return self._template(Intent.PEST, "with_crop").format(crop=crop)
        return self._template(Intent.PEST)

    def _soil(self, entities: EntityBag, context: ConversationContext) -> str:
        if context.soil_type:
            return self._template(Intent.SOIL, "with_soil_type").format(
                soil_type=context.soil_type
            )
        return self._template(Intent.SOIL)

    def _crop(self, entities: EntityBag, context: ConversationContext) -> str:
        crop = _first(entities, "crops")
        if crop:
            return self._template(Intent.CROP, "with_crop").format(crop=crop)
        return self._template(Intent.CROP)

    def _irrigation(self, entities: EntityBag, context: ConversationContext) -> str:
        return self._template(Intent.IRRIGATION)

    def _market(self, entities: EntityBag, context: ConversationContext) -> str:
        return self._template(Intent.MARKET)

    def _overview(self, entities: EntityBag, context: ConversationContext) -> str:
        return self._template(Intent.GENERAL)
