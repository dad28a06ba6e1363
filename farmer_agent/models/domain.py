"""
Domain models representing the core conversation entities and state.
ChatState is the state object threaded through the LangGraph workflow.
"""

from datetime import datetime
from enum import Enum
from typing import Annotated, Any, Literal, Optional
from typing_extensions import TypedDict
from pydantic import BaseModel, ConfigDict, Field
from langchain_core.messages import BaseMessage
from langgraph.graph.message import add_messages


class Intent(str, Enum):
    """Coarse topic assigned to a free-text farming question."""

    WEATHER = "weather"
    PEST = "pest"
    SOIL = "soil"
    CROP = "crop"
    IRRIGATION = "irrigation"
    MARKET = "market"
    ADVICE = "advice"
    GENERAL = "general"


# Classification order; the first intent with a matching keyword wins.
INTENT_PRIORITY: tuple[Intent, ...] = (
    Intent.WEATHER,
    Intent.PEST,
    Intent.SOIL,
    Intent.CROP,
    Intent.IRRIGATION,
    Intent.MARKET,
    Intent.ADVICE,
)

ENTITY_CATEGORIES: tuple[str, ...] = ("crops", "locations", "timeframes", "problems")

# Category name -> matched terms in lexicon order. Absent category means no match.
EntityBag = dict[str, list[str]]


class ConversationContext(BaseModel):
    """
    Long-lived facts about the farmer, owned by the caller.

    The engine only reads it and proposes a ContextDelta; merging happens
    through context_service.apply_context_delta, which returns a new instance.

    Attributes:
        location: Free-form farm location, used by weather replies.
        known_crops: Crops mentioned so far, unique, in first-seen order.
        soil_type: Soil type reported by the farmer (e.g. "clay").
        last_weather_check: When weather data was last fetched for this context.
    """

    location: Optional[str] = None
    known_crops: list[str] = Field(default_factory=list)
    soil_type: Optional[str] = None
    last_weather_check: Optional[datetime] = None

    model_config = ConfigDict(frozen=True)


class ConversationTurn(BaseModel):
    """One prior (speaker, text) pair supplied as read-only history."""

    speaker: Literal["user", "assistant"]
    text: str

    model_config = ConfigDict(frozen=True)


class ChatState(TypedDict, total=False):
    """
    State of one conversation inside the LangGraph workflow.

    Attributes:
        messages: Conversation messages, appended through add_messages.
        context: Caller-owned ConversationContext, replaced on merge.
        intent: Intent of the last user message.
        entities: Entities extracted from the last user message.
        suggestions: Follow-up prompts for the last reply.
        context_delta: Proposed context update of the last turn.
        weather_data: Weather snapshot fetched for weather questions.
        market_data: Market quote fetched for market questions.
        offline: True when a data collaborator failed during the turn.
    """

    messages: Annotated[list[BaseMessage], add_messages]
    context: ConversationContext
    intent: str
    entities: EntityBag
    suggestions: list[str]
    context_delta: Optional[dict[str, Any]]
    weather_data: Optional[dict[str, Any]]
    market_data: Optional[dict[str, Any]]
    offline: bool
