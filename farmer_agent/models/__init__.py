"""
Models package exports for domain entities and schemas.
"""

from farmer_agent.models.domain import (
    Intent,
    INTENT_PRIORITY,
    ENTITY_CATEGORIES,
    EntityBag,
    ConversationContext,
    ConversationTurn,
    ChatState,
)
from farmer_agent.models.schemas import (
    ContextDelta,
    ComposedReply,
    ChatTurnResult,
    DiagnosisCandidate,
    ExternalAnalysis,
    WeatherSnapshot,
    WeatherReport,
    MarketQuote,
    SoilSample,
    SoilAnalysis,
)

__all__ = [
    "Intent",
    "INTENT_PRIORITY",
    "ENTITY_CATEGORIES",
    "EntityBag",
    "ConversationContext",
    "ConversationTurn",
    "ChatState",
    "ContextDelta",
    "ComposedReply",
    "ChatTurnResult",
    "DiagnosisCandidate",
    "ExternalAnalysis",
    "WeatherSnapshot",
    "WeatherReport",
    "MarketQuote",
    "SoilSample",
    "SoilAnalysis",
]
