"""
Shared test fixtures and configuration.
"""

import random

import pytest
from langchain_core.messages import HumanMessage, AIMessage

from farmer_agent.models.domain import ChatState, ConversationContext, ConversationTurn
from farmer_agent.services.assistant_service import AssistantService
from farmer_agent.services.classifier_service import ClassifierService
from farmer_agent.services.collaborator_service import (
    CollaboratorService,
    ImageAnalyzer,
    MarketProvider,
    WeatherProvider,
)
from farmer_agent.services.diagnosis_service import DiagnosisService
from farmer_agent.services.response_service import ResponseService


@pytest.fixture
def classifier() -> ClassifierService:
    """Classifier over the default lexicon."""
    return ClassifierService()


@pytest.fixture
def composer() -> ResponseService:
    """Composer over the default templates."""
    return ResponseService()


@pytest.fixture
def assistant() -> AssistantService:
    """Assistant pipeline with default tables."""
    return AssistantService()


@pytest.fixture
def diagnosis_service() -> DiagnosisService:
    """Diagnosis engine with the default rule set."""
    return DiagnosisService()


@pytest.fixture
def collaborator_service() -> CollaboratorService:
    """Collaborator guard without backoff waits."""
    return CollaboratorService(max_retries=3, timeout=1, rate_limit=2, backoff=0)


@pytest.fixture
def weather_provider() -> WeatherProvider:
    """Weather stub with a seeded random source."""
    return WeatherProvider(rng=random.Random(42), latency=0)


@pytest.fixture
def market_provider() -> MarketProvider:
    """Market stub with a seeded random source."""
    return MarketProvider(rng=random.Random(7), latency=0)


@pytest.fixture
def image_analyzer() -> ImageAnalyzer:
    """Image analysis stub without latency."""
    return ImageAnalyzer(latency=0)


@pytest.fixture
def empty_context() -> ConversationContext:
    """Context of a first-time farmer."""
    return ConversationContext()


@pytest.fixture
def farm_context() -> ConversationContext:
    """Context of a farmer who already shared details."""
    return ConversationContext(
        location="Nashik",
        known_crops=["onion"],
        soil_type="black",
    )


@pytest.fixture
def sample_history() -> list[ConversationTurn]:
    """Seven prior turns, oldest first."""
    texts = [
        "Hello",
        "Hello! How can I help?",
        "I grow onion",
        "Great choice.",
        "My field is dry",
        "Consider drip irrigation.",
        "Thanks",
    ]
    return [
        ConversationTurn(speaker="user" if i % 2 == 0 else "assistant", text=text)
        for i, text in enumerate(texts)
    ]


@pytest.fixture
def sample_chat_state(farm_context) -> ChatState:
    """ChatState with prior messages and a new user question."""
    return {
        "messages": [
            HumanMessage(content="Hello"),
            AIMessage(content="Hello! How can I help?"),
            HumanMessage(content="Tell me about tomato planting"),
        ],
        "context": farm_context,
    }


@pytest.fixture
def tomato_analysis() -> dict:
    """Image analysis payload in the camelCase shape sent by browsers."""
    return {
        "cropType": "Tomato",
        "detectedSymptoms": ["Brown spots", "Yellowing leaves"],
        "confidence": 0.85,
    }
