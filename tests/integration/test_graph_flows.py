"""
Integration tests for the LangGraph conversation workflow.
Tests complete chat turns through the graph, including collaborator routing.
"""

import random

import pytest
from unittest.mock import AsyncMock, Mock
from langchain_core.messages import AIMessage, HumanMessage

from farmer_agent.graph.builder import build_graph
from farmer_agent.models.domain import ChatState, ConversationContext
from farmer_agent.services.collaborator_service import (
    CollaboratorService,
    MarketProvider,
    WeatherProvider,
)


@pytest.fixture
def graph():
    """Graph with seeded stubs and no backoff waits."""
    return build_graph(
        with_checkpointer=False,
        collaborator_service=CollaboratorService(backoff=0),
        weather_provider=WeatherProvider(rng=random.Random(1), latency=0),
        market_provider=MarketProvider(rng=random.Random(1), latency=0),
    )


@pytest.fixture
def failing_weather_provider():
    """Weather provider whose every call fails."""
    provider = Mock(spec=WeatherProvider)
    provider.current = AsyncMock(side_effect=RuntimeError("weather API down"))
    return provider


@pytest.mark.integration
class TestGraphWeatherFlow:
    """Tests for weather questions."""

    @pytest.mark.asyncio
    async def test_weather_with_known_location(self, graph, farm_context):
        """Should attach weather data and stamp the check time."""
        # Arrange
        inputs: ChatState = {
            "messages": [HumanMessage(content="Will it rain today?")],
            "context": farm_context,
        }

        # Act
        result = await graph.ainvoke(inputs)

        # Assert
        assert result["intent"] == "weather"
        assert result["entities"] == {"timeframes": ["today"]}
        assert result["weather_data"]["location"] == "Nashik"
        assert result["context"].last_weather_check is not None
        assert result["offline"] is False
        assert "Nashik" in result["messages"][-1].content

    @pytest.mark.asyncio
    async def test_weather_without_location(self, graph, empty_context):
        """Should skip the weather collaborator and ask for a location."""
        # Arrange
        inputs: ChatState = {
            "messages": [HumanMessage(content="What is the forecast?")],
            "context": empty_context,
        }

        # Act
        result = await graph.ainvoke(inputs)

        # Assert
        assert result["intent"] == "weather"
        assert result["weather_data"] is None
        assert result["context"].last_weather_check is None
        assert "your location" in result["messages"][-1].content

    @pytest.mark.asyncio
    async def test_weather_failure_sets_offline(self, farm_context, failing_weather_provider):
        """Should keep the rule-based reply when the weather service fails."""
        # Arrange
        graph = build_graph(
            collaborator_service=CollaboratorService(max_retries=2, backoff=0),
            weather_provider=failing_weather_provider,
        )
        inputs: ChatState = {
            "messages": [HumanMessage(content="Is a storm coming?")],
            "context": farm_context,
        }

        # Act
        result = await graph.ainvoke(inputs)

        # Assert
        assert result["offline"] is True
        assert result["weather_data"] is None
        assert isinstance(result["messages"][-1], AIMessage)
        assert "Nashik" in result["messages"][-1].content
        assert failing_weather_provider.current.await_count == 2


@pytest.mark.integration
class TestGraphMarketFlow:
    """Tests for market questions."""

    @pytest.mark.asyncio
    async def test_market_quote_and_context_merge(self, graph, empty_context):
        """Should quote the crop and remember it in the context."""
        # Arrange
        inputs: ChatState = {
            "messages": [HumanMessage(content="Where can I sell my onion?")],
            "context": empty_context,
        }

        # Act
        result = await graph.ainvoke(inputs)

        # Assert
        assert result["intent"] == "market"
        assert result["market_data"]["crop"] == "onion"
        assert result["market_data"]["market"] == "Nashik APMC"
        assert result["context"].known_crops == ["onion"]
        assert result["suggestions"][0] == "Indian market prices"

    @pytest.mark.asyncio
    async def test_market_without_crop(self, graph, empty_context):
        """Should not call the market collaborator without a crop."""
        # Arrange
        inputs: ChatState = {
            "messages": [HumanMessage(content="market trends")],
            "context": empty_context,
        }

        # Act
        result = await graph.ainvoke(inputs)

        # Assert
        assert result["intent"] == "market"
        assert result["market_data"] is None
        assert result["context"].known_crops == []


@pytest.mark.integration
class TestGraphConversation:
    """Tests for multi-turn behaviour."""

    @pytest.mark.asyncio
    async def test_greeting_without_user_message(self, graph):
        """Should greet when there is no user message to answer."""
        # Act
        result = await graph.ainvoke({"messages": []})

        # Assert
        assert result["intent"] == "general"
        assert result["messages"][-1].content.startswith("Hello!")

    @pytest.mark.asyncio
    async def test_checkpointed_turns_accumulate_crops(self):
        """Should carry context and messages across turns of a thread."""
        # Arrange
        graph = build_graph(
            with_checkpointer=True,
            collaborator_service=CollaboratorService(backoff=0),
            market_provider=MarketProvider(rng=random.Random(1), latency=0),
        )
        run_config = {"configurable": {"thread_id": "farm-1"}}

        # Act
        await graph.ainvoke(
            {
                "messages": [HumanMessage(content="I am growing tomato")],
                "context": ConversationContext(),
            },
            config=run_config,
        )
        result = await graph.ainvoke(
            {"messages": [HumanMessage(content="wheat harvest tips")]},
            config=run_config,
        )

        # Assert
        assert result["intent"] == "crop"
        assert result["context"].known_crops == ["tomato", "wheat"]
        assert len(result["messages"]) == 4
        assert result["context_delta"] == {"known_crops": ["wheat"]}
