"""
Graph builder for constructing the conversation workflow.
Assembles nodes, edges, and services into an executable graph.
"""

from langgraph.graph import StateGraph, END
from langgraph.checkpoint.memory import MemorySaver

from farmer_agent import config
from farmer_agent.models.domain import ChatState
from farmer_agent.services.assistant_service import AssistantService
from farmer_agent.services.collaborator_service import (
    CollaboratorService,
    MarketProvider,
    WeatherProvider,
)
from farmer_agent.graph.nodes import GraphNodes
from farmer_agent.graph.edges import route_after_assistant
from farmer_agent.utils.logger import get_logger

logger = get_logger(__name__)


def build_graph(
    with_checkpointer: bool = False,
    assistant_service: AssistantService | None = None,
    collaborator_service: CollaboratorService | None = None,
    weather_provider: WeatherProvider | None = None,
    market_provider: MarketProvider | None = None,
):
    """
    Builds and compiles the conversation workflow.

    Args:
        with_checkpointer: If True, compiles with MemorySaver so a thread_id
            keeps messages and context between turns
        assistant_service: Rule pipeline (default tables when omitted)
        collaborator_service: Retry/timeout guard for data sources
        weather_provider: Weather data source
        market_provider: Market price source

    Returns:
        Compiled graph ready for execution
    """
    logger.info("graph_components_initializing")

    nodes = GraphNodes(
        assistant_service=assistant_service
        or AssistantService(history_window=config.HISTORY_WINDOW),
        collaborator_service=collaborator_service or CollaboratorService(),
        weather_provider=weather_provider or WeatherProvider(),
        market_provider=market_provider or MarketProvider(),
    )

    logger.info("graph_workflow_building")
    workflow = StateGraph(ChatState)

    workflow.add_node("assistant", nodes.assistant_node)
    workflow.add_node("weather", nodes.weather_node)
    workflow.add_node("market", nodes.market_node)
    workflow.add_node("merge_context", nodes.merge_context_node)

    workflow.set_entry_point("assistant")

    workflow.add_conditional_edges(
        "assistant",
        route_after_assistant,
        {
            "weather": "weather",
            "market": "market",
            "merge_context": "merge_context",
        },
    )

    workflow.add_edge("weather", "merge_context")
    workflow.add_edge("market", "merge_context")
    workflow.add_edge("merge_context", END)

    if with_checkpointer:
        logger.info("graph_compiling", checkpointer=True)
        return workflow.compile(checkpointer=MemorySaver())
    logger.info("graph_compiling", checkpointer=False)
    return workflow.compile()
