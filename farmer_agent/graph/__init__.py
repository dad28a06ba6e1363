"""
Graph package for the LangGraph conversation workflow.
"""

from farmer_agent.graph.builder import build_graph
from farmer_agent.graph.nodes import GraphNodes
from farmer_agent.graph.edges import route_after_assistant

__all__ = [
    "build_graph",
    "GraphNodes",
    "route_after_assistant",
]
