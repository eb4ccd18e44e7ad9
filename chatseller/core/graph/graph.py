"""
LangGraph conversation graph.
Orchestrates one turn: welcome, order collection, retrieval, generation, tools.
"""

import logging

from langgraph.graph import END, START, StateGraph

from chatseller.core.graph.nodes import (
    choose_after_collect,
    choose_entry,
    collect_order,
    dispatch_tools,
    generate_response,
    greet,
    retrieve_context,
    route_turn,
)
from chatseller.core.graph.state import ConversationState

logger = logging.getLogger(__name__)


def create_graph() -> StateGraph:
    """
    Create the conversation graph.

    Flow:
        START -> route -> greet -> END
                       -> collect -> END (confirmation, completed, cancelled)
                                  -> retrieve -> generate -> dispatch -> END
    """
    graph = StateGraph(ConversationState)

    # Add nodes
    graph.add_node("route", route_turn)
    graph.add_node("greet", greet)
    graph.add_node("collect", collect_order)
    graph.add_node("retrieve", retrieve_context)
    graph.add_node("generate", generate_response)
    graph.add_node("dispatch", dispatch_tools)

    # Define flow
    graph.add_edge(START, "route")
    graph.add_conditional_edges("route", choose_entry, {"greet": "greet", "collect": "collect"})
    graph.add_edge("greet", END)
    graph.add_conditional_edges(
        "collect", choose_after_collect, {"retrieve": "retrieve", "end": END}
    )
    graph.add_edge("retrieve", "generate")
    graph.add_edge("generate", "dispatch")
    graph.add_edge("dispatch", END)

    return graph


# Compiled graph singleton
_compiled_graph = None


def get_conversation_graph():
    """Get compiled conversation graph (singleton)."""
    global _compiled_graph

    if _compiled_graph is None:
        logger.info("Compiling LangGraph conversation graph...")
        _compiled_graph = create_graph().compile()
        logger.info("LangGraph graph compiled successfully")

    return _compiled_graph
