"""
LangGraph conversation management.
Provides the per-turn pipeline and the service that persists it.
"""

from chatseller.core.graph.graph import create_graph, get_conversation_graph
from chatseller.core.graph.service import ConversationService, TurnRequest, TurnResult
from chatseller.core.graph.state import ConversationState

__all__ = [
    "create_graph",
    "get_conversation_graph",
    "ConversationService",
    "TurnRequest",
    "TurnResult",
    "ConversationState",
]
