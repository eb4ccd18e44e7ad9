"""
Conversation state for LangGraph.
Defines the structure of one turn flowing through the graph.
"""

from typing import Annotated, Optional, TypedDict

from langgraph.graph.message import add_messages

from chatseller.core.models import CatalogItem, TenantContext
from chatseller.core.orders.machine import Transition
from chatseller.core.orders.models import Order, OrderCollectionState
from chatseller.integrations.llm.chain import CompletionResult


class ConversationState(TypedDict, total=False):
    """
    State of one conversation turn.

    Attributes:
        messages: Prior turns plus the current shopper message (add_messages)
        conversation_id: Conversation the turn belongs to
        message: Current shopper message
        tenant: Shop, persona, catalog and documents
        product_hint: Product the shopper is looking at, if any
        is_first_message: True when the conversation has no prior turn
        order_state: Order collection state, None when no order is in progress
        transition: Result of the state machine for this turn
        order: Order created when the collection completed on this turn
        context: Retrieval context
        completion: Provider chain outcome
        reply: Final assistant text
        artifact: Product card or cart mutation shown with the reply
        provider: Provider that produced the reply
    """
    # Messages are accumulated automatically by LangGraph
    messages: Annotated[list, add_messages]

    # Turn input
    conversation_id: str
    message: str
    tenant: TenantContext
    product_hint: Optional[CatalogItem]
    is_first_message: bool

    # Order collection
    order_state: Optional[OrderCollectionState]
    transition: Optional[Transition]
    order: Optional[Order]

    # RAG context
    context: str

    # Output
    completion: Optional[CompletionResult]
    reply: str
    artifact: Optional[dict]
    provider: str
