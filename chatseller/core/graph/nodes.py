"""
Graph nodes for conversation processing.
Each node takes the turn state and returns the keys it updates.
"""

import logging
from typing import Optional

from langchain_core.messages import AIMessage, HumanMessage

from chatseller.config import settings
from chatseller.core.graph.state import ConversationState
from chatseller.core.models import CatalogItem, TenantContext, format_price
from chatseller.core.orders.machine import OrderStateMachine, format_order_summary
from chatseller.core.orders.models import OrderStep
from chatseller.core.rag.prompts import (
    build_order_collection_instructions,
    build_sales_prompt,
    build_welcome_message,
    strip_leading_greeting,
)
from chatseller.core.rag.retriever import KnowledgeRetriever
from chatseller.core.tools.dispatcher import find_catalog_product, tool_dispatcher
from chatseller.core.tools.schemas import TOOL_SCHEMAS
from chatseller.integrations.llm import build_provider_chain

logger = logging.getLogger(__name__)


ORDER_CONFIRMED_MESSAGE = (
    "🎉 **Commande confirmée !**\n\n"
    "{summary}\n\n"
    "📦 Votre numéro de commande : **n°{order_number}**\n\n"
    "Notre équipe vous contactera très rapidement au {phone} pour finaliser "
    "{delivery}. Merci pour votre confiance !"
)


async def route_turn(state: ConversationState) -> dict:
    """Mark the turn as the opening of the conversation when nothing precedes it."""
    prior = [m for m in state.get("messages", [])[:-1] if isinstance(m, (HumanMessage, AIMessage))]
    return {"is_first_message": not prior}


def choose_entry(state: ConversationState) -> str:
    return "greet" if state.get("is_first_message") else "collect"


async def greet(state: ConversationState) -> dict:
    """Open the conversation with the welcome message, no completion call."""
    reply = build_welcome_message(state["tenant"].persona)
    logger.info(f"Welcome message sent for conversation {state.get('conversation_id')}")
    return {
        "reply": reply,
        "provider": "welcome",
        "artifact": None,
        "messages": [AIMessage(content=reply)],
    }


async def collect_order(state: ConversationState) -> dict:
    """
    Advance the order collection dialogue.

    A confirmation question, a completed order and a cancellation are
    answered here without calling a provider.
    """
    tenant = state["tenant"]
    message = state["message"]
    machine = OrderStateMachine.for_agent(tenant.persona.config, tenant.currency)

    product = resolve_order_product(
        tenant, message, state.get("product_hint"), state.get("messages", [])
    )
    transition = machine.advance(state.get("order_state"), message, product)
    update = {"transition": transition, "order_state": transition.state}

    reply = None
    if transition.completed:
        order = transition.state.to_order(
            currency=settings.order_currency_code,
            conversation_id=state.get("conversation_id"),
            shop_id=tenant.shop_id,
        )
        data = transition.state.data
        reply = ORDER_CONFIRMED_MESSAGE.format(
            summary=format_order_summary(data, tenant.currency),
            order_number=order.order_number,
            phone=data.customer_phone or "numéro indiqué",
            delivery="le retrait en magasin" if data.is_pickup else "la livraison",
        )
        update["order"] = order
        update["order_state"] = None
        logger.info(
            f"Order {order.order_number} completed: {format_price(order.total_amount)} {tenant.currency}"
        )
    elif transition.cancelled:
        reply = transition.instruction
    elif transition.in_progress and transition.state.step == OrderStep.CONFIRMATION:
        reply = transition.instruction

    if reply is not None:
        update.update(
            {
                "reply": reply,
                "provider": "order_flow",
                "artifact": None,
                "messages": [AIMessage(content=reply)],
            }
        )
    return update


def choose_after_collect(state: ConversationState) -> str:
    return "end" if state.get("reply") else "retrieve"


async def retrieve_context(state: ConversationState) -> dict:
    """Select knowledge documents, facts and catalog blocks for the message."""
    tenant = state["tenant"]
    retriever = KnowledgeRetriever(currency=tenant.currency)
    result = retriever.retrieve(state["message"], tenant.active_catalog, tenant.documents)

    logger.info(
        f"Retrieved {len(result.documents)} documents, {len(result.entries)} facts, "
        f"{len(result.products)} products for: {state['message'][:50]}"
    )
    return {"context": result.context}


async def generate_response(state: ConversationState) -> dict:
    """Call the provider chain with the sales prompt, history and tool schemas."""
    tenant = state["tenant"]
    persona = tenant.persona
    config = persona.config

    system_prompt = build_sales_prompt(
        persona,
        state.get("context", ""),
        tenant.shop_name,
        is_first_message=False,
    )

    transition = state.get("transition")
    if transition is not None and transition.in_progress:
        system_prompt += "\n" + build_order_collection_instructions(
            transition.state, transition.instruction, tenant.currency
        )

    chain = build_provider_chain(config.ai_provider, tenant.plan)
    completion = await chain.complete(
        _to_provider_history(state.get("messages", [])),
        system_prompt,
        temperature=config.temperature,
        max_tokens=config.max_tokens,
        tools=TOOL_SCHEMAS,
    )

    logger.info(
        f"Generated response with {completion.provider}"
        f"{' (fallback)' if completion.fallback_used else ''}"
    )
    return {"completion": completion}


async def dispatch_tools(state: ConversationState) -> dict:
    """Apply tool calls, then enforce the no-greeting rule on the reply."""
    tenant = state["tenant"]
    completion = state["completion"]
    transition = state.get("transition")

    text = completion.text
    artifact = None

    if completion.tool_calls:
        if len(completion.tool_calls) > 1:
            logger.debug(f"Ignoring {len(completion.tool_calls) - 1} extra tool calls")
        result = tool_dispatcher.dispatch(
            completion.tool_calls[0],
            tenant.active_catalog,
            default_text=completion.text,
            currency=tenant.currency,
        )
        text = result.text
        artifact = result.artifact.to_dict() if result.artifact else None

    if completion.is_apology:
        if transition is not None and transition.in_progress:
            # Keep the order dialogue moving without a provider
            text = transition.instruction
        elif tenant.persona.fallback_message:
            text = tenant.persona.fallback_message

    text = strip_leading_greeting(text)

    return {
        "reply": text,
        "artifact": artifact,
        "provider": completion.provider,
        "messages": [AIMessage(content=text, additional_kwargs=_artifact_kwargs(artifact))],
    }


def resolve_order_product(
    tenant: TenantContext,
    message: str,
    hint: Optional[CatalogItem],
    messages: list,
) -> Optional[CatalogItem]:
    """
    Product an order is about.

    Page hint first, then a catalog name quoted in the message, then the
    last product card shown in the conversation.
    """
    if hint is not None:
        return hint

    catalog = tenant.active_catalog
    message_lower = (message or "").lower()
    for item in catalog:
        if item.name.lower() in message_lower:
            return item

    for previous in reversed(messages):
        if not isinstance(previous, AIMessage):
            continue
        artifact = previous.additional_kwargs.get("artifact") or {}
        if artifact.get("type") != "product_card":
            continue
        for item in catalog:
            if item.id == artifact.get("id"):
                return item
        return find_catalog_product(artifact.get("name", ""), catalog)

    return None


def _to_provider_history(messages: list) -> list[dict[str, str]]:
    """Convert LangChain messages to provider chat messages."""
    history = []
    for msg in messages:
        if isinstance(msg, HumanMessage):
            history.append({"role": "user", "content": msg.content})
        elif isinstance(msg, AIMessage):
            history.append({"role": "assistant", "content": msg.content})
    return history


def _artifact_kwargs(artifact: Optional[dict]) -> dict:
    return {"artifact": artifact} if artifact else {}
