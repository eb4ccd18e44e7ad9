"""
Conversation service: loads a turn's inputs, runs the graph, persists the outcome.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Callable, Optional

from langchain_core.messages import AIMessage, HumanMessage
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from chatseller.config import settings
from chatseller.core.graph.graph import get_conversation_graph
from chatseller.core.models import CatalogItem, ConversationTurn, TenantContext
from chatseller.core.orders.exporter import order_exporter
from chatseller.core.orders.models import Order, OrderCollectionState
from chatseller.core.orders.store import OrderStateStore, SqlOrderStateStore
from chatseller.core.tools.dispatcher import find_catalog_product
from chatseller.db.models import new_id
from chatseller.db.repository import ShopRepository
from chatseller.db.sqlite import Database, db
from chatseller.exceptions import PersistenceError

logger = logging.getLogger(__name__)


@dataclass
class TurnRequest:
    """One shopper message."""
    shop_id: str
    message: str
    conversation_id: Optional[str] = None
    agent_id: Optional[str] = None
    # Product page the widget is shown on: {"product_id": ..., "product_name": ...}
    customer_context_hint: Optional[dict] = None


@dataclass
class TurnResult:
    """Reply to one shopper message."""
    reply: str
    conversation_id: str
    provider: str
    is_first_message: bool
    artifact: Optional[dict] = None
    order_state: Optional[dict] = None
    order: Optional[dict] = None


class ConversationService:
    """
    Runs conversation turns for every shop.

    Usage:
        service = ConversationService()
        result = await service.handle_turn(TurnRequest(shop_id=shop_id, message="Bonjour"))
    """

    def __init__(
        self,
        database: Optional[Database] = None,
        order_store: Optional[OrderStateStore] = None,
        store_factory: Callable[[AsyncSession], OrderStateStore] = SqlOrderStateStore,
    ):
        self.database = database or db
        self.order_store = order_store
        self.store_factory = store_factory

    async def handle_turn(self, request: TurnRequest) -> TurnResult:
        """
        Process one shopper message.

        Raises:
            TenantNotFoundError: Unknown or inactive shop, or no active agent
            PersistenceError: The turn could not be saved, nothing was committed
        """
        tenant, (conversation_id, turns, order_state) = await asyncio.gather(
            self._load_tenant(request.shop_id, request.agent_id),
            self._load_history(request.conversation_id, request.shop_id),
        )

        product_hint = self._resolve_hint(tenant, request.customer_context_hint)
        messages = [_to_message(turn) for turn in turns]
        messages.append(HumanMessage(content=request.message))

        input_state = {
            "messages": messages,
            "conversation_id": conversation_id,
            "message": request.message,
            "tenant": tenant,
            "product_hint": product_hint,
            "order_state": order_state,
        }

        try:
            result = await get_conversation_graph().ainvoke(input_state)
        except Exception as e:
            logger.error(f"Graph execution error: {e}", exc_info=True)
            result = {
                "reply": tenant.persona.fallback_message or settings.apology_message,
                "provider": "fallback",
                "is_first_message": not turns,
                "order_state": order_state,
            }

        new_state: Optional[OrderCollectionState] = result.get("order_state")
        order: Optional[Order] = result.get("order")

        await self._persist(
            request,
            tenant,
            conversation_id,
            product_hint,
            reply=result["reply"],
            artifact=result.get("artifact"),
            provider=result.get("provider", "fallback"),
            order_state=new_state,
            order=order,
        )

        if order is not None and settings.export_orders:
            self._export(order)

        return TurnResult(
            reply=result["reply"],
            conversation_id=conversation_id,
            provider=result.get("provider", "fallback"),
            is_first_message=result.get("is_first_message", not turns),
            artifact=result.get("artifact"),
            order_state=new_state.to_dict() if new_state else None,
            order=order.to_dict() if order else None,
        )

    async def _load_tenant(self, shop_id: str, agent_id: Optional[str]) -> TenantContext:
        async with self.database.session() as session:
            return await ShopRepository(session).get_tenant(shop_id, agent_id)

    async def _load_history(
        self, conversation_id: Optional[str], shop_id: str
    ) -> tuple[str, list[ConversationTurn], Optional[OrderCollectionState]]:
        """
        Turns and order state of the shop's conversation.

        A missing id, or one owned by another shop, starts a new conversation.
        """
        if not conversation_id:
            return new_id(), [], None

        async with self.database.session() as session:
            repository = ShopRepository(session)
            conversation = await repository.get_conversation(conversation_id)
            if conversation is not None and conversation.shop_id != shop_id:
                logger.warning(
                    f"Conversation {conversation_id} is not owned by shop {shop_id}, starting a new one"
                )
                return new_id(), [], None

            turns = await repository.list_turns(conversation_id, shop_id)
            state = await self._store(session).get(conversation_id)
        return conversation_id, turns, state

    async def _persist(
        self,
        request: TurnRequest,
        tenant: TenantContext,
        conversation_id: str,
        product_hint: Optional[CatalogItem],
        reply: str,
        artifact: Optional[dict],
        provider: str,
        order_state: Optional[OrderCollectionState],
        order: Optional[Order],
    ) -> None:
        """Save both turns, the order state and the order in one transaction."""
        try:
            async with self.database.session() as session:
                repository = ShopRepository(session)
                conversation = await repository.get_or_create_conversation(
                    conversation_id,
                    tenant.shop_id,
                    agent_id=tenant.agent_id,
                    product_id=product_hint.id if product_hint else None,
                    product_name=product_hint.name if product_hint else None,
                )
                await repository.add_turn(conversation, "user", request.message)
                await repository.add_turn(
                    conversation, "assistant", reply, artifact=artifact, provider=provider
                )

                if order is not None:
                    await repository.create_order(order)
                    conversation.status = "completed"

                store = self._store(session)
                if order_state is not None:
                    await store.set(conversation_id, order_state)
                else:
                    await store.delete(conversation_id)
        except SQLAlchemyError as e:
            logger.error(f"Failed to persist turn of {conversation_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to persist turn: {e}") from e

    def _store(self, session: AsyncSession) -> OrderStateStore:
        if self.order_store is not None:
            return self.order_store
        return self.store_factory(session)

    @staticmethod
    def _resolve_hint(tenant: TenantContext, hint: Optional[dict]) -> Optional[CatalogItem]:
        """Catalog product named by the page context, if any."""
        if not hint:
            return None

        product_id = hint.get("product_id") or hint.get("id")
        if product_id:
            for item in tenant.active_catalog:
                if item.id == product_id:
                    return item

        product_name = hint.get("product_name") or hint.get("name")
        if product_name:
            return find_catalog_product(product_name, tenant.active_catalog)
        return None

    @staticmethod
    def _export(order: Order) -> None:
        try:
            order_exporter.export(order)
        except OSError as e:
            logger.error(f"Failed to export order {order.order_number}: {e}", exc_info=True)


def _to_message(turn: ConversationTurn):
    if turn.role == "user":
        return HumanMessage(content=turn.content)
    kwargs = {"artifact": turn.artifact} if turn.artifact else {}
    return AIMessage(content=turn.content, additional_kwargs=kwargs)
