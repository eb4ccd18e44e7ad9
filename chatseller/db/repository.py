"""
Data access for the conversation engine.
Maps database rows to the engine's domain models.
"""

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from chatseller.config import AgentConfig
from chatseller.core.models import (
    CatalogItem,
    ConversationTurn,
    KnowledgeDocument,
    Persona,
    TenantContext,
)
from chatseller.core.orders.models import Order
from chatseller.db.models import (
    Agent,
    Conversation,
    KnowledgeDocumentRecord,
    Message,
    OrderRecord,
    Product,
    Shop,
)
from chatseller.exceptions import PersistenceError, TenantNotFoundError

logger = logging.getLogger(__name__)


def product_to_item(product: Product) -> CatalogItem:
    """Convert a product row to a catalog item."""
    return CatalogItem(
        id=product.id,
        name=product.name,
        price=product.price,
        description=product.description,
        image_url=product.image_url,
        purchase_url=product.url,
        category=product.category,
        active=product.is_active,
    )


def agent_to_persona(agent: Agent) -> Persona:
    """Convert an agent row to a persona with resolved options."""
    return Persona(
        name=agent.name,
        title=agent.title,
        personality=agent.personality,
        welcome_message=agent.welcome_message,
        fallback_message=agent.fallback_message,
        config=AgentConfig.model_validate(agent.config or {}),
    )


class ShopRepository:
    """Reads and writes shops, conversations and orders within one session."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_tenant(self, shop_id: str, agent_id: Optional[str] = None) -> TenantContext:
        """
        Load shop, agent persona, active catalog and active documents.

        Raises:
            TenantNotFoundError: Shop unknown or inactive, or no active agent
        """
        shop = await self.session.get(Shop, shop_id)
        if shop is None or not shop.is_active:
            raise TenantNotFoundError(f"Shop {shop_id} not found or inactive")

        query = select(Agent).where(Agent.shop_id == shop_id, Agent.is_active.is_(True))
        if agent_id:
            query = query.where(Agent.id == agent_id)
        agent = await self.session.scalar(query.order_by(Agent.created_at).limit(1))
        if agent is None:
            raise TenantNotFoundError(f"No active agent for shop {shop_id}")

        catalog = await self.list_active_products(shop_id)
        documents = await self.list_active_documents(shop_id, agent.id)

        return TenantContext(
            shop_id=shop.id,
            shop_name=shop.name,
            persona=agent_to_persona(agent),
            catalog=catalog,
            documents=documents,
            agent_id=agent.id,
            plan=shop.subscription_plan,
            currency=shop.currency,
        )

    async def list_active_products(self, shop_id: str) -> list[CatalogItem]:
        products = await self.session.scalars(
            select(Product)
            .where(Product.shop_id == shop_id, Product.is_active.is_(True))
            .order_by(Product.created_at, Product.name)
        )
        return [product_to_item(p) for p in products]

    async def list_active_documents(
        self, shop_id: str, agent_id: Optional[str] = None
    ) -> list[KnowledgeDocument]:
        """Active documents of the agent, plus shop-wide ones."""
        query = select(KnowledgeDocumentRecord).where(
            KnowledgeDocumentRecord.shop_id == shop_id,
            KnowledgeDocumentRecord.is_active.is_(True),
        )
        if agent_id:
            query = query.where(
                or_(
                    KnowledgeDocumentRecord.agent_id == agent_id,
                    KnowledgeDocumentRecord.agent_id.is_(None),
                )
            )
        documents = await self.session.scalars(query.order_by(KnowledgeDocumentRecord.created_at))
        return [
            KnowledgeDocument(id=d.id, title=d.title, content=d.content, active=d.is_active)
            for d in documents
        ]

    async def get_conversation(
        self, conversation_id: str, shop_id: Optional[str] = None
    ) -> Optional[Conversation]:
        """Get a conversation, or None when it belongs to another shop."""
        conversation = await self.session.get(Conversation, conversation_id)
        if conversation is not None and shop_id and conversation.shop_id != shop_id:
            return None
        return conversation

    async def list_turns(
        self, conversation_id: str, shop_id: Optional[str] = None
    ) -> list[ConversationTurn]:
        """Prior turns of a conversation, oldest first."""
        query = select(Message).where(Message.conversation_id == conversation_id)
        if shop_id:
            query = query.join(Conversation).where(Conversation.shop_id == shop_id)
        messages = await self.session.scalars(
            query.order_by(Message.created_at, Message.id)
        )
        return [
            ConversationTurn(
                role=m.role,
                content=m.content,
                timestamp=m.created_at,
                artifact=m.artifact,
            )
            for m in messages
        ]

    async def get_or_create_conversation(
        self,
        conversation_id: str,
        shop_id: str,
        agent_id: Optional[str] = None,
        product_id: Optional[str] = None,
        product_name: Optional[str] = None,
    ) -> Conversation:
        """Get the conversation, creating it on its first turn."""
        try:
            conversation = await self.session.get(Conversation, conversation_id)
            if conversation is not None and conversation.shop_id != shop_id:
                raise PersistenceError(
                    f"Conversation {conversation_id} belongs to another shop"
                )
            if conversation is None:
                conversation = Conversation(
                    id=conversation_id,
                    shop_id=shop_id,
                    agent_id=agent_id,
                    product_id=product_id,
                    product_name=product_name,
                )
                self.session.add(conversation)
                await self.session.flush()
                logger.info(f"Conversation {conversation_id} created for shop {shop_id}")
            return conversation
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to save conversation: {e}") from e

    async def add_turn(
        self,
        conversation: Conversation,
        role: str,
        content: str,
        artifact: Optional[dict] = None,
        provider: Optional[str] = None,
    ) -> Message:
        """Append a message to a conversation."""
        try:
            message = Message(
                conversation_id=conversation.id,
                role=role,
                content=content,
                artifact=artifact,
                provider=provider,
            )
            self.session.add(message)
            conversation.message_count = (conversation.message_count or 0) + 1
            conversation.last_activity = datetime.utcnow()
            await self.session.flush()
            return message
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to save message: {e}") from e

    async def create_order(self, order: Order) -> OrderRecord:
        """Persist a completed order."""
        try:
            record = OrderRecord(
                id=order.id,
                shop_id=order.shop_id,
                conversation_id=order.conversation_id,
                customer_name=order.customer_name,
                customer_phone=order.customer_phone,
                customer_address=order.customer_address,
                product_items=[item.to_dict() for item in order.items],
                total_amount=order.total_amount,
                currency=order.currency,
                payment_method=order.payment_method,
                status=order.status.value,
                created_at=order.created_at,
            )
            self.session.add(record)

            if order.conversation_id:
                conversation = await self.session.get(Conversation, order.conversation_id)
                if conversation is not None:
                    conversation.conversion_completed = True

            await self.session.flush()
            logger.info(f"Order {order.order_number} saved: {order.total_amount} {order.currency}")
            return record
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to save order: {e}") from e
