"""
SQLAlchemy models for ChatSeller.
Shops, agents, catalog, knowledge documents, conversations and orders.
"""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import (
    Boolean,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    JSON,
    String,
    Text,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


def new_id() -> str:
    return str(uuid.uuid4())


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


# =============================================================================
# SHOP & AGENT
# =============================================================================


class Shop(Base):
    """Merchant shop (tenant)."""

    __tablename__ = "shops"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    domain: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    subscription_plan: Mapped[str] = mapped_column(String(50), default="free")
    currency: Mapped[str] = mapped_column(String(10), default="FCFA")
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    # Relationships
    agents: Mapped[list["Agent"]] = relationship(back_populates="shop")
    products: Mapped[list["Product"]] = relationship(back_populates="shop")

    def __repr__(self) -> str:
        return f"<Shop(id={self.id}, name='{self.name}')>"


class Agent(Base):
    """Sales agent persona of a shop."""

    __tablename__ = "agents"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    shop_id: Mapped[str] = mapped_column(ForeignKey("shops.id"), nullable=False)

    name: Mapped[str] = mapped_column(String(255), default="Conseillère")
    title: Mapped[str] = mapped_column(String(255), default="Vendeuse IA")
    personality: Mapped[str] = mapped_column(
        String(255), default="chaleureuse et professionnelle"
    )
    welcome_message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    fallback_message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # AgentConfig options, validated on load
    config: Mapped[dict] = mapped_column(JSON, default=dict)

    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    # Relationships
    shop: Mapped["Shop"] = relationship(back_populates="agents")

    __table_args__ = (Index("ix_agents_shop", "shop_id"),)

    def __repr__(self) -> str:
        return f"<Agent(id={self.id}, name='{self.name}')>"


# =============================================================================
# CATALOG & KNOWLEDGE
# =============================================================================


class Product(Base):
    """Product in a shop catalog."""

    __tablename__ = "products"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    shop_id: Mapped[str] = mapped_column(ForeignKey("shops.id"), nullable=False)

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    price: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    image_url: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)
    url: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)
    category: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    # Relationships
    shop: Mapped["Shop"] = relationship(back_populates="products")

    __table_args__ = (
        Index("ix_products_shop_active", "shop_id", "is_active"),
        Index("ix_products_name", "name"),
    )

    def __repr__(self) -> str:
        return f"<Product(id={self.id}, name='{self.name}', price={self.price})>"


class KnowledgeDocumentRecord(Base):
    """Free-text document attached to an agent."""

    __tablename__ = "knowledge_documents"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    shop_id: Mapped[str] = mapped_column(ForeignKey("shops.id"), nullable=False)
    agent_id: Mapped[Optional[str]] = mapped_column(ForeignKey("agents.id"), nullable=True)

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    __table_args__ = (Index("ix_knowledge_documents_shop", "shop_id"),)

    def __repr__(self) -> str:
        return f"<KnowledgeDocumentRecord(id={self.id}, title='{self.title}')>"


# =============================================================================
# CONVERSATIONS
# =============================================================================


class Conversation(Base):
    """Conversation of a shopper with an agent."""

    __tablename__ = "conversations"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    shop_id: Mapped[str] = mapped_column(ForeignKey("shops.id"), nullable=False)
    agent_id: Mapped[Optional[str]] = mapped_column(ForeignKey("agents.id"), nullable=True)

    # Product page the conversation started from
    product_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
    product_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    status: Mapped[str] = mapped_column(String(20), default="active")  # active, completed
    message_count: Mapped[int] = mapped_column(Integer, default=0)
    conversion_completed: Mapped[bool] = mapped_column(Boolean, default=False)

    started_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    last_activity: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    # Relationships
    messages: Mapped[list["Message"]] = relationship(
        back_populates="conversation", order_by="Message.created_at"
    )

    def __repr__(self) -> str:
        return f"<Conversation(id={self.id}, shop={self.shop_id})>"


class Message(Base):
    """Individual message in a conversation."""

    __tablename__ = "messages"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    conversation_id: Mapped[str] = mapped_column(
        ForeignKey("conversations.id"), nullable=False
    )

    role: Mapped[str] = mapped_column(String(20), nullable=False)  # user, assistant
    content: Mapped[str] = mapped_column(Text, nullable=False)

    # Product card or cart mutation shown with the message
    artifact: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)
    provider: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    # Relationships
    conversation: Mapped["Conversation"] = relationship(back_populates="messages")

    __table_args__ = (Index("ix_messages_conversation", "conversation_id", "created_at"),)

    def __repr__(self) -> str:
        return f"<Message(id={self.id}, role='{self.role}')>"


class OrderCollection(Base):
    """In-flight order collection state of a conversation."""

    __tablename__ = "order_collections"

    conversation_id: Mapped[str] = mapped_column(
        ForeignKey("conversations.id"), primary_key=True
    )
    state: Mapped[str] = mapped_column(Text, nullable=False)  # JSON

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    def __repr__(self) -> str:
        return f"<OrderCollection(conversation={self.conversation_id})>"


# =============================================================================
# ORDERS
# =============================================================================


class OrderRecord(Base):
    """Order placed through a conversation."""

    __tablename__ = "orders"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    shop_id: Mapped[str] = mapped_column(ForeignKey("shops.id"), nullable=False)
    conversation_id: Mapped[Optional[str]] = mapped_column(
        ForeignKey("conversations.id"), nullable=True
    )

    customer_name: Mapped[str] = mapped_column(String(255), nullable=False)
    customer_phone: Mapped[str] = mapped_column(String(50), nullable=False)
    customer_address: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    product_items: Mapped[list] = mapped_column(JSON, default=list)
    total_amount: Mapped[float] = mapped_column(Float, default=0)
    currency: Mapped[str] = mapped_column(String(10), default="XOF")
    payment_method: Mapped[str] = mapped_column(String(100), nullable=False)
    status: Mapped[str] = mapped_column(String(20), default="pending")

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    __table_args__ = (Index("ix_orders_shop", "shop_id", "created_at"),)

    def __repr__(self) -> str:
        return f"<OrderRecord(id={self.id}, total={self.total_amount})>"
