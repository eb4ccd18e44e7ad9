"""
Domain models shared by retrieval, prompts, tools and orders.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from chatseller.config import AgentConfig


def format_price(price: Optional[float]) -> str:
    """Format a price without useless decimals."""
    if price is None:
        return ""
    if float(price).is_integer():
        return f"{int(price)}"
    return f"{price:.2f}"


@dataclass(frozen=True)
class CatalogItem:
    """Product of a shop catalog, read-only for the engine."""
    id: str
    name: str
    price: Optional[float] = None
    description: Optional[str] = None
    image_url: Optional[str] = None
    purchase_url: Optional[str] = None
    category: Optional[str] = None
    active: bool = True

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "price": self.price,
            "description": self.description,
            "image_url": self.image_url,
            "purchase_url": self.purchase_url,
            "category": self.category,
            "active": self.active,
        }


@dataclass(frozen=True)
class KnowledgeDocument:
    """Free-text document uploaded by a shop (brand story, FAQ, shipping...)."""
    id: str
    title: str
    content: str
    active: bool = True


@dataclass
class ConversationTurn:
    """One message of a conversation."""
    role: str                   # user, assistant
    content: str
    timestamp: datetime = field(default_factory=datetime.utcnow)
    artifact: Optional[dict] = None


@dataclass
class Persona:
    """Identity, tone and welcome message of a sales agent."""
    name: str = "Conseillère"
    title: str = "Vendeuse IA"
    personality: str = "chaleureuse et professionnelle"
    welcome_message: Optional[str] = None
    fallback_message: Optional[str] = None
    config: AgentConfig = field(default_factory=AgentConfig)


@dataclass
class TenantContext:
    """Everything the engine reads about a shop for one turn."""
    shop_id: str
    shop_name: str
    persona: Persona
    catalog: list[CatalogItem] = field(default_factory=list)
    documents: list[KnowledgeDocument] = field(default_factory=list)
    agent_id: Optional[str] = None
    plan: str = "free"
    currency: str = "FCFA"

    @property
    def active_catalog(self) -> list[CatalogItem]:
        """Catalog items that can be shown to shoppers."""
        return [item for item in self.catalog if item.active]
