"""
Retriever - selects knowledge documents, beauty facts and catalog items
relevant to a shopper message. Lexical scoring only, no side effects.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from chatseller.config import settings
from chatseller.core.models import CatalogItem, KnowledgeDocument, format_price
from chatseller.core.rag.knowledge import KnowledgeBase, KnowledgeEntry, get_knowledge_base

logger = logging.getLogger(__name__)


BLOCK_SEPARATOR = "\n\n---\n\n"

EMPTY_CONTEXT = (
    "Aucun produit ni information spécifique trouvé pour cette requête. "
    "Donne des conseils beauté généraux basés sur tes connaissances en cosmétologie, "
    "sans inventer de produit."
)

# Knowledge documents
MIN_DOCUMENT_LENGTH = 30
MAX_DOCUMENT_LENGTH = 2000
MAX_DOCUMENTS = 7
SMALL_TENANT_DOCUMENTS = 5
TITLE_WEIGHT = 3
BODY_OCCURRENCE_CAP = 5

# Catalog
MAX_RELEVANT_PRODUCTS = 3
MAX_DESCRIPTION_LENGTH = 250


@dataclass
class RetrievalResult:
    """Result of context retrieval."""

    blocks: list[str]
    documents: list[KnowledgeDocument] = field(default_factory=list)
    entries: list[KnowledgeEntry] = field(default_factory=list)
    products: list[CatalogItem] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.blocks

    @property
    def context(self) -> str:
        """Context blob passed to the prompt."""
        if not self.blocks:
            return EMPTY_CONTEXT
        return BLOCK_SEPARATOR.join(self.blocks)


def tokenize(message: str, min_length: int = 3) -> list[str]:
    """Lowercase whitespace tokens of at least min_length characters."""
    return [word for word in message.lower().split() if len(word) >= min_length]


class KnowledgeRetriever:
    """Builds the retrieval context for a message."""

    def __init__(
        self,
        knowledge_base: KnowledgeBase | None = None,
        currency: str | None = None,
    ):
        self.knowledge_base = knowledge_base or get_knowledge_base()
        self.currency = currency or settings.currency

    def retrieve(
        self,
        message: str,
        catalog: list[CatalogItem],
        documents: list[KnowledgeDocument] | None = None,
    ) -> RetrievalResult:
        """
        Select context blocks for a message.

        Blocks are ordered knowledge documents, then static facts, then catalog.

        Args:
            message: Shopper message
            catalog: Shop catalog (inactive items are ignored)
            documents: Shop knowledge documents

        Returns:
            RetrievalResult with formatted blocks
        """
        tokens = tokenize(message)
        result = RetrievalResult(blocks=[])

        # 1. Shop knowledge documents
        top_documents = self._score_documents(tokens, documents or [])
        for document in top_documents:
            result.blocks.append(self._format_document(document))
        result.documents = top_documents

        # 2. Static beauty facts
        entries = self.knowledge_base.match(message)
        result.blocks.extend(entry.format() for entry in entries)
        result.entries = entries

        # 3. Catalog
        active = [item for item in catalog if item.active]
        if active:
            relevant = self._search_products(message, active)
            if relevant:
                result.blocks.append(self._format_relevant_products(relevant))
                shown = {item.id for item in relevant}
                others = [item for item in active if item.id not in shown]
                if others:
                    result.blocks.append(self._format_catalog_summary(others))
            else:
                result.blocks.append(self._format_catalog_summary(active))
            result.products = relevant

        logger.debug(
            f"Retrieved {len(top_documents)} documents, {len(entries)} facts, "
            f"{len(result.products)} relevant products for: {message[:50]}"
        )
        return result

    def _score_documents(
        self,
        tokens: list[str],
        documents: list[KnowledgeDocument],
    ) -> list[KnowledgeDocument]:
        usable = [
            doc for doc in documents
            if doc.active and len(doc.content or "") >= MIN_DOCUMENT_LENGTH
        ]
        small_tenant = len(usable) <= SMALL_TENANT_DOCUMENTS

        scored: list[tuple[int, KnowledgeDocument]] = []
        for doc in usable:
            title = (doc.title or "").lower()
            body = doc.content.lower()
            score = 0
            for token in tokens:
                score += TITLE_WEIGHT * title.count(token)
                score += min(body.count(token), BODY_OCCURRENCE_CAP)

            if score > 0 or small_tenant:
                scored.append((max(score, 1), doc))

        # sorted() is stable: equal scores keep the shop's document order
        scored = sorted(scored, key=lambda pair: pair[0], reverse=True)
        return [doc for _, doc in scored[:MAX_DOCUMENTS]]

    def _format_document(self, document: KnowledgeDocument) -> str:
        content = document.content
        if len(content) > MAX_DOCUMENT_LENGTH:
            content = content[:MAX_DOCUMENT_LENGTH] + "..."
        return f"📖 CONNAISSANCE MARQUE — {document.title or 'Document'}\n{content}"

    def _search_products(
        self,
        message: str,
        catalog: list[CatalogItem],
    ) -> list[CatalogItem]:
        keywords = tokenize(message, min_length=4)
        if not keywords:
            return []

        scored: list[tuple[int, CatalogItem]] = []
        for item in catalog:
            text = f"{item.name} {item.description or ''}".lower()
            score = sum(1 for keyword in keywords if keyword in text)
            if score > 0:
                scored.append((score, item))

        scored = sorted(scored, key=lambda pair: pair[0], reverse=True)
        return [item for _, item in scored[:MAX_RELEVANT_PRODUCTS]]

    def _format_relevant_products(self, products: list[CatalogItem]) -> str:
        lines = ["🎯 PRODUITS LES PLUS PERTINENTS POUR CETTE DEMANDE :"]
        for item in products:
            lines.append("")
            lines.append(f"**{item.name}**")
            if item.price is not None:
                lines.append(f"  Prix : {format_price(item.price)} {self.currency}")
            if item.description:
                description = item.description[:MAX_DESCRIPTION_LENGTH]
                if len(item.description) > MAX_DESCRIPTION_LENGTH:
                    description += "..."
                lines.append(f"  Description : {description}")
            if item.purchase_url:
                lines.append(f"  Lien : {item.purchase_url}")
        return "\n".join(lines)

    def _format_catalog_summary(self, products: list[CatalogItem]) -> str:
        plural = "s" if len(products) > 1 else ""
        lines = [f"📋 CATALOGUE COMPLET ({len(products)} produit{plural}) :"]
        for item in products:
            price = f" — {format_price(item.price)} {self.currency}" if item.price is not None else ""
            category = f" ({item.category})" if item.category else ""
            lines.append(f"• {item.name}{price}{category}")

        lines.append("")
        lines.append(
            "Note : Utilise recommend_product avec le nom exact pour recommander "
            "un produit visuellement (carte produit)."
        )
        lines.append(
            "Note : Utilise add_to_cart quand le client demande explicitement d'ajouter "
            "un produit à son panier/commande (ex: \"ajoutez aussi...\", \"je veux aussi...\", "
            "\"mettez dans mon panier\")."
        )
        return "\n".join(lines)


def retrieve_context(
    message: str,
    catalog: list[CatalogItem],
    documents: list[KnowledgeDocument] | None = None,
) -> str:
    """Retrieve the context blob for a message with the default knowledge base."""
    return KnowledgeRetriever().retrieve(message, catalog, documents).context
