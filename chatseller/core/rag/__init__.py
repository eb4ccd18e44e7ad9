"""
Retrieval and prompt assembly.

Usage:
    retriever = KnowledgeRetriever()
    result = retriever.retrieve("mes cheveux cassent", catalog)
    prompt = build_sales_prompt(persona, result.context, "Maison Nala", False)
"""

from chatseller.core.rag.knowledge import (
    KnowledgeBase,
    KnowledgeEntry,
    get_knowledge_base,
    is_hair_related,
)
from chatseller.core.rag.prompts import (
    GREETING_TOKENS,
    build_order_collection_instructions,
    build_sales_prompt,
    build_welcome_message,
    starts_with_greeting,
    strip_leading_greeting,
)
from chatseller.core.rag.retriever import (
    EMPTY_CONTEXT,
    KnowledgeRetriever,
    RetrievalResult,
    retrieve_context,
)

__all__ = [
    # Knowledge
    "KnowledgeBase",
    "KnowledgeEntry",
    "get_knowledge_base",
    "is_hair_related",
    # Retrieval
    "EMPTY_CONTEXT",
    "KnowledgeRetriever",
    "RetrievalResult",
    "retrieve_context",
    # Prompts
    "GREETING_TOKENS",
    "build_order_collection_instructions",
    "build_sales_prompt",
    "build_welcome_message",
    "starts_with_greeting",
    "strip_leading_greeting",
]
