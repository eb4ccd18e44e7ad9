"""
Model tools: schemas and dispatch.
"""

from chatseller.core.tools.dispatcher import (
    CartMutationArtifact,
    DispatchResult,
    ProductCardArtifact,
    ToolDispatcher,
    find_catalog_product,
    tool_dispatcher,
)
from chatseller.core.tools.schemas import (
    ADD_TO_CART,
    RECOMMEND_PRODUCT,
    TOOL_SCHEMAS,
    anthropic_tool_schemas,
)
from chatseller.integrations.llm.anthropic import to_anthropic_tools

__all__ = [
    "ADD_TO_CART",
    "RECOMMEND_PRODUCT",
    "TOOL_SCHEMAS",
    "anthropic_tool_schemas",
    "to_anthropic_tools",
    "CartMutationArtifact",
    "DispatchResult",
    "ProductCardArtifact",
    "ToolDispatcher",
    "find_catalog_product",
    "tool_dispatcher",
]
