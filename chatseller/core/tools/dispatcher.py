"""
Turns model tool calls into reply text and UI artifacts.

A card is only ever built from a catalog product; when the requested
product is not in the catalog the reply degrades to plain text.
"""

import logging
from dataclasses import asdict, dataclass
from typing import Optional, Union

from chatseller.core.models import CatalogItem, format_price
from chatseller.core.tools.schemas import ADD_TO_CART, RECOMMEND_PRODUCT
from chatseller.integrations.llm.base import ToolCall

logger = logging.getLogger(__name__)


@dataclass
class ProductCardArtifact:
    """Product card shown under the assistant message."""
    id: str
    name: str
    description: Optional[str]
    price: Optional[float]
    image_url: Optional[str]
    purchase_url: Optional[str]
    reason: str
    type: str = "product_card"

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class CartMutationArtifact:
    """Cart change the widget applies client-side."""
    product_id: str
    name: str
    price: Optional[float]
    quantity: int
    image_url: Optional[str] = None
    action: str = "add"
    type: str = "cart_mutation"

    def to_dict(self) -> dict:
        return asdict(self)


Artifact = Union[ProductCardArtifact, CartMutationArtifact]


@dataclass
class DispatchResult:
    """Reply text and optional artifact of a tool call."""
    text: str
    artifact: Optional[Artifact] = None


def find_catalog_product(product_name: str, catalog: list[CatalogItem]) -> Optional[CatalogItem]:
    """
    Find an active product whose name contains the query, or is contained in it.

    Case-insensitive; the first match in catalog order wins.
    """
    query = (product_name or "").strip().lower()
    if not query:
        return None

    for item in catalog:
        if not item.active:
            continue
        name = item.name.lower()
        if query in name or name in query:
            return item
    return None


def _parse_quantity(value) -> int:
    try:
        quantity = int(value)
    except (TypeError, ValueError):
        return 1
    return max(quantity, 1)


class ToolDispatcher:
    """Executes recommend_product and add_to_cart against the shop catalog."""

    def dispatch(
        self,
        tool_call: ToolCall,
        catalog: list[CatalogItem],
        default_text: str = "",
        currency: str = "FCFA",
    ) -> DispatchResult:
        """
        Resolve a tool call.

        Args:
            tool_call: Call requested by the model
            catalog: Shop catalog
            default_text: Text the model produced alongside the call
            currency: Currency label for confirmation sentences

        Returns:
            DispatchResult whose text replaces the model text
        """
        if tool_call.name == RECOMMEND_PRODUCT:
            return self._recommend(tool_call.arguments, catalog, default_text)
        if tool_call.name == ADD_TO_CART:
            return self._add_to_cart(tool_call.arguments, catalog, default_text, currency)

        logger.warning(f"Unknown tool requested: {tool_call.name}")
        return DispatchResult(text=default_text)

    def _recommend(self, arguments: dict, catalog: list[CatalogItem], default_text: str) -> DispatchResult:
        product_name = str(arguments.get("product_name") or "").strip()
        reason = str(arguments.get("reason") or "").strip()

        product = find_catalog_product(product_name, catalog)
        if product is None:
            logger.warning(f"Recommended product not in catalog: {product_name}")
            text = default_text or f"Je vous recommande {product_name}. {reason}".strip()
            return DispatchResult(text=text)

        logger.info(f"Product card for {product.name}")
        card = ProductCardArtifact(
            id=product.id,
            name=product.name,
            description=product.description or reason,
            price=product.price,
            image_url=product.image_url,
            purchase_url=product.purchase_url,
            reason=reason,
        )
        return DispatchResult(text=reason or default_text, artifact=card)

    def _add_to_cart(
        self,
        arguments: dict,
        catalog: list[CatalogItem],
        default_text: str,
        currency: str,
    ) -> DispatchResult:
        product_name = str(arguments.get("product_name") or "").strip()
        quantity = _parse_quantity(arguments.get("quantity", 1))

        product = find_catalog_product(product_name, catalog)
        if product is None:
            logger.warning(f"Cart product not in catalog: {product_name}")
            text = default_text or (
                f"Je ne trouve pas « {product_name} » dans notre catalogue. "
                "Pouvez-vous me préciser le produit souhaité ?"
            )
            return DispatchResult(text=text)

        logger.info(f"Cart mutation: {quantity} x {product.name}")
        mutation = CartMutationArtifact(
            product_id=product.id,
            name=product.name,
            price=product.price,
            quantity=quantity,
            image_url=product.image_url,
        )
        text = f"C'est noté, j'ajoute {quantity} × {product.name} à votre panier"
        if product.price is not None:
            text += f" ({format_price(product.price * quantity)} {currency})"
        return DispatchResult(text=text + ".", artifact=mutation)


# Singleton instance
tool_dispatcher = ToolDispatcher()
