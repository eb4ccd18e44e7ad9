"""
Tool schemas offered to the model, in OpenAI function format.
"""

from chatseller.integrations.llm.anthropic import to_anthropic_tools

RECOMMEND_PRODUCT = "recommend_product"
ADD_TO_CART = "add_to_cart"

RECOMMEND_PRODUCT_TOOL = {
    "type": "function",
    "function": {
        "name": RECOMMEND_PRODUCT,
        "description": (
            "Recommander un produit spécifique au client après avoir compris ses besoins. "
            "Utilise cette fonction quand tu veux présenter visuellement un produit "
            "avec son image, prix et lien d'achat."
        ),
        "parameters": {
            "type": "object",
            "properties": {
                "product_name": {
                    "type": "string",
                    "description": (
                        "Le nom exact du produit à recommander "
                        "(doit correspondre à un produit du catalogue)"
                    ),
                },
                "reason": {
                    "type": "string",
                    "description": (
                        "Courte explication (1-2 phrases) de pourquoi ce produit "
                        "est recommandé pour le client"
                    ),
                },
            },
            "required": ["product_name", "reason"],
        },
    },
}

ADD_TO_CART_TOOL = {
    "type": "function",
    "function": {
        "name": ADD_TO_CART,
        "description": (
            "Ajouter un produit du catalogue au panier du client. "
            "Utilise cette fonction uniquement quand le client demande explicitement "
            "d'ajouter un produit à son panier ou à sa commande."
        ),
        "parameters": {
            "type": "object",
            "properties": {
                "product_name": {
                    "type": "string",
                    "description": "Le nom exact du produit à ajouter (produit du catalogue)",
                },
                "quantity": {
                    "type": "integer",
                    "description": "Quantité à ajouter (1 par défaut)",
                    "minimum": 1,
                },
            },
            "required": ["product_name"],
        },
    },
}

TOOL_SCHEMAS = [RECOMMEND_PRODUCT_TOOL, ADD_TO_CART_TOOL]


def anthropic_tool_schemas() -> list[dict]:
    """The same tools as Anthropic tool definitions."""
    return to_anthropic_tools(TOOL_SCHEMAS)
