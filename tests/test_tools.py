"""
Tests for tool schemas and the tool dispatcher.

USAGE:
    Run from project root: python -m pytest tests/test_tools.py -v
"""

import unittest

from chatseller.core.models import CatalogItem
from chatseller.core.tools import (
    ADD_TO_CART,
    RECOMMEND_PRODUCT,
    TOOL_SCHEMAS,
    ToolDispatcher,
    anthropic_tool_schemas,
    find_catalog_product,
)
from chatseller.integrations.llm.base import ToolCall


CATALOG = [
    CatalogItem(
        id="p1",
        name="Huile de Ricin Noir Bio",
        price=8500,
        description="Stimule la pousse.",
        image_url="https://cdn.example/ricin.jpg",
        purchase_url="https://maison-nala.example/ricin",
    ),
    CatalogItem(id="p2", name="Beurre de Karité Brut", price=6000),
    CatalogItem(id="p3", name="Savon Noir", price=3000, active=False),
]


class TestFindCatalogProduct(unittest.TestCase):

    def test_query_in_name(self):
        self.assertEqual(find_catalog_product("huile de ricin", CATALOG).id, "p1")

    def test_name_in_query(self):
        self.assertEqual(find_catalog_product("Beurre de Karité Brut 250g", CATALOG).id, "p2")

    def test_inactive_and_missing(self):
        self.assertIsNone(find_catalog_product("Savon Noir", CATALOG))
        self.assertIsNone(find_catalog_product("Sérum Vitamine C", CATALOG))
        self.assertIsNone(find_catalog_product("  ", CATALOG))


class TestToolDispatcher(unittest.TestCase):

    def setUp(self):
        self.dispatcher = ToolDispatcher()

    def test_recommend_hit_builds_card(self):
        call = ToolCall(
            name=RECOMMEND_PRODUCT,
            arguments={"product_name": "Huile de Ricin", "reason": "Idéale contre la casse."},
        )
        result = self.dispatcher.dispatch(call, CATALOG, default_text="Texte du modèle")

        self.assertEqual(result.text, "Idéale contre la casse.")
        card = result.artifact.to_dict()
        self.assertEqual(card["type"], "product_card")
        self.assertEqual(card["id"], "p1")
        self.assertEqual(card["name"], "Huile de Ricin Noir Bio")
        self.assertEqual(card["price"], 8500)
        self.assertEqual(card["purchase_url"], "https://maison-nala.example/ricin")

    def test_recommend_miss_degrades_to_text(self):
        call = ToolCall(
            name=RECOMMEND_PRODUCT,
            arguments={"product_name": "Sérum Vitamine C", "reason": "Parfait pour l'éclat."},
        )
        result = self.dispatcher.dispatch(call, CATALOG)

        self.assertIsNone(result.artifact)
        self.assertEqual(result.text, "Je vous recommande Sérum Vitamine C. Parfait pour l'éclat.")

    def test_recommend_miss_keeps_model_text(self):
        call = ToolCall(name=RECOMMEND_PRODUCT, arguments={"product_name": "Inconnu", "reason": ""})
        result = self.dispatcher.dispatch(call, CATALOG, default_text="Voici mon conseil.")

        self.assertIsNone(result.artifact)
        self.assertEqual(result.text, "Voici mon conseil.")

    def test_add_to_cart(self):
        call = ToolCall(name=ADD_TO_CART, arguments={"product_name": "beurre de karité", "quantity": 2})
        result = self.dispatcher.dispatch(call, CATALOG, currency="FCFA")

        mutation = result.artifact.to_dict()
        self.assertEqual(mutation["type"], "cart_mutation")
        self.assertEqual(mutation["action"], "add")
        self.assertEqual(mutation["product_id"], "p2")
        self.assertEqual(mutation["quantity"], 2)
        self.assertIn("12000 FCFA", result.text)

    def test_add_to_cart_bad_quantity(self):
        call = ToolCall(name=ADD_TO_CART, arguments={"product_name": "Huile de Ricin", "quantity": "beaucoup"})
        result = self.dispatcher.dispatch(call, CATALOG)

        self.assertEqual(result.artifact.quantity, 1)

    def test_add_to_cart_miss(self):
        call = ToolCall(name=ADD_TO_CART, arguments={"product_name": "Savon Noir"})
        result = self.dispatcher.dispatch(call, CATALOG)

        self.assertIsNone(result.artifact)
        self.assertIn("« Savon Noir »", result.text)

    def test_unknown_tool(self):
        result = self.dispatcher.dispatch(ToolCall(name="delete_shop"), CATALOG, default_text="Bien sûr.")

        self.assertEqual(result.text, "Bien sûr.")
        self.assertIsNone(result.artifact)


class TestSchemas(unittest.TestCase):

    def test_openai_schemas(self):
        names = [tool["function"]["name"] for tool in TOOL_SCHEMAS]
        self.assertEqual(names, [RECOMMEND_PRODUCT, ADD_TO_CART])

    def test_anthropic_schemas(self):
        tools = anthropic_tool_schemas()

        self.assertEqual(tools[0]["name"], RECOMMEND_PRODUCT)
        self.assertEqual(tools[0]["input_schema"]["required"], ["product_name", "reason"])
        self.assertEqual(tools[1]["input_schema"]["properties"]["quantity"]["type"], "integer")


if __name__ == "__main__":
    unittest.main()
