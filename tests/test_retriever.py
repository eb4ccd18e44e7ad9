"""
Tests for knowledge matching and context retrieval.

PURPOSE:
    - Static beauty facts matched by alias, hair facts gated by hair words
    - Shop documents scored and capped
    - Catalog relevance block and summary

USAGE:
    Run from project root: python -m pytest tests/test_retriever.py -v
"""

import unittest

from chatseller.core.models import CatalogItem, KnowledgeDocument
from chatseller.core.rag.knowledge import get_knowledge_base, is_hair_related
from chatseller.core.rag.retriever import (
    BLOCK_SEPARATOR,
    EMPTY_CONTEXT,
    MAX_DOCUMENTS,
    KnowledgeRetriever,
    retrieve_context,
)


def make_catalog():
    return [
        CatalogItem(
            id="p1",
            name="Huile de Ricin Noir Bio",
            price=8500,
            description="Huile pressée à froid, stimule la pousse des cheveux cassants.",
            category="Cheveux",
        ),
        CatalogItem(
            id="p2",
            name="Beurre de Karité Brut",
            price=6000,
            description="Nourrit les peaux sèches.",
            category="Corps",
        ),
        CatalogItem(
            id="p3",
            name="Savon Noir Traditionnel",
            price=3000,
            active=False,
        ),
    ]


class TestKnowledgeBase(unittest.TestCase):

    def setUp(self):
        self.knowledge_base = get_knowledge_base()

    def keys(self, message):
        return [entry.key for entry in self.knowledge_base.match(message)]

    def test_loaded(self):
        self.assertGreater(len(self.knowledge_base), 10)

    def test_alias_match(self):
        self.assertIn("karite", self.keys("Le beurre de KARITÉ est-il bon ?"))
        self.assertIn("acide_hyaluronique", self.keys("un sérum à l'ah"))

    def test_short_alias_is_whole_word(self):
        self.assertNotIn("acide_hyaluronique", self.keys("j'adore le Sahara"))

    def test_hair_entries_need_hair_context(self):
        self.assertNotIn("chute_cheveux", self.keys("mon colis tombe en retard"))
        self.assertIn("chute_cheveux", self.keys("mes cheveux tombent"))

    def test_is_hair_related(self):
        self.assertTrue(is_hair_related("cheveux 4c"))
        self.assertFalse(is_hair_related("peau grasse"))


class TestKnowledgeRetriever(unittest.TestCase):

    def setUp(self):
        self.retriever = KnowledgeRetriever(currency="FCFA")
        self.catalog = make_catalog()

    def test_braids_scenario(self):
        result = self.retriever.retrieve("mes cheveux sont cassants après les tresses", [])

        self.assertIn("casse_alopecie_traction", [entry.key for entry in result.entries])
        self.assertIn("alopécie de traction", result.context)
        self.assertIn("hydratation", result.context)

    def test_deterministic(self):
        message = "huile de ricin pour mes cheveux"
        first = self.retriever.retrieve(message, self.catalog).context
        second = self.retriever.retrieve(message, self.catalog).context
        self.assertEqual(first, second)

    def test_empty_context(self):
        result = self.retriever.retrieve("xyz", [], [])

        self.assertTrue(result.is_empty)
        self.assertEqual(result.context, EMPTY_CONTEXT)
        self.assertEqual(retrieve_context("xyz", []), EMPTY_CONTEXT)

    def test_catalog_relevance(self):
        result = self.retriever.retrieve("huile de ricin contre la casse", self.catalog)

        self.assertEqual([item.id for item in result.products], ["p1"])
        self.assertIn("🎯 PRODUITS LES PLUS PERTINENTS", result.context)
        self.assertIn("Prix : 8500 FCFA", result.context)
        self.assertIn("📋 CATALOGUE COMPLET (1 produit)", result.context)
        self.assertIn("Beurre de Karité Brut", result.context)
        self.assertNotIn("Savon Noir Traditionnel", result.context)

    def test_catalog_summary_without_match(self):
        result = self.retriever.retrieve("bonjour", self.catalog)

        self.assertEqual(result.products, [])
        self.assertIn("📋 CATALOGUE COMPLET (2 produits)", result.context)
        self.assertIn("recommend_product", result.context)

    def test_block_order(self):
        documents = [
            KnowledgeDocument(
                id="d1",
                title="Notre huile de ricin",
                content="Notre huile de ricin vient du Bénin, pressée à froid par une coopérative.",
            )
        ]
        result = self.retriever.retrieve("huile de ricin", self.catalog, documents)
        context = result.context

        self.assertLess(context.index("📖 CONNAISSANCE MARQUE"), context.index("🌍 INGRÉDIENT AFRICAIN"))
        self.assertLess(context.index("🌍 INGRÉDIENT AFRICAIN"), context.index("🎯 PRODUITS"))
        self.assertEqual(len(context.split(BLOCK_SEPARATOR)), len(result.blocks))


class TestDocumentScoring(unittest.TestCase):

    def setUp(self):
        self.retriever = KnowledgeRetriever(currency="FCFA")

    def test_title_match_ranks_first(self):
        documents = [
            KnowledgeDocument(id="d1", title="Retours", content="Retours acceptés sous 14 jours, produit non ouvert."),
            KnowledgeDocument(id="d2", title="Livraison", content="Nous livrons en 48h partout à Dakar et Abidjan."),
        ]
        result = self.retriever.retrieve("délais de livraison ?", [], documents)

        # Small shops keep every usable document
        self.assertEqual([doc.id for doc in result.documents], ["d2", "d1"])
        self.assertTrue(result.blocks[0].startswith("📖 CONNAISSANCE MARQUE — Livraison"))

    def test_short_and_inactive_documents_skipped(self):
        documents = [
            KnowledgeDocument(id="d1", title="Court", content="Trop court."),
            KnowledgeDocument(
                id="d2", title="Ancien", content="Ancienne politique de livraison, plus valable.", active=False
            ),
        ]
        result = self.retriever.retrieve("livraison", [], documents)

        self.assertEqual(result.documents, [])

    def test_large_shop_keeps_matching_documents_only(self):
        documents = [
            KnowledgeDocument(id=f"d{i}", title=f"Fiche {i}", content="Conseils généraux de la marque pour nos clientes.")
            for i in range(10)
        ]
        documents.append(
            KnowledgeDocument(id="ship", title="Livraison", content="Livraison en 48h à Dakar, 5 jours ailleurs.")
        )
        result = self.retriever.retrieve("livraison", [], documents)

        self.assertEqual([doc.id for doc in result.documents], ["ship"])

    def test_document_cap(self):
        documents = [
            KnowledgeDocument(id=f"d{i}", title="Livraison", content=f"Livraison zone {i} : délais et tarifs détaillés.")
            for i in range(10)
        ]
        result = self.retriever.retrieve("livraison", [], documents)

        self.assertEqual(len(result.documents), MAX_DOCUMENTS)

    def test_long_document_truncated(self):
        documents = [KnowledgeDocument(id="d1", title="Histoire", content="a" * 2500)]
        result = self.retriever.retrieve("histoire", [], documents)

        self.assertTrue(result.blocks[0].endswith("..."))


if __name__ == "__main__":
    unittest.main()
