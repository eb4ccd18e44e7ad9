"""
Tests for catalog file parsing and loading.

USAGE:
    Run from project root: python -m pytest tests/test_catalog.py -v
"""

import tempfile
import unittest
from pathlib import Path

from sqlalchemy import select

from chatseller.data.loaders.catalog_loader import CatalogLoader
from chatseller.data.parsers import CatalogParser, parse_catalog
from chatseller.db.models import Product, Shop
from chatseller.db.sqlite import Database
from chatseller.exceptions import TenantNotFoundError


CATALOG_CSV = """Nom,Prix,Description,Catégorie,Actif
Huile de Ricin Noir Bio,8 500 FCFA,Renforce les cheveux,Cheveux,oui
Beurre de Karité Brut,"6000,00",Nourrit la peau,Corps,
Savon Noir,3000,Nettoyant,Corps,non
,1000,Ligne sans nom,,
"""


def write_file(directory, name, content):
    path = Path(directory) / name
    path.write_text(content, encoding="utf-8")
    return path


class TestCatalogParser(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)

    def test_parse_csv(self):
        products = parse_catalog(write_file(self.tmp.name, "catalogue.csv", CATALOG_CSV))

        self.assertEqual([p.name for p in products], [
            "Huile de Ricin Noir Bio", "Beurre de Karité Brut", "Savon Noir",
        ])
        self.assertEqual(products[0].price, 8500)
        self.assertEqual(products[0].category, "Cheveux")
        self.assertEqual(products[1].price, 6000)
        self.assertTrue(products[1].is_active)
        self.assertFalse(products[2].is_active)

    def test_parse_price(self):
        parser = CatalogParser()
        self.assertEqual(parser._parse_price("12 500 FCFA"), 12500)
        self.assertEqual(parser._parse_price("12,50"), 12.5)
        self.assertIsNone(parser._parse_price("sur devis"))
        self.assertIsNone(parser._parse_price(None))

    def test_missing_name_column(self):
        path = write_file(self.tmp.name, "bad.csv", "sku,prix\nA1,100\n")
        with self.assertRaises(ValueError):
            parse_catalog(path)

    def test_unsupported_format(self):
        path = write_file(self.tmp.name, "catalogue.txt", "rien")
        with self.assertRaises(ValueError):
            parse_catalog(path)


class TestCatalogLoader(unittest.IsolatedAsyncioTestCase):

    async def asyncSetUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.database = Database("sqlite+aiosqlite://")
        await self.database.init()
        async with self.database.session() as session:
            session.add(Shop(id="shop-1", name="Maison Nala"))
        self.loader = CatalogLoader(self.database)

    async def asyncTearDown(self):
        await self.database.close()
        self.tmp.cleanup()

    async def test_load_then_update(self):
        path = write_file(self.tmp.name, "catalogue.csv", CATALOG_CSV)

        stats = await self.loader.load_file(path, "shop-1")
        self.assertEqual(stats["total_products"], 3)
        self.assertEqual(stats["new_products"], 3)
        self.assertEqual(stats["active_products"], 2)

        update = write_file(
            self.tmp.name, "maj.csv", "nom,prix\nHuile de Ricin Noir Bio,9000\n"
        )
        stats = await self.loader.load_file(update, "shop-1", deactivate_missing=True)
        self.assertEqual(stats["updated_products"], 1)
        self.assertEqual(stats["deactivated_products"], 1)

        async with self.database.session() as session:
            products = {
                p.name: p for p in await session.scalars(select(Product).where(Product.shop_id == "shop-1"))
            }

        self.assertEqual(products["Huile de Ricin Noir Bio"].price, 9000)
        self.assertEqual(products["Huile de Ricin Noir Bio"].description, "Renforce les cheveux")
        self.assertFalse(products["Beurre de Karité Brut"].is_active)

    async def test_unknown_shop(self):
        path = write_file(self.tmp.name, "catalogue.csv", CATALOG_CSV)
        with self.assertRaises(TenantNotFoundError):
            await self.loader.load_file(path, "nope")


if __name__ == "__main__":
    unittest.main()
