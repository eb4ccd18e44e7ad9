"""
Catalog loader - imports a merchant product file into the shop catalog.
"""

import logging
from pathlib import Path
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from chatseller.data.parsers import ParsedProduct, parse_catalog
from chatseller.db.models import Product, Shop
from chatseller.db.sqlite import Database, db
from chatseller.exceptions import TenantNotFoundError

logger = logging.getLogger(__name__)


class CatalogLoader:
    """Loads catalog files into the products table."""

    def __init__(self, database: Optional[Database] = None):
        self.database = database or db

    async def load_file(
        self,
        file_path: str | Path,
        shop_id: str,
        deactivate_missing: bool = False,
    ) -> dict:
        """
        Load a catalog file for a shop.

        Args:
            file_path: Path to CSV or XLSX file
            shop_id: Shop receiving the products
            deactivate_missing: Deactivate shop products absent from the file

        Returns:
            Statistics about loaded data
        """
        file_path = Path(file_path)
        parsed = parse_catalog(file_path)

        stats = {
            "file": file_path.name,
            "total_products": len(parsed),
            "active_products": 0,
            "new_products": 0,
            "updated_products": 0,
            "deactivated_products": 0,
        }

        async with self.database.session() as session:
            if await session.get(Shop, shop_id) is None:
                raise TenantNotFoundError(f"Shop {shop_id} not found")

            seen = set()
            for parsed_product in parsed:
                product, is_new = await self._upsert_product(session, shop_id, parsed_product)
                seen.add(product.id)

                if parsed_product.is_active:
                    stats["active_products"] += 1
                if is_new:
                    stats["new_products"] += 1
                else:
                    stats["updated_products"] += 1

            if deactivate_missing:
                existing = await session.scalars(
                    select(Product).where(Product.shop_id == shop_id, Product.is_active.is_(True))
                )
                for product in existing:
                    if product.id not in seen:
                        product.is_active = False
                        stats["deactivated_products"] += 1

        logger.info(
            f"Catalog {file_path.name} loaded for shop {shop_id}: "
            f"{stats['new_products']} new, {stats['updated_products']} updated"
        )
        return stats

    async def _upsert_product(
        self, session: AsyncSession, shop_id: str, parsed_product: ParsedProduct
    ) -> tuple[Product, bool]:
        """Create the product or update the one with the same name."""
        stmt = select(Product).where(
            Product.shop_id == shop_id,
            Product.name == parsed_product.name,
        )
        product = (await session.execute(stmt)).scalar_one_or_none()

        if product is None:
            product = Product(
                shop_id=shop_id,
                name=parsed_product.name,
                description=parsed_product.description,
                price=parsed_product.price,
                image_url=parsed_product.image_url,
                url=parsed_product.url,
                category=parsed_product.category,
                is_active=parsed_product.is_active,
            )
            session.add(product)
            await session.flush()  # Get the ID
            return product, True

        product.description = parsed_product.description or product.description
        if parsed_product.price is not None:
            product.price = parsed_product.price
        product.image_url = parsed_product.image_url or product.image_url
        product.url = parsed_product.url or product.url
        product.category = parsed_product.category or product.category
        product.is_active = parsed_product.is_active
        return product, False


async def load_catalog(file_path: str | Path, shop_id: str, deactivate_missing: bool = False) -> dict:
    """Convenience function to load a catalog file."""
    loader = CatalogLoader()
    return await loader.load_file(file_path, shop_id, deactivate_missing)
