#!/usr/bin/env python3
"""
Script to load a product catalog into a shop.

Usage:
    python scripts/load_catalog.py SHOP_ID path/to/catalog.csv
    python scripts/load_catalog.py SHOP_ID path/to/catalog.xlsx --deactivate-missing
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from chatseller.data.loaders.catalog_loader import load_catalog
from chatseller.db.sqlite import db


async def main(shop_id: str, file_path: str, deactivate_missing: bool) -> None:
    """Load catalog from file."""
    file_path = Path(file_path)

    if not file_path.exists():
        print(f"Error: File not found: {file_path}")
        sys.exit(1)

    await db.init()

    print(f"Loading catalog from: {file_path}")
    print("-" * 50)

    try:
        stats = await load_catalog(file_path, shop_id, deactivate_missing)

        print("✅ Successfully loaded catalog!")
        print(f"   Total products: {stats['total_products']}")
        print(f"   Active: {stats['active_products']}")
        print(f"   New products: {stats['new_products']}")
        print(f"   Updated products: {stats['updated_products']}")
        print(f"   Deactivated: {stats['deactivated_products']}")

    except Exception as e:
        print(f"❌ Error loading catalog: {e}")
        raise
    finally:
        await db.close()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Load a product catalog into a shop")
    parser.add_argument("shop_id", help="Shop ID")
    parser.add_argument("file", help="Path to catalog file (CSV or XLSX)")
    parser.add_argument(
        "--deactivate-missing",
        action="store_true",
        help="Deactivate shop products absent from the file",
    )

    args = parser.parse_args()
    asyncio.run(main(args.shop_id, args.file, args.deactivate_missing))
