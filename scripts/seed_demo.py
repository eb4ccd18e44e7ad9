#!/usr/bin/env python3
"""
Script to create a demo beauty shop with an agent, products and a document.

Usage:
    python scripts/seed_demo.py
"""

import asyncio
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from chatseller.db.models import Agent, KnowledgeDocumentRecord, Product, Shop
from chatseller.db.sqlite import db


DEMO_PRODUCTS = [
    {
        "name": "Huile de Ricin Noir Bio",
        "description": "Huile pure pressée à froid, stimule la pousse et renforce les cheveux cassants.",
        "price": 8500,
        "category": "Cheveux",
    },
    {
        "name": "Beurre de Karité Brut",
        "description": "Karité non raffiné du Burkina Faso, nourrit les peaux sèches et les cheveux crépus.",
        "price": 6000,
        "category": "Corps",
    },
    {
        "name": "Sérum Niacinamide 10%",
        "description": "Sérum anti-taches pour hyperpigmentation et pores dilatés.",
        "price": 12500,
        "category": "Visage",
    },
]

DEMO_DOCUMENT = (
    "Livraison sous 48h à Dakar et Abidjan, 5 jours ailleurs. "
    "Paiement à la livraison, Mobile Money (Orange Money, Wave) ou retrait en boutique."
)


async def main() -> None:
    """Create the demo shop."""
    await db.init()

    async with db.session() as session:
        shop = Shop(name="Maison Nala", domain="maison-nala.example", subscription_plan="starter")
        session.add(shop)
        await session.flush()

        agent = Agent(
            shop_id=shop.id,
            name="Awa",
            title="Conseillère beauté",
            personality="chaleureuse et experte",
            config={"collect_address": True, "upsell_enabled": True},
        )
        session.add(agent)
        await session.flush()

        for data in DEMO_PRODUCTS:
            session.add(Product(shop_id=shop.id, **data))

        session.add(
            KnowledgeDocumentRecord(
                shop_id=shop.id,
                agent_id=agent.id,
                title="Livraison et paiement",
                content=DEMO_DOCUMENT,
            )
        )

        shop_id, agent_id = shop.id, agent.id

    print("✅ Demo shop created")
    print(f"   Shop ID: {shop_id}")
    print(f"   Agent ID: {agent_id}")
    print(f"   Try: python -m chatseller.main {shop_id}")

    await db.close()


if __name__ == "__main__":
    asyncio.run(main())
