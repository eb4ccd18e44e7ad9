"""
End-to-end tests for the conversation service.

PURPOSE:
    - Run full turns against a seeded SQLite database
    - Provider chain replaced by a scripted mock, no network calls

USAGE:
    Run from project root: python -m pytest tests/test_service.py -v
"""

import tempfile
import unittest
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

from sqlalchemy import func, select

from chatseller.config import settings
from chatseller.core.graph.service import ConversationService, TurnRequest
from chatseller.core.orders.store import SqlOrderStateStore
from chatseller.db.models import Agent, KnowledgeDocumentRecord, OrderRecord, Product, Shop
from chatseller.db.repository import ShopRepository
from chatseller.db.sqlite import Database
from chatseller.exceptions import PersistenceError, TenantNotFoundError
from chatseller.integrations.llm import CompletionResult, ToolCall


WELCOME = "Bienvenue chez Maison Nala ! Je suis Awa, comment puis-je vous aider ?"


class TestConversationService(unittest.IsolatedAsyncioTestCase):

    async def asyncSetUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.database = Database(f"sqlite+aiosqlite:///{Path(self.tmp.name) / 'test.db'}")
        await self.database.init()

        async with self.database.session() as session:
            shop = Shop(id="shop-1", name="Maison Nala", subscription_plan="starter")
            session.add(shop)
            session.add(
                Agent(
                    id="agent-1",
                    shop_id="shop-1",
                    name="Awa",
                    title="Conseillère beauté",
                    welcome_message=WELCOME,
                    config={"upsell_enabled": True},
                )
            )
            session.add(
                Product(
                    id="p-ricin",
                    shop_id="shop-1",
                    name="Huile de Ricin Noir Bio",
                    price=8500,
                    description="Renforce les cheveux cassants.",
                )
            )
            session.add(
                Product(
                    id="p-karite",
                    shop_id="shop-1",
                    name="Beurre de Karité Brut",
                    price=6000,
                    description="Nourrit les peaux sèches.",
                )
            )
            session.add(
                KnowledgeDocumentRecord(
                    shop_id="shop-1",
                    agent_id="agent-1",
                    title="Livraison",
                    content="Livraison sous 48h à Dakar, 5 jours dans le reste du pays.",
                )
            )

        self.chain = MagicMock()
        self.chain.complete = AsyncMock(
            return_value=CompletionResult(text="Très bien.", provider="openai")
        )
        patcher = patch(
            "chatseller.core.graph.nodes.build_provider_chain", return_value=self.chain
        )
        self.build_chain = patcher.start()
        self.addCleanup(patcher.stop)

        self.service = ConversationService(database=self.database)

    async def asyncTearDown(self):
        await self.database.close()
        self.tmp.cleanup()

    async def turn(self, message, conversation_id="conv-1", **kwargs):
        return await self.service.handle_turn(
            TurnRequest(shop_id="shop-1", message=message, conversation_id=conversation_id, **kwargs)
        )

    async def test_first_message_gets_welcome(self):
        result = await self.turn("Bonjour, je cherche un soin")

        self.assertTrue(result.is_first_message)
        self.assertEqual(result.reply, WELCOME)
        self.assertEqual(result.provider, "welcome")
        self.chain.complete.assert_not_awaited()

        async with self.database.session() as session:
            turns = await ShopRepository(session).list_turns("conv-1")
        self.assertEqual([(t.role, t.content) for t in turns], [
            ("user", "Bonjour, je cherche un soin"),
            ("assistant", WELCOME),
        ])

    async def test_new_conversation_id_generated(self):
        result = await self.service.handle_turn(TurnRequest(shop_id="shop-1", message="Salut"))

        self.assertTrue(result.conversation_id)
        self.assertTrue(result.is_first_message)

    async def test_continuation_strips_greeting(self):
        await self.turn("Bonjour")
        self.chain.complete.return_value = CompletionResult(
            text="Bonjour ! Je te conseille le Beurre de Karité Brut.", provider="openai"
        )

        result = await self.turn("Quel soin pour la peau sèche ?")

        self.assertFalse(result.is_first_message)
        self.assertEqual(result.reply, "Je te conseille le Beurre de Karité Brut.")
        self.assertEqual(result.provider, "openai")

        history, system_prompt = self.chain.complete.await_args.args[:2]
        self.assertEqual(history, [
            {"role": "user", "content": "Bonjour"},
            {"role": "assistant", "content": WELCOME},
            {"role": "user", "content": "Quel soin pour la peau sèche ?"},
        ])
        self.assertIn("INTERDIT DE SALUER", system_prompt)
        self.assertIn("Beurre de Karité Brut", system_prompt)
        self.assertIn("📖 CONNAISSANCE MARQUE — Livraison", system_prompt)
        self.build_chain.assert_called_with(None, "starter")

    async def test_product_card_then_order_from_card(self):
        await self.turn("Bonjour")
        self.chain.complete.return_value = CompletionResult(
            text="Voici mon conseil.",
            tool_calls=[
                ToolCall(
                    name="recommend_product",
                    arguments={"product_name": "Huile de Ricin", "reason": "Elle renforce les cheveux cassants."},
                )
            ],
            provider="openai",
        )

        result = await self.turn("mes cheveux cassent, que me conseillez-vous ?")

        self.assertEqual(result.reply, "Elle renforce les cheveux cassants.")
        self.assertEqual(result.artifact["type"], "product_card")
        self.assertEqual(result.artifact["id"], "p-ricin")

        self.chain.complete.return_value = CompletionResult(
            text="Quel est votre numéro ?", provider="openai"
        )
        result = await self.turn("je le prends, 1 s'il vous plaît")

        self.assertEqual(result.order_state["step"], "phone")
        self.assertEqual(result.order_state["data"]["product_name"], "Huile de Ricin Noir Bio")
        self.assertEqual(result.order_state["data"]["quantity"], 1)

    async def test_full_order_flow(self):
        await self.turn("Bonjour", customer_context_hint={"product_id": "p-ricin"})

        result = await self.turn(
            "je veux acheter 2", customer_context_hint={"product_id": "p-ricin"}
        )
        self.assertEqual(result.order_state["step"], "phone")
        system_prompt = self.chain.complete.await_args.args[1]
        self.assertIn("COMMANDE EN COURS", system_prompt)
        self.assertIn("Quel est votre numéro de téléphone", system_prompt)

        for message in ["77 123 45 67", "Awa Diop", "Dakar, Plateau"]:
            result = await self.turn(message)
        self.assertEqual(result.order_state["step"], "payment")

        result = await self.turn("Mobile Money")
        self.assertEqual(result.provider, "order_flow")
        self.assertIn("Récapitulatif", result.reply)
        self.assertIn("17000 FCFA", result.reply)
        self.assertEqual(self.chain.complete.await_count, 4)

        result = await self.turn("oui")
        self.assertIn("Commande confirmée", result.reply)
        self.assertIsNone(result.order_state)
        self.assertEqual(result.order["total_amount"], 17000)
        self.assertEqual(result.order["currency"], settings.order_currency_code)
        self.assertIn(result.order["order_number"], result.reply)
        self.assertEqual(self.chain.complete.await_count, 4)

        async with self.database.session() as session:
            record = await session.scalar(select(OrderRecord))
            conversation = await ShopRepository(session).get_conversation("conv-1")
            state = await SqlOrderStateStore(session).get("conv-1")

        self.assertEqual(record.customer_name, "Awa Diop")
        self.assertEqual(record.customer_phone, "771234567")
        self.assertEqual(record.customer_address, "Dakar, Plateau")
        self.assertEqual(record.payment_method, "Mobile Money")
        self.assertEqual(record.product_items[0]["product_id"], "p-ricin")
        self.assertEqual(conversation.status, "completed")
        self.assertTrue(conversation.conversion_completed)
        self.assertEqual(conversation.product_id, "p-ricin")
        self.assertEqual(conversation.message_count, 14)
        self.assertIsNone(state)

    async def test_cancel_clears_state(self):
        await self.turn("Bonjour")
        await self.turn("je veux acheter 2", customer_context_hint={"product_id": "p-karite"})

        result = await self.turn("finalement, annulez")

        self.assertEqual(result.provider, "order_flow")
        self.assertIsNone(result.order_state)
        async with self.database.session() as session:
            self.assertIsNone(await SqlOrderStateStore(session).get("conv-1"))

    async def test_provider_failure_returns_apology(self):
        await self.turn("Bonjour")
        self.chain.complete.return_value = CompletionResult(text=settings.apology_message)

        result = await self.turn("Quel soin pour la peau sèche ?")

        self.assertEqual(result.provider, "fallback")
        self.assertEqual(result.reply, settings.apology_message)

    async def test_graph_error_returns_apology(self):
        await self.turn("Bonjour")
        self.build_chain.side_effect = RuntimeError("boom")

        result = await self.turn("Quel soin pour la peau sèche ?")

        self.assertEqual(result.provider, "fallback")
        self.assertEqual(result.reply, settings.apology_message)
        async with self.database.session() as session:
            turns = await ShopRepository(session).list_turns("conv-1")
        self.assertEqual(len(turns), 4)

    async def test_persistence_failure_commits_nothing(self):
        with patch.object(
            ShopRepository,
            "add_turn",
            new_callable=AsyncMock,
            side_effect=PersistenceError("Failed to save message: disk full"),
        ):
            with self.assertRaises(PersistenceError):
                await self.turn("Bonjour", conversation_id="conv-broken")

        async with self.database.session() as session:
            repository = ShopRepository(session)
            self.assertIsNone(await repository.get_conversation("conv-broken"))
            self.assertEqual(await repository.list_turns("conv-broken"), [])

    async def test_conversation_of_another_shop_is_not_reused(self):
        async with self.database.session() as session:
            session.add(Shop(id="shop-2", name="Beauté Kora"))
            session.add(Agent(id="agent-2", shop_id="shop-2", name="Kora", welcome_message="Bienvenue chez Kora !"))

        await self.turn("Bonjour")
        await self.turn("mon numero 771234567")

        result = await self.service.handle_turn(
            TurnRequest(shop_id="shop-2", message="Bonjour", conversation_id="conv-1")
        )

        self.assertTrue(result.is_first_message)
        self.assertEqual(result.reply, "Bienvenue chez Kora !")
        self.assertNotEqual(result.conversation_id, "conv-1")

        await self.service.handle_turn(
            TurnRequest(shop_id="shop-2", message="Un soin pour la peau ?", conversation_id=result.conversation_id)
        )
        history = self.chain.complete.await_args.args[0]
        self.assertEqual(history, [
            {"role": "user", "content": "Bonjour"},
            {"role": "assistant", "content": "Bienvenue chez Kora !"},
            {"role": "user", "content": "Un soin pour la peau ?"},
        ])

        async with self.database.session() as session:
            repository = ShopRepository(session)
            self.assertEqual(len(await repository.list_turns("conv-1")), 4)
            self.assertEqual(await repository.list_turns("conv-1", "shop-2"), [])
            self.assertIsNone(await repository.get_conversation("conv-1", "shop-2"))
            with self.assertRaises(PersistenceError):
                await repository.get_or_create_conversation("conv-1", "shop-2")

    async def test_unknown_shop(self):
        with self.assertRaises(TenantNotFoundError):
            await self.service.handle_turn(TurnRequest(shop_id="nope", message="Bonjour"))

    async def test_inactive_agent(self):
        async with self.database.session() as session:
            agent = await session.get(Agent, "agent-1")
            agent.is_active = False

        with self.assertRaises(TenantNotFoundError):
            await self.turn("Bonjour")

        async with self.database.session() as session:
            count = await session.scalar(select(func.count()).select_from(OrderRecord))
        self.assertEqual(count, 0)


if __name__ == "__main__":
    unittest.main()
