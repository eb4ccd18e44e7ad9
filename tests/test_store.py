"""
Tests for order state stores and the order models they save.

USAGE:
    Run from project root: python -m pytest tests/test_store.py -v
"""

import asyncio
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import create_async_engine

from chatseller.core.orders.models import (
    Order,
    OrderCollectionState,
    OrderData,
    OrderStep,
    PaymentMethod,
)
from chatseller.core.orders.store import MemoryOrderStateStore, SqlOrderStateStore
from chatseller.db.models import Conversation, Shop
from chatseller.db.sqlite import Database


def make_state():
    return OrderCollectionState(
        step=OrderStep.NAME,
        data=OrderData(
            product_id="p1",
            product_name="Beurre de Karité Brut",
            product_price=6000,
            quantity=3,
            customer_phone="771234567",
        ),
    )


class TestOrderCollectionState(unittest.TestCase):

    def test_dict_roundtrip(self):
        state = make_state()
        restored = OrderCollectionState.from_dict(state.to_dict())

        self.assertEqual(restored, state)

    def test_unknown_keys_ignored(self):
        restored = OrderCollectionState.from_dict(
            {"step": "phone", "data": {"quantity": 2, "legacy_field": "x"}}
        )
        self.assertEqual(restored.step, OrderStep.PHONE)
        self.assertEqual(restored.data.quantity, 2)

    def test_to_order_pickup_drops_address(self):
        state = make_state()
        state.data.customer_first_name = "Awa"
        state.data.customer_address = "Dakar"
        state.data.payment_method = PaymentMethod.PICKUP

        order = state.to_order(currency="XOF", conversation_id="c1", shop_id="s1")

        self.assertIsNone(order.customer_address)
        self.assertEqual(order.total_amount, 18000)
        self.assertEqual(order.to_dict()["items"][0]["total"], 18000)

    def test_order_number(self):
        order = Order(
            customer_name="Awa Diop",
            customer_phone="771234567",
            payment_method=PaymentMethod.MOBILE_MONEY,
            id="0f8e7d6c-5b4a-3928-1706-abcdef123456",
        )
        self.assertEqual(order.order_number, "EF123456")


class TestMemoryOrderStateStore(unittest.IsolatedAsyncioTestCase):

    async def test_set_get_delete(self):
        store = MemoryOrderStateStore()

        self.assertIsNone(await store.get("c1"))
        await store.set("c1", make_state())
        self.assertEqual(await store.get("c1"), make_state())

        await store.delete("c1")
        await store.delete("c1")
        self.assertIsNone(await store.get("c1"))

    async def test_returns_copies(self):
        store = MemoryOrderStateStore()
        await store.set("c1", make_state())

        state = await store.get("c1")
        state.data.quantity = 99

        self.assertEqual((await store.get("c1")).data.quantity, 3)


class TestSqlOrderStateStore(unittest.IsolatedAsyncioTestCase):

    async def asyncSetUp(self):
        self.database = Database("sqlite+aiosqlite://")
        await self.database.init()
        async with self.database.session() as session:
            session.add(Shop(id="s1", name="Maison Nala"))
            session.add(Conversation(id="c1", shop_id="s1"))

    async def asyncTearDown(self):
        await self.database.close()

    async def test_set_then_get_in_new_session(self):
        async with self.database.session() as session:
            await SqlOrderStateStore(session).set("c1", make_state())

        async with self.database.session() as session:
            state = await SqlOrderStateStore(session).get("c1")

        self.assertEqual(state, make_state())

    async def test_overwrite(self):
        async with self.database.session() as session:
            store = SqlOrderStateStore(session)
            await store.set("c1", make_state())
            updated = make_state()
            updated.step = OrderStep.ADDRESS
            await store.set("c1", updated)

        async with self.database.session() as session:
            state = await SqlOrderStateStore(session).get("c1")

        self.assertEqual(state.step, OrderStep.ADDRESS)

    async def test_delete(self):
        async with self.database.session() as session:
            await SqlOrderStateStore(session).set("c1", make_state())

        async with self.database.session() as session:
            await SqlOrderStateStore(session).delete("c1")

        async with self.database.session() as session:
            self.assertIsNone(await SqlOrderStateStore(session).get("c1"))

    async def test_rollback_discards_write(self):
        with self.assertRaises(RuntimeError):
            async with self.database.session() as session:
                await SqlOrderStateStore(session).set("c1", make_state())
                raise RuntimeError("turn aborted")

        async with self.database.session() as session:
            self.assertIsNone(await SqlOrderStateStore(session).get("c1"))


class TestDatabaseInit(unittest.IsolatedAsyncioTestCase):

    async def test_concurrent_first_sessions_wait_for_tables(self):
        tmp = tempfile.TemporaryDirectory()
        self.addCleanup(tmp.cleanup)
        database = Database(f"sqlite+aiosqlite:///{Path(tmp.name) / 'test.db'}")
        self.addAsyncCleanup(database.close)

        async def count_shops():
            async with database.session() as session:
                return await session.scalar(select(func.count()).select_from(Shop))

        with patch(
            "chatseller.db.sqlite.create_async_engine", wraps=create_async_engine
        ) as create_engine:
            counts = await asyncio.gather(count_shops(), count_shops(), count_shops())

        self.assertEqual(counts, [0, 0, 0])
        create_engine.assert_called_once()


if __name__ == "__main__":
    unittest.main()
