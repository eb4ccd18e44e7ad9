"""
Storage of in-flight order collection states, keyed by conversation.
"""

import json
import logging
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from chatseller.core.orders.models import OrderCollectionState
from chatseller.db.models import OrderCollection
from chatseller.exceptions import PersistenceError

logger = logging.getLogger(__name__)


class OrderStateStore(ABC):
    """Key-value store of order collection states."""

    @abstractmethod
    async def get(self, conversation_id: str) -> Optional[OrderCollectionState]:
        """State of a conversation, None when no order is in progress."""
        pass

    @abstractmethod
    async def set(self, conversation_id: str, state: OrderCollectionState) -> None:
        pass

    @abstractmethod
    async def delete(self, conversation_id: str) -> None:
        pass


class MemoryOrderStateStore(OrderStateStore):
    """Process-local store, for tests and single-process development."""

    def __init__(self):
        self._states: dict[str, dict] = {}

    async def get(self, conversation_id: str) -> Optional[OrderCollectionState]:
        raw = self._states.get(conversation_id)
        return OrderCollectionState.from_dict(raw) if raw else None

    async def set(self, conversation_id: str, state: OrderCollectionState) -> None:
        self._states[conversation_id] = state.to_dict()

    async def delete(self, conversation_id: str) -> None:
        self._states.pop(conversation_id, None)


class SqlOrderStateStore(OrderStateStore):
    """
    Store backed by the order_collections table.

    Writes go through the caller's session so they commit together
    with the conversation turns.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, conversation_id: str) -> Optional[OrderCollectionState]:
        try:
            row = await self.session.scalar(
                select(OrderCollection).where(OrderCollection.conversation_id == conversation_id)
            )
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to read order state: {e}") from e

        if row is None:
            return None
        return OrderCollectionState.from_dict(json.loads(row.state))

    async def set(self, conversation_id: str, state: OrderCollectionState) -> None:
        payload = json.dumps(state.to_dict(), ensure_ascii=False)
        try:
            row = await self.session.scalar(
                select(OrderCollection).where(OrderCollection.conversation_id == conversation_id)
            )
            if row is None:
                self.session.add(OrderCollection(conversation_id=conversation_id, state=payload))
            else:
                row.state = payload
                row.updated_at = datetime.utcnow()
            await self.session.flush()
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to save order state: {e}") from e

    async def delete(self, conversation_id: str) -> None:
        try:
            await self.session.execute(
                delete(OrderCollection).where(OrderCollection.conversation_id == conversation_id)
            )
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to clear order state: {e}") from e
