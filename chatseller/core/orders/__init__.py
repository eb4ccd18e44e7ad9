"""
Orders module for ChatSeller.
Handles purchase intent, order collection, storage, and export.
"""

from chatseller.core.orders.models import (
    Order,
    OrderCollectionState,
    OrderData,
    OrderItem,
    OrderStatus,
    OrderStep,
    PaymentMethod,
    STEP_SEQUENCE,
)
from chatseller.core.orders.intent import detect_purchase_intent
from chatseller.core.orders.validators import extract
from chatseller.core.orders.machine import (
    OrderStateMachine,
    Transition,
    format_order_summary,
)
from chatseller.core.orders.store import (
    MemoryOrderStateStore,
    OrderStateStore,
    SqlOrderStateStore,
)
from chatseller.core.orders.exporter import order_exporter

__all__ = [
    # Models
    "Order",
    "OrderCollectionState",
    "OrderData",
    "OrderItem",
    "OrderStatus",
    "OrderStep",
    "PaymentMethod",
    "STEP_SEQUENCE",
    # Intent
    "detect_purchase_intent",
    # Extractors
    "extract",
    # State machine
    "OrderStateMachine",
    "Transition",
    "format_order_summary",
    # Storage
    "OrderStateStore",
    "MemoryOrderStateStore",
    "SqlOrderStateStore",
    # Exporter
    "order_exporter",
]
