"""
Order models for ChatSeller.
"""

from dataclasses import asdict, dataclass, field, fields
from datetime import datetime
from enum import Enum
from typing import Optional
import uuid


class OrderStep(Enum):
    """Steps of the order collection dialogue, in order."""
    QUANTITY = "quantity"
    PHONE = "phone"
    NAME = "name"
    ADDRESS = "address"
    PAYMENT = "payment"
    CONFIRMATION = "confirmation"
    COMPLETED = "completed"


STEP_SEQUENCE = [
    OrderStep.QUANTITY,
    OrderStep.PHONE,
    OrderStep.NAME,
    OrderStep.ADDRESS,
    OrderStep.PAYMENT,
    OrderStep.CONFIRMATION,
    OrderStep.COMPLETED,
]


class PaymentMethod:
    """Canonical payment method labels."""
    CASH_ON_DELIVERY = "Paiement à la livraison"
    BANK_TRANSFER = "Virement bancaire"
    MOBILE_MONEY = "Mobile Money"
    CARD = "Carte bancaire"
    PICKUP = "Retrait en magasin"

    ALL = [CASH_ON_DELIVERY, BANK_TRANSFER, MOBILE_MONEY, CARD, PICKUP]


class OrderStatus(Enum):
    """Order status enum."""
    PENDING = "pending"          # Waiting for the merchant
    CONFIRMED = "confirmed"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


@dataclass
class OrderData:
    """Fields collected during the dialogue."""
    product_id: Optional[str] = None
    product_name: Optional[str] = None
    product_price: Optional[float] = None
    quantity: Optional[int] = None
    customer_phone: Optional[str] = None
    customer_first_name: Optional[str] = None
    customer_last_name: Optional[str] = None
    customer_address: Optional[str] = None
    payment_method: Optional[str] = None

    @property
    def customer_name(self) -> str:
        """Full customer name."""
        parts = [self.customer_first_name, self.customer_last_name]
        return " ".join(p for p in parts if p)

    @property
    def total(self) -> float:
        """Unit price times quantity."""
        return (self.product_price or 0) * (self.quantity or 0)

    @property
    def is_pickup(self) -> bool:
        return self.payment_method == PaymentMethod.PICKUP

    def update(self, values: dict) -> None:
        """Set the known fields present in values."""
        known = {f.name for f in fields(self)}
        for key, value in values.items():
            if key in known and value is not None:
                setattr(self, key, value)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return asdict(self)


@dataclass
class OrderCollectionState:
    """In-flight order collection of one conversation."""
    step: OrderStep = OrderStep.QUANTITY
    data: OrderData = field(default_factory=OrderData)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {"step": self.step.value, "data": self.data.to_dict()}

    @classmethod
    def from_dict(cls, raw: dict) -> "OrderCollectionState":
        """Restore a state saved with to_dict()."""
        data = OrderData()
        data.update(raw.get("data") or {})
        return cls(step=OrderStep(raw.get("step", OrderStep.QUANTITY.value)), data=data)

    def to_order(
        self,
        currency: str = "XOF",
        conversation_id: Optional[str] = None,
        shop_id: Optional[str] = None,
    ) -> "Order":
        """Durable order of a completed collection."""
        return Order.from_state(self, currency, conversation_id, shop_id)


@dataclass
class OrderItem:
    """Single line of an order."""
    name: str
    unit_price: float
    quantity: int
    product_id: Optional[str] = None

    @property
    def total_price(self) -> float:
        """Calculate total price for this item."""
        return self.unit_price * self.quantity

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "product_id": self.product_id,
            "name": self.name,
            "unit_price": self.unit_price,
            "quantity": self.quantity,
            "total": self.total_price,
        }


@dataclass
class Order:
    """Durable order placed at the end of a collection dialogue."""
    customer_name: str
    customer_phone: str
    payment_method: str
    items: list[OrderItem] = field(default_factory=list)
    customer_address: Optional[str] = None
    currency: str = "XOF"
    conversation_id: Optional[str] = None
    shop_id: Optional[str] = None
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created_at: datetime = field(default_factory=datetime.utcnow)
    status: OrderStatus = OrderStatus.PENDING

    @property
    def total_amount(self) -> float:
        """Total order price."""
        return sum(item.total_price for item in self.items)

    @property
    def order_number(self) -> str:
        """Human-readable order number."""
        return self.id.replace("-", "")[-8:].upper()

    @classmethod
    def from_state(
        cls,
        state: OrderCollectionState,
        currency: str = "XOF",
        conversation_id: Optional[str] = None,
        shop_id: Optional[str] = None,
    ) -> "Order":
        """Build the durable order from a completed collection."""
        data = state.data
        item = OrderItem(
            name=data.product_name or "Produit",
            unit_price=data.product_price or 0,
            quantity=data.quantity or 1,
            product_id=data.product_id,
        )
        return cls(
            customer_name=data.customer_name,
            customer_phone=data.customer_phone or "",
            payment_method=data.payment_method or "",
            items=[item],
            customer_address=None if data.is_pickup else data.customer_address,
            currency=currency,
            conversation_id=conversation_id,
            shop_id=shop_id,
        )

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "order_number": self.order_number,
            "conversation_id": self.conversation_id,
            "shop_id": self.shop_id,
            "created_at": self.created_at.isoformat(),
            "status": self.status.value,
            "customer_name": self.customer_name,
            "customer_phone": self.customer_phone,
            "customer_address": self.customer_address,
            "items": [item.to_dict() for item in self.items],
            "total_amount": self.total_amount,
            "currency": self.currency,
            "payment_method": self.payment_method,
        }
