"""
Order collection state machine.

Walks the shopper through quantity, phone, name, address, payment and
confirmation, one field per turn. A step only advances when its extractor
found a value; otherwise the same question is asked again.
"""

import copy
import logging
from dataclasses import dataclass
from typing import Optional

from chatseller.config import AgentConfig, settings
from chatseller.core.models import CatalogItem, format_price
from chatseller.core.orders import validators
from chatseller.core.orders.intent import detect_purchase_intent
from chatseller.core.orders.models import (
    OrderCollectionState,
    OrderData,
    OrderStep,
    PaymentMethod,
    STEP_SEQUENCE,
)

logger = logging.getLogger(__name__)


STEP_QUESTIONS = {
    OrderStep.QUANTITY: "Combien d'exemplaires souhaitez-vous commander ?",
    OrderStep.PHONE: "Quel est votre numéro de téléphone pour que nous puissions vous contacter ?",
    OrderStep.NAME: "Pouvez-vous me donner votre nom complet ?",
    OrderStep.ADDRESS: "À quelle adresse souhaitez-vous recevoir votre commande ?",
    OrderStep.PAYMENT: (
        "Quel mode de paiement préférez-vous ?\n\n"
        "💳 Paiement à la livraison\n💰 Virement bancaire\n📱 Mobile Money\n"
        "💳 Carte bancaire\n🏪 Retrait en magasin"
    ),
}

PICKUP_PAYMENT_QUESTION = (
    "Vous avez choisi le retrait en magasin : on garde cette option ? "
    "Sinon, indiquez votre mode de paiement (livraison, Mobile Money, virement, carte)."
)

CONFIRMATION_QUESTION = (
    "📋 **Récapitulatif de votre commande :**\n\n{summary}\n\n"
    "Tout est correct ? Confirmez-vous cette commande ?"
)

CANCELLED_MESSAGE = (
    "C'est noté, j'ai annulé cette commande. "
    "N'hésitez pas si vous souhaitez un autre conseil ou un autre produit."
)


@dataclass
class Transition:
    """Outcome of one advance() call."""
    state: Optional[OrderCollectionState]
    instruction: str = ""
    started: bool = False
    advanced: bool = False
    completed: bool = False
    cancelled: bool = False
    summary: Optional[str] = None

    @property
    def in_progress(self) -> bool:
        """True while the dialogue still has a question to ask."""
        return self.state is not None and not self.completed


def format_order_summary(data: OrderData, currency: str) -> str:
    """Human-readable summary shown before confirmation."""
    quantity = data.quantity or 1
    lines = [
        "🛍️ **Produits :**",
        f"• {data.product_name or 'Produit'} x{quantity} - {format_price(data.total)} {currency}",
        "",
        f"👤 **Client :** {data.customer_name or '-'}",
        f"📞 **Téléphone :** {data.customer_phone or '-'}",
    ]
    if data.customer_address and not data.is_pickup:
        lines.append(f"📍 **Adresse :** {data.customer_address}")
    lines.append(f"💳 **Paiement :** {data.payment_method or 'Non précisé'}")
    lines.append("")
    lines.append(f"💰 **Total : {format_price(data.total)} {currency}**")
    return "\n".join(lines)


class OrderStateMachine:
    """
    Advances an order collection dialogue by one shopper message.

    Usage:
        machine = OrderStateMachine()
        transition = machine.advance(None, "je veux acheter 2", product)
        transition.state.step  # OrderStep.PHONE
    """

    def __init__(
        self,
        steps: list[OrderStep] | None = None,
        currency: str | None = None,
    ):
        self.steps = list(steps or STEP_SEQUENCE)
        self.currency = currency or settings.currency

    @classmethod
    def for_agent(cls, config: AgentConfig, currency: str | None = None) -> "OrderStateMachine":
        """Build the step sequence from the agent's collection options."""
        disabled = set()
        if not config.collect_phone:
            disabled.add(OrderStep.PHONE)
        if not config.collect_name:
            disabled.add(OrderStep.NAME)
        if not config.collect_address:
            disabled.add(OrderStep.ADDRESS)
        if not config.collect_payment_method:
            disabled.add(OrderStep.PAYMENT)
        return cls(
            steps=[step for step in STEP_SEQUENCE if step not in disabled],
            currency=currency,
        )

    def successor(self, step: OrderStep, data: OrderData) -> OrderStep:
        """
        Next step of the sequence.

        Address is dropped for in-store pickup. A shopper who leaves pickup
        at the payment step is sent back to the skipped address step, after
        which payment is already known and confirmation follows.
        """
        if step == OrderStep.PAYMENT and self.needs_address(data):
            return OrderStep.ADDRESS

        position = STEP_SEQUENCE.index(step)
        for candidate in self.steps:
            if STEP_SEQUENCE.index(candidate) <= position:
                continue
            if candidate == OrderStep.ADDRESS and data.is_pickup:
                continue
            if candidate == OrderStep.PAYMENT and data.payment_method and not data.is_pickup:
                continue
            return candidate
        return OrderStep.COMPLETED

    def needs_address(self, data: OrderData) -> bool:
        """True when a delivery order still lacks its address."""
        return (
            OrderStep.ADDRESS in self.steps
            and not data.is_pickup
            and not data.customer_address
        )

    def advance(
        self,
        state: Optional[OrderCollectionState],
        message: str,
        product: Optional[CatalogItem] = None,
    ) -> Transition:
        """
        Apply one shopper message.

        Args:
            state: Current collection state, None when no order is in progress
            message: Latest shopper message
            product: Product the order is about, when known

        Returns:
            Transition with the next state and the question to ask
        """
        if state is None:
            return self._start(message, product)

        state = copy.deepcopy(state)
        data = state.data

        if state.step == OrderStep.COMPLETED:
            return Transition(state=state, completed=True)

        if validators.is_cancel_request(message):
            logger.info(f"Order collection cancelled at step {state.step.value}")
            return Transition(state=None, instruction=CANCELLED_MESSAGE, cancelled=True)

        if product is not None and not data.product_name:
            self._set_product(data, product)

        if validators.mentions_pickup(message):
            data.payment_method = PaymentMethod.PICKUP

        step = state.step

        if step == OrderStep.CONFIRMATION:
            return self._confirm(state, message)

        if step == OrderStep.ADDRESS and data.is_pickup:
            # Pickup answered the address question
            values = {"payment_method": PaymentMethod.PICKUP}
        elif step == OrderStep.PAYMENT and data.payment_method and validators.is_affirmative(message):
            values = {"payment_method": data.payment_method}
        else:
            values = validators.extract(step, message)

        if not values:
            logger.debug(f"Nothing extracted for step {step.value}, asking again")
            return Transition(state=state, instruction=self.question(state))

        data.update(values)
        state.step = self.successor(step, data)
        logger.info(f"Order collection: {step.value} -> {state.step.value}")

        transition = Transition(state=state, advanced=True)
        if state.step == OrderStep.CONFIRMATION:
            transition.summary = format_order_summary(data, self.currency)
        transition.instruction = self.question(state)
        return transition

    def question(self, state: OrderCollectionState) -> str:
        """The single question to ask for the current step."""
        if state.step == OrderStep.CONFIRMATION:
            return CONFIRMATION_QUESTION.format(
                summary=format_order_summary(state.data, self.currency)
            )
        if state.step == OrderStep.PAYMENT and state.data.is_pickup:
            return PICKUP_PAYMENT_QUESTION
        return STEP_QUESTIONS.get(state.step, "")

    def _start(self, message: str, product: Optional[CatalogItem]) -> Transition:
        if not detect_purchase_intent(message):
            return Transition(state=None)

        state = OrderCollectionState(step=self.steps[0])
        if product is not None:
            self._set_product(state.data, product)
        if validators.mentions_pickup(message):
            state.data.payment_method = PaymentMethod.PICKUP

        # "je veux acheter 2" already answers the quantity question
        values = validators.extract(OrderStep.QUANTITY, message)
        if values:
            state.data.update(values)
            state.step = self.successor(OrderStep.QUANTITY, state.data)

        logger.info(
            f"Order collection started for {state.data.product_name or 'unknown product'} "
            f"at step {state.step.value}"
        )
        transition = Transition(state=state, started=True, advanced=bool(values))
        if state.step == OrderStep.CONFIRMATION:
            transition.summary = format_order_summary(state.data, self.currency)
        transition.instruction = self.question(state)
        return transition

    def _confirm(self, state: OrderCollectionState, message: str) -> Transition:
        values = validators.extract(OrderStep.CONFIRMATION, message)
        summary = format_order_summary(state.data, self.currency)

        if values.get("confirmed") is True:
            state.step = OrderStep.COMPLETED
            logger.info("Order collection completed")
            return Transition(state=state, advanced=True, completed=True, summary=summary)

        if values.get("confirmed") is False:
            logger.info("Order refused at confirmation")
            return Transition(state=None, instruction=CANCELLED_MESSAGE, cancelled=True)

        return Transition(state=state, instruction=self.question(state), summary=summary)

    @staticmethod
    def _set_product(data: OrderData, product: CatalogItem) -> None:
        data.product_id = product.id
        data.product_name = product.name
        data.product_price = product.price
