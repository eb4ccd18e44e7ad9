"""
ChatSeller - Main entry point.
Interactive console conversation with a shop's sales agent.
"""

import argparse
import asyncio
import logging
import sys

from chatseller.config import settings
from chatseller.core.graph import ConversationService, TurnRequest
from chatseller.db.sqlite import db
from chatseller.exceptions import ChatSellerError


# Fix for Windows asyncio
if sys.platform == "win32":
    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())


# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


async def on_startup() -> None:
    """Initialize services on startup."""
    logger.info("Starting ChatSeller...")

    await db.init()
    logger.info("Database initialized")


async def on_shutdown() -> None:
    """Cleanup on shutdown."""
    logger.info("Shutting down ChatSeller...")

    await db.close()

    logger.info("Cleanup complete")


async def main(shop_id: str, agent_id: str | None = None, product_id: str | None = None) -> None:
    """Run a console conversation until EOF or 'quit'."""
    await on_startup()
    service = ConversationService()
    conversation_id = None
    hint = {"product_id": product_id} if product_id else None

    try:
        while True:
            try:
                message = await asyncio.to_thread(input, "Vous > ")
            except EOFError:
                break

            message = message.strip()
            if not message:
                continue
            if message.lower() in {"quit", "exit"}:
                break

            try:
                result = await service.handle_turn(
                    TurnRequest(
                        shop_id=shop_id,
                        message=message,
                        conversation_id=conversation_id,
                        agent_id=agent_id,
                        customer_context_hint=hint,
                    )
                )
            except ChatSellerError as e:
                logger.error(f"Turn failed: {e}")
                print(f"❌ {e}")
                continue

            conversation_id = result.conversation_id
            print(f"Agent > {result.reply}")
            if result.artifact:
                print(f"        [{result.artifact['type']}] {result.artifact['name']}")
            if result.order:
                print(f"        Commande n°{result.order['order_number']} enregistrée")
    finally:
        await on_shutdown()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Chat with a shop's sales agent")
    parser.add_argument("shop_id", help="Shop ID (see scripts/seed_demo.py)")
    parser.add_argument("--agent", "-a", help="Agent ID", default=None)
    parser.add_argument("--product", "-p", help="Product page the shopper is on", default=None)

    args = parser.parse_args()
    asyncio.run(main(args.shop_id, args.agent, args.product))
