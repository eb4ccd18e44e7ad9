"""
Ordered provider fallback.

The primary provider runs with tool schemas; the secondary provider runs
without them. Each call is bounded by the configured timeout. When every
provider fails the chain answers with the canned apology instead of raising.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Callable

from chatseller.config import settings
from chatseller.exceptions import ProviderError
from chatseller.integrations.llm.base import BaseLLM, ToolCall

logger = logging.getLogger(__name__)

FALLBACK_PROVIDER = "fallback"


@dataclass
class ProviderStrategy:
    """One step of the chain."""

    provider: str
    use_tools: bool = True


@dataclass
class CompletionResult:
    """Outcome of a chain run."""

    text: str
    tool_calls: list[ToolCall] = field(default_factory=list)
    provider: str = FALLBACK_PROVIDER
    fallback_used: bool = False

    @property
    def is_apology(self) -> bool:
        """True when no provider answered."""
        return self.provider == FALLBACK_PROVIDER


class ProviderChain:
    """
    Try providers in order until one answers.

    Usage:
        chain = ProviderChain([ProviderStrategy("openai"), ProviderStrategy("claude", use_tools=False)])
        result = await chain.complete(history, system_prompt, 0.7, 1000, tools=TOOL_SCHEMAS)
    """

    def __init__(
        self,
        strategies: list[ProviderStrategy],
        factory: Callable[[str], BaseLLM],
        timeout: float | None = None,
        apology: str | None = None,
    ):
        self.strategies = strategies
        self.factory = factory
        self.timeout = timeout or settings.llm_timeout
        self.apology = apology or settings.apology_message

    @property
    def providers(self) -> list[str]:
        return [strategy.provider for strategy in self.strategies]

    async def complete(
        self,
        history: list[dict[str, str]],
        system_prompt: str,
        temperature: float = 0.7,
        max_tokens: int = 1000,
        tools: list[dict] | None = None,
    ) -> CompletionResult:
        """
        Run the strategies in order.

        Args:
            history: Prior turns plus the current user message
            system_prompt: System instructions
            temperature: Sampling temperature
            max_tokens: Maximum tokens to generate
            tools: Tool schemas offered to strategies that use tools

        Returns:
            CompletionResult, the apology when every strategy failed
        """
        for index, strategy in enumerate(self.strategies):
            try:
                llm = self.factory(strategy.provider)
                response = await asyncio.wait_for(
                    llm.chat(
                        history,
                        system_prompt=system_prompt,
                        temperature=temperature,
                        max_tokens=max_tokens,
                        tools=tools if strategy.use_tools and llm.supports_tools else None,
                    ),
                    timeout=self.timeout,
                )
            except asyncio.TimeoutError:
                logger.warning(
                    f"Provider {strategy.provider} timed out after {self.timeout}s"
                )
                continue
            except ProviderError as e:
                logger.warning(f"Provider {strategy.provider} failed: {e}")
                continue
            except Exception as e:
                logger.error(
                    f"Unexpected error from provider {strategy.provider}: {e}", exc_info=True
                )
                continue

            if not response.content and not response.tool_calls:
                logger.warning(f"Provider {strategy.provider} returned an empty reply")
                continue

            if index > 0:
                logger.info(f"Fallback provider {strategy.provider} answered")

            return CompletionResult(
                text=response.content,
                tool_calls=response.tool_calls,
                provider=llm.name,
                fallback_used=index > 0,
            )

        logger.error(f"All providers failed: {', '.join(self.providers) or 'none configured'}")
        return CompletionResult(text=self.apology, fallback_used=True)
