"""
LLM provider factory and initialization.
"""

from functools import lru_cache

from chatseller.config import settings
from chatseller.exceptions import ProviderConfigError
from chatseller.integrations.llm.anthropic import ClaudeLLM, to_anthropic_tools
from chatseller.integrations.llm.base import BaseLLM, LLMResponse, ToolCall
from chatseller.integrations.llm.chain import (
    CompletionResult,
    FALLBACK_PROVIDER,
    ProviderChain,
    ProviderStrategy,
)
from chatseller.integrations.llm.gigachat import GigaChatLLM
from chatseller.integrations.llm.openai import OpenAILLM


def get_llm_provider(provider: str | None = None) -> BaseLLM:
    """
    Get LLM provider instance.

    Args:
        provider: Provider name ('openai', 'claude', 'gigachat')
                  If None, uses settings.default_provider

    Returns:
        LLM provider instance

    Raises:
        ProviderConfigError: Unknown provider or missing credentials
    """
    provider = provider or settings.default_provider

    if provider == "openai":
        return OpenAILLM()
    elif provider == "claude":
        return ClaudeLLM()
    elif provider == "gigachat":
        return GigaChatLLM()
    else:
        raise ProviderConfigError(provider, f"Unknown LLM provider: {provider}")


@lru_cache(maxsize=None)
def get_shared_llm(provider: str) -> BaseLLM:
    """Get cached provider instance, one client per provider."""
    return get_llm_provider(provider)


def select_primary_provider(requested: str | None, plan: str) -> str:
    """
    Provider used first for a tenant.

    Claude is reserved to paid plans; other tenants get the default provider.
    """
    provider = requested or settings.default_provider
    if provider == "claude" and plan not in settings.paid_plans:
        provider = settings.default_provider
        if provider == "claude":
            provider = "openai"
    return provider


def build_provider_chain(requested: str | None, plan: str) -> ProviderChain:
    """Primary provider with tools, then the secondary provider without tools."""
    primary = select_primary_provider(requested, plan)
    strategies = [ProviderStrategy(primary, use_tools=True)]

    secondary = settings.secondary_provider
    if secondary != primary:
        strategies.append(ProviderStrategy(secondary, use_tools=False))

    return ProviderChain(strategies, factory=get_shared_llm)


__all__ = [
    "BaseLLM",
    "LLMResponse",
    "ToolCall",
    "OpenAILLM",
    "ClaudeLLM",
    "GigaChatLLM",
    "to_anthropic_tools",
    "CompletionResult",
    "FALLBACK_PROVIDER",
    "ProviderChain",
    "ProviderStrategy",
    "get_llm_provider",
    "get_shared_llm",
    "select_primary_provider",
    "build_provider_chain",
]
