"""
Base interface for LLM providers.
Allows easy switching between OpenAI, Claude and GigaChat.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any


@dataclass
class ToolCall:
    """Function call requested by the model."""

    name: str
    arguments: dict[str, Any] = field(default_factory=dict)


@dataclass
class LLMResponse:
    """Response from LLM."""

    content: str
    tool_calls: list[ToolCall] = field(default_factory=list)
    tokens_used: int | None = None
    model: str | None = None


class BaseLLM(ABC):
    """Abstract base class for LLM providers."""

    supports_tools: bool = False

    @abstractmethod
    async def chat(
        self,
        messages: list[dict[str, str]],
        system_prompt: str | None = None,
        temperature: float = 0.7,
        max_tokens: int = 1000,
        tools: list[dict] | None = None,
    ) -> LLMResponse:
        """
        Generate the next assistant message of a conversation.

        Args:
            messages: Conversation as {"role": "user"|"assistant", "content": ...}
            system_prompt: System instructions
            temperature: Sampling temperature
            max_tokens: Maximum tokens to generate
            tools: Tool schemas in OpenAI function format, ignored by
                   providers without tool support

        Returns:
            LLMResponse with generated content and tool calls

        Raises:
            ProviderUnavailableError: Transport, auth, quota or API failure
        """
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider name."""
        pass
