"""
OpenAI LLM provider implementation.
Chat completions with function calling.
"""

import json
import logging

from openai import AsyncOpenAI, OpenAIError

from chatseller.config import settings
from chatseller.exceptions import ProviderConfigError, ProviderUnavailableError
from chatseller.integrations.llm.base import BaseLLM, LLMResponse, ToolCall

logger = logging.getLogger(__name__)


class OpenAILLM(BaseLLM):
    """OpenAI LLM provider."""

    supports_tools = True

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
    ):
        self.api_key = api_key or settings.openai_api_key
        self.model = model or settings.openai_model

        if not self.api_key:
            raise ProviderConfigError(
                "openai",
                "OpenAI API key not provided. Set OPENAI_API_KEY in .env file.",
            )

        self._client = AsyncOpenAI(api_key=self.api_key)

    async def chat(
        self,
        messages: list[dict[str, str]],
        system_prompt: str | None = None,
        temperature: float = 0.7,
        max_tokens: int = 1000,
        tools: list[dict] | None = None,
    ) -> LLMResponse:
        """Generate response using OpenAI chat completions."""
        payload = []
        if system_prompt:
            payload.append({"role": "system", "content": system_prompt})
        payload.extend(messages)

        options = {}
        if tools:
            options["tools"] = tools
            options["tool_choice"] = "auto"

        try:
            completion = await self._client.chat.completions.create(
                model=self.model,
                messages=payload,
                temperature=temperature,
                max_tokens=max_tokens,
                **options,
            )
        except OpenAIError as e:
            raise ProviderUnavailableError("openai", str(e)) from e

        message = completion.choices[0].message

        tool_calls = []
        for call in message.tool_calls or []:
            try:
                arguments = json.loads(call.function.arguments or "{}")
            except json.JSONDecodeError:
                logger.warning(f"Ignoring tool call {call.function.name} with invalid arguments")
                continue
            tool_calls.append(ToolCall(name=call.function.name, arguments=arguments))

        return LLMResponse(
            content=message.content or "",
            tool_calls=tool_calls,
            tokens_used=completion.usage.total_tokens if completion.usage else None,
            model=completion.model,
        )

    @property
    def name(self) -> str:
        return "openai"
