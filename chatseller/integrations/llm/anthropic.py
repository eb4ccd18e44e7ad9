"""
Claude LLM provider implementation.
Anthropic messages API with tool use.
"""

from anthropic import AnthropicError, AsyncAnthropic

from chatseller.config import settings
from chatseller.exceptions import ProviderConfigError, ProviderUnavailableError
from chatseller.integrations.llm.base import BaseLLM, LLMResponse, ToolCall


def to_anthropic_tools(tools: list[dict]) -> list[dict]:
    """Convert OpenAI function schemas to Anthropic tool definitions."""
    converted = []
    for tool in tools:
        function = tool.get("function", tool)
        converted.append(
            {
                "name": function["name"],
                "description": function.get("description", ""),
                "input_schema": function.get("parameters", {"type": "object", "properties": {}}),
            }
        )
    return converted


class ClaudeLLM(BaseLLM):
    """Claude LLM provider."""

    supports_tools = True

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
    ):
        self.api_key = api_key or settings.anthropic_api_key
        self.model = model or settings.anthropic_model

        if not self.api_key:
            raise ProviderConfigError(
                "claude",
                "Anthropic API key not provided. Set ANTHROPIC_API_KEY in .env file.",
            )

        self._client = AsyncAnthropic(api_key=self.api_key)

    async def chat(
        self,
        messages: list[dict[str, str]],
        system_prompt: str | None = None,
        temperature: float = 0.7,
        max_tokens: int = 1000,
        tools: list[dict] | None = None,
    ) -> LLMResponse:
        """Generate response using Claude."""
        payload = [
            {
                "role": "assistant" if message["role"] == "assistant" else "user",
                "content": message["content"],
            }
            for message in messages
        ]

        options = {}
        if system_prompt:
            options["system"] = system_prompt
        if tools:
            options["tools"] = to_anthropic_tools(tools)

        try:
            response = await self._client.messages.create(
                model=self.model,
                messages=payload,
                temperature=temperature,
                max_tokens=max_tokens,
                **options,
            )
        except AnthropicError as e:
            raise ProviderUnavailableError("claude", str(e)) from e

        texts = []
        tool_calls = []
        for block in response.content or []:
            if block.type == "text":
                texts.append(block.text)
            elif block.type == "tool_use":
                tool_calls.append(ToolCall(name=block.name, arguments=dict(block.input or {})))

        usage = response.usage
        return LLMResponse(
            content="".join(texts),
            tool_calls=tool_calls,
            tokens_used=(usage.input_tokens + usage.output_tokens) if usage else None,
            model=response.model,
        )

    @property
    def name(self) -> str:
        return "claude"
