"""
GigaChat LLM provider implementation.
Text-only secondary provider, tool schemas are ignored.
"""

from gigachat import GigaChat
from gigachat.exceptions import GigaChatException
from gigachat.models import Chat, Messages, MessagesRole

from chatseller.config import settings
from chatseller.exceptions import ProviderConfigError, ProviderUnavailableError
from chatseller.integrations.llm.base import BaseLLM, LLMResponse


class GigaChatLLM(BaseLLM):
    """GigaChat LLM provider."""

    def __init__(
        self,
        credentials: str | None = None,
        scope: str | None = None,
    ):
        self.credentials = credentials or settings.gigachat_credentials
        self.scope = scope or settings.gigachat_scope

        if not self.credentials:
            raise ProviderConfigError(
                "gigachat",
                "GigaChat credentials not provided. Set GIGACHAT_CREDENTIALS in .env file.",
            )

    def _get_client(self) -> GigaChat:
        """Create GigaChat client."""
        return GigaChat(
            credentials=self.credentials,
            scope=self.scope,
            verify_ssl_certs=False,
        )

    async def chat(
        self,
        messages: list[dict[str, str]],
        system_prompt: str | None = None,
        temperature: float = 0.7,
        max_tokens: int = 1000,
        tools: list[dict] | None = None,
    ) -> LLMResponse:
        """Generate response using GigaChat."""
        payload = []

        if system_prompt:
            payload.append(Messages(role=MessagesRole.SYSTEM, content=system_prompt))

        for message in messages:
            role = MessagesRole.ASSISTANT if message["role"] == "assistant" else MessagesRole.USER
            payload.append(Messages(role=role, content=message["content"]))

        try:
            async with self._get_client() as client:
                response = await client.achat(
                    Chat(
                        messages=payload,
                        temperature=temperature,
                        max_tokens=max_tokens,
                    )
                )
        except GigaChatException as e:
            raise ProviderUnavailableError("gigachat", str(e)) from e

        return LLMResponse(
            content=response.choices[0].message.content,
            tokens_used=response.usage.total_tokens if response.usage else None,
            model=response.model,
        )

    @property
    def name(self) -> str:
        return "gigachat"
