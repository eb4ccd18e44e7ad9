"""
Configuration management for ChatSeller.
Loads settings from environment variables with validation.
"""

from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


ProviderName = Literal["openai", "claude", "gigachat"]


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Paths
    base_dir: Path = Path(__file__).parent.parent
    data_dir: Path = Path(__file__).parent.parent / "data"
    knowledge_dir: Path = Path(__file__).parent / "data" / "knowledge"

    # LLM providers
    default_provider: ProviderName = Field(
        default="openai", description="Primary provider when the agent does not pick one"
    )
    secondary_provider: ProviderName = Field(
        default="claude", description="Provider tried once, without tools, when the primary fails"
    )
    llm_timeout: float = Field(
        default=30.0, description="Timeout in seconds for a single completion call"
    )

    # OpenAI
    openai_api_key: Optional[str] = Field(default=None, description="OpenAI API key")
    openai_model: str = Field(default="gpt-4o", description="OpenAI chat model")

    # Anthropic
    anthropic_api_key: Optional[str] = Field(default=None, description="Anthropic API key")
    anthropic_model: str = Field(
        default="claude-3-5-sonnet-latest", description="Anthropic chat model"
    )

    # GigaChat
    gigachat_credentials: Optional[str] = Field(
        default=None, description="GigaChat API credentials"
    )
    gigachat_scope: str = Field(
        default="GIGACHAT_API_PERS", description="GigaChat API scope"
    )

    # Database
    database_url: Optional[str] = Field(
        default=None,
        description="Database connection URL",
    )

    @property
    def db_url(self) -> str:
        """Get database URL with absolute path."""
        if self.database_url:
            return self.database_url
        return f"sqlite+aiosqlite:///{self.data_dir / 'chatseller.db'}"

    # Shop defaults
    currency: str = Field(default="FCFA", description="Currency label shown to shoppers")
    order_currency_code: str = Field(default="XOF", description="Currency stored on orders")
    paid_plans: list[str] = Field(
        default=["starter", "pro", "enterprise"],
        description="Subscription plans allowed to use Claude as primary provider",
    )

    # Messages
    apology_message: str = Field(
        default="Désolé, je ne peux pas répondre pour le moment.",
        description="Reply used when every provider failed",
    )

    # Orders
    export_orders: bool = Field(
        default=False, description="Write an XLSX sheet for every completed order"
    )

    # Debug
    debug: bool = Field(default=False, description="Debug mode")

    @property
    def orders_dir(self) -> Path:
        """Directory for exported order sheets."""
        return self.data_dir / "orders"


class AgentConfig(BaseModel):
    """Per-agent options, defaults resolved once when the agent is loaded."""

    model_config = ConfigDict(extra="ignore")

    ai_provider: Optional[ProviderName] = None
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    max_tokens: int = Field(default=1000, gt=0)
    specific_instructions: Optional[str] = None

    # Order collection
    collect_name: bool = True
    collect_phone: bool = True
    collect_address: bool = True
    collect_payment_method: bool = True

    # Sales tactics
    upsell_enabled: bool = False
    urgency_enabled: bool = False


# Global settings instance
settings = Settings()
