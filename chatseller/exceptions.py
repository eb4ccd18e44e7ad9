"""
Exceptions raised by ChatSeller.
"""


class ChatSellerError(Exception):
    """Base class for all ChatSeller errors."""


class ProviderError(ChatSellerError):
    """A completion provider could not produce a reply."""

    def __init__(self, provider: str, message: str):
        self.provider = provider
        super().__init__(f"[{provider}] {message}")


class ProviderConfigError(ProviderError):
    """Provider is missing credentials or is unknown."""


class ProviderUnavailableError(ProviderError):
    """Transport, auth, quota or timeout failure of a provider call."""


class TenantNotFoundError(ChatSellerError):
    """Shop is unknown or inactive, or has no active agent."""


class PersistenceError(ChatSellerError):
    """Writing a turn, an order state or an order failed."""
