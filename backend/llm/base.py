"""Errors raised by the LLM layer.

Configuration problems are detected locally and never reach a provider.
Everything that comes back from a provider is a DispatchError.
"""


class LLMError(Exception):
    """Base class for LLM layer failures."""


class ConfigurationError(LLMError):
    """Raised when a request cannot be built (missing credential, empty message)."""


class UnsupportedProviderError(LLMError):
    """Raised for provider IDs missing from the registry."""

    def __init__(self, provider_id: str) -> None:
        super().__init__(f"Unsupported provider: {provider_id}")
        self.provider_id = provider_id


class DispatchError(LLMError):
    """Raised when a provider call fails.

    Attributes:
        status_code: HTTP status, None for transport failures.
        provider_message: Message from the provider's error envelope, if any.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        provider_message: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.provider_message = provider_message


class RateLimitError(DispatchError):
    """Raised on HTTP 429."""


class ProviderUnavailableError(DispatchError):
    """Raised when the provider reports transient unavailability (HTTP 503)."""
