"""LLM module - provider catalog, prompt assembly, dispatch and probing.

Usage:
    from llm import ChatOptions, Dispatcher, get_provider

    provider = get_provider("openai")
    reply = await dispatcher.chat(provider, "Hi", ChatOptions(), credentials)

Structure:
    - base.py: Error hierarchy (LLMError and friends)
    - providers.py: Static provider registry
    - assembler.py: Provider-specific request building
    - dispatcher.py: HTTP transport adapters and the gemini fallback matrix
    - prober.py: Credential connectivity checks
"""

from llm.assembler import ChatOptions, ProviderRequest, build_request
from llm.base import (
    ConfigurationError,
    DispatchError,
    LLMError,
    ProviderUnavailableError,
    RateLimitError,
    UnsupportedProviderError,
)
from llm.dispatcher import Dispatcher
from llm.prober import ConnectivityProber, connectivity_fingerprint
from llm.providers import Provider, find_provider, get_provider, list_providers

__all__ = [
    "ChatOptions",
    "ProviderRequest",
    "build_request",
    "LLMError",
    "ConfigurationError",
    "DispatchError",
    "ProviderUnavailableError",
    "RateLimitError",
    "UnsupportedProviderError",
    "Dispatcher",
    "ConnectivityProber",
    "connectivity_fingerprint",
    "Provider",
    "find_provider",
    "get_provider",
    "list_providers",
]
