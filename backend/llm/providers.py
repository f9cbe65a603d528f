"""Static catalog of supported language model providers.

Adding a provider means appending an entry to PROVIDERS and registering an
adapter in llm.dispatcher; nothing else changes.
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from llm.base import UnsupportedProviderError
from services.types import Credentials

ANTHROPIC_VERSION = "2023-06-01"


@dataclass(frozen=True)
class ProviderVersion:
    """A selectable model version.

    `model` is the name sent on the wire; it defaults to the version ID.
    """

    id: str
    name: str
    model: str = ""

    @property
    def wire_model(self) -> str:
        return self.model or self.id


@dataclass(frozen=True)
class ProbeRecipe:
    """Minimal-cost request used to validate credentials."""

    method: str
    path: str
    headers: Callable[[Credentials], dict[str, str]]
    body: dict[str, Any] | None = None


@dataclass(frozen=True)
class Provider:
    """A language model provider."""

    id: str
    name: str
    required_fields: tuple[str, ...]
    base_url: str
    versions: tuple[ProviderVersion, ...]
    probe: ProbeRecipe
    # Gemini only: endpoint naming fallback matrix
    api_versions: tuple[str, ...] = ()
    fallback_models: tuple[str, ...] = field(default_factory=tuple)

    @property
    def default_version(self) -> str:
        return self.versions[0].id if self.versions else ""

    def find_version(self, version_id: str) -> ProviderVersion | None:
        for version in self.versions:
            if version.id == version_id:
                return version
        return None

    def resolve_model(self, version_id: str | None) -> str:
        """Map a version ID to its wire model name.

        Unknown IDs pass through unchanged so callers can name models
        the catalog does not list.
        """
        version_id = version_id or self.default_version
        version = self.find_version(version_id)
        return version.wire_model if version else version_id

    def display_name(self, version_id: str | None = None) -> str:
        return f"{self.name} ({version_id or self.default_version})"

    def base_url_from(self, settings: Any | None) -> str:
        """Base URL, honoring `<id>_base_url` overrides in settings."""
        override = getattr(settings, f"{self.id}_base_url", None) if settings else None
        return (override or self.base_url).rstrip("/")


def _gemini_probe_headers(credentials: Credentials) -> dict[str, str]:
    return {
        "Content-Type": "application/json",
        "x-goog-api-key": credentials.api_key,
    }


def _openai_probe_headers(credentials: Credentials) -> dict[str, str]:
    headers = {"Authorization": f"Bearer {credentials.api_key}"}
    if credentials.organization_id:
        headers["OpenAI-Organization"] = credentials.organization_id
    return headers


def _anthropic_probe_headers(credentials: Credentials) -> dict[str, str]:
    return {
        "Content-Type": "application/json",
        "x-api-key": credentials.api_key,
        "anthropic-version": ANTHROPIC_VERSION,
    }


GEMINI = Provider(
    id="gemini",
    name="Google Gemini",
    required_fields=("api_key",),
    base_url="https://generativelanguage.googleapis.com",
    versions=(
        ProviderVersion("gemini-2-flash", "Gemini 2.0 Flash", "gemini-2.0-flash"),
        ProviderVersion("gemini-2-pro", "Gemini 2.0 Pro", "gemini-2.0-pro-exp"),
        ProviderVersion(
            "gemini-2-flash-experimental",
            "Gemini 2.0 Flash Thinking Experimental",
            "gemini-2.0-flash-thinking-exp",
        ),
        ProviderVersion("gemma-2", "Gemma 2", "gemma-2-27b-it"),
    ),
    probe=ProbeRecipe(
        method="POST",
        path="/v1beta/models/gemini-1.5-flash:generateContent",
        headers=_gemini_probe_headers,
        body={"contents": [{"parts": [{"text": "Hello"}]}]},
    ),
    api_versions=("v1beta", "v1"),
    fallback_models=("gemini-1.5-flash",),
)

OPENAI = Provider(
    id="openai",
    name="OpenAI",
    required_fields=("api_key", "organization_id"),
    base_url="https://api.openai.com",
    versions=(
        ProviderVersion("gpt-4-o", "GPT-4o", "gpt-4o"),
        ProviderVersion("gpt-4-o-mini", "GPT-4o mini", "gpt-4o-mini"),
        ProviderVersion("gpt-3.5-turbo", "GPT-3.5 Turbo"),
        ProviderVersion("o1", "O1"),
        ProviderVersion("o1-mini", "O1 Mini"),
        ProviderVersion("o3", "O3"),
        ProviderVersion("o3-mini", "O3 Mini"),
    ),
    probe=ProbeRecipe(
        method="GET",
        path="/v1/models",
        headers=_openai_probe_headers,
    ),
)

ANTHROPIC = Provider(
    id="anthropic",
    name="Anthropic Claude",
    required_fields=("api_key",),
    base_url="https://api.anthropic.com",
    versions=(
        ProviderVersion("claude-3-opus", "Claude 3 Opus", "claude-3-opus-20240229"),
        ProviderVersion(
            "claude-3.5-sonnet", "Claude 3.5 Sonnet", "claude-3-5-sonnet-20241022"
        ),
        ProviderVersion(
            "claude-3.5-haiku", "Claude 3.5 Haiku", "claude-3-5-haiku-20241022"
        ),
    ),
    probe=ProbeRecipe(
        method="POST",
        path="/v1/messages",
        headers=_anthropic_probe_headers,
        body={
            "model": "claude-3-5-haiku-20241022",
            "max_tokens": 1,
            "messages": [{"role": "user", "content": "Hello"}],
        },
    ),
)

PROVIDERS: tuple[Provider, ...] = (GEMINI, OPENAI, ANTHROPIC)


def list_providers() -> tuple[Provider, ...]:
    """Return all providers in display order."""
    return PROVIDERS


def find_provider(provider_id: str) -> Provider | None:
    """Look up a provider by ID, None when unknown."""
    for provider in PROVIDERS:
        if provider.id == provider_id:
            return provider
    return None


def get_provider(provider_id: str) -> Provider:
    """Look up a provider by ID.

    Raises:
        UnsupportedProviderError: If the ID is not in the catalog.
    """
    provider = find_provider(provider_id)
    if provider is None:
        raise UnsupportedProviderError(provider_id)
    return provider
