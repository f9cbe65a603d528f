"""Provider dispatch: sends assembled requests and normalizes replies to text.

Each provider has one adapter that owns its authentication scheme and its
success envelope. The gemini adapter also walks the API-version x model
fallback matrix, retrying a pair only while the provider reports itself
unavailable.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any

import anthropic
import httpx

from config import Settings, get_settings
from llm.assembler import ChatOptions, Endpoint, ProviderRequest, build_request
from llm.base import (
    ConfigurationError,
    DispatchError,
    ProviderUnavailableError,
    RateLimitError,
    UnsupportedProviderError,
)
from llm.providers import Provider
from services.types import Credentials

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[None]]


def create_http_client(settings: Settings) -> httpx.AsyncClient:
    """HTTP client shared by the dispatcher and the connectivity prober."""
    return httpx.AsyncClient(
        timeout=httpx.Timeout(
            timeout=settings.llm_timeout, connect=settings.llm_connect_timeout
        ),
    )


def parse_json(response: httpx.Response) -> dict[str, Any]:
    """Decode a JSON object body, {} for anything else."""
    try:
        data = response.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


def error_message(data: dict[str, Any]) -> str | None:
    """Read `error.message` from a provider error envelope."""
    error = data.get("error")
    if isinstance(error, dict):
        message = error.get("message")
        return str(message) if message else None
    if isinstance(error, str):
        return error
    return None


class ProviderAdapter:
    """Transport for one provider: auth, POST, reply extraction."""

    def __init__(self, provider: Provider, base_url: str) -> None:
        self.provider = provider
        self.base_url = base_url

    def auth(self, credentials: Credentials) -> tuple[dict[str, str], dict[str, str]]:
        """Return (headers, query params) that authenticate a call."""
        raise NotImplementedError

    def extract_reply(self, data: dict[str, Any]) -> str:
        """Pull the reply text out of a success envelope."""
        raise NotImplementedError

    def is_unavailable(self, status_code: int, data: dict[str, Any]) -> bool:
        return status_code == 503

    def status_error(self, status_code: int, data: dict[str, Any]) -> DispatchError:
        """Classify a non-2xx reply."""
        provider_message = error_message(data)
        message = (
            f"{self.provider.name} API error: {status_code} - "
            f"{provider_message or 'Unknown error'}"
        )
        if self.is_unavailable(status_code, data):
            error_cls = ProviderUnavailableError
        elif status_code == 429:
            error_cls = RateLimitError
        else:
            error_cls = DispatchError
        return error_cls(
            message, status_code=status_code, provider_message=provider_message
        )

    async def send(
        self,
        client: httpx.AsyncClient,
        request: ProviderRequest,
        credentials: Credentials,
        settings: Settings,
        sleep: Sleep,
    ) -> str:
        return await self.post(client, request.endpoints[0], request, credentials)

    async def post(
        self,
        client: httpx.AsyncClient,
        endpoint: Endpoint,
        request: ProviderRequest,
        credentials: Credentials,
    ) -> str:
        """Issue one HTTP call and return the reply text.

        Raises:
            ProviderUnavailableError: Transient unavailability.
            RateLimitError: HTTP 429.
            DispatchError: Any other failure.
        """
        auth_headers, params = self.auth(credentials)
        headers = {**request.headers, **auth_headers}
        url = f"{self.base_url}{endpoint.path}"

        try:
            response = await client.post(
                url, headers=headers, params=params or None, json=request.body
            )
        except httpx.HTTPError as e:
            logger.error("%s transport error: %s", self.provider.name, e)
            raise DispatchError(f"{self.provider.name} request failed: {e}") from e

        data = parse_json(response)

        if not response.is_success:
            raise self.status_error(response.status_code, data)

        try:
            return self.extract_reply(data)
        except (KeyError, IndexError, TypeError) as e:
            raise DispatchError(
                f"{self.provider.name} returned an unexpected response",
                status_code=response.status_code,
            ) from e


class GeminiAdapter(ProviderAdapter):
    """Google Gemini: API key in the query string, fallback matrix on 503."""

    def auth(self, credentials: Credentials) -> tuple[dict[str, str], dict[str, str]]:
        return {}, {"key": credentials.api_key}

    def extract_reply(self, data: dict[str, Any]) -> str:
        return data["candidates"][0]["content"]["parts"][0]["text"]

    def is_unavailable(self, status_code: int, data: dict[str, Any]) -> bool:
        error = data.get("error")
        status = error.get("status") if isinstance(error, dict) else None
        return status_code == 503 or status == "UNAVAILABLE"

    async def send(
        self,
        client: httpx.AsyncClient,
        request: ProviderRequest,
        credentials: Credentials,
        settings: Settings,
        sleep: Sleep,
    ) -> str:
        max_attempts = settings.gemini_max_attempts
        base_delay = settings.gemini_retry_base_delay
        last_error: DispatchError | None = None

        for endpoint in request.endpoints:
            for attempt in range(1, max_attempts + 1):
                try:
                    reply = await self.post(client, endpoint, request, credentials)
                    if last_error is not None:
                        logger.info("Gemini succeeded via %s", endpoint.path)
                    return reply
                except ProviderUnavailableError as e:
                    last_error = e
                    if attempt < max_attempts:
                        delay = attempt * base_delay
                        logger.warning(
                            "Gemini unavailable at %s, retry %d/%d in %.1fs",
                            endpoint.path,
                            attempt,
                            max_attempts,
                            delay,
                        )
                        await sleep(delay)
                except DispatchError as e:
                    last_error = e
                    logger.warning(
                        "Gemini failed at %s (%s), trying next endpoint",
                        endpoint.path,
                        e.status_code,
                    )
                    break

        logger.error("Gemini failed on all %d endpoints", len(request.endpoints))
        if last_error is None:
            raise DispatchError("Gemini request has no endpoints")
        raise last_error


class OpenAIAdapter(ProviderAdapter):
    """OpenAI chat completions: bearer token plus optional organization."""

    def auth(self, credentials: Credentials) -> tuple[dict[str, str], dict[str, str]]:
        headers = {"Authorization": f"Bearer {credentials.api_key}"}
        if credentials.organization_id:
            headers["OpenAI-Organization"] = credentials.organization_id
        return headers, {}

    def extract_reply(self, data: dict[str, Any]) -> str:
        return data["choices"][0]["message"]["content"]


class AnthropicAdapter(ProviderAdapter):
    """Anthropic messages API through the official SDK.

    The SDK sends `x-api-key` and `anthropic-version` itself and rides on
    the shared HTTP client, so timeouts and test transports still apply.
    """

    async def send(
        self,
        client: httpx.AsyncClient,
        request: ProviderRequest,
        credentials: Credentials,
        settings: Settings,
        sleep: Sleep,
    ) -> str:
        try:
            sdk = anthropic.AsyncAnthropic(
                api_key=credentials.api_key,
                base_url=self.base_url,
                http_client=client,
                max_retries=0,
                timeout=httpx.Timeout(
                    timeout=settings.llm_timeout, connect=settings.llm_connect_timeout
                ),
            )
        except (TypeError, anthropic.AnthropicError) as e:
            logger.error("%s client setup failed: %s", self.provider.name, e)
            raise DispatchError(f"{self.provider.name} client setup failed: {e}") from e

        try:
            response = await sdk.messages.create(
                **request.body, extra_headers=request.headers
            )
        except anthropic.APIStatusError as e:
            data = e.body if isinstance(e.body, dict) else {}
            raise self.status_error(e.status_code, data) from e
        except anthropic.APIConnectionError as e:
            logger.error("%s transport error: %s", self.provider.name, e)
            raise DispatchError(f"{self.provider.name} request failed: {e}") from e

        try:
            return response.content[0].text
        except (AttributeError, IndexError) as e:
            raise DispatchError(
                f"{self.provider.name} returned an unexpected response"
            ) from e


ADAPTERS: dict[str, type[ProviderAdapter]] = {
    "gemini": GeminiAdapter,
    "openai": OpenAIAdapter,
    "anthropic": AnthropicAdapter,
}


class Dispatcher:
    """Sends provider requests and returns plain reply text.

    Does not touch conversation state; callers append the reply.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        client: httpx.AsyncClient | None = None,
        sleep: Sleep | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self._client = client or create_http_client(self.settings)
        self._sleep = sleep or asyncio.sleep

    def adapter_for(self, provider: Provider) -> ProviderAdapter:
        adapter_cls = ADAPTERS.get(provider.id)
        if adapter_cls is None:
            raise UnsupportedProviderError(provider.id)
        return adapter_cls(provider, provider.base_url_from(self.settings))

    async def send(
        self,
        provider: Provider,
        request: ProviderRequest,
        credentials: Credentials,
    ) -> str:
        """Send an assembled request.

        Raises:
            UnsupportedProviderError: Unknown provider ID.
            ConfigurationError: Request built for a different provider.
            DispatchError: Provider call failed.
        """
        adapter = self.adapter_for(provider)
        if request.provider_id != provider.id:
            raise ConfigurationError(
                f"Request built for '{request.provider_id}' sent to '{provider.id}'"
            )

        logger.info(
            "Dispatching to %s (%s)", provider.id, request.endpoints[0].model
        )
        return await adapter.send(
            self._client, request, credentials, self.settings, self._sleep
        )

    async def chat(
        self,
        provider: Provider,
        message: str,
        options: ChatOptions,
        credentials: Credentials,
    ) -> str:
        """Assemble and send in one step."""
        request = build_request(provider, message, options, credentials)
        return await self.send(provider, request, credentials)

    async def aclose(self) -> None:
        await self._client.aclose()
