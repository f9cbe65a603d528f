"""Connectivity probe: a minimal-cost call that validates credentials.

Probing never raises. Every outcome, including timeouts and missing
credentials, is reported as a ConnectivityStatus so callers can show it.
"""

import logging

import httpx

from config import Settings, get_settings
from llm.dispatcher import create_http_client, error_message, parse_json
from llm.providers import Provider
from services.types import AssistantConfig, ConnectivityStatus, Credentials

logger = logging.getLogger(__name__)

GENERIC_FAILURE = "Connection test failed"


def connectivity_fingerprint(config: AssistantConfig) -> tuple[str, ...]:
    """Fields whose change invalidates a previous connectivity status."""
    return (
        config.provider,
        config.credentials.api_key,
        config.credentials.organization_id or "",
        config.model_version,
    )


class ConnectivityProber:
    """Runs provider probe recipes."""

    def __init__(
        self,
        settings: Settings | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self._client = client or create_http_client(self.settings)

    async def test_connection(
        self,
        provider: Provider,
        credentials: Credentials,
        model_version: str | None = None,
    ) -> ConnectivityStatus:
        """Probe the provider with the given credentials.

        Safe to call repeatedly; has no side effects beyond the request.
        """
        missing = credentials.missing(provider.required_fields)
        if missing:
            return ConnectivityStatus(
                connected=False,
                error=f"Missing credentials: {', '.join(missing)}",
            )

        recipe = provider.probe
        url = f"{provider.base_url_from(self.settings)}{recipe.path}"

        try:
            response = await self._client.request(
                recipe.method,
                url,
                headers=recipe.headers(credentials),
                json=recipe.body if recipe.method != "GET" else None,
            )
        except httpx.HTTPError as e:
            logger.warning("Probe to %s failed: %s", provider.id, e)
            return ConnectivityStatus(connected=False, error=f"{GENERIC_FAILURE}: {e}")

        if not response.is_success:
            reason = error_message(parse_json(response)) or GENERIC_FAILURE
            logger.info(
                "Probe to %s rejected (%d): %s",
                provider.id,
                response.status_code,
                reason,
            )
            return ConnectivityStatus(connected=False, error=reason)

        version = model_version or provider.default_version
        logger.info("Probe to %s succeeded", provider.id)
        return ConnectivityStatus(
            connected=True, display_name=provider.display_name(version)
        )
