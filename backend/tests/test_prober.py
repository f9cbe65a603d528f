"""Tests for the credential connectivity probe."""

import httpx
import pytest

from llm import ConnectivityProber, connectivity_fingerprint, get_provider
from services.types import Credentials


def _prober(settings, handler):
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return ConnectivityProber(settings=settings, client=client)


class TestConnectivityProber:
    """Tests for ConnectivityProber.test_connection."""

    @pytest.mark.asyncio
    async def test_anthropic_invalid_key(self, settings):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                401,
                json={
                    "type": "error",
                    "error": {"type": "authentication_error", "message": "invalid x-api-key"},
                },
            )

        status = await _prober(settings, handler).test_connection(
            get_provider("anthropic"), Credentials(api_key="bad-key")
        )

        assert status.connected is False
        assert status.error == "invalid x-api-key"

    @pytest.mark.asyncio
    async def test_openai_success(self, settings):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["method"] = request.method
            seen["url"] = str(request.url)
            seen["headers"] = request.headers
            return httpx.Response(200, json={"data": []})

        status = await _prober(settings, handler).test_connection(
            get_provider("openai"),
            Credentials(api_key="sk-1", organization_id="org-1"),
            "gpt-4-o-mini",
        )

        assert status.connected is True
        assert status.display_name == "OpenAI (gpt-4-o-mini)"
        assert status.error is None
        assert seen["method"] == "GET"
        assert seen["url"] == "https://openai.test/v1/models"
        assert seen["headers"]["openai-organization"] == "org-1"

    @pytest.mark.asyncio
    async def test_gemini_default_display_name(self, settings):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.headers["x-goog-api-key"] == "AIza"
            return httpx.Response(200, json={})

        status = await _prober(settings, handler).test_connection(
            get_provider("gemini"), Credentials(api_key="AIza")
        )

        assert status.connected is True
        assert status.display_name == "Google Gemini (gemini-2-flash)"

    @pytest.mark.asyncio
    async def test_missing_credentials_skip_network(self, settings):
        def handler(request: httpx.Request) -> httpx.Response:
            raise AssertionError("probe should not be sent")

        status = await _prober(settings, handler).test_connection(
            get_provider("openai"), Credentials(api_key="sk-1")
        )

        assert status.connected is False
        assert "organization_id" in status.error

    @pytest.mark.asyncio
    async def test_generic_failure_message(self, settings):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(500, text="oops")

        status = await _prober(settings, handler).test_connection(
            get_provider("anthropic"), Credentials(api_key="k")
        )

        assert status.connected is False
        assert status.error == "Connection test failed"

    @pytest.mark.asyncio
    async def test_transport_failure(self, settings):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectTimeout("timed out", request=request)

        status = await _prober(settings, handler).test_connection(
            get_provider("gemini"), Credentials(api_key="k")
        )

        assert status.connected is False
        assert status.error.startswith("Connection test failed")


class TestConnectivityFingerprint:
    def test_changes_with_credentials_only(self, openai_assistant):
        renamed = openai_assistant.model_copy(update={"name": "Other"})
        rekeyed = openai_assistant.model_copy(
            update={"credentials": Credentials(api_key="sk-new", organization_id="org-1")}
        )

        assert connectivity_fingerprint(renamed) == connectivity_fingerprint(openai_assistant)
        assert connectivity_fingerprint(rekeyed) != connectivity_fingerprint(openai_assistant)
