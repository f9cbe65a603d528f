"""Tests for provider dispatch over a mocked HTTP transport."""

import json

import httpx
import pytest

from llm import (
    ChatOptions,
    ConfigurationError,
    Dispatcher,
    DispatchError,
    ProviderUnavailableError,
    RateLimitError,
    UnsupportedProviderError,
    build_request,
    get_provider,
)
from llm.providers import Provider
from services.types import Credentials

OPENAI_CREDS = Credentials(api_key="sk-test", organization_id="org-1")
KEY_ONLY = Credentials(api_key="key-test")


def _gemini_reply(text):
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


def _unavailable():
    return httpx.Response(
        503, json={"error": {"code": 503, "message": "overloaded", "status": "UNAVAILABLE"}}
    )


class TestDispatcher:
    """Tests for Dispatcher.chat and Dispatcher.send."""

    def _dispatcher(self, settings, handler, sleep):
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        return Dispatcher(settings=settings, client=client, sleep=sleep)

    @pytest.mark.asyncio
    async def test_openai_reply(self, settings, no_sleep):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["headers"] = request.headers
            seen["body"] = json.loads(request.content)
            return httpx.Response(
                200, json={"choices": [{"message": {"content": "Paris."}}]}
            )

        dispatcher = self._dispatcher(settings, handler, no_sleep)
        reply = await dispatcher.chat(
            get_provider("openai"), "Capital?", ChatOptions(), OPENAI_CREDS
        )

        assert reply == "Paris."
        assert seen["url"] == "https://openai.test/v1/chat/completions"
        assert seen["headers"]["authorization"] == "Bearer sk-test"
        assert seen["headers"]["openai-organization"] == "org-1"
        assert seen["body"]["messages"][-1]["content"] == "Capital?"

    @pytest.mark.asyncio
    async def test_anthropic_reply(self, settings, no_sleep):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["headers"] = request.headers
            return httpx.Response(200, json={"content": [{"type": "text", "text": "Hi!"}]})

        dispatcher = self._dispatcher(settings, handler, no_sleep)
        reply = await dispatcher.chat(
            get_provider("anthropic"), "Hello", ChatOptions(), KEY_ONLY
        )

        assert reply == "Hi!"
        assert seen["headers"]["x-api-key"] == "key-test"
        assert seen["headers"]["anthropic-version"] == "2023-06-01"

    @pytest.mark.asyncio
    async def test_gemini_reply_uses_query_key(self, settings, no_sleep):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = request.url
            return httpx.Response(200, json=_gemini_reply("Bonjour"))

        dispatcher = self._dispatcher(settings, handler, no_sleep)
        reply = await dispatcher.chat(
            get_provider("gemini"),
            "Hello",
            ChatOptions(model_version="gemini-2-flash"),
            KEY_ONLY,
        )

        assert reply == "Bonjour"
        assert seen["url"].path == "/v1beta/models/gemini-2.0-flash:generateContent"
        assert seen["url"].params["key"] == "key-test"

    @pytest.mark.asyncio
    async def test_gemini_retry_bound(self, settings, no_sleep):
        """Always-503 stops after 3 attempts per (api version, model) pair."""
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request.url.path)
            return _unavailable()

        dispatcher = self._dispatcher(settings, handler, no_sleep)
        with pytest.raises(ProviderUnavailableError) as exc_info:
            await dispatcher.chat(
                get_provider("gemini"),
                "Hello",
                ChatOptions(model_version="gemini-2-flash"),
                KEY_ONLY,
            )

        # 2 api versions x 2 models x 3 attempts
        assert len(calls) == 12
        assert calls[0] == "/v1beta/models/gemini-2.0-flash:generateContent"
        assert calls[-1] == "/v1/models/gemini-1.5-flash:generateContent"
        assert exc_info.value.status_code == 503
        # Sleeps only between attempts on the same pair
        assert len(no_sleep.delays) == 8

    @pytest.mark.asyncio
    async def test_gemini_backoff_is_linear(self, settings, no_sleep):
        settings.gemini_retry_base_delay = 1.5
        attempts = []

        def handler(request: httpx.Request) -> httpx.Response:
            attempts.append(request.url.path)
            if len(attempts) < 3:
                return _unavailable()
            return httpx.Response(200, json=_gemini_reply("ok"))

        dispatcher = self._dispatcher(settings, handler, no_sleep)
        reply = await dispatcher.chat(get_provider("gemini"), "Hi", ChatOptions(), KEY_ONLY)

        assert reply == "ok"
        assert no_sleep.delays == [1.5, 3.0]
        assert len(set(attempts)) == 1

    @pytest.mark.asyncio
    async def test_gemini_non_retryable_moves_to_next_pair(self, settings, no_sleep):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request.url.path)
            if "gemini-2.0-flash" in request.url.path:
                return httpx.Response(404, json={"error": {"message": "model not found"}})
            return httpx.Response(200, json=_gemini_reply("fallback"))

        dispatcher = self._dispatcher(settings, handler, no_sleep)
        reply = await dispatcher.chat(
            get_provider("gemini"),
            "Hi",
            ChatOptions(model_version="gemini-2-flash"),
            KEY_ONLY,
        )

        assert reply == "fallback"
        assert calls == [
            "/v1beta/models/gemini-2.0-flash:generateContent",
            "/v1beta/models/gemini-1.5-flash:generateContent",
        ]
        assert no_sleep.delays == []

    @pytest.mark.asyncio
    async def test_gemini_last_error_raised(self, settings, no_sleep):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(400, json={"error": {"message": "API key not valid"}})

        dispatcher = self._dispatcher(settings, handler, no_sleep)
        with pytest.raises(DispatchError, match="API key not valid") as exc_info:
            await dispatcher.chat(get_provider("gemini"), "Hi", ChatOptions(), KEY_ONLY)

        assert exc_info.value.status_code == 400

    @pytest.mark.asyncio
    async def test_error_message_includes_status(self, settings, no_sleep):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(401, json={"error": {"message": "Incorrect API key"}})

        dispatcher = self._dispatcher(settings, handler, no_sleep)
        with pytest.raises(DispatchError) as exc_info:
            await dispatcher.chat(
                get_provider("openai"), "Hi", ChatOptions(), OPENAI_CREDS
            )

        assert str(exc_info.value) == "OpenAI API error: 401 - Incorrect API key"
        assert exc_info.value.provider_message == "Incorrect API key"

    @pytest.mark.asyncio
    async def test_unknown_error_envelope(self, settings, no_sleep):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(500, text="upstream exploded")

        dispatcher = self._dispatcher(settings, handler, no_sleep)
        with pytest.raises(DispatchError, match="500 - Unknown error"):
            await dispatcher.chat(
                get_provider("anthropic"), "Hi", ChatOptions(), KEY_ONLY
            )

    @pytest.mark.asyncio
    async def test_rate_limit_not_retried(self, settings, no_sleep):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(1)
            return httpx.Response(429, json={"error": {"message": "slow down"}})

        dispatcher = self._dispatcher(settings, handler, no_sleep)
        with pytest.raises(RateLimitError):
            await dispatcher.chat(
                get_provider("openai"), "Hi", ChatOptions(), OPENAI_CREDS
            )
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_malformed_success_envelope(self, settings, no_sleep):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"choices": []})

        dispatcher = self._dispatcher(settings, handler, no_sleep)
        with pytest.raises(DispatchError, match="unexpected response"):
            await dispatcher.chat(
                get_provider("openai"), "Hi", ChatOptions(), OPENAI_CREDS
            )

    @pytest.mark.asyncio
    async def test_transport_error(self, settings, no_sleep):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        dispatcher = self._dispatcher(settings, handler, no_sleep)
        with pytest.raises(DispatchError) as exc_info:
            await dispatcher.chat(
                get_provider("anthropic"), "Hi", ChatOptions(), KEY_ONLY
            )
        assert exc_info.value.status_code is None

    @pytest.mark.asyncio
    async def test_anthropic_client_setup_error(self, settings, no_sleep, monkeypatch):
        def reject_client(**kwargs):
            raise TypeError("Invalid 'http_client' argument")

        monkeypatch.setattr("llm.dispatcher.anthropic.AsyncAnthropic", reject_client)

        dispatcher = self._dispatcher(settings, lambda r: httpx.Response(200), no_sleep)
        with pytest.raises(DispatchError) as exc_info:
            await dispatcher.chat(
                get_provider("anthropic"), "Hi", ChatOptions(), KEY_ONLY
            )
        assert "client setup failed" in str(exc_info.value)
        assert exc_info.value.status_code is None

    @pytest.mark.asyncio
    async def test_unsupported_provider(self, settings, no_sleep):
        rogue = Provider(
            id="rogue",
            name="Rogue",
            required_fields=("api_key",),
            base_url="https://rogue.test",
            versions=(),
            probe=get_provider("openai").probe,
        )
        request = build_request(get_provider("openai"), "Hi", ChatOptions(), OPENAI_CREDS)

        dispatcher = self._dispatcher(settings, lambda r: httpx.Response(200), no_sleep)
        with pytest.raises(UnsupportedProviderError):
            await dispatcher.send(rogue, request, KEY_ONLY)

    @pytest.mark.asyncio
    async def test_request_provider_mismatch(self, settings, no_sleep):
        request = build_request(get_provider("openai"), "Hi", ChatOptions(), OPENAI_CREDS)

        dispatcher = self._dispatcher(settings, lambda r: httpx.Response(200), no_sleep)
        with pytest.raises(ConfigurationError):
            await dispatcher.send(get_provider("anthropic"), request, KEY_ONLY)

    @pytest.mark.asyncio
    async def test_missing_credentials_never_sent(self, settings, no_sleep):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(1)
            return httpx.Response(200)

        dispatcher = self._dispatcher(settings, handler, no_sleep)
        with pytest.raises(ConfigurationError):
            await dispatcher.chat(
                get_provider("openai"), "Hi", ChatOptions(), Credentials(api_key="sk")
            )
        assert calls == []
