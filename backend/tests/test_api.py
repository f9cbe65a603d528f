"""HTTP API tests using FastAPI's TestClient with dependency overrides."""

import ipaddress
import uuid
from unittest.mock import AsyncMock

import httpx
import pytest
from fastapi.testclient import TestClient

import dependencies
from llm import ConnectivityProber, Dispatcher
from main import app
from services.conversation import ConversationStore
from services.types import AssistantConfig, Credentials, KnowledgeItem


def _openai_handler(request: httpx.Request) -> httpx.Response:
    if request.url.path == "/v1/models":
        return httpx.Response(200, json={"data": []})
    body = request.read()
    if b"explode" in body:
        return httpx.Response(500, json={"error": {"message": "server fire"}})
    return httpx.Response(200, json={"choices": [{"message": {"content": "Paris."}}]})


def _anthropic_handler(request: httpx.Request) -> httpx.Response:
    return httpx.Response(
        401, json={"type": "error", "error": {"message": "invalid x-api-key"}}
    )


def _route(request: httpx.Request) -> httpx.Response:
    if request.url.host == "anthropic.test":
        return _anthropic_handler(request)
    return _openai_handler(request)


ASSISTANT_BODY = {
    "name": "Travel Guide",
    "instructions": "You are a travel guide.",
    "provider": "openai",
    "model_version": "gpt-4-o",
    "api_key": "sk-live-abcdef123456",
    "organization_id": "org-1",
    "knowledge_base": [{"name": "doc1", "content": "Paris is the capital."}],
    "welcome_message": "Bonjour!",
}


class ApiTestCase:
    """Shared app wiring: fake auth, mocked Firestore, mocked provider HTTP."""

    user_id = "user-1"

    @pytest.fixture(autouse=True)
    def _wire(self, settings, no_sleep, mock_firestore_service):
        http = httpx.AsyncClient(transport=httpx.MockTransport(_route))
        self.firestore = mock_firestore_service
        self.store = ConversationStore()

        app.dependency_overrides[dependencies.get_current_user] = lambda: self.user_id
        app.dependency_overrides[dependencies.get_firestore_service] = lambda: self.firestore
        app.dependency_overrides[dependencies.get_conversation_store] = lambda: self.store
        app.dependency_overrides[dependencies.get_dispatcher] = lambda: Dispatcher(
            settings=settings, client=http, sleep=no_sleep
        )
        app.dependency_overrides[dependencies.get_prober] = lambda: ConnectivityProber(
            settings=settings, client=http
        )

        # Distinct client address per test keeps rate limit windows apart
        self.address = str(ipaddress.IPv6Address(uuid.uuid4().int))
        self.client = TestClient(
            app,
            headers={
                "Authorization": "Bearer test-token",
                "X-Forwarded-For": self.address,
            },
        )
        yield
        app.dependency_overrides.clear()


class TestHealthAndProviders(ApiTestCase):
    def test_health(self):
        response = self.client.get("/api/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["providers"] == ["gemini", "openai", "anthropic"]

    def test_root_info(self):
        response = self.client.get("/")

        assert response.status_code == 200
        assert response.json()["providers"] == ["gemini", "openai", "anthropic"]

    def test_unknown_path_uses_envelope(self):
        response = self.client.get("/api/nowhere")

        assert response.status_code == 404
        assert response.json()["code"] == "1011"

    def test_list_providers(self):
        response = self.client.get("/api/providers")

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["code"] == "0000"
        openai = body["data"]["providers"][1]
        assert openai["id"] == "openai"
        assert openai["required_fields"] == ["api_key", "organization_id"]
        assert "base_url" not in openai

    def test_unknown_provider(self):
        response = self.client.get("/api/providers/mistral")

        assert response.status_code == 400
        assert response.json()["code"] == "1007"

    def test_connection_failure_is_reported_not_raised(self):
        response = self.client.post(
            "/api/providers/anthropic/test", json={"api_key": "bad-key"}
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["connected"] is False
        assert data["error"] == "invalid x-api-key"

    def test_rotating_tokens_share_one_rate_limit(self):
        codes = []
        for i in range(6):
            response = self.client.post(
                "/api/providers/openai/test",
                json={"api_key": "sk-1", "organization_id": "org-1"},
                headers={"Authorization": f"Bearer junk{i}"},
            )
            codes.append(response.status_code)

        assert codes == [200] * 5 + [429]
        assert response.json()["code"] == "3001"

    def test_connection_success(self):
        response = self.client.post(
            "/api/providers/openai/test",
            json={"api_key": "sk-1", "organization_id": "org-1", "model_version": "o1"},
        )

        data = response.json()["data"]
        assert data == {"connected": True, "display_name": "OpenAI (o1)", "error": None}


class TestAuthentication:
    def test_missing_token_rejected(self):
        client = TestClient(app)

        response = client.get("/api/assistants")

        assert response.status_code == 401
        assert response.json()["code"] == "1010"


class TestAssistants(ApiTestCase):
    def test_create_validates(self):
        response = self.client.post("/api/assistants", json={"provider": "openai"})

        assert response.status_code == 400
        body = response.json()
        assert body["code"] == "1006"
        assert "Assistant name is required" in body["error_details"]["problems"]
        self.firestore.create_assistant.assert_not_awaited()

    def test_create_saves_and_probes(self):
        self.firestore.create_assistant.side_effect = (
            lambda config, owner_id: config.model_copy(update={"id": "new-id"})
        )

        response = self.client.post("/api/assistants", json=ASSISTANT_BODY)

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["assistant"]["id"] == "new-id"
        assert data["assistant"]["api_key_hint"] == "********3456"
        assert "api_key" not in data["assistant"]
        assert data["connection"]["connected"] is True

        config, owner_id = self.firestore.create_assistant.await_args.args
        assert owner_id == "user-1"
        assert config.credentials.api_key == "sk-live-abcdef123456"
        assert config.knowledge_base == [
            KnowledgeItem(name="doc1", content="Paris is the capital.")
        ]

    def test_update_keeps_key_and_skips_probe(self):
        existing = AssistantConfig(
            id="a1",
            name="Old",
            instructions="Old instructions",
            provider="openai",
            model_version="gpt-4-o",
            credentials=Credentials(api_key="sk-stored-999999", organization_id="org-1"),
        )
        self.firestore.get_assistant.return_value = existing
        self.firestore.update_assistant.side_effect = (
            lambda assistant_id, config, owner_id: config
        )

        body = {**ASSISTANT_BODY, "api_key": None}
        response = self.client.put("/api/assistants/a1", json=body)

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["connection"] is None
        assert data["assistant"]["name"] == "Travel Guide"
        _, config, _ = self.firestore.update_assistant.await_args.args
        assert config.credentials.api_key == "sk-stored-999999"

    def test_get_missing_assistant(self):
        from db import AssistantNotFoundError

        self.firestore.get_assistant.side_effect = AssistantNotFoundError("a1")

        response = self.client.get("/api/assistants/a1")

        assert response.status_code == 404
        assert response.json()["code"] == "1003"

    def test_list_assistants(self):
        self.firestore.list_assistants.return_value = [{"id": "a1", "name": "One"}]

        response = self.client.get("/api/assistants")

        assert response.json()["data"]["total_count"] == 1

    def test_delete_store_failure(self):
        self.firestore.delete_assistant.side_effect = RuntimeError("deadline exceeded")

        response = self.client.delete("/api/assistants/a1")

        assert response.status_code == 503
        assert response.json()["code"] == "2001"


class TestKnowledge(ApiTestCase):
    def test_extract_skips_empty_files(self):
        response = self.client.post(
            "/api/knowledge/extract",
            files=[
                ("files", ("empty.txt", b"", "text/plain")),
                ("files", ("hello.txt", b"hello", "text/plain")),
            ],
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["items"] == [{"name": "hello.txt", "content": "hello"}]
        assert data["failures"][0]["name"] == "empty.txt"
        assert data["failures"][0]["code"] == "1004"

    def test_extract_nothing_usable(self):
        response = self.client.post(
            "/api/knowledge/extract",
            files=[("files", ("image.png", b"\x89PNG", "image/png"))],
        )

        assert response.status_code == 400
        body = response.json()
        assert body["code"] == "1004"
        assert body["error_details"]["failures"][0]["name"] == "image.png"
        assert body["error_details"]["failures"][0]["code"] == "1001"

    def test_extract_reports_corrupted_file(self):
        response = self.client.post(
            "/api/knowledge/extract",
            files=[
                ("files", ("broken.pdf", b"not a pdf", "application/pdf")),
                ("files", ("notes.md", b"# Notes", "text/markdown")),
            ],
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert [item["name"] for item in data["items"]] == ["notes.md"]
        failure = data["failures"][0]
        assert (failure["name"], failure["code"]) == ("broken.pdf", "1005")


class TestConversations(ApiTestCase):
    def _start(self):
        response = self.client.post("/api/conversations", json={"assistant": ASSISTANT_BODY})
        assert response.status_code == 201
        return response.json()["data"]

    def test_create_from_saved_assistant(self, openai_assistant):
        self.firestore.get_assistant.return_value = openai_assistant

        response = self.client.post("/api/conversations", json={"assistant_id": "assistant-1"})

        assert response.status_code == 201
        messages = response.json()["data"]["messages"]
        assert [m["content"] for m in messages] == ["Hello! Where are you headed?"]

    def test_create_requires_source(self):
        response = self.client.post("/api/conversations", json={})
        assert response.status_code == 422

    def test_send_message(self):
        conversation = self._start()

        response = self.client.post(
            f"/api/conversations/{conversation['id']}/messages",
            json={"content": "What is the capital?"},
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["reply"]["content"] == "Paris."
        assert [m["role"] for m in data["conversation"]["messages"]] == [
            "assistant",
            "user",
            "assistant",
        ]

    def test_send_message_provider_failure(self):
        conversation = self._start()

        response = self.client.post(
            f"/api/conversations/{conversation['id']}/messages",
            json={"content": "please explode"},
        )

        assert response.status_code == 502
        body = response.json()
        assert body["code"] == "3003"
        assert "500 - server fire" in body["message"]
        details = body["error_details"]["conversation"]
        assert details["messages"][-1]["content"] == "please explode"
        assert details["last_error"] == body["message"]

    def test_stale_generation(self):
        conversation = self._start()
        conversation_id = conversation["id"]
        self.client.post(f"/api/conversations/{conversation_id}/reset")

        response = self.client.post(
            f"/api/conversations/{conversation_id}/messages",
            json={"content": "Hi", "generation": conversation["generation"]},
        )

        assert response.status_code == 409
        assert response.json()["code"] == "1009"

    def test_reset(self):
        conversation = self._start()
        conversation_id = conversation["id"]
        self.client.post(
            f"/api/conversations/{conversation_id}/messages", json={"content": "Hi"}
        )

        response = self.client.post(f"/api/conversations/{conversation_id}/reset")

        data = response.json()["data"]
        assert [m["content"] for m in data["messages"]] == ["Bonjour!"]
        assert data["generation"] == conversation["generation"] + 1

    def test_update_assistant_clears_welcome(self):
        conversation = self._start()

        response = self.client.put(
            f"/api/conversations/{conversation['id']}/assistant",
            json={**ASSISTANT_BODY, "welcome_message": None},
        )

        assert response.status_code == 200
        assert response.json()["data"]["messages"] == []

    def test_other_users_conversation_hidden(self):
        conversation = self._start()
        self.user_id = "user-2"

        response = self.client.get(f"/api/conversations/{conversation['id']}")

        assert response.status_code == 404
        assert response.json()["code"] == "1008"

    def test_delete(self):
        conversation = self._start()

        response = self.client.delete(f"/api/conversations/{conversation['id']}")
        assert response.status_code == 200

        response = self.client.get(f"/api/conversations/{conversation['id']}")
        assert response.status_code == 404
