"""Pytest configuration and fixtures for Assistant Studio tests."""

import os
import sys

# Set required env vars BEFORE any imports that might trigger Settings
os.environ.setdefault(
    "FIREBASE_CREDENTIALS", '{"type":"service_account","project_id":"test"}'
)
os.environ.setdefault("GEMINI_RETRY_BASE_DELAY", "0")

from unittest.mock import AsyncMock

import pytest

# Add backend to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))


@pytest.fixture
def settings():
    """Real settings with fast retries and test base URLs."""
    from config import Settings

    return Settings(
        firebase_credentials='{"type":"service_account","project_id":"test"}',
        environment="test",
        gemini_base_url="https://gemini.test",
        openai_base_url="https://openai.test",
        anthropic_base_url="https://anthropic.test",
        gemini_retry_base_delay=0,
        max_conversations=3,
    )


@pytest.fixture
def no_sleep():
    """Sleep replacement that records requested delays."""
    delays: list[float] = []

    async def sleep(delay: float) -> None:
        delays.append(delay)

    sleep.delays = delays
    return sleep


@pytest.fixture
def openai_assistant():
    """OpenAI assistant with a one-document knowledge base."""
    from services.types import AssistantConfig, Credentials, KnowledgeItem

    return AssistantConfig(
        id="assistant-1",
        name="Travel Guide",
        instructions="You are a travel guide.",
        provider="openai",
        model_version="gpt-4-o",
        credentials=Credentials(api_key="sk-test-1234567890", organization_id="org-1"),
        knowledge_base=[KnowledgeItem(name="doc1", content="Paris is the capital.")],
        welcome_message="Hello! Where are you headed?",
    )


@pytest.fixture
def mock_firestore_service():
    """Mock Firestore service."""
    service = AsyncMock()
    service.health_check.return_value = {"status": "healthy", "latency_ms": 10}
    service.list_assistants.return_value = []
    return service


@pytest.fixture
def sample_text_content():
    """Sample knowledge base text."""
    return """
    Company Handbook

    Chapter 1: Holidays

    Employees receive   25 days of paid leave per year.



    Chapter 2: Offices

    Offices are located in Paris and Berlin.
    """
