"""Shared domain types.

Pydantic models so the same values flow through handlers, the prompt
assembler, and Firestore without hand-written conversion.
"""

from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, Field


class Role(str, Enum):
    """Author of a conversation message."""

    USER = "user"
    ASSISTANT = "assistant"


class KnowledgeItem(BaseModel):
    """A knowledge base document: filename plus extracted plain text."""

    name: str = Field(..., min_length=1, description="Source document name")
    content: str = Field(..., description="Extracted plain text")

    @property
    def is_usable(self) -> bool:
        """Items need non-blank content to be injected into prompts."""
        return bool(self.content.strip())


class Credentials(BaseModel):
    """Provider credentials held for the session."""

    api_key: str = Field(default="", description="Provider API key")
    organization_id: str | None = Field(
        default=None, description="Organization ID (OpenAI only)"
    )

    def missing(self, required_fields: tuple[str, ...]) -> list[str]:
        """Return the required credential fields that are empty."""
        missing = []
        for field_name in required_fields:
            value = getattr(self, field_name, None)
            if not value or not str(value).strip():
                missing.append(field_name)
        return missing


class Message(BaseModel):
    """One exchanged chat message."""

    role: Role
    content: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
    entities: list[str] | None = Field(
        default=None, description="Context entities detected in this message"
    )


class AssistantConfig(BaseModel):
    """Everything needed to talk to one configured assistant."""

    id: str | None = Field(default=None, description="Persisted assistant ID")
    name: str = Field(default="", description="Assistant display name")
    instructions: str = Field(default="", description="System instructions")
    provider: str = Field(default="", description="Provider ID (gemini, openai, ...)")
    model_version: str = Field(default="", description="Selected provider version")
    credentials: Credentials = Field(default_factory=Credentials)
    max_tokens: int = Field(default=1024, gt=0, description="Max tokens per reply")
    temperature: float = Field(default=0.7, ge=0.0, le=1.0)
    knowledge_base: list[KnowledgeItem] = Field(default_factory=list)
    welcome_message: str | None = Field(
        default=None, description="Assistant-authored message shown first"
    )


class ConnectivityStatus(BaseModel):
    """Result of a provider connectivity probe."""

    connected: bool
    display_name: str = Field(default="", description="e.g. 'OpenAI (gpt-4-o)'")
    error: str | None = Field(default=None, description="Last failure reason")
