"""API schemas for assistant configuration.

API keys are accepted on write and never returned; views carry a masked
hint instead.
"""

from pydantic import BaseModel, Field

from llm import find_provider
from services.types import AssistantConfig, Credentials, KnowledgeItem
from utils import mask_secret


class AssistantPayload(BaseModel):
    """Request body for creating or updating an assistant."""

    name: str = Field(default="", max_length=200, description="Assistant name")
    instructions: str = Field(default="", description="System instructions")
    provider: str = Field(default="", description="Provider ID")
    model_version: str = Field(default="", description="Provider version ID")
    api_key: str | None = Field(
        default=None, description="Provider API key. Omit on update to keep the stored key."
    )
    organization_id: str | None = Field(default=None, description="OpenAI organization")
    max_tokens: int = Field(default=1024, gt=0, le=32768)
    temperature: float = Field(default=0.7, ge=0.0, le=1.0)
    knowledge_base: list[KnowledgeItem] = Field(default_factory=list)
    welcome_message: str | None = Field(default=None, max_length=2000)

    def to_config(
        self,
        assistant_id: str | None = None,
        existing: AssistantConfig | None = None,
    ) -> AssistantConfig:
        """Build a configuration, falling back to stored credentials."""
        api_key = self.api_key
        if not api_key and existing is not None:
            api_key = existing.credentials.api_key

        organization_id = self.organization_id
        if organization_id is None and existing is not None:
            organization_id = existing.credentials.organization_id

        return AssistantConfig(
            id=assistant_id,
            name=self.name.strip(),
            instructions=self.instructions,
            provider=self.provider,
            model_version=self.model_version,
            credentials=Credentials(
                api_key=(api_key or "").strip(),
                organization_id=(organization_id or "").strip() or None,
            ),
            max_tokens=self.max_tokens,
            temperature=self.temperature,
            knowledge_base=[item for item in self.knowledge_base if item.is_usable],
            welcome_message=(self.welcome_message or "").strip() or None,
        )


class AssistantView(BaseModel):
    """Assistant as returned by the API."""

    id: str | None
    name: str
    instructions: str
    provider: str
    model_version: str
    api_key_hint: str
    organization_id: str | None
    max_tokens: int
    temperature: float
    knowledge_base: list[KnowledgeItem]
    welcome_message: str | None

    @classmethod
    def from_config(cls, config: AssistantConfig) -> "AssistantView":
        return cls(
            id=config.id,
            name=config.name,
            instructions=config.instructions,
            provider=config.provider,
            model_version=config.model_version,
            api_key_hint=mask_secret(config.credentials.api_key),
            organization_id=config.credentials.organization_id,
            max_tokens=config.max_tokens,
            temperature=config.temperature,
            knowledge_base=config.knowledge_base,
            welcome_message=config.welcome_message,
        )


def validate_for_save(config: AssistantConfig) -> list[str]:
    """Return human-readable problems that block saving."""
    problems = []
    if not config.name:
        problems.append("Assistant name is required")
    if not config.instructions.strip():
        problems.append("Instructions are required")
    if not config.provider or not config.model_version:
        problems.append("Please select a model and version")
    elif find_provider(config.provider) is None:
        problems.append(f"Unsupported provider: {config.provider}")
    return problems
