"""API schemas for the provider catalog."""

from pydantic import BaseModel, Field

from llm import Provider
from services.types import Credentials


class VersionView(BaseModel):
    id: str
    name: str


class ProviderView(BaseModel):
    """Provider as shown in the model picker (no endpoints, no secrets)."""

    id: str
    name: str
    required_fields: list[str]
    versions: list[VersionView]
    default_version: str

    @classmethod
    def from_provider(cls, provider: Provider) -> "ProviderView":
        return cls(
            id=provider.id,
            name=provider.name,
            required_fields=list(provider.required_fields),
            versions=[VersionView(id=v.id, name=v.name) for v in provider.versions],
            default_version=provider.default_version,
        )


class ConnectionTestRequest(BaseModel):
    """Credentials to probe."""

    api_key: str = Field(default="", description="Provider API key")
    organization_id: str | None = Field(default=None, description="OpenAI organization")
    model_version: str | None = Field(default=None, description="Provider version ID")

    def to_credentials(self) -> Credentials:
        return Credentials(
            api_key=self.api_key.strip(),
            organization_id=(self.organization_id or "").strip() or None,
        )
