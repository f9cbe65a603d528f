"""Provider request/response schemas."""

from apps.providers.models.provider import (
    ConnectionTestRequest,
    ProviderView,
    VersionView,
)

__all__ = ["ConnectionTestRequest", "ProviderView", "VersionView"]
