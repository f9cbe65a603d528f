"""Provider handlers."""

from apps.providers.handlers.get_provider import get_provider
from apps.providers.handlers.list_providers import list_providers
from apps.providers.handlers.test_connection import test_connection

__all__ = ["get_provider", "list_providers", "test_connection"]
