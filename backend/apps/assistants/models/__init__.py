"""Assistant request/response schemas."""

from apps.assistants.models.assistant import (
    AssistantPayload,
    AssistantView,
    validate_for_save,
)

__all__ = ["AssistantPayload", "AssistantView", "validate_for_save"]
