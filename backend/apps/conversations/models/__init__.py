"""Conversation request/response schemas."""

from apps.conversations.models.conversation import (
    ConversationView,
    CreateConversationRequest,
    MessageView,
    SendMessageRequest,
)

__all__ = [
    "ConversationView",
    "CreateConversationRequest",
    "MessageView",
    "SendMessageRequest",
]
