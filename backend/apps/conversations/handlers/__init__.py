"""Conversation handlers."""

from apps.conversations.handlers.create_conversation import create_conversation
from apps.conversations.handlers.delete_conversation import delete_conversation
from apps.conversations.handlers.get_conversation import get_conversation
from apps.conversations.handlers.reset_conversation import reset_conversation
from apps.conversations.handlers.send_message import send_message
from apps.conversations.handlers.update_conversation_assistant import (
    update_conversation_assistant,
)

__all__ = [
    "create_conversation",
    "delete_conversation",
    "get_conversation",
    "reset_conversation",
    "send_message",
    "update_conversation_assistant",
]
