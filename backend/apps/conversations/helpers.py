"""Shared helpers for conversation handlers."""

from services.conversation import (
    Conversation,
    ConversationNotFoundError,
    ConversationStore,
)


def get_owned_conversation(
    store: ConversationStore, conversation_id: str, user_id: str
) -> Conversation:
    """Load a conversation, hiding ones that belong to another user."""
    conversation = store.get(conversation_id)
    if conversation.owner_id != user_id:
        raise ConversationNotFoundError(f"Conversation {conversation_id} not found")
    return conversation
