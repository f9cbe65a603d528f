"""Conversation routes - registers all conversation endpoints."""

from fastapi import APIRouter

from apps.conversations.handlers import (
    create_conversation,
    delete_conversation,
    get_conversation,
    reset_conversation,
    send_message,
    update_conversation_assistant,
)

router = APIRouter(prefix="/conversations", tags=["Conversations"])

# POST /conversations - Start conversation
router.post("")(create_conversation)

# GET /conversations/{conversation_id} - Get conversation
router.get("/{conversation_id}")(get_conversation)

# POST /conversations/{conversation_id}/messages - Send message
router.post("/{conversation_id}/messages")(send_message)

# POST /conversations/{conversation_id}/reset - Reset conversation
router.post("/{conversation_id}/reset")(reset_conversation)

# PUT /conversations/{conversation_id}/assistant - Edit assistant in place
router.put("/{conversation_id}/assistant")(update_conversation_assistant)

# DELETE /conversations/{conversation_id} - Delete conversation
router.delete("/{conversation_id}")(delete_conversation)
