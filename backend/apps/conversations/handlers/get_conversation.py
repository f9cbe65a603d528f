"""GET /conversations/{conversation_id} - Get conversation messages."""

import uuid

from fastapi import Depends
from fastapi.responses import JSONResponse

from apps.conversations.helpers import get_owned_conversation
from apps.conversations.models import ConversationView
from dependencies import get_conversation_store, get_current_user
from responses import ResponseCode, error_response, success_response
from services.conversation import ConversationNotFoundError, ConversationStore


async def get_conversation(
    conversation_id: str,
    user_id: str = Depends(get_current_user),
    store: ConversationStore = Depends(get_conversation_store),
) -> JSONResponse:
    request_id = str(uuid.uuid4())[:8]

    try:
        conversation = get_owned_conversation(store, conversation_id, user_id)
    except ConversationNotFoundError:
        return error_response(ResponseCode.CONVERSATION_NOT_FOUND, request_id=request_id)

    return success_response(
        ResponseCode.SUCCESS,
        ConversationView.from_conversation(conversation).model_dump(mode="json"),
        request_id,
    )
