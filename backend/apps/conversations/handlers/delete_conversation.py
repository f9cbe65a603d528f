"""DELETE /conversations/{conversation_id} - Close a conversation."""

import logging
import uuid

from fastapi import Depends
from fastapi.responses import JSONResponse

from apps.conversations.helpers import get_owned_conversation
from dependencies import get_conversation_store, get_current_user
from responses import ResponseCode, error_response, success_response
from services.conversation import ConversationNotFoundError, ConversationStore

logger = logging.getLogger(__name__)


async def delete_conversation(
    conversation_id: str,
    user_id: str = Depends(get_current_user),
    store: ConversationStore = Depends(get_conversation_store),
) -> JSONResponse:
    """Discard a conversation. Replies still in flight are dropped."""
    request_id = str(uuid.uuid4())[:8]

    try:
        get_owned_conversation(store, conversation_id, user_id)
    except ConversationNotFoundError:
        return error_response(ResponseCode.CONVERSATION_NOT_FOUND, request_id=request_id)

    store.delete(conversation_id)
    logger.info("[%s] Deleted conversation %s", request_id, conversation_id)

    return success_response(
        ResponseCode.SUCCESS, {"conversation_id": conversation_id}, request_id
    )
