"""POST /conversations/{conversation_id}/reset - Start over."""

import logging
import uuid

from fastapi import Depends
from fastapi.responses import JSONResponse

from apps.conversations.helpers import get_owned_conversation
from apps.conversations.models import ConversationView
from dependencies import get_conversation_store, get_current_user
from responses import ResponseCode, error_response, success_response
from services.conversation import ConversationNotFoundError, ConversationStore

logger = logging.getLogger(__name__)


async def reset_conversation(
    conversation_id: str,
    user_id: str = Depends(get_current_user),
    store: ConversationStore = Depends(get_conversation_store),
) -> JSONResponse:
    """Clear messages back to the welcome message.

    Replies still in flight for the old generation are discarded.
    """
    request_id = str(uuid.uuid4())[:8]

    try:
        conversation = get_owned_conversation(store, conversation_id, user_id)
    except ConversationNotFoundError:
        return error_response(ResponseCode.CONVERSATION_NOT_FOUND, request_id=request_id)

    conversation.reset()
    logger.info(
        "[%s] Reset conversation %s (generation %d)",
        request_id,
        conversation.id,
        conversation.generation,
    )

    return success_response(
        ResponseCode.SUCCESS,
        ConversationView.from_conversation(conversation).model_dump(mode="json"),
        request_id,
    )
