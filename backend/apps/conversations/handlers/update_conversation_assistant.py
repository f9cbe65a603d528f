"""PUT /conversations/{conversation_id}/assistant - Edit the live assistant."""

import logging
import uuid

from fastapi import Depends
from fastapi.responses import JSONResponse

from apps.assistants.models import AssistantPayload
from apps.conversations.helpers import get_owned_conversation
from apps.conversations.models import ConversationView
from dependencies import get_conversation_store, get_current_user
from llm import find_provider
from responses import ResponseCode, error_response, success_response
from services.conversation import ConversationNotFoundError, ConversationStore

logger = logging.getLogger(__name__)


async def update_conversation_assistant(
    conversation_id: str,
    payload: AssistantPayload,
    user_id: str = Depends(get_current_user),
    store: ConversationStore = Depends(get_conversation_store),
) -> JSONResponse:
    """Apply configuration edits to an open conversation.

    Existing messages are kept. Only the welcome message rule touches
    them: a changed welcome replaces the leading one, a cleared welcome
    removes it.
    """
    request_id = str(uuid.uuid4())[:8]

    try:
        conversation = get_owned_conversation(store, conversation_id, user_id)
    except ConversationNotFoundError:
        return error_response(ResponseCode.CONVERSATION_NOT_FOUND, request_id=request_id)

    current = conversation.assistant
    config = payload.to_config(current.id, existing=current)

    if config.provider and find_provider(config.provider) is None:
        return error_response(
            ResponseCode.UNSUPPORTED_PROVIDER,
            f"Unsupported provider: {config.provider}",
            request_id,
        )

    conversation.update_assistant(config)
    logger.info("[%s] Updated assistant for conversation %s", request_id, conversation.id)

    return success_response(
        ResponseCode.SUCCESS,
        ConversationView.from_conversation(conversation).model_dump(mode="json"),
        request_id,
    )
