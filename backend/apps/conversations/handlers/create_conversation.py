"""POST /conversations - Start a conversation with an assistant."""

import logging
import uuid

from fastapi import Depends
from fastapi.responses import JSONResponse

from apps.conversations.models import ConversationView, CreateConversationRequest
from db import AssistantNotFoundError, FirestoreService
from dependencies import (
    get_conversation_store,
    get_current_user,
    get_firestore_service,
)
from llm import find_provider
from responses import ResponseCode, error_response, success_response
from services.conversation import ConversationStore

logger = logging.getLogger(__name__)


async def create_conversation(
    request: CreateConversationRequest,
    user_id: str = Depends(get_current_user),
    store: ConversationStore = Depends(get_conversation_store),
    firestore_service: FirestoreService = Depends(get_firestore_service),
) -> JSONResponse:
    """Start a conversation seeded with the assistant's welcome message."""
    request_id = str(uuid.uuid4())[:8]

    if request.assistant_id:
        try:
            config = await firestore_service.get_assistant(request.assistant_id, user_id)
        except AssistantNotFoundError:
            return error_response(ResponseCode.ASSISTANT_NOT_FOUND, request_id=request_id)
        except Exception as e:
            logger.exception("[%s] Failed to load assistant", request_id)
            return error_response(ResponseCode.PERSISTENCE_ERROR, str(e), request_id)
    else:
        config = request.assistant.to_config()

    if config.provider and find_provider(config.provider) is None:
        return error_response(
            ResponseCode.UNSUPPORTED_PROVIDER,
            f"Unsupported provider: {config.provider}",
            request_id,
        )

    conversation = store.create(config, owner_id=user_id)
    logger.info(
        "[%s] Conversation %s started (assistant %s)",
        request_id,
        conversation.id,
        config.id or "draft",
    )

    return success_response(
        ResponseCode.CONVERSATION_CREATED,
        ConversationView.from_conversation(conversation).model_dump(mode="json"),
        request_id,
    )
