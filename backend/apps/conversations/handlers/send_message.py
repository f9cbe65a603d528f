"""POST /conversations/{conversation_id}/messages - Send a chat message."""

import logging
import uuid

from fastapi import Depends
from fastapi.responses import JSONResponse

from apps.conversations.helpers import get_owned_conversation
from apps.conversations.models import ConversationView, MessageView, SendMessageRequest
from dependencies import get_chat_service, get_conversation_store, get_current_user
from llm import (
    ConfigurationError,
    DispatchError,
    ProviderUnavailableError,
    RateLimitError,
    UnsupportedProviderError,
)
from responses import ResponseCode, error_response, success_response
from services.conversation import (
    ChatService,
    ConversationNotFoundError,
    ConversationStore,
    StaleReplyError,
)

logger = logging.getLogger(__name__)


# --- Error mapping ---

# Ordered: subclasses before DispatchError
SEND_ERROR_MAP = (
    (ConfigurationError, ResponseCode.CONFIGURATION_ERROR),
    (UnsupportedProviderError, ResponseCode.UNSUPPORTED_PROVIDER),
    (RateLimitError, ResponseCode.LLM_RATE_LIMIT),
    (ProviderUnavailableError, ResponseCode.PROVIDER_UNAVAILABLE),
    (DispatchError, ResponseCode.DISPATCH_FAILED),
    (StaleReplyError, ResponseCode.STALE_CONVERSATION),
)


def _error_code(error: Exception) -> ResponseCode:
    for error_type, code in SEND_ERROR_MAP:
        if isinstance(error, error_type):
            return code
    return ResponseCode.INTERNAL_ERROR


# --- Handler ---


async def send_message(
    conversation_id: str,
    request: SendMessageRequest,
    user_id: str = Depends(get_current_user),
    store: ConversationStore = Depends(get_conversation_store),
    chat_service: ChatService = Depends(get_chat_service),
) -> JSONResponse:
    """Send a message and wait for the assistant's reply.

    On failure the user message stays in the conversation and the
    conversation (with `last_error` set) is returned in `error_details`.
    """
    request_id = str(uuid.uuid4())[:8]

    try:
        conversation = get_owned_conversation(store, conversation_id, user_id)
    except ConversationNotFoundError:
        return error_response(ResponseCode.CONVERSATION_NOT_FOUND, request_id=request_id)

    if request.generation is not None and request.generation != conversation.generation:
        return error_response(
            ResponseCode.STALE_CONVERSATION,
            request_id=request_id,
            error_details={"generation": conversation.generation},
        )

    try:
        reply = await chat_service.send_message(conversation, request.content)

    except (
        ConfigurationError,
        UnsupportedProviderError,
        DispatchError,
        StaleReplyError,
    ) as e:
        code = _error_code(e)
        log_fn = logger.warning if code.value.startswith("1") else logger.error
        log_fn("[%s] %s: %s", request_id, type(e).__name__, e)
        return error_response(
            code,
            str(e),
            request_id,
            error_details={
                "conversation": ConversationView.from_conversation(
                    conversation
                ).model_dump(mode="json")
            },
        )

    except Exception as e:
        logger.exception("[%s] Unexpected error during chat", request_id)
        return error_response(ResponseCode.INTERNAL_ERROR, str(e), request_id)

    return success_response(
        ResponseCode.SUCCESS,
        {
            "reply": MessageView.from_message(reply).model_dump(mode="json"),
            "conversation": ConversationView.from_conversation(
                conversation
            ).model_dump(mode="json"),
        },
        request_id,
    )
