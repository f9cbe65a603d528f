"""DELETE /assistants/{assistant_id} - Delete an assistant."""

import logging
import uuid

from fastapi import Depends
from fastapi.responses import JSONResponse

from db import AssistantNotFoundError, FirestoreService
from dependencies import get_current_user, get_firestore_service
from responses import ResponseCode, error_response, success_response

logger = logging.getLogger(__name__)


async def delete_assistant(
    assistant_id: str,
    user_id: str = Depends(get_current_user),
    firestore_service: FirestoreService = Depends(get_firestore_service),
) -> JSONResponse:
    """Delete an assistant and its knowledge base."""
    request_id = str(uuid.uuid4())[:8]
    logger.info("[%s] Delete request for assistant: %s", request_id, assistant_id)

    try:
        await firestore_service.delete_assistant(assistant_id, user_id)
        return success_response(
            ResponseCode.ASSISTANT_DELETED, {"assistant_id": assistant_id}, request_id
        )

    except AssistantNotFoundError:
        return error_response(ResponseCode.ASSISTANT_NOT_FOUND, request_id=request_id)

    except Exception as e:
        logger.exception("[%s] Unexpected error deleting assistant", request_id)
        return error_response(ResponseCode.PERSISTENCE_ERROR, str(e), request_id)
