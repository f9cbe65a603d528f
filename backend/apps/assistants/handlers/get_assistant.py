"""GET /assistants/{assistant_id} - Load one assistant."""

import logging
import uuid

from fastapi import Depends
from fastapi.responses import JSONResponse

from apps.assistants.models import AssistantView
from db import AssistantNotFoundError, FirestoreService
from dependencies import get_current_user, get_firestore_service
from responses import ResponseCode, error_response, success_response

logger = logging.getLogger(__name__)


async def get_assistant(
    assistant_id: str,
    user_id: str = Depends(get_current_user),
    firestore_service: FirestoreService = Depends(get_firestore_service),
) -> JSONResponse:
    """Load an assistant with its knowledge base."""
    request_id = str(uuid.uuid4())[:8]

    try:
        config = await firestore_service.get_assistant(assistant_id, user_id)
        return success_response(
            ResponseCode.SUCCESS,
            AssistantView.from_config(config).model_dump(mode="json"),
            request_id,
        )

    except AssistantNotFoundError:
        return error_response(ResponseCode.ASSISTANT_NOT_FOUND, request_id=request_id)

    except Exception as e:
        logger.exception("[%s] Failed to load assistant %s", request_id, assistant_id)
        return error_response(ResponseCode.PERSISTENCE_ERROR, str(e), request_id)
