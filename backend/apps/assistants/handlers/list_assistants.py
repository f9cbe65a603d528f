"""GET /assistants - List the current user's assistants."""

import logging
import uuid

from fastapi import Depends
from fastapi.responses import JSONResponse

from db import FirestoreService
from dependencies import get_current_user, get_firestore_service
from responses import ResponseCode, error_response, success_response

logger = logging.getLogger(__name__)


async def list_assistants(
    user_id: str = Depends(get_current_user),
    firestore_service: FirestoreService = Depends(get_firestore_service),
) -> JSONResponse:
    """List assistant summaries, newest first."""
    request_id = str(uuid.uuid4())[:8]

    try:
        assistants = await firestore_service.list_assistants(user_id)
        return success_response(
            ResponseCode.SUCCESS,
            {"assistants": assistants, "total_count": len(assistants)},
            request_id,
        )

    except Exception as e:
        logger.exception("[%s] Failed to list assistants", request_id)
        return error_response(
            ResponseCode.PERSISTENCE_ERROR, f"Failed to list assistants: {e}", request_id
        )
