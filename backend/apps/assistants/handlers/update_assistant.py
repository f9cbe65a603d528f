"""PUT /assistants/{assistant_id} - Update an assistant."""

import logging
import uuid

from fastapi import Depends
from fastapi.responses import JSONResponse

from apps.assistants.models import AssistantPayload, AssistantView, validate_for_save
from db import AssistantNotFoundError, FirestoreService
from dependencies import get_current_user, get_firestore_service, get_prober
from llm import ConnectivityProber, connectivity_fingerprint, get_provider
from responses import ResponseCode, error_response, success_response

logger = logging.getLogger(__name__)


async def update_assistant(
    assistant_id: str,
    payload: AssistantPayload,
    user_id: str = Depends(get_current_user),
    firestore_service: FirestoreService = Depends(get_firestore_service),
    prober: ConnectivityProber = Depends(get_prober),
) -> JSONResponse:
    """Update configuration, then replace the knowledge base.

    Connectivity is re-probed only when provider, credentials or version
    changed; otherwise `connection` is null.
    """
    request_id = str(uuid.uuid4())[:8]

    try:
        existing = await firestore_service.get_assistant(assistant_id, user_id)
    except AssistantNotFoundError:
        return error_response(ResponseCode.ASSISTANT_NOT_FOUND, request_id=request_id)
    except Exception as e:
        logger.exception("[%s] Failed to load assistant %s", request_id, assistant_id)
        return error_response(ResponseCode.PERSISTENCE_ERROR, str(e), request_id)

    config = payload.to_config(assistant_id, existing)

    problems = validate_for_save(config)
    if problems:
        return error_response(
            ResponseCode.CONFIGURATION_ERROR,
            problems[0],
            request_id,
            error_details={"problems": problems},
        )

    try:
        saved = await firestore_service.update_assistant(assistant_id, config, user_id)
    except AssistantNotFoundError:
        return error_response(ResponseCode.ASSISTANT_NOT_FOUND, request_id=request_id)
    except Exception as e:
        logger.exception("[%s] Failed to update assistant %s", request_id, assistant_id)
        return error_response(
            ResponseCode.PERSISTENCE_ERROR, f"Failed to save assistant: {e}", request_id
        )

    connection = None
    if connectivity_fingerprint(existing) != connectivity_fingerprint(saved):
        logger.info("[%s] Connection settings changed, re-probing", request_id)
        status = await prober.test_connection(
            get_provider(saved.provider), saved.credentials, saved.model_version
        )
        connection = status.model_dump()

    return success_response(
        ResponseCode.ASSISTANT_UPDATED,
        {
            "assistant": AssistantView.from_config(saved).model_dump(mode="json"),
            "connection": connection,
        },
        request_id,
    )
