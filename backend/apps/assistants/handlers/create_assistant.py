"""POST /assistants - Save a new assistant."""

import logging
import uuid

from fastapi import Depends
from fastapi.responses import JSONResponse

from apps.assistants.models import AssistantPayload, AssistantView, validate_for_save
from db import FirestoreService
from dependencies import get_current_user, get_firestore_service, get_prober
from llm import ConnectivityProber, get_provider
from responses import ResponseCode, error_response, success_response
from utils import mask_secret

logger = logging.getLogger(__name__)


async def create_assistant(
    payload: AssistantPayload,
    user_id: str = Depends(get_current_user),
    firestore_service: FirestoreService = Depends(get_firestore_service),
    prober: ConnectivityProber = Depends(get_prober),
) -> JSONResponse:
    """Validate, persist configuration, then persist the knowledge base.

    The connectivity status of the new credentials is probed and returned
    alongside the saved assistant; a failed probe does not block saving.
    """
    request_id = str(uuid.uuid4())[:8]
    config = payload.to_config()

    problems = validate_for_save(config)
    if problems:
        return error_response(
            ResponseCode.CONFIGURATION_ERROR,
            problems[0],
            request_id,
            error_details={"problems": problems},
        )

    logger.info(
        "[%s] Creating assistant '%s' (%s/%s, key %s)",
        request_id,
        config.name,
        config.provider,
        config.model_version,
        mask_secret(config.credentials.api_key),
    )

    try:
        saved = await firestore_service.create_assistant(config, user_id)
    except Exception as e:
        logger.exception("[%s] Failed to create assistant", request_id)
        return error_response(
            ResponseCode.PERSISTENCE_ERROR, f"Failed to save assistant: {e}", request_id
        )

    connection = await prober.test_connection(
        get_provider(saved.provider), saved.credentials, saved.model_version
    )

    return success_response(
        ResponseCode.ASSISTANT_CREATED,
        {
            "assistant": AssistantView.from_config(saved).model_dump(mode="json"),
            "connection": connection.model_dump(),
        },
        request_id,
    )
