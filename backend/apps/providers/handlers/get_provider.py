"""GET /providers/{provider_id} - Describe one provider."""

import uuid

from fastapi.responses import JSONResponse

from apps.providers.models import ProviderView
from llm import find_provider
from responses import ResponseCode, error_response, success_response


async def get_provider(provider_id: str) -> JSONResponse:
    request_id = str(uuid.uuid4())[:8]

    provider = find_provider(provider_id)
    if provider is None:
        return error_response(
            ResponseCode.UNSUPPORTED_PROVIDER,
            f"Unsupported provider: {provider_id}",
            request_id,
        )

    return success_response(
        ResponseCode.SUCCESS, ProviderView.from_provider(provider).model_dump(), request_id
    )
