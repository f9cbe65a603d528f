"""GET /providers - List supported providers and their versions."""

import uuid

from fastapi.responses import JSONResponse

from apps.providers.models import ProviderView
from llm import list_providers as catalog
from responses import ResponseCode, success_response


async def list_providers() -> JSONResponse:
    """List the provider catalog in display order."""
    request_id = str(uuid.uuid4())[:8]
    providers = [ProviderView.from_provider(p).model_dump() for p in catalog()]
    return success_response(
        ResponseCode.SUCCESS,
        {"providers": providers, "total_count": len(providers)},
        request_id,
    )
