"""Provider routes - registers all provider endpoints."""

from fastapi import APIRouter

from apps.providers.handlers import get_provider, list_providers, test_connection

router = APIRouter(prefix="/providers", tags=["Providers"])

# GET /providers - List providers
router.get("")(list_providers)

# GET /providers/{provider_id} - Get provider
router.get("/{provider_id}")(get_provider)

# POST /providers/{provider_id}/test - Test connectivity
router.post("/{provider_id}/test")(test_connection)
