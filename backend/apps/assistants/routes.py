"""Assistant routes - registers all assistant endpoints."""

from fastapi import APIRouter

from apps.assistants.handlers import (
    create_assistant,
    delete_assistant,
    get_assistant,
    list_assistants,
    update_assistant,
)

router = APIRouter(prefix="/assistants", tags=["Assistants"])

# GET /assistants - List assistants
router.get("")(list_assistants)

# POST /assistants - Create assistant
router.post("")(create_assistant)

# GET /assistants/{assistant_id} - Get assistant
router.get("/{assistant_id}")(get_assistant)

# PUT /assistants/{assistant_id} - Update assistant
router.put("/{assistant_id}")(update_assistant)

# DELETE /assistants/{assistant_id} - Delete assistant
router.delete("/{assistant_id}")(delete_assistant)
