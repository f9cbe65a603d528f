"""Knowledge routes - registers all knowledge base endpoints."""

from fastapi import APIRouter

from apps.knowledge.handlers import extract_knowledge

router = APIRouter(prefix="/knowledge", tags=["Knowledge"])

# POST /knowledge/extract - Extract text from uploaded files
router.post("/extract")(extract_knowledge)
