"""Main API router that registers all sub-routers.

This module aggregates all domain-specific routers into a single router
that gets mounted in main.py.
"""

from fastapi import APIRouter

from apps.assistants import router as assistants_router
from apps.conversations import router as conversations_router
from apps.health import router as health_router
from apps.knowledge import router as knowledge_router
from apps.providers import router as providers_router

# Create main API router
router = APIRouter()

# Register all domain routers
router.include_router(health_router)
router.include_router(providers_router)
router.include_router(assistants_router)
router.include_router(knowledge_router)
router.include_router(conversations_router)
