"""Knowledge module - knowledge base file extraction."""

from apps.knowledge.routes import router

__all__ = ["router"]
