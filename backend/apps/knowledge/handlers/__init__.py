"""Knowledge handlers."""

from apps.knowledge.handlers.extract_knowledge import extract_knowledge

__all__ = ["extract_knowledge"]
