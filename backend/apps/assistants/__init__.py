"""Assistants module - configuration CRUD."""

from apps.assistants.routes import router

__all__ = ["router"]
