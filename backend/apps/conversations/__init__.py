"""Conversations module - live chat with an assistant."""

from apps.conversations.routes import router

__all__ = ["router"]
