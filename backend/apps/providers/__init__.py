"""Providers module - catalog and connectivity checks."""

from apps.providers.routes import router

__all__ = ["router"]
