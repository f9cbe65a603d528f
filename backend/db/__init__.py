"""Persistence and auth backed by Firebase."""

from db.auth import AuthenticationError, verify_id_token
from db.firestore import AssistantNotFoundError, FirestoreService, get_firestore_service

__all__ = [
    "AssistantNotFoundError",
    "AuthenticationError",
    "FirestoreService",
    "get_firestore_service",
    "verify_id_token",
]
