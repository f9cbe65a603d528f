"""FastAPI dependency injection for services.

Services are cached with @lru_cache() to avoid recreation per request.
"""

from functools import lru_cache

import httpx
from fastapi import Depends, Header, HTTPException

from config import get_settings
from db import AuthenticationError, FirestoreService, verify_id_token
from llm import ConnectivityProber, Dispatcher
from llm.dispatcher import create_http_client
from responses import ResponseCode, error_dict
from services import DocumentParser
from services.conversation import ChatService, ConversationStore

# --- Cached Singletons ---
# These are created once and reused across all requests


@lru_cache
def get_http_client() -> httpx.AsyncClient:
    """Get cached HTTP client shared by every provider call."""
    return create_http_client(get_settings())


@lru_cache
def get_dispatcher() -> Dispatcher:
    """Get cached dispatcher."""
    return Dispatcher(settings=get_settings(), client=get_http_client())


@lru_cache
def get_prober() -> ConnectivityProber:
    """Get cached connectivity prober."""
    return ConnectivityProber(settings=get_settings(), client=get_http_client())


@lru_cache
def get_conversation_store() -> ConversationStore:
    """Get the process-wide conversation store (in-memory)."""
    return ConversationStore(max_conversations=get_settings().max_conversations)


@lru_cache
def get_firestore_service() -> FirestoreService:
    """Get cached Firestore service."""
    return FirestoreService()


# --- Lightweight Services (per-request is fine) ---


def get_document_parser() -> DocumentParser:
    """Get document parser (stateless, cheap to create)."""
    return DocumentParser()


# --- Composed Services ---


def get_chat_service(
    dispatcher: Dispatcher = Depends(get_dispatcher),
    store: ConversationStore = Depends(get_conversation_store),
) -> ChatService:
    """Get chat service with injected dependencies."""
    return ChatService(dispatcher=dispatcher, store=store, settings=get_settings())


# --- Auth ---


def get_current_user(authorization: str | None = Header(default=None)) -> str:
    """Resolve the Firebase uid from an `Authorization: Bearer <token>` header."""
    token = ""
    if authorization and authorization.lower().startswith("bearer "):
        token = authorization[7:].strip()

    try:
        return verify_id_token(token)
    except AuthenticationError as e:
        raise HTTPException(
            status_code=401,
            detail=error_dict(ResponseCode.UNAUTHORIZED, custom_message=str(e)),
        ) from e
