"""Services module for assistant business logic.

Contains services used across the API handlers:
- Shared domain types (assistant configuration, messages, knowledge items)
- Knowledge base extraction (PDF, DOCX, text)
- Conversation state and the chat exchange flow (services.conversation)

Note: Service instances are managed via dependencies.py using FastAPI DI.
services.conversation is imported directly to keep this package free of
llm imports.
"""

from services.document import (
    DocumentParseError,
    DocumentParser,
    EmptyDocumentError,
    ExtractionFailure,
    ExtractionResult,
    FileTooLargeError,
    UnsupportedFileTypeError,
)
from services.types import (
    AssistantConfig,
    ConnectivityStatus,
    Credentials,
    KnowledgeItem,
    Message,
    Role,
)

__all__ = [
    # Document services
    "DocumentParser",
    "DocumentParseError",
    "EmptyDocumentError",
    "ExtractionFailure",
    "ExtractionResult",
    "FileTooLargeError",
    "UnsupportedFileTypeError",
    # Types
    "AssistantConfig",
    "ConnectivityStatus",
    "Credentials",
    "KnowledgeItem",
    "Message",
    "Role",
]
