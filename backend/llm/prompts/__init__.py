"""LLM prompts for assistant conversations."""

from llm.prompts.assistant import CONVERSATION_DIRECTIVE, DEFAULT_INSTRUCTIONS
from llm.prompts.context import (
    CONTEXT_ENTITIES_TEMPLATE,
    CONVERSATION_HISTORY_TEMPLATE,
    OPENING_MESSAGE_TEMPLATE,
)
from llm.prompts.knowledge_base import (
    KNOWLEDGE_BASE_HEADER,
    KNOWLEDGE_BASE_USAGE_RULES,
    KNOWLEDGE_DOCUMENT_TEMPLATE,
)

__all__ = [
    "DEFAULT_INSTRUCTIONS",
    "CONVERSATION_DIRECTIVE",
    "KNOWLEDGE_BASE_HEADER",
    "KNOWLEDGE_DOCUMENT_TEMPLATE",
    "KNOWLEDGE_BASE_USAGE_RULES",
    "CONVERSATION_HISTORY_TEMPLATE",
    "CONTEXT_ENTITIES_TEMPLATE",
    "OPENING_MESSAGE_TEMPLATE",
]
