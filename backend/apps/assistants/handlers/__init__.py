"""Assistant handlers."""

from apps.assistants.handlers.create_assistant import create_assistant
from apps.assistants.handlers.delete_assistant import delete_assistant
from apps.assistants.handlers.get_assistant import get_assistant
from apps.assistants.handlers.list_assistants import list_assistants
from apps.assistants.handlers.update_assistant import update_assistant

__all__ = [
    "create_assistant",
    "delete_assistant",
    "get_assistant",
    "list_assistants",
    "update_assistant",
]
