"""API schemas for conversations."""

from datetime import datetime

from pydantic import BaseModel, Field, model_validator

from apps.assistants.models import AssistantPayload, AssistantView
from services.conversation import Conversation
from services.types import Message, Role


class CreateConversationRequest(BaseModel):
    """Start a conversation from a saved assistant or an unsaved draft."""

    assistant_id: str | None = Field(default=None, description="Saved assistant ID")
    assistant: AssistantPayload | None = Field(
        default=None, description="Inline configuration (preview before saving)"
    )

    @model_validator(mode="after")
    def check_source(self) -> "CreateConversationRequest":
        if not self.assistant_id and self.assistant is None:
            raise ValueError("Either assistant_id or assistant is required")
        return self


class SendMessageRequest(BaseModel):
    """Request body for sending a chat message."""

    content: str = Field(..., min_length=1, max_length=8000, description="User message")
    generation: int | None = Field(
        default=None,
        description="Conversation generation the client last saw; a mismatch "
        "means the conversation was reset meanwhile",
    )


class MessageView(BaseModel):
    role: Role
    content: str
    timestamp: datetime
    entities: list[str] | None = None

    @classmethod
    def from_message(cls, message: Message) -> "MessageView":
        return cls(
            role=message.role,
            content=message.content,
            timestamp=message.timestamp,
            entities=message.entities,
        )


class ConversationView(BaseModel):
    """Conversation as returned by the API."""

    id: str
    generation: int
    assistant: AssistantView
    messages: list[MessageView]
    last_error: str | None = None

    @classmethod
    def from_conversation(cls, conversation: Conversation) -> "ConversationView":
        return cls(
            id=conversation.id,
            generation=conversation.generation,
            assistant=AssistantView.from_config(conversation.assistant),
            messages=[MessageView.from_message(m) for m in conversation.messages],
            last_error=conversation.last_error,
        )
