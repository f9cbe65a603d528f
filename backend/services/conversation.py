"""In-memory conversation state.

A conversation belongs to one assistant session and is discarded on
reset or deletion. The assistant configuration it holds is the single
source of truth for instructions, knowledge base and welcome message.

Replies are keyed to the conversation generation they were requested in:
`reset()` bumps the generation, so a late reply to an abandoned exchange
is dropped instead of being appended to the fresh one.
"""

import logging
import uuid
from collections import OrderedDict

from config import Settings, get_settings
from llm import (
    ChatOptions,
    ConfigurationError,
    Dispatcher,
    LLMError,
    get_provider,
)
from llm.assembler import extract_entities
from services.types import AssistantConfig, Message, Role
from utils import truncate_text

logger = logging.getLogger(__name__)


class ConversationNotFoundError(Exception):
    """Raised when a conversation ID is unknown or was evicted."""


class StaleReplyError(Exception):
    """Raised when a reply arrives for a conversation that has since been reset."""


class Conversation:
    """Ordered messages exchanged with one assistant."""

    def __init__(
        self,
        assistant: AssistantConfig,
        conversation_id: str | None = None,
        owner_id: str | None = None,
    ):
        self.id = conversation_id or str(uuid.uuid4())
        self.owner_id = owner_id
        self.assistant = assistant
        self.messages: list[Message] = []
        self.generation = 0
        self.last_error: str | None = None
        self.reset()

    @property
    def welcome_message(self) -> str | None:
        return self.assistant.welcome_message or None

    def _starts_with_welcome(self, welcome: str | None) -> bool:
        if not self.messages or welcome is None:
            return False
        first = self.messages[0]
        return first.role == Role.ASSISTANT and first.content == welcome

    def append_user_message(self, text: str) -> Message:
        message = Message(
            role=Role.USER,
            content=text,
            entities=extract_entities([Message(role=Role.USER, content=text)]) or None,
        )
        self.messages.append(message)
        self.last_error = None
        return message

    def append_assistant_message(
        self, text: str, generation: int | None = None
    ) -> Message | None:
        """Append a reply.

        Returns None (and drops the reply) when `generation` no longer
        matches, i.e. the conversation was reset while the reply was in flight.
        """
        if generation is not None and generation != self.generation:
            logger.info(
                "Dropping late reply for conversation %s (generation %d != %d)",
                self.id,
                generation,
                self.generation,
            )
            return None

        message = Message(role=Role.ASSISTANT, content=text)
        self.messages.append(message)
        return message

    def reset(self) -> None:
        """Restore to the welcome message alone, or empty."""
        self.generation += 1
        self.last_error = None
        self.messages = []
        if self.welcome_message:
            self.messages.append(
                Message(role=Role.ASSISTANT, content=self.welcome_message)
            )

    def set_welcome_message(self, text: str | None) -> None:
        """Apply the welcome message rule.

        - set on an empty conversation: inserted as the sole message
        - same message set again: no change
        - changed: the old leading welcome is replaced
        - cleared: the first message is removed only if it is an
          assistant message (never a real user turn)
        """
        previous = self.welcome_message
        text = text or None
        self.assistant = self.assistant.model_copy(update={"welcome_message": text})

        if text is None:
            if self._starts_with_welcome(previous):
                self.messages.pop(0)
            return

        if not self.messages:
            self.messages.append(Message(role=Role.ASSISTANT, content=text))
        elif self._starts_with_welcome(text):
            return
        elif self._starts_with_welcome(previous):
            self.messages[0] = Message(role=Role.ASSISTANT, content=text)

    def update_assistant(self, assistant: AssistantConfig) -> None:
        """Swap in an edited configuration, keeping the welcome rule in effect."""
        welcome = assistant.welcome_message or None
        changed = welcome != self.welcome_message
        self.assistant = assistant.model_copy(
            update={"welcome_message": self.welcome_message}
        )
        if changed:
            self.set_welcome_message(welcome)


class ConversationStore:
    """Conversations kept in memory, oldest evicted past `max_conversations`."""

    def __init__(self, max_conversations: int = 500) -> None:
        self.max_conversations = max_conversations
        self._conversations: OrderedDict[str, Conversation] = OrderedDict()

    def create(
        self, assistant: AssistantConfig, owner_id: str | None = None
    ) -> Conversation:
        conversation = Conversation(assistant, owner_id=owner_id)
        self._conversations[conversation.id] = conversation

        while len(self._conversations) > self.max_conversations:
            evicted_id, _ = self._conversations.popitem(last=False)
            logger.info("Evicted conversation %s", evicted_id)

        return conversation

    def get(self, conversation_id: str) -> Conversation:
        conversation = self._conversations.get(conversation_id)
        if conversation is None:
            raise ConversationNotFoundError(
                f"Conversation {conversation_id} not found"
            )
        self._conversations.move_to_end(conversation_id)
        return conversation

    def contains(self, conversation: Conversation) -> bool:
        return self._conversations.get(conversation.id) is conversation

    def delete(self, conversation_id: str) -> bool:
        return self._conversations.pop(conversation_id, None) is not None

    def __len__(self) -> int:
        return len(self._conversations)


class ChatService:
    """Runs one exchange: append user turn, dispatch, append reply."""

    def __init__(
        self,
        dispatcher: Dispatcher,
        store: ConversationStore,
        settings: Settings | None = None,
    ) -> None:
        self.dispatcher = dispatcher
        self.store = store
        self.settings = settings or get_settings()

    async def send_message(self, conversation: Conversation, text: str) -> Message:
        """Send a user message and return the appended reply.

        The user message stays in the conversation even when dispatch fails;
        the failure is recorded in `last_error` and re-raised.

        Raises:
            ConfigurationError: Empty message, missing credential or provider.
            LLMError: Provider call failed.
            StaleReplyError: The conversation was reset or deleted meanwhile.
        """
        if not text or not text.strip():
            raise ConfigurationError("Message cannot be empty")

        assistant = conversation.assistant
        if not assistant.provider:
            raise ConfigurationError("Please select a model and version")
        provider = get_provider(assistant.provider)

        history = list(conversation.messages)
        options = ChatOptions.from_assistant(
            assistant,
            history,
            history_window=self.settings.context_history_window,
        )

        conversation.append_user_message(text)
        generation = conversation.generation

        logger.info(
            "Conversation %s -> %s: %s",
            conversation.id,
            provider.id,
            truncate_text(text),
        )

        try:
            reply = await self.dispatcher.chat(
                provider, text, options, assistant.credentials
            )
        except LLMError as e:
            if conversation.generation == generation:
                conversation.last_error = str(e)
            raise

        if not self.store.contains(conversation):
            raise StaleReplyError("Conversation was closed before the reply arrived")

        message = conversation.append_assistant_message(reply, generation=generation)
        if message is None:
            raise StaleReplyError("Conversation was reset before the reply arrived")
        return message
