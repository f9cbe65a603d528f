"""Prompt assembly: turns an assistant configuration plus a user message into
a provider-specific request.

Two context strategies exist because the target APIs differ:
- openai / anthropic take structured multi-turn input, so they receive the
  full conversation history as role-tagged turns.
- gemini is driven as a single prompt: the last N turns are flattened into
  the prompt text together with the capitalized "entities" mentioned in
  them, so pronouns can be resolved without turn structure.

Authentication is not part of the request; the dispatcher adds it from the
credentials at send time so secrets never sit in a request object.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, Field

from llm.base import ConfigurationError, UnsupportedProviderError
from llm.prompts import (
    CONTEXT_ENTITIES_TEMPLATE,
    CONVERSATION_DIRECTIVE,
    CONVERSATION_HISTORY_TEMPLATE,
    DEFAULT_INSTRUCTIONS,
    KNOWLEDGE_BASE_HEADER,
    KNOWLEDGE_BASE_USAGE_RULES,
    KNOWLEDGE_DOCUMENT_TEMPLATE,
    OPENING_MESSAGE_TEMPLATE,
)
from llm.providers import ANTHROPIC_VERSION, Provider
from services.types import AssistantConfig, Credentials, KnowledgeItem, Message, Role

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_WINDOW = 10

# Runs of capitalized words ("Paris", "New York", "Marie Curie")
_ENTITY_PATTERN = re.compile(r"\b[A-Z][\w'-]*(?:\s+[A-Z][\w'-]*)*")

# Capitalized only because they start a sentence or are pronouns
_ENTITY_STOPWORDS = frozenset(
    {
        "A", "An", "And", "Are", "As", "At", "But", "Can", "Could", "Did",
        "Do", "Does", "For", "He", "Hello", "Her", "Hi", "His", "How", "I",
        "If", "In", "Is", "It", "Its", "Me", "My", "No", "Of", "Ok", "Okay",
        "On", "Or", "Our", "Please", "She", "Should", "So", "Tell", "Thanks",
        "That", "The", "Their", "Then", "There", "These", "They", "This",
        "Those", "To", "Was", "We", "Were", "What", "When", "Where", "Which",
        "Who", "Why", "Will", "With", "Would", "Yes", "You", "Your",
    }
)


class ChatOptions(BaseModel):
    """Per-request generation options and context."""

    max_tokens: int = Field(default=1024, gt=0)
    temperature: float = Field(default=0.7, ge=0.0, le=1.0)
    model_version: str = Field(default="")
    instructions: str = Field(default="")
    knowledge_base: list[KnowledgeItem] = Field(default_factory=list)
    conversation_history: list[Message] = Field(default_factory=list)
    history_window: int = Field(default=DEFAULT_HISTORY_WINDOW, gt=0)

    @classmethod
    def from_assistant(
        cls,
        assistant: AssistantConfig,
        history: list[Message] | None = None,
        history_window: int = DEFAULT_HISTORY_WINDOW,
    ) -> "ChatOptions":
        """Build options from the assistant that owns the conversation."""
        return cls(
            max_tokens=assistant.max_tokens,
            temperature=assistant.temperature,
            model_version=assistant.model_version,
            instructions=assistant.instructions,
            knowledge_base=assistant.knowledge_base,
            conversation_history=history or [],
            history_window=history_window,
        )


@dataclass(frozen=True)
class Endpoint:
    """One URL path to try, relative to the provider base URL."""

    path: str
    model: str


@dataclass(frozen=True)
class ProviderRequest:
    """Provider-specific request, minus authentication.

    `endpoints` holds a single entry except for gemini, where it is the
    ordered API-version x model fallback matrix.
    """

    provider_id: str
    body: dict[str, Any]
    endpoints: tuple[Endpoint, ...]
    headers: dict[str, str] = field(default_factory=dict)

    @property
    def messages(self) -> list[dict[str, str]]:
        """Role-tagged turns for chat-style providers, empty otherwise."""
        return list(self.body.get("messages", []))


def extract_entities(messages: list[Message]) -> list[str]:
    """Extract capitalized-word entities, most recent first.

    Leading stopwords are trimmed from each run ("The Eiffel Tower" ->
    "Eiffel Tower") and possessives are dropped ("Paris's" -> "Paris").
    """
    seen: set[str] = set()
    entities: list[str] = []

    for message in reversed(messages):
        for match in _ENTITY_PATTERN.finditer(message.content):
            words = match.group(0).split()
            while words and words[0] in _ENTITY_STOPWORDS:
                words.pop(0)
            if not words:
                continue

            entity = " ".join(words)
            if entity.endswith("'s"):
                entity = entity[:-2]
            if entity in _ENTITY_STOPWORDS or entity in seen:
                continue

            seen.add(entity)
            entities.append(entity)

    return entities


def build_knowledge_block(knowledge_base: list[KnowledgeItem]) -> str:
    """Render usable knowledge items between named markers.

    Returns an empty string when nothing is usable.
    """
    items = [item for item in knowledge_base if item.is_usable]
    if not items:
        return ""

    documents = "\n\n".join(
        KNOWLEDGE_DOCUMENT_TEMPLATE.format(name=item.name, content=item.content)
        for item in items
    )
    return f"{KNOWLEDGE_BASE_HEADER}\n\n{documents}\n\n{KNOWLEDGE_BASE_USAGE_RULES}"


def build_system_prompt(
    instructions: str, knowledge_base: list[KnowledgeItem]
) -> str:
    """Instructions, the conversation directive, and the knowledge block."""
    parts = [instructions.strip() or DEFAULT_INSTRUCTIONS, CONVERSATION_DIRECTIVE]

    knowledge_block = build_knowledge_block(knowledge_base)
    if knowledge_block:
        parts.append(knowledge_block)

    return "\n\n".join(parts)


def _history_turns(history: list[Message]) -> list[dict[str, str]]:
    return [{"role": m.role.value, "content": m.content} for m in history]


def _flatten_history(history: list[Message], window: int) -> str:
    recent = history[-window:]
    if not recent:
        return ""

    transcript = "\n".join(
        f"{'User' if m.role == Role.USER else 'Assistant'}: {m.content}"
        for m in recent
    )
    parts = [
        CONVERSATION_HISTORY_TEMPLATE.format(count=len(recent), transcript=transcript)
    ]

    entities = extract_entities(recent)
    if entities:
        parts.append(CONTEXT_ENTITIES_TEMPLATE.format(entities=", ".join(entities)))

    return "\n\n".join(parts)


def _build_gemini(
    provider: Provider, message: str, options: ChatOptions
) -> ProviderRequest:
    sections = [build_system_prompt(options.instructions, options.knowledge_base)]

    context = _flatten_history(options.conversation_history, options.history_window)
    if context:
        sections.append(context)

    sections.append(f"User: {message}")

    models = [provider.resolve_model(options.model_version)]
    models += [m for m in provider.fallback_models if m not in models]

    endpoints = tuple(
        Endpoint(path=f"/{api_version}/models/{model}:generateContent", model=model)
        for api_version in provider.api_versions
        for model in models
    )

    body = {
        "contents": [{"role": "user", "parts": [{"text": "\n\n".join(sections)}]}],
        "generationConfig": {
            "maxOutputTokens": options.max_tokens,
            "temperature": options.temperature,
        },
    }
    return ProviderRequest(
        provider_id=provider.id,
        body=body,
        endpoints=endpoints,
        headers={"Content-Type": "application/json"},
    )


def _build_openai(
    provider: Provider, message: str, options: ChatOptions
) -> ProviderRequest:
    system = build_system_prompt(options.instructions, options.knowledge_base)
    model = provider.resolve_model(options.model_version)

    messages = [{"role": "system", "content": system}]
    messages += _history_turns(options.conversation_history)
    messages.append({"role": "user", "content": message})

    body = {
        "model": model,
        "messages": messages,
        "max_tokens": options.max_tokens,
        "temperature": options.temperature,
    }
    return ProviderRequest(
        provider_id=provider.id,
        body=body,
        endpoints=(Endpoint(path="/v1/chat/completions", model=model),),
        headers={"Content-Type": "application/json"},
    )


def _build_anthropic(
    provider: Provider, message: str, options: ChatOptions
) -> ProviderRequest:
    system = build_system_prompt(options.instructions, options.knowledge_base)
    model = provider.resolve_model(options.model_version)

    # The messages API expects a user turn first; a leading assistant
    # welcome moves into the system prompt.
    history = list(options.conversation_history)
    opening = []
    while history and history[0].role == Role.ASSISTANT:
        opening.append(history.pop(0).content)
    if opening:
        system += "\n\n" + OPENING_MESSAGE_TEMPLATE.format(opening="\n".join(opening))

    messages = _history_turns(history)
    messages.append({"role": "user", "content": message})

    body = {
        "model": model,
        "system": system,
        "messages": messages,
        "max_tokens": options.max_tokens,
        "temperature": options.temperature,
    }
    return ProviderRequest(
        provider_id=provider.id,
        body=body,
        endpoints=(Endpoint(path="/v1/messages", model=model),),
        headers={
            "Content-Type": "application/json",
            "anthropic-version": ANTHROPIC_VERSION,
        },
    )


_BUILDERS = {
    "gemini": _build_gemini,
    "openai": _build_openai,
    "anthropic": _build_anthropic,
}


def build_request(
    provider: Provider,
    message: str,
    options: ChatOptions,
    credentials: Credentials | None,
) -> ProviderRequest:
    """Build the provider-specific request for a new user message.

    Args:
        provider: Target provider.
        message: New user message.
        options: Generation options, instructions, knowledge base, history.
        credentials: Credentials that will be used to send the request.

    Returns:
        ProviderRequest ready for the dispatcher.

    Raises:
        ConfigurationError: Empty message or missing credential.
        UnsupportedProviderError: No builder for the provider.
    """
    if not message or not message.strip():
        raise ConfigurationError("Message cannot be empty")

    if credentials is None:
        raise ConfigurationError("API key is missing. Please configure the model first.")
    missing = credentials.missing(provider.required_fields)
    if missing:
        raise ConfigurationError(
            f"Missing credentials for {provider.name}: {', '.join(missing)}"
        )

    builder = _BUILDERS.get(provider.id)
    if builder is None:
        raise UnsupportedProviderError(provider.id)

    request = builder(provider, message, options)
    logger.debug(
        "Built %s request: %d history turns, %d knowledge items, %d endpoint(s)",
        provider.id,
        len(options.conversation_history),
        len(options.knowledge_base),
        len(request.endpoints),
    )
    return request
