"""Conversation context folded into prompt text."""

# Placeholders: {count}, {transcript}
CONVERSATION_HISTORY_TEMPLATE = """CONVERSATION HISTORY (last {count} messages):
{transcript}"""

# Placeholders: {entities}
CONTEXT_ENTITIES_TEMPLATE = """CURRENT CONTEXT ENTITIES: {entities}
When the user refers to someone or something with a pronoun ('he', 'she', 'it', 'they', 'this', 'that'), resolve it against these entities, most recent first."""

# Placeholders: {opening}
OPENING_MESSAGE_TEMPLATE = """You opened this conversation by saying:
{opening}"""
