"""System prompt pieces shared by every provider."""

DEFAULT_INSTRUCTIONS = "You are a helpful assistant."

CONVERSATION_DIRECTIVE = """IMPORTANT: You are having a conversation. You must maintain context between messages. When you see pronouns like 'he', 'she', 'it', 'they', refer to the most recently discussed subject."""
