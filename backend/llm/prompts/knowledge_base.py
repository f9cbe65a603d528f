"""Knowledge base block injected into the system prompt.

Each document is wrapped in start/end markers carrying its name so the
model can attribute facts to a named source.
"""

KNOWLEDGE_BASE_HEADER = "KNOWLEDGE BASE (YOU MUST USE THIS INFORMATION):"

# Placeholders: {name}, {content}
KNOWLEDGE_DOCUMENT_TEMPLATE = """=== START OF DOCUMENT: {name} ===
{content}
=== END OF DOCUMENT: {name} ==="""

KNOWLEDGE_BASE_USAGE_RULES = """KNOWLEDGE BASE USAGE RULES:
1. You MUST check the knowledge base FIRST before answering any question.
2. If the knowledge base contains relevant information, you MUST use it.
3. Only use your general knowledge if the knowledge base does not contain the answer.
4. When using knowledge base information, cite the source document by name."""
