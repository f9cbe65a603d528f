"""Helper utilities for Assistant Studio."""


def truncate_text(text: str, max_length: int = 100) -> str:
    """Truncate text with ellipsis.

    Args:
        text: Text to truncate
        max_length: Maximum length

    Returns:
        Truncated text with ellipsis if needed
    """
    if len(text) <= max_length:
        return text
    return text[: max_length - 3] + "..."


def mask_secret(value: str | None, visible: int = 4) -> str:
    """Mask a secret for logs and API responses.

    Args:
        value: Secret (API key, token)
        visible: Number of trailing characters left readable

    Returns:
        "[MISSING]" for empty values, otherwise asterisks plus the tail
    """
    if not value:
        return "[MISSING]"
    if len(value) <= visible * 2:
        return "*" * len(value)
    return "*" * 8 + value[-visible:]


def format_file_size(size_bytes: int) -> str:
    """Format file size in human-readable format.

    Args:
        size_bytes: Size in bytes

    Returns:
        Formatted string (e.g., "1.5 MB")
    """
    size = float(size_bytes)
    for unit in ["B", "KB", "MB", "GB"]:
        if size < 1024:
            return f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.1f} TB"
