"""Word counting."""


def count_words(text: str) -> int:
    """
    Count whitespace-delimited words.

    Args:
        text: Document content

    Returns:
        Number of words, 0 for empty or whitespace-only content
    """
    stripped = text.strip()
    if not stripped:
        return 0
    return len(stripped.split())
