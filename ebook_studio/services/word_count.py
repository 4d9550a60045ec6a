"""Canonical word count: whitespace-separated non-empty tokens."""


def count_words(text: str) -> int:
    """Count words by splitting on any whitespace run.

    No punctuation-aware tokenization; this is the definition used for
    every stored ``word_count``.

    Examples:
        >>> count_words("Hello   world\\n\\nfoo")
        3
        >>> count_words("")
        0
    """
    if not text:
        return 0
    return len(text.split())
