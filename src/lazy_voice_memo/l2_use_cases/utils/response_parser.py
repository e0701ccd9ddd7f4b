"""Pure functions for turning completion text into structured values."""

from __future__ import annotations

_QUOTE_PAIRS = (('"', '"'), ("'", "'"), ('“', '”'), ('*', '*'))


def parse_lines(text: str) -> list[str]:
    """Split on newlines, strip each line, and drop empty ones.

    Numbering or bullets are kept as-is; the model's format is not guaranteed.
    """
    return [line.strip() for line in text.splitlines() if line.strip()]


def clean_title(text: str) -> str:
    """Strip whitespace and one layer of wrapping quotes from a generated title."""
    title = text.strip()
    for opening, closing in _QUOTE_PAIRS:
        if len(title) >= 2 and title.startswith(opening) and title.endswith(closing):
            title = title[len(opening) : -len(closing)].strip()
            break
    return title
