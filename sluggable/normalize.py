"""ABOUTME: Text normalization for URL-safe slugs.
ABOUTME: Provides the default slugify normalizer used by the slug generator."""

import re
import unicodedata

_NON_ALPHANUMERIC = re.compile(r"[^a-z0-9]+")


def slugify(text: str, separator: str = "-") -> str:
    """Convert text to a lowercase, separator-joined, ASCII-safe slug.

    Handles:
    - Unicode normalization (accents folded to ASCII, the rest dropped)
    - Lowercase conversion
    - Any run of whitespace or non-alphanumeric characters becomes one separator
    - Leading/trailing separators are stripped

    Args:
        text: Input text to slugify.
        separator: String placed between words.

    Returns:
        Normalized slug string, empty if nothing alphanumeric remains.

    Examples:
        >>> slugify("Hello World")
        'hello-world'
        >>> slugify("  Crème   Brûlée!  ")
        'creme-brulee'
        >>> slugify("Q&A -- 2024")
        'q-a-2024'
    """
    if not text:
        return ""

    text = unicodedata.normalize("NFKD", text)
    text = text.encode("ascii", "ignore").decode("ascii")
    text = text.lower()

    text = _NON_ALPHANUMERIC.sub(lambda _: separator, text)

    return text.strip(separator)
