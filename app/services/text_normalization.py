"""
Text normalization for matching user input: strip, collapse spaces, normalize unicode.

Use before comparing free text against menu labels or keywords to handle
WhatsApp copy/paste: non-breaking spaces, zero-width chars.
"""

import re
import unicodedata

# Common unicode replacements
NBSP = "\u00A0"
ZWSP = "\u200B"
ZWNBSP = "\uFEFF"


def normalize_text(text: str | None) -> str:
    """
    Normalize user input: strip, collapse spaces, fix common unicode.

    Args:
        text: Raw user message (or None)

    Returns:
        Normalized string (empty string if input is None/empty)
    """
    if text is None:
        return ""
    if not isinstance(text, str):
        return ""
    s = text.strip()
    s = s.replace(NBSP, " ")
    s = s.replace(ZWSP, "")
    s = s.replace(ZWNBSP, "")
    # Normalize unicode (NFC) so composed chars are consistent
    s = unicodedata.normalize("NFC", s)
    s = re.sub(r"\s+", " ", s)
    return s.strip()


def fold_text(text: str | None) -> str:
    """Normalize and case-fold, for case-insensitive comparisons."""
    return normalize_text(text).casefold()
