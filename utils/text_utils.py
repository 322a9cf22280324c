"""
Text utilities for comparing product names.

Used by the suggestion index for both stored vocabulary and incoming queries.
"""

import re
import unicodedata
from typing import Optional


_DISALLOWED = re.compile(r"[^a-z0-9 \-]")
_WHITESPACE = re.compile(r"\s+")


def normalize_product_name(name: Optional[str]) -> str:
    """
    Normalize a product name for comparison.

    Lossy and only used for matching, never displayed:
    - "Stainless  Steel Pipe " → "stainless steel pipe"
    - "Café-Crème, 250g" → "cafe-creme 250g"
    - "PVC (rigid)" → "pvc rigid"

    Args:
        name: Product name as typed or as stored (may be None)

    Returns:
        Lowercase ASCII string with single spaces, or "" for empty input
    """
    if not name:
        return ""

    # NFKD separates base chars from accents, Mn is the accents
    decomposed = unicodedata.normalize("NFKD", name)
    folded = "".join(
        c for c in decomposed
        if unicodedata.category(c) != "Mn"
    ).lower()

    # Anything outside letters/digits/space/hyphen becomes a separator
    cleaned = _DISALLOWED.sub(" ", folded)

    return _WHITESPACE.sub(" ", cleaned).strip()


def clean_product_name(name: Optional[str], max_length: int = 500) -> Optional[str]:
    """
    Clean a product name for storage (preserves case and accents).

    - Strips whitespace
    - Truncates to max length
    - Returns None for empty/whitespace-only strings

    Args:
        name: Raw product name
        max_length: Maximum characters to store

    Returns:
        Cleaned name or None
    """
    if not name:
        return None

    name = name.strip()

    if not name:
        return None

    if len(name) > max_length:
        name = name[:max_length]

    return name
