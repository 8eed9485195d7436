"""nura.language.text

Text normalization and string-distance helpers.
"""

from __future__ import annotations

import re
import unicodedata

from rapidfuzz.distance import Levenshtein


def collapse_whitespace(text: str) -> str:
    return re.sub(r"\s+", " ", (text or "").strip())


def strip_diacritics(text: str) -> str:
    """Remove combining marks: "menú" -> "menu", "sí" -> "si"."""
    decomposed = unicodedata.normalize("NFD", text or "")
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def normalize_for_lookup(text: str) -> str:
    """Lowercase, accent-free, trimmed form used for table and lexicon lookups."""
    if not text:
        return ""
    return collapse_whitespace(strip_diacritics(str(text)).lower())


def strip_trailing_punct(text: str) -> str:
    return (text or "").strip().rstrip(".?!,;:\"'")


def levenshtein(a: str, b: str) -> int:
    """Classic edit distance (insert, delete, substitute; all cost 1)."""
    return Levenshtein.distance(a or "", b or "")


def edit_similarity(a: str, b: str) -> float:
    """
    Normalized edit-distance similarity in [0, 1].

    1 - levenshtein(a, b) / max(len(a), len(b)); two empty strings are identical.
    """
    a = a or ""
    b = b or ""
    max_len = max(len(a), len(b))
    if max_len == 0:
        return 1.0
    return max(0.0, 1.0 - levenshtein(a, b) / max_len)
