"""nura.language.synonyms

Domain synonym normalization ("pedidos" -> "órdenes").
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from nura.language.text import normalize_for_lookup

LOCALE_SYNONYMS: Dict[str, Dict[str, str]] = {
    "es": {
        "pedido": "órdenes",
        "pedidos": "órdenes",
        "orden": "órdenes",
        "ordenes": "órdenes",
    },
    "en": {
        "orders": "orders",
        "order": "orders",
    },
}


@dataclass
class SynonymMatch:
    input: Optional[str]
    normalized: str
    matched: bool
    variants: List[str] = field(default_factory=list)


def normalize_synonyms(term: Optional[str], locale: str = "en") -> SynonymMatch:
    """
    Map a term to its canonical domain word.

    Lookup is case and accent insensitive. `matched` is True only when the
    canonical form differs from the looked-up input.
    """
    lookup = normalize_for_lookup(term or "")
    synonyms = LOCALE_SYNONYMS.get(locale, LOCALE_SYNONYMS["en"])
    canonical = synonyms.get(lookup, lookup)

    variants: List[str] = []
    for candidate in (canonical, lookup, term):
        if candidate and candidate not in variants:
            variants.append(candidate)

    return SynonymMatch(
        input=term,
        normalized=canonical,
        matched=canonical != lookup,
        variants=variants,
    )
