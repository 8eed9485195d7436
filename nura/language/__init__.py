"""nura.language

Lexical helpers shared by the resolution pipeline:
- Text normalization and edit-distance similarity
- Locale detection (es/en keyword heuristic)
- Spoken numeral extraction
- Domain synonym normalization

Everything here is deterministic string processing; there is no language model.
"""

from nura.language.locale import LocaleDetector, resolve_locale
from nura.language.numerals import NumeralExtraction, NumeralExtractor, parse_numeral
from nura.language.synonyms import SynonymMatch, normalize_synonyms
from nura.language.text import edit_similarity, levenshtein, normalize_for_lookup

__all__ = [
    "LocaleDetector",
    "resolve_locale",
    "NumeralExtraction",
    "NumeralExtractor",
    "parse_numeral",
    "SynonymMatch",
    "normalize_synonyms",
    "edit_similarity",
    "levenshtein",
    "normalize_for_lookup",
]
