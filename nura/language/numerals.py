"""nura.language.numerals

Spoken numeral extraction ("borra la orden quince" -> "borra la orden 15").

Tables cover 0-50 for each locale, including compounds ("twenty-one",
"twenty one", "treinta y dos") and accent-less spellings that speech
recognizers tend to produce ("dieciseis").

Iteration order matters:
- Tables are ordered from the highest value down, so a compound such as
  "treinta y uno" is replaced before its components "treinta" and "uno".
- Every table entry found in the text overwrites numbers["id"], so when an
  utterance holds several distinct number words the one processed LAST in
  table order wins (the lowest value), not the last one spoken. After word
  substitution the first bare digit run in the text overwrites "id" again.
  This mirrors the console's established behavior and is kept as-is.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Pattern, Tuple

from nura.core.logger import get_logger
from nura.language.text import normalize_for_lookup

NUMBER_KEY = "id"


def _build_es_table() -> List[Tuple[str, int]]:
    entries: List[Tuple[str, int]] = []
    units = ["cero", "uno", "dos", "tres", "cuatro", "cinco", "seis", "siete", "ocho", "nueve"]
    for value, word in enumerate(units):
        entries.append((word, value))
    entries += [
        ("diez", 10), ("once", 11), ("doce", 12), ("trece", 13), ("catorce", 14),
        ("quince", 15), ("dieciséis", 16), ("dieciseis", 16), ("diecisiete", 17),
        ("dieciocho", 18), ("diecinueve", 19), ("veinte", 20),
        ("veintiuno", 21), ("veintiuna", 21), ("veintiún", 21),
        ("veintidós", 22), ("veintidos", 22), ("veintitrés", 23), ("veintitres", 23),
        ("veinticuatro", 24), ("veinticinco", 25), ("veintiséis", 26), ("veintiseis", 26),
        ("veintisiete", 27), ("veintiocho", 28), ("veintinueve", 29),
    ]
    for tens_value, tens_word in ((30, "treinta"), (40, "cuarenta")):
        entries.append((tens_word, tens_value))
        for unit in range(1, 10):
            entries.append((f"{tens_word} y {units[unit]}", tens_value + unit))
    entries.append(("cincuenta", 50))
    return entries


def _build_en_table() -> List[Tuple[str, int]]:
    entries: List[Tuple[str, int]] = []
    units = ["zero", "one", "two", "three", "four", "five", "six", "seven", "eight", "nine"]
    teens = ["ten", "eleven", "twelve", "thirteen", "fourteen", "fifteen",
             "sixteen", "seventeen", "eighteen", "nineteen"]
    for value, word in enumerate(units + teens):
        entries.append((word, value))
    for tens_value, tens_word in ((20, "twenty"), (30, "thirty"), (40, "forty")):
        entries.append((tens_word, tens_value))
        for unit in range(1, 10):
            entries.append((f"{tens_word}-{units[unit]}", tens_value + unit))
            entries.append((f"{tens_word} {units[unit]}", tens_value + unit))
    entries.append(("fifty", 50))
    return entries


def _descending(entries: List[Tuple[str, int]]) -> Dict[str, int]:
    # sorted() is stable: spelling variants keep their relative order
    return dict(sorted(entries, key=lambda item: -item[1]))


NUMERAL_TABLES: Dict[str, Dict[str, int]] = {
    "es": _descending(_build_es_table()),
    "en": _descending(_build_en_table()),
}

# Accent-free lookup tables for parse_numeral()
_LOOKUP_TABLES: Dict[str, Dict[str, int]] = {
    locale: {normalize_for_lookup(word): value for word, value in table.items()}
    for locale, table in NUMERAL_TABLES.items()
}

_DIGITS_RE = re.compile(r"\b(\d+)\b")


@dataclass
class NumeralExtraction:
    """Result of numeral extraction"""
    cleaned: str
    numbers: Dict[str, int] = field(default_factory=dict)

    @property
    def id(self) -> Optional[int]:
        return self.numbers.get(NUMBER_KEY)


class NumeralExtractor:
    """Replaces spoken numbers with digits for a given locale"""

    def __init__(self):
        self.logger = get_logger()
        self._patterns: Dict[str, List[Tuple[Pattern, int]]] = {
            locale: [
                (re.compile(rf"\b{re.escape(word)}\b", re.IGNORECASE), value)
                for word, value in table.items()
            ]
            for locale, table in NUMERAL_TABLES.items()
        }

    def extract(self, text: str, locale: str) -> NumeralExtraction:
        patterns = self._patterns.get(locale, self._patterns["en"])
        numbers: Dict[str, int] = {}
        cleaned = text or ""

        for pattern, value in patterns:
            if pattern.search(cleaned):
                numbers[NUMBER_KEY] = value
                cleaned = pattern.sub(str(value), cleaned)

        digits = _DIGITS_RE.search(cleaned)
        if digits:
            numbers[NUMBER_KEY] = int(digits.group(1))

        if numbers:
            self.logger.debug(f"[NUMERALS] {text!r} -> {cleaned!r} id={numbers[NUMBER_KEY]}")
        return NumeralExtraction(cleaned=cleaned, numbers=numbers)


def parse_numeral(value, locale: str = "en") -> Optional[int]:
    """
    Parse a single spoken or written number.

    Accepts digit strings ("42", "-3"), table words ("quince", "twenty-one")
    and space-separated sums of table words ("veinte cinco" -> 25).
    Returns None when the value is not a number.
    """
    if value is None:
        return None
    normalized = normalize_for_lookup(str(value))
    if not normalized:
        return None

    if re.fullmatch(r"-?\d+", normalized):
        return int(normalized)

    table = _LOOKUP_TABLES.get(locale, _LOOKUP_TABLES["en"])
    if normalized in table:
        return table[normalized]

    if " " in normalized:
        parts = [table.get(segment) for segment in normalized.split(" ")]
        if all(part is not None for part in parts):
            return sum(parts)

    return None
