"""
Wake phrase detection for transcribed utterances.
Detects a configured wake phrase ("ok nura") or one of its phonetic aliases
("ok nora") at the start of an utterance and strips it.

Confidence:
- canonical phrase: 1.0 (via "exact")
- alias: normalized edit-distance similarity to its canonical phrase
  (via "phonetic"); below the minimum confidence the alias is reported for
  diagnostics but not accepted.
"""
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from nura.core.config import Config
from nura.core.event_bus import EventBus
from nura.core.logger import get_logger
from nura.language.text import edit_similarity, normalize_for_lookup, strip_trailing_punct

VIA_EXACT = "exact"
VIA_PHONETIC = "phonetic"
VIA_NONE = "none"


@dataclass
class WakeMatchResult:
    """Outcome of wake phrase detection"""
    matched: bool
    confidence: float
    command: str
    via: str = VIA_NONE
    wake_word: Optional[str] = None
    alias: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "matched": self.matched,
            "confidence": self.confidence,
            "command": self.command,
            "via": self.via,
            "wake_word": self.wake_word,
            "alias": self.alias,
        }


@dataclass
class _WakeCandidate:
    canonical: str
    alias: Optional[str]
    tokens: Tuple[str, ...]
    confidence: float


class WakeWordStripper:
    """
    Longest-prefix wake phrase matcher over canonical phrases and aliases.
    """

    def __init__(
        self,
        wake_words: Optional[List[str]] = None,
        aliases: Optional[Dict[str, List[str]]] = None,
        min_confidence: Optional[float] = None,
        event_bus: Optional[EventBus] = None,
    ):
        """
        Args:
            wake_words: Canonical wake phrases (defaults to Config.WAKE_WORDS)
            aliases: Canonical phrase -> list of phonetic variants
            min_confidence: Aliases scoring below this are not accepted
            event_bus: Optional bus for wake-exact / wake-phonetic diagnostics
        """
        self.logger = get_logger()
        self.wake_words = wake_words if wake_words is not None else Config.get_wake_words()
        self.aliases = aliases if aliases is not None else Config.get_wake_aliases()
        self.min_confidence = Config.WAKE_MIN_CONFIDENCE if min_confidence is None else min_confidence
        self.event_bus = event_bus
        self._candidates = self._build_candidates()

    def _build_candidates(self) -> List[_WakeCandidate]:
        by_phrase: Dict[Tuple[str, ...], _WakeCandidate] = {}

        for word in self.wake_words:
            tokens = tuple(normalize_for_lookup(word).split())
            if tokens:
                by_phrase[tokens] = _WakeCandidate(word, None, tokens, 1.0)

        for canonical, alias_list in self.aliases.items():
            canonical_norm = normalize_for_lookup(canonical)
            for alias in alias_list:
                tokens = tuple(normalize_for_lookup(alias).split())
                if not tokens or tokens in by_phrase:
                    # Canonical phrases take precedence over an identical alias
                    continue
                confidence = edit_similarity(" ".join(tokens), canonical_norm)
                by_phrase[tokens] = _WakeCandidate(canonical, alias, tokens, confidence)

        # Longest phrase first so "ok nura" wins over a shorter "ok"
        return sorted(by_phrase.values(), key=lambda c: (len(c.tokens), len(" ".join(c.tokens))), reverse=True)

    def strip(self, utterance: Optional[str]) -> WakeMatchResult:
        cleaned = (utterance or "").strip()
        words = cleaned.split()
        lookup = [normalize_for_lookup(strip_trailing_punct(w)) for w in words]

        candidate = self._find_prefix(lookup)
        if candidate is None:
            return WakeMatchResult(matched=False, confidence=0.0, command=cleaned)

        command = " ".join(words[len(candidate.tokens):])
        accepted = candidate.confidence >= self.min_confidence
        self._publish(candidate, accepted)

        if not accepted:
            self.logger.debug(
                f"[WAKE] alias '{candidate.alias}' below threshold "
                f"({candidate.confidence:.2f} < {self.min_confidence:.2f})"
            )
            return WakeMatchResult(
                matched=False,
                confidence=candidate.confidence,
                command=cleaned,
                wake_word=candidate.canonical,
                alias=candidate.alias,
            )

        via = VIA_EXACT if candidate.alias is None else VIA_PHONETIC
        self.logger.debug(f"[WAKE] {via} '{candidate.canonical}' confidence={candidate.confidence:.2f}")
        return WakeMatchResult(
            matched=True,
            confidence=candidate.confidence,
            command=command,
            via=via,
            wake_word=candidate.canonical,
            alias=candidate.alias,
        )

    def _find_prefix(self, lookup: List[str]) -> Optional[_WakeCandidate]:
        for candidate in self._candidates:
            n = len(candidate.tokens)
            if len(lookup) >= n and tuple(lookup[:n]) == candidate.tokens:
                return candidate
        return None

    def _publish(self, candidate: _WakeCandidate, accepted: bool) -> None:
        if self.event_bus is None:
            return
        if candidate.alias is None:
            self.event_bus.emit("wake-exact", {"wake": candidate.canonical, "confidence": 1.0})
        else:
            self.event_bus.emit("wake-phonetic", {
                "wake": candidate.alias,
                "canonical": candidate.canonical,
                "confidence": candidate.confidence,
                "accepted": accepted,
            })
