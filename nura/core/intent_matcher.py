"""nura.core.intent_matcher

Fuzzy intent matcher for cleaned commands.

It returns either:
- the top-ranked catalog intent when its score clears the threshold
  (matched_by="plugin"), OR
- the first fallback rule whose regexes match (matched_by="fallback"), OR
- an empty intent (matched_by="none").

Scoring is lexical only: exact equality, substring containment, and a blend
of word overlap with normalized edit distance weighted by strategy.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Literal, Optional, Sequence, Tuple

from nura.core.config import Config
from nura.core.logger import get_logger
from nura.intents import catalog
from nura.intents.catalog import DEFAULT_CATALOG, IntentPattern
from nura.language.text import edit_similarity

MatchedBy = Literal["plugin", "fallback", "none"]

# strategy -> (word overlap weight, edit distance weight)
STRATEGY_WEIGHTS: Dict[str, Tuple[float, float]] = {
    "damerau": (0.0, 1.0),
    "soundex": (0.8, 0.2),
    "double-metaphone": (0.7, 0.3),
    "hybrid": (0.6, 0.4),
}

DEFAULT_STRATEGY = "hybrid"


@dataclass
class IntentCandidate:
    pattern: str
    intent: str
    score: float
    reason: str

    def to_dict(self) -> dict:
        return {"pattern": self.pattern, "intent": self.intent, "score": self.score, "reason": self.reason}


@dataclass
class MatchResult:
    intent: str
    confidence: float
    matched_by: MatchedBy
    ranking: List[IntentCandidate] = field(default_factory=list)


def validate_strategy(strategy: str) -> str:
    if strategy not in STRATEGY_WEIGHTS:
        raise ValueError(f"Unknown strategy {strategy!r}; expected one of {sorted(STRATEGY_WEIGHTS)}")
    return strategy


def validate_threshold(threshold: float) -> float:
    value = float(threshold)
    if not 0.0 <= value <= 1.0:
        raise ValueError(f"Threshold must be within [0, 1], got {threshold!r}")
    return value


def similarity(text: str, pattern: str, strategy: str = DEFAULT_STRATEGY) -> float:
    """Score text against one catalog pattern, in [0, 1]."""
    text_lower = (text or "").lower().strip()
    pattern_lower = (pattern or "").lower().strip()

    if text_lower == pattern_lower:
        return 1.0
    if pattern_lower in text_lower:
        return 0.9

    text_words = set(text_lower.split())
    pattern_words = pattern_lower.split()
    if pattern_words:
        overlap = sum(1 for w in pattern_words if w in text_words)
        word_score = overlap / len(pattern_words)
    else:
        word_score = 0.0

    edit_score = edit_similarity(text_lower, pattern_lower)

    word_weight, edit_weight = STRATEGY_WEIGHTS.get(strategy, STRATEGY_WEIGHTS[DEFAULT_STRATEGY])
    score = word_score * word_weight + edit_score * edit_weight
    return min(1.0, max(0.0, score))


# ============================================================================
# FALLBACK RULES
# ============================================================================
# Evaluated in order when no catalog pattern clears the threshold.
# Each rule is a predicate over the command text; the first hit wins.

@dataclass(frozen=True)
class FallbackRule:
    name: str
    predicate: Callable[[str], bool]
    intent: str
    confidence: float


def _all_of(*patterns: str) -> Callable[[str], bool]:
    compiled = [re.compile(p, re.IGNORECASE) for p in patterns]
    return lambda text: all(p.search(text) for p in compiled)


_ORDER = r"orden|order"
_EXPLAIN = r"\bexplain\b"

FALLBACK_RULES: List[FallbackRule] = [
    FallbackRule("open-menu", _all_of(r"abre|open", r"men[uú]"), catalog.OPEN_ORDERS_MENU, 0.6),
    FallbackRule("delete-order", _all_of(r"elimina|borra|delete", _ORDER), catalog.DELETE_ORDER, 0.6),
    FallbackRule("create-order", _all_of(r"agrega|añade|add", _ORDER), catalog.CREATE_ORDER, 0.58),
    FallbackRule("update-order", _all_of(r"modifica|actualiza|update", _ORDER), catalog.UPDATE_ORDER, 0.58),
    FallbackRule("show-capabilities", _all_of(r"show|help|ayuda|capacit"), catalog.SHOW_CAPABILITIES, 0.55),
    FallbackRule("open-telemetry", _all_of(r"telemetr|ranking"), catalog.OPEN_TELEMETRY, 0.55),
    FallbackRule("explain-on", _all_of(_EXPLAIN, r"\b(?:on|activa|activar|enable)\b"), catalog.EXPLAIN_ON, 0.55),
    FallbackRule("explain-off", _all_of(_EXPLAIN), catalog.EXPLAIN_OFF, 0.55),
    FallbackRule("connect-gateway", _all_of(r"mcp", r"connect|conect"), catalog.GATEWAY_CONNECT, 0.55),
    FallbackRule("list-resources", _all_of(r"mcp", r"resource|recurso"), catalog.GATEWAY_LIST_RESOURCES, 0.55),
    FallbackRule("list-tools", _all_of(r"mcp", r"tool|herramienta"), catalog.GATEWAY_LIST_TOOLS, 0.55),
]


class IntentMatcher:
    """Scores commands against a pattern catalog"""

    def __init__(
        self,
        patterns: Optional[Sequence[IntentPattern]] = None,
        strategy: Optional[str] = None,
        threshold: Optional[float] = None,
        fallback_rules: Optional[Sequence[FallbackRule]] = None,
    ):
        self.logger = get_logger()
        self.patterns: List[IntentPattern] = list(patterns if patterns is not None else DEFAULT_CATALOG)
        self.strategy = validate_strategy(strategy or Config.MATCH_STRATEGY)
        self.threshold = validate_threshold(Config.MATCH_THRESHOLD if threshold is None else threshold)
        self.fallback_rules: List[FallbackRule] = list(fallback_rules if fallback_rules is not None else FALLBACK_RULES)
        self.last_ranking: List[IntentCandidate] = []

    def rank(self, text: str) -> List[IntentCandidate]:
        """All catalog candidates sorted by score, best first (stable for ties)."""
        candidates = [
            IntentCandidate(
                pattern=entry.pattern,
                intent=entry.intent,
                score=similarity(text, entry.pattern, self.strategy),
                reason=f'{self.strategy} similarity with pattern "{entry.pattern}"',
            )
            for entry in self.patterns
        ]
        return sorted(candidates, key=lambda c: c.score, reverse=True)

    def match(self, text: str) -> MatchResult:
        ranking = self.rank(text)
        self.last_ranking = ranking

        best = ranking[0] if ranking else None
        if best is not None and best.score >= self.threshold:
            self.logger.debug(f"[MATCH] plugin intent={best.intent} score={best.score:.3f} pattern=\"{best.pattern}\"")
            return MatchResult(best.intent, best.score, "plugin", ranking)

        for rule in self.fallback_rules:
            if rule.predicate(text or ""):
                self.logger.debug(f"[MATCH] fallback rule={rule.name} intent={rule.intent}")
                return MatchResult(rule.intent, rule.confidence, "fallback", ranking)

        top = f"{best.score:.3f}" if best is not None else "n/a"
        self.logger.debug(f"[MATCH] none (top score {top} < {self.threshold})")
        return MatchResult("", 0.0, "none", ranking)
