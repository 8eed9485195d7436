"""
Configuration module for the Nura command console.
Centralizes all settings with environment variable overrides.
"""
import json
import os
from typing import Dict, List


def _env_bool(name: str, default: str) -> bool:
    return os.environ.get(name, default).lower() in ("true", "1", "yes")


class Config:
    """Central configuration for Nura"""

    # Intent matching
    MATCH_THRESHOLD: float = float(os.environ.get("NURA_MATCH_THRESHOLD", "0.7"))
    # One of: damerau, soundex, double-metaphone, hybrid
    MATCH_STRATEGY: str = os.environ.get("NURA_MATCH_STRATEGY", "hybrid")

    # Locale: auto, es, en, es-419
    LOCALE: str = os.environ.get("NURA_LOCALE", "auto")
    # Winner when keyword counts tie during auto detection
    DEFAULT_LOCALE: str = os.environ.get("NURA_DEFAULT_LOCALE", "en")

    # Explain mode resolves intents without dispatching side effects
    EXPLAIN_MODE: bool = _env_bool("NURA_EXPLAIN_MODE", "false")

    # Wake words
    WAKE_WORDS: List[str] = os.environ.get("NURA_WAKE_WORDS", "ok nura,oye nura").split(",")
    WAKE_MIN_CONFIDENCE: float = float(os.environ.get("NURA_WAKE_MIN_CONFIDENCE", "0.6"))
    # When enabled, utterances without a wake phrase resolve to an empty intent
    REQUIRE_WAKE_WORD: bool = _env_bool("NURA_REQUIRE_WAKE_WORD", "false")

    # Canonical wake phrase -> phonetic variants heard by speech recognizers.
    # Override with NURA_WAKE_ALIASES='{"ok nura": ["ok nora"]}'
    WAKE_ALIASES: Dict[str, List[str]] = {
        "ok nura": ["ok nora", "okay nura", "okey nura", "ok lura", "ok nula", "hola nura"],
        "oye nura": ["oye nora", "oye lura"],
    }

    # Telemetry ring buffer size
    EVENT_HISTORY_SIZE: int = int(os.environ.get("NURA_EVENT_HISTORY_SIZE", "120"))

    # Logging
    LOG_LEVEL: str = os.environ.get("NURA_LOG_LEVEL", "INFO")

    # Quiet Mode - hides pipeline internals for cleaner console output
    QUIET_MODE: bool = _env_bool("NURA_QUIET_MODE", "false")

    @classmethod
    def get_wake_words(cls) -> List[str]:
        """Get configured wake phrases with blanks removed"""
        return [w.strip() for w in cls.WAKE_WORDS if w.strip()]

    @classmethod
    def get_wake_aliases(cls) -> Dict[str, List[str]]:
        """
        Get the canonical -> alias map.
        Returns the NURA_WAKE_ALIASES JSON override if set, otherwise the defaults.
        """
        raw = os.environ.get("NURA_WAKE_ALIASES")
        if not raw:
            return {k: list(v) for k, v in cls.WAKE_ALIASES.items()}
        parsed = json.loads(raw)
        if not isinstance(parsed, dict):
            raise ValueError("NURA_WAKE_ALIASES must be a JSON object")
        return {str(k): [str(a) for a in v] for k, v in parsed.items()}
