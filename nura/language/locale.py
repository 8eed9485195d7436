"""nura.language.locale

Locale detection for spoken commands.

This is a keyword-frequency heuristic, not a language model: each token of
the command is compared against two fixed keyword lists and the language with
more hits wins. Short utterances will sometimes be misclassified; that is
acceptable because the fuzzy matcher scores against patterns in both
languages anyway.
"""

from __future__ import annotations

import re
from typing import List, Optional, Tuple

from nura.core.config import Config
from nura.core.logger import get_logger

SUPPORTED_LOCALES: Tuple[str, ...] = ("es", "en")
AUTO = "auto"

ES_KEYWORDS = frozenset({
    "abre", "abrir", "elimina", "eliminar", "borra", "borrar", "agrega", "añade",
    "modifica", "actualiza", "menú", "órdenes", "ordenes", "pedidos", "pedido",
    "orden", "sí", "telemetría", "telemetria", "capacidades", "ayuda", "muestra",
    "recursos", "herramientas", "listar", "conectar", "explica", "activa",
    "desactiva", "la", "el", "de",
})

EN_KEYWORDS = frozenset({
    "open", "delete", "remove", "add", "update", "menu", "orders", "order", "yes",
    "telemetry", "capabilities", "help", "show", "resources", "tools", "list",
    "connect", "explain", "turn", "the", "of",
})

_TOKEN_RE = re.compile(r"[\w'-]+", re.UNICODE)


def tokenize(text: str) -> List[str]:
    return _TOKEN_RE.findall((text or "").lower())


def resolve_locale(locale: str) -> str:
    """
    Map a forced locale (possibly regional) to its base language.

    "es-419" -> "es", "en_US" -> "en". Raises ValueError for "auto" or an
    unsupported language since those cannot be used downstream.
    """
    base = (locale or "").strip().lower().replace("_", "-").split("-")[0]
    if base not in SUPPORTED_LOCALES:
        raise ValueError(f"Unsupported locale: {locale!r}")
    return base


class LocaleDetector:
    """Chooses "es" or "en" for a command"""

    def __init__(self, forced_locale: str = AUTO, default_locale: Optional[str] = None):
        self.logger = get_logger()
        self.default_locale = resolve_locale(default_locale or Config.DEFAULT_LOCALE)
        self.forced_locale = forced_locale
        # Validate eagerly so a bad setting fails at configuration time
        if forced_locale != AUTO:
            resolve_locale(forced_locale)

    def count_keywords(self, text: str) -> Tuple[int, int]:
        """Return (spanish_hits, english_hits) for the tokens of text"""
        tokens = tokenize(text)
        es_count = sum(1 for t in tokens if t in ES_KEYWORDS)
        en_count = sum(1 for t in tokens if t in EN_KEYWORDS)
        return es_count, en_count

    def detect(self, text: str) -> str:
        if self.forced_locale != AUTO:
            return resolve_locale(self.forced_locale)

        es_count, en_count = self.count_keywords(text)
        if es_count > en_count:
            locale = "es"
        elif en_count > es_count:
            locale = "en"
        else:
            locale = self.default_locale

        self.logger.debug(f"[LOCALE] es={es_count} en={en_count} -> {locale}")
        return locale
