"""nura.core.client

The resolution pipeline of the command console.

    utterance
      -> pending confirmation check (a bare "sí" never reaches the matcher)
      -> wake phrase stripping
      -> locale detection
      -> numeral extraction
      -> fuzzy intent matching (+ fallback rules)
      -> payload enrichment (order name/notes)
      -> domain event dispatch / pending action registration

One NuraClient serves one user or device: it owns its pending-action slots
and settings, and is not meant to be shared across concurrent callers.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from nura.core.config import Config
from nura.core.event_bus import EventBus
from nura.core.intent_matcher import (
    IntentCandidate,
    IntentMatcher,
    MatchedBy,
    validate_strategy,
    validate_threshold,
)
from nura.core.logger import get_logger
from nura.intents import catalog
from nura.intents.order_payload import format_order_text, parse_create_order, parse_update_order
from nura.language.locale import AUTO, LocaleDetector
from nura.language.numerals import NumeralExtractor
from nura.policy.pending_confirmation import (
    DELETE_KEY,
    REASON_REJECTED,
    ConfirmationResult,
    PendingAction,
    PendingActionCoordinator,
)
from nura.voice.wake import VIA_NONE, VIA_PHONETIC, WakeMatchResult, WakeWordStripper

CONTEXT_CONFIRM_CONFIDENCE = 0.95
CONTEXT_CANCEL_CONFIDENCE = 0.9

# Toggles still dispatch in explain mode, otherwise it could never be switched off by voice
_ALWAYS_DISPATCH = frozenset({catalog.EXPLAIN_ON, catalog.EXPLAIN_OFF})


@dataclass
class ResolvedIntent:
    intent: str
    confidence: float
    via: str
    matched_by: MatchedBy
    locale: str
    utterance: str
    timestamp: int
    payload: Optional[Dict[str, Any]] = None
    confirmation: Optional[ConfirmationResult] = None

    def to_dict(self, include_timestamp: bool = True) -> Dict[str, Any]:
        data = {
            "intent": self.intent,
            "confidence": self.confidence,
            "via": self.via,
            "matched_by": self.matched_by,
            "locale": self.locale,
            "payload": self.payload,
            "utterance": self.utterance,
        }
        if self.confirmation is not None:
            data["confirmation"] = self.confirmation.to_dict()
        if include_timestamp:
            data["timestamp"] = self.timestamp
        return data


def _now_ms() -> int:
    return int(time.time() * 1000)


def _settled(outcome: ConfirmationResult) -> bool:
    return outcome.confirmed or outcome.reason == REASON_REJECTED


class NuraClient:
    """Resolves utterances into intents and dispatches their side effects"""

    def __init__(
        self,
        event_bus: Optional[EventBus] = None,
        matcher: Optional[IntentMatcher] = None,
        wake: Optional[WakeWordStripper] = None,
        coordinator: Optional[PendingActionCoordinator] = None,
        locale: Optional[str] = None,
        explain_mode: Optional[bool] = None,
        require_wake_word: Optional[bool] = None,
    ):
        self.logger = get_logger()
        self.event_bus = event_bus or EventBus()
        self.matcher = matcher or IntentMatcher()
        self.wake = wake or WakeWordStripper(event_bus=self.event_bus)
        self.coordinator = coordinator or PendingActionCoordinator(event_bus=self.event_bus)
        self.numerals = NumeralExtractor()
        self.locale = AUTO
        self._locale_detector = LocaleDetector(AUTO)
        self.set_locale(locale or Config.LOCALE)
        self.explain_mode = Config.EXPLAIN_MODE if explain_mode is None else explain_mode
        self.require_wake_word = Config.REQUIRE_WAKE_WORD if require_wake_word is None else require_wake_word

        self._handlers: Dict[str, Callable[[ResolvedIntent], None]] = {
            catalog.OPEN_ORDERS_MENU: self._open_menu,
            catalog.DELETE_ORDER: self._request_delete,
            catalog.CREATE_ORDER: self._create_order,
            catalog.UPDATE_ORDER: self._update_order,
            catalog.SHOW_CAPABILITIES: lambda r: self.event_bus.emit("show-capabilities"),
            catalog.OPEN_TELEMETRY: lambda r: self.event_bus.emit("open-telemetry"),
            catalog.EXPLAIN_ON: lambda r: self._toggle_explain(True),
            catalog.EXPLAIN_OFF: lambda r: self._toggle_explain(False),
            catalog.GATEWAY_CONNECT: lambda r: self.event_bus.emit("connect-gateway"),
            catalog.GATEWAY_LIST_RESOURCES: lambda r: self.event_bus.emit("list-resources"),
            catalog.GATEWAY_LIST_TOOLS: lambda r: self.event_bus.emit("list-tools"),
        }
        # Side effects of a confirmed pending action
        self._confirmed_handlers: Dict[str, Callable[[PendingAction], None]] = {
            catalog.DELETE_ORDER: lambda a: self.event_bus.emit("delete-order", {"id": (a.payload or {}).get("id")}),
        }

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------

    @property
    def threshold(self) -> float:
        return self.matcher.threshold

    @property
    def strategy(self) -> str:
        return self.matcher.strategy

    def set_threshold(self, value: float) -> None:
        self.matcher.threshold = validate_threshold(value)

    def set_strategy(self, strategy: str) -> None:
        self.matcher.strategy = validate_strategy(strategy)

    def set_locale(self, locale: str) -> None:
        """Force a locale ("es", "en", "es-419") or "auto" for detection"""
        self._locale_detector = LocaleDetector(locale)
        self.locale = locale

    def set_explain_mode(self, enabled: bool) -> None:
        self.explain_mode = bool(enabled)

    def get_last_ranking(self) -> List[IntentCandidate]:
        return list(self.matcher.last_ranking)

    # ------------------------------------------------------------------
    # Pending actions
    # ------------------------------------------------------------------

    def get_pending_action(self, key: str = DELETE_KEY) -> Optional[PendingAction]:
        return self.coordinator.get_pending(key)

    def confirm_pending_action(self, key: str = DELETE_KEY) -> Optional[PendingAction]:
        """Confirm from outside the voice loop (e.g. a dialog button)"""
        entry = self.coordinator.confirm(key)
        if entry is not None:
            self._run_confirmed(entry)
        return entry

    def cancel_pending_action(self, key: str = DELETE_KEY) -> Optional[PendingAction]:
        return self.coordinator.cancel(key)

    def _run_confirmed(self, entry: PendingAction) -> None:
        handler = self._confirmed_handlers.get(entry.intent)
        if handler is not None:
            self.logger.info(f"[DISPATCH] confirmed {entry.intent} payload={entry.payload}")
            handler(entry)

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def process(self, utterance: Optional[str]) -> ResolvedIntent:
        timestamp = _now_ms()
        text = utterance or ""

        wake = self.wake.strip(text)
        result = self._check_pending(text, wake, timestamp)
        if result is None:
            result = self._resolve(text, wake, timestamp)

        self.logger.info(
            f"[MATCH] '{text}' -> {result.intent or '-'} "
            f"({result.matched_by}, {result.confidence:.2f}, via={result.via}, locale={result.locale})"
        )
        self.event_bus.emit("resolved", result.to_dict())
        return result

    def _check_pending(self, text: str, wake: WakeMatchResult, timestamp: int) -> Optional[ResolvedIntent]:
        key = self.coordinator.active_key()
        if key is None:
            return None

        reply, via, confidence_cap = text, VIA_NONE, 1.0
        outcome = self.coordinator.resolve(key, reply)
        if not _settled(outcome) and wake.matched and wake.command:
            # "ok nura sí": the reply follows the wake phrase
            reply, via = wake.command, wake.via
            if wake.via == VIA_PHONETIC:
                confidence_cap = wake.confidence
            outcome = self.coordinator.resolve(key, reply)

        if outcome.confirmed:
            self._run_confirmed(outcome.action)
            intent, confidence = catalog.CONFIRM_LAST_ACTION, CONTEXT_CONFIRM_CONFIDENCE
        elif outcome.reason == REASON_REJECTED:
            intent, confidence = catalog.CANCEL_LAST_ACTION, CONTEXT_CANCEL_CONFIDENCE
        else:
            # empty or unrecognized: the slot stays, treat the text as a new command
            return None

        return ResolvedIntent(
            intent=intent,
            confidence=min(confidence, confidence_cap),
            via=via,
            matched_by="plugin",
            locale=self._locale_detector.detect(reply),
            utterance=text,
            timestamp=timestamp,
            payload=outcome.action.payload,
            confirmation=outcome,
        )

    def _resolve(self, text: str, wake: WakeMatchResult, timestamp: int) -> ResolvedIntent:
        command = wake.command
        locale = self._locale_detector.detect(command)

        if self.require_wake_word and not wake.matched:
            self.matcher.last_ranking = []
            return ResolvedIntent("", 0.0, VIA_NONE, "none", locale, text, timestamp)

        extraction = self.numerals.extract(command, locale)
        match = self.matcher.match(extraction.cleaned)

        intent = match.intent
        matched_by = match.matched_by
        confidence = match.confidence
        payload: Optional[Dict[str, Any]] = dict(extraction.numbers) or None
        confirmation: Optional[ConfirmationResult] = None
        settled = False

        if intent in (catalog.CONFIRM_LAST_ACTION, catalog.CANCEL_LAST_ACTION):
            key = self.coordinator.active_key()
            entry = None
            if key is not None:
                if intent == catalog.CONFIRM_LAST_ACTION:
                    entry = self.confirm_pending_action(key)
                    confirmation = ConfirmationResult(confirmed=True, action=entry)
                else:
                    entry = self.cancel_pending_action(key)
                    confirmation = ConfirmationResult(confirmed=False, reason=REASON_REJECTED, action=entry)
            if entry is None:
                # Nothing to confirm or cancel
                intent, matched_by, confidence = "", "none", 0.0
            else:
                if intent == catalog.CONFIRM_LAST_ACTION:
                    # report what was actually carried out
                    intent = entry.intent
                payload = entry.payload
                settled = True

        if not settled:
            if intent == catalog.CREATE_ORDER:
                payload = self._merge(payload, parse_create_order(extraction.cleaned))
            elif intent == catalog.UPDATE_ORDER:
                payload = self._merge(payload, parse_update_order(extraction.cleaned))

        if wake.via == VIA_PHONETIC:
            confidence = min(confidence, wake.confidence)

        result = ResolvedIntent(
            intent=intent,
            confidence=confidence,
            via=wake.via,
            matched_by=matched_by,
            locale=locale,
            utterance=text,
            timestamp=timestamp,
            payload=payload,
            confirmation=confirmation,
        )

        if intent and not settled and (not self.explain_mode or intent in _ALWAYS_DISPATCH):
            self._dispatch(result)
        return result

    @staticmethod
    def _merge(payload: Optional[Dict[str, Any]], details: Dict[str, str]) -> Optional[Dict[str, Any]]:
        if not details:
            return payload
        merged = dict(payload or {})
        merged.update(details)
        return merged

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def _dispatch(self, result: ResolvedIntent) -> None:
        handler = self._handlers.get(result.intent)
        if handler is None:
            self.logger.debug(f"[DISPATCH] no handler for {result.intent}")
            return
        self.logger.debug(f"[DISPATCH] {result.intent} payload={result.payload}")
        handler(result)

    def _open_menu(self, result: ResolvedIntent) -> None:
        self.event_bus.emit("open-menu", {"menu": "orders"})

    def _request_delete(self, result: ResolvedIntent) -> None:
        order_id = (result.payload or {}).get("id")
        description = f"Delete order {order_id}" if order_id is not None else "Delete last referenced order"
        self.coordinator.register(DELETE_KEY, result.intent, {"id": order_id}, description)

    def _create_order(self, result: ResolvedIntent) -> None:
        payload = result.payload or {}
        self.event_bus.emit("create-order", {
            "name": _clean_text(payload.get("name")),
            "notes": _clean_text(payload.get("notes")),
        })

    def _update_order(self, result: ResolvedIntent) -> None:
        payload = result.payload or {}
        order_id = payload.get("id")
        if not isinstance(order_id, int):
            try:
                order_id = int(str(order_id))
            except (TypeError, ValueError):
                order_id = None
        self.event_bus.emit("update-order", {
            "id": order_id,
            "name": _clean_text(payload.get("name")),
            "notes": _clean_text(payload.get("notes")),
        })

    def _toggle_explain(self, enabled: bool) -> None:
        self.explain_mode = enabled
        self.event_bus.emit("toggle-explain", {"enabled": enabled})


def _clean_text(value: Any) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return format_order_text(value)
    return None
