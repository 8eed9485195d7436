"""
Pending action confirmation for destructive voice commands.

This module provides deterministic yes/no pattern matching and a single-slot
store of actions awaiting confirmation ("delete order 15?"). It is the SINGLE
source of truth for turning a reply like "sí, elimínala" or "no" into a
confirm/cancel decision.

HARD RULES:
- Regex/string only - no model parsing for yes/no
- At most one pending action per category key; a new save overwrites
- A slot is cleared exactly once: on confirm or on rejection
- Stray replies never raise; they return a typed "not confirmed" result

Usage:
    coordinator = PendingActionCoordinator(event_bus=bus)
    coordinator.register("delete", "delete::order", {"id": 15}, "Delete order 15")

    result = coordinator.resolve("delete", transcript)
    if result.confirmed:
        # run result.action
    elif result.reason == REASON_REJECTED:
        # user cancelled
    else:
        # empty/unrecognized reply: slot kept, re-ask or treat as a new command
"""

import re
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Union

from nura.core.event_bus import EventBus
from nura.core.logger import get_logger
from nura.language.text import normalize_for_lookup

# ============================================================================
# YES/NO PATTERNS (compiled regexes)
# ============================================================================
# Patterns run on accent-free lowercase text and match if the reply STARTS
# with a confirmation word, so "Sí, elimínala" and "No, déjala" both work.

YES_PATTERN = re.compile(
    r"^(?:yes|yeah|yep|yup|si|claro|confirm|confirma|confirmalo|confirmala|confirmado|"
    r"dale|adelante|de\s+acuerdo|correcto|sure|do\s+it|go\s+ahead|proceed|absolutely|"
    r"affirmative|eliminala|eliminalo|borrala|borralo|delete\s+it)\b",
    re.IGNORECASE,
)

NO_PATTERN = re.compile(
    r"^(?:no|nope|nah|cancel|cancela|cancelar|cancelala|cancelalo|rechaza|rechazar|"
    r"stop|abort|never\s*mind|negative|mejor\s+no|olvidalo|don'?t|do\s+not)\b",
    re.IGNORECASE,
)

REASON_MISSING_CONTEXT = "missing-context"
REASON_EMPTY_RESPONSE = "empty-response"
REASON_REJECTED = "rejected"
REASON_UNRECOGNIZED = "unrecognized"

DELETE_KEY = "delete"


def normalize(text: Optional[str]) -> str:
    """
    Normalize a reply for pattern matching.

    - Lowercase, accents removed
    - Leading/trailing whitespace stripped, inner whitespace collapsed
    """
    return normalize_for_lookup(text or "")


def is_yes(text: Optional[str]) -> bool:
    """Check if text is an affirmative response"""
    return bool(YES_PATTERN.match(normalize(text)))


def is_no(text: Optional[str]) -> bool:
    """Check if text is a negative/cancel response"""
    return bool(NO_PATTERN.match(normalize(text)))


def is_confirmation_response(text: Optional[str]) -> bool:
    """Check if text is any kind of confirmation response (yes OR no)"""
    return is_yes(text) or is_no(text)


@dataclass
class PendingAction:
    """An action waiting for the user's explicit confirmation"""
    intent: str
    description: str = ""
    payload: Optional[Dict[str, Any]] = None
    saved_at: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "intent": self.intent,
            "description": self.description,
            "payload": self.payload,
            "saved_at": self.saved_at,
        }


@dataclass
class ConfirmationResult:
    confirmed: bool
    reason: Optional[str] = None
    action: Optional[PendingAction] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "confirmed": self.confirmed,
            "reason": self.reason,
            "action": self.action.to_dict() if self.action else None,
        }


ActionLike = Union[PendingAction, Mapping[str, Any]]


def _as_pending_action(action: ActionLike) -> PendingAction:
    if isinstance(action, PendingAction):
        return PendingAction(action.intent, action.description, action.payload)
    payload = action.get("payload")
    return PendingAction(
        intent=str(action.get("intent", "")),
        description=str(action.get("description", "")),
        payload=dict(payload) if payload is not None else None,
    )


class ContextManager:
    """Single-slot store of pending actions keyed by category"""

    def __init__(self):
        self.logger = get_logger()
        self._store: Dict[str, PendingAction] = {}

    def save_action(self, key: str, action: ActionLike) -> PendingAction:
        """Store an action under key, replacing any previous one"""
        entry = _as_pending_action(action)
        entry.saved_at = int(time.time() * 1000)
        previous = self._store.pop(key, None)
        if previous is not None:
            self.logger.debug(f"[CONFIRM] replacing pending '{key}' action {previous.intent}")
        # Re-inserting keeps dict order == save order
        self._store[key] = entry
        return entry

    def get_action(self, key: str) -> Optional[PendingAction]:
        return self._store.get(key)

    def clear_action(self, key: str) -> Optional[PendingAction]:
        return self._store.pop(key, None)

    def keys(self) -> List[str]:
        """Keys with a pending action, most recently saved first"""
        return list(reversed(list(self._store)))

    def maybe_confirm(self, key: str, utterance: Optional[str]) -> ConfirmationResult:
        """
        Resolve a reply against the pending action for key.

        The slot is cleared only on a confirmed or rejected reply; empty and
        unrecognized replies keep it for a further attempt.
        """
        entry = self._store.get(key)
        if entry is None:
            return ConfirmationResult(confirmed=False, reason=REASON_MISSING_CONTEXT)

        cleaned = normalize(utterance)
        if not cleaned:
            return ConfirmationResult(confirmed=False, reason=REASON_EMPTY_RESPONSE, action=entry)

        if YES_PATTERN.match(cleaned):
            del self._store[key]
            self.logger.info(f"[CONFIRM] received reply=\"yes\" -> {entry.intent}")
            return ConfirmationResult(confirmed=True, action=entry)

        if NO_PATTERN.match(cleaned):
            del self._store[key]
            self.logger.info(f"[CONFIRM] received reply=\"no\" -> {entry.intent} cancelled")
            return ConfirmationResult(confirmed=False, reason=REASON_REJECTED, action=entry)

        self.logger.debug(f"[CONFIRM] ignored - not yes/no: '{cleaned[:50]}'")
        return ConfirmationResult(confirmed=False, reason=REASON_UNRECOGNIZED, action=entry)


class PendingActionCoordinator:
    """
    Owns the pending-action slots for one user/device and publishes the
    confirmation lifecycle on the event bus:

        pending-confirmation {intent, payload, description}
        confirmed            {intent, payload}
        cancelled            {intent, payload, description}
    """

    def __init__(self, context: Optional[ContextManager] = None, event_bus: Optional[EventBus] = None):
        self.logger = get_logger()
        self.context = context or ContextManager()
        self.event_bus = event_bus

    def register(
        self,
        key: str,
        intent: str,
        payload: Optional[Dict[str, Any]] = None,
        description: str = "",
    ) -> PendingAction:
        entry = self.context.save_action(
            key, PendingAction(intent=intent, description=description, payload=payload)
        )
        self.logger.info(f"[CONFIRM] pending '{key}': {description or intent}")
        self._publish("pending-confirmation", {
            "intent": entry.intent,
            "payload": entry.payload,
            "description": entry.description,
        })
        return entry

    def has_pending(self, key: Optional[str] = None) -> bool:
        if key is None:
            return bool(self.context.keys())
        return self.context.get_action(key) is not None

    def get_pending(self, key: str) -> Optional[PendingAction]:
        return self.context.get_action(key)

    def active_key(self) -> Optional[str]:
        """The category of the most recently registered pending action"""
        keys = self.context.keys()
        return keys[0] if keys else None

    def resolve(self, key: str, utterance: Optional[str]) -> ConfirmationResult:
        """Feed a reply to the pending action for key and publish the outcome"""
        result = self.context.maybe_confirm(key, utterance)
        if result.confirmed:
            self._publish_confirmed(result.action)
        elif result.reason == REASON_REJECTED:
            self._publish_cancelled(result.action)
        return result

    def confirm(self, key: str) -> Optional[PendingAction]:
        """Explicit confirmation (e.g. a dialog button). Returns the action, if any."""
        entry = self.context.clear_action(key)
        if entry is not None:
            self.logger.info(f"[CONFIRM] confirmed '{key}' -> {entry.intent}")
            self._publish_confirmed(entry)
        return entry

    def cancel(self, key: str) -> Optional[PendingAction]:
        """Explicit cancellation. Returns the dropped action, if any."""
        entry = self.context.clear_action(key)
        if entry is not None:
            self.logger.info(f"[CONFIRM] cancelled '{key}' -> {entry.intent}")
            self._publish_cancelled(entry)
        return entry

    def _publish_confirmed(self, entry: PendingAction) -> None:
        self._publish("confirmed", {"intent": entry.intent, "payload": entry.payload})

    def _publish_cancelled(self, entry: PendingAction) -> None:
        self._publish("cancelled", {
            "intent": entry.intent,
            "payload": entry.payload,
            "description": entry.description,
        })

    def _publish(self, event_type: str, data: Dict[str, Any]) -> None:
        if self.event_bus is not None:
            self.event_bus.emit(event_type, data)
