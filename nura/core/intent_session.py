"""nura.core.intent_session

Intent -> Approval -> Execute workflow engine.

An IntentSession takes any intent payload through:

    idle -> pending -> approval   (validator denied: waits for approve()/reject())
                    -> executing  (validator approved, or approve() called)
    executing -> done | error
    approval  -> rejected | executing

The validator and executor are injected and may be plain callables or
coroutines. They are awaited strictly in sequence; there is no timeout, so a
session in "approval" waits until its owner calls approve() or reject().

Every transition publishes an IntentEvent synchronously to all listeners. A
failing listener is logged and skipped; it never breaks delivery to the
others or the session state.

Usage:
    session = IntentSession(validator=check, executor=run)
    session.on(lambda event: print(event.type))
    await session.start({"intent": "create_order", "parameters": {"productId": 1}})
    if session.get_state().status is SessionStatus.APPROVAL:
        await session.approve({"approvedBy": "operator"})
"""

from __future__ import annotations

import inspect
import time
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Union

from nura.core.logger import get_logger
from nura.core.state import SessionState, SessionStatus

# ============================================================================
# EVENT TYPES
# ============================================================================

INTENT_RECEIVED = "intent-received"
APPROVAL_REQUIRED = "approval-required"
APPROVAL_GRANTED = "approval-granted"
EXECUTION_STARTED = "execution-started"
EXECUTED = "executed"
REJECTED = "rejected"
ERROR = "error"


class IntentSessionError(RuntimeError):
    """The session was driven in an order its state does not allow."""


class NoActiveIntentError(IntentSessionError):
    """approve()/reject() was called before any intent was started."""


class IntentPayloadError(ValueError):
    """The payload given to start() is malformed."""


@dataclass
class IntentPayload:
    intent: str
    parameters: Dict[str, Any] = field(default_factory=dict)
    locale: str = "en-US"
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "intent": self.intent,
            "parameters": dict(self.parameters),
            "locale": self.locale,
            "metadata": dict(self.metadata),
        }


def ensure_intent_payload(payload: Union[IntentPayload, Mapping[str, Any], None]) -> IntentPayload:
    """
    Validate and normalize a payload.

    Raises:
        IntentPayloadError: missing/empty intent name, or non-mapping parameters
    """
    if isinstance(payload, IntentPayload):
        intent = payload.intent
        parameters = payload.parameters
        locale = payload.locale
        metadata = payload.metadata
    elif isinstance(payload, Mapping):
        intent = payload.get("intent")
        parameters = payload.get("parameters")
        locale = payload.get("locale") or "en-US"
        metadata = payload.get("metadata")
    else:
        raise IntentPayloadError("Intent payload must be a mapping with an 'intent' key")

    if not isinstance(intent, str) or not intent.strip():
        raise IntentPayloadError("Intent payload must include a non-empty intent string")
    if parameters is None:
        parameters = {}
    if not isinstance(parameters, Mapping):
        raise IntentPayloadError("Intent parameters must be a mapping")
    if metadata is not None and not isinstance(metadata, Mapping):
        raise IntentPayloadError("Intent metadata must be a mapping")

    return IntentPayload(
        intent=intent,
        parameters=dict(parameters),
        locale=locale,
        metadata=dict(metadata or {}),
    )


# ============================================================================
# APPROVAL DECISIONS
# ============================================================================

@dataclass(frozen=True)
class Approved:
    metadata: Dict[str, Any] = field(default_factory=dict)
    approved: bool = field(default=True, init=False)

    def to_dict(self) -> Dict[str, Any]:
        return {"approved": True, "metadata": dict(self.metadata)}


@dataclass(frozen=True)
class Denied:
    reason: str = "denied"
    metadata: Dict[str, Any] = field(default_factory=dict)
    approved: bool = field(default=False, init=False)

    def to_dict(self) -> Dict[str, Any]:
        return {"approved": False, "reason": self.reason, "metadata": dict(self.metadata)}


ApprovalDecision = Union[Approved, Denied]

Validator = Callable[[IntentPayload], Union[Any, Awaitable[Any]]]
Executor = Callable[[IntentPayload, Dict[str, Any]], Union[Any, Awaitable[Any]]]


def coerce_approval(value: Any) -> ApprovalDecision:
    """
    Convert a validator return value into an ApprovalDecision.

    Accepts Approved/Denied, a bool, None (denied), or a mapping shaped like
    {"approved": bool, "reason": str, "metadata": dict}.
    """
    if isinstance(value, (Approved, Denied)):
        return value
    if isinstance(value, bool):
        return Approved() if value else Denied()
    if value is None:
        return Denied()
    if isinstance(value, Mapping):
        metadata = dict(value.get("metadata") or {})
        if value.get("approved") is True:
            return Approved(metadata=metadata)
        return Denied(reason=str(value.get("reason") or "denied"), metadata=metadata)
    raise TypeError(f"Validator returned unsupported value: {value!r}")


def _default_executor(payload: IntentPayload, metadata: Dict[str, Any]) -> Dict[str, Any]:
    return {"ok": True}


async def _resolve(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


@dataclass
class IntentEvent:
    type: str
    timestamp: int
    payload: Dict[str, Any]
    state: SessionState


IntentListener = Callable[[IntentEvent], None]


class IntentSession:
    """Approval-gated execution of a single intent at a time"""

    def __init__(self, validator: Optional[Validator] = None, executor: Optional[Executor] = None):
        """
        Args:
            validator: Decides whether an intent may run without manual approval.
                       None means every intent waits for approve()/reject().
            executor: Runs an approved intent; its return value becomes the result.
        """
        self.logger = get_logger()
        self.validator = validator
        self.executor = executor or _default_executor
        self._listeners: List[IntentListener] = []
        self._state = SessionState()

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------

    def on(self, listener: IntentListener) -> Callable[[], None]:
        """Subscribe to session events. Returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def get_state(self) -> SessionState:
        return self._state.snapshot()

    def _emit(self, event_type: str, payload: Dict[str, Any]) -> IntentEvent:
        event = IntentEvent(
            type=event_type,
            timestamp=int(time.time() * 1000),
            payload=payload,
            state=self._state.snapshot(),
        )
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception as e:
                self.logger.error(f"[SESSION] listener failed on '{event_type}': {e}")
        return event

    def _transition(self, status: SessionStatus) -> None:
        self._state.transition_to(status)
        self.logger.debug(f"[SESSION] state -> {status.value}")

    # ------------------------------------------------------------------
    # Workflow
    # ------------------------------------------------------------------

    async def start(self, payload: Union[IntentPayload, Mapping[str, Any]]) -> Any:
        """
        Begin a new intent.

        Returns the executor result when the validator approves, otherwise the
        Denied decision (the session then waits in "approval").
        """
        intent = ensure_intent_payload(payload)
        if self._state.is_in_state(SessionStatus.EXECUTING):
            raise IntentSessionError("Cannot start a new intent while another is executing")

        self._state = SessionState(intent=intent)
        self._transition(SessionStatus.PENDING)
        self.logger.info(f"[SESSION] intent received: {intent.intent}")
        self._emit(INTENT_RECEIVED, {"intent": intent})

        try:
            decision = await self._evaluate_approval(intent)
        except Exception as e:
            self._fail(intent, e)
            raise
        self._state.approval = decision

        if decision.approved:
            self._emit(APPROVAL_GRANTED, {"intent": intent, "approval": decision})
            return await self._run_execution(intent, decision.metadata)

        self._transition(SessionStatus.APPROVAL)
        self.logger.info(f"[SESSION] approval required: {intent.intent} ({decision.reason})")
        self._emit(APPROVAL_REQUIRED, {"intent": intent, "approval": decision})
        return decision

    async def approve(self, metadata: Optional[Dict[str, Any]] = None) -> Any:
        """Grant approval for the current intent and execute it"""
        intent = self._require_open_intent("approve")
        metadata = dict(metadata or {})
        decision = Approved(metadata=metadata)
        self._state.approval = decision
        self.logger.info(f"[SESSION] approval granted: {intent.intent}")
        self._emit(APPROVAL_GRANTED, {"intent": intent, "metadata": metadata})
        return await self._run_execution(intent, metadata)

    def reject(self, reason: str = "rejected-by-user") -> Dict[str, Any]:
        """Reject the current intent; nothing is executed"""
        intent = self._require_open_intent("reject")
        self._state.approval = Denied(reason=reason)
        self._transition(SessionStatus.REJECTED)
        self.logger.info(f"[SESSION] rejected: {intent.intent} ({reason})")
        self._emit(REJECTED, {"intent": intent, "reason": reason})
        return {"ok": False, "reason": reason}

    def _require_open_intent(self, action: str) -> IntentPayload:
        intent = self._state.intent
        if intent is None:
            raise NoActiveIntentError(f"No intent to {action}")
        if self._state.is_in_state(SessionStatus.EXECUTING):
            raise IntentSessionError(f"Cannot {action} while the intent is executing")
        if self._state.is_terminal():
            raise IntentSessionError(
                f"Cannot {action}: intent already {self._state.status.value}; call start() again"
            )
        return intent

    async def _evaluate_approval(self, intent: IntentPayload) -> ApprovalDecision:
        if self.validator is None:
            return Denied(reason="manual")
        return coerce_approval(await _resolve(self.validator(intent)))

    async def _run_execution(self, intent: IntentPayload, metadata: Dict[str, Any]) -> Any:
        approval = self._state.approval
        if approval is None or not approval.approved:
            raise IntentSessionError("Refusing to execute an intent that was not approved")

        self._transition(SessionStatus.EXECUTING)
        self._emit(EXECUTION_STARTED, {"intent": intent, "metadata": metadata})

        try:
            result = await _resolve(self.executor(intent, metadata))
        except Exception as e:
            self._fail(intent, e)
            raise

        elapsed = self._state.get_time_in_current_state()
        self._state.result = result
        self._transition(SessionStatus.DONE)
        self.logger.info(f"[SESSION] executed: {intent.intent} ({elapsed:.2f}s)")
        self._emit(EXECUTED, {"intent": intent, "result": result})
        return result

    def _fail(self, intent: IntentPayload, error: Exception) -> None:
        self._state.error = error
        self._transition(SessionStatus.ERROR)
        self.logger.error(f"[SESSION] {intent.intent} failed: {error}")
        self._emit(ERROR, {"intent": intent, "error": error})
