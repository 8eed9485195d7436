"""
Telemetry event bus for the Nura command console.

Components publish named events (wake detection, pending confirmations,
domain actions such as "delete-order") and UI/telemetry collaborators
subscribe to them. The bus keeps a bounded history so a diagnostic view can
replay what happened recently.

Listeners registered for "*" receive the full TelemetryEvent; listeners for a
specific type receive only the event data.
"""
from __future__ import annotations

import json
import time
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Deque, Dict, List, Optional

from nura.core.config import Config
from nura.core.logger import get_logger

WILDCARD = "*"

Listener = Callable[[Any], None]


@dataclass
class TelemetryEvent:
    """A published event"""
    type: str
    data: Any
    timestamp: int = field(default_factory=lambda: int(time.time() * 1000))

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "data": self.data, "timestamp": self.timestamp}


class EventBus:
    """In-process publish/subscribe with a bounded event history"""

    def __init__(self, max_events: Optional[int] = None):
        self.logger = get_logger()
        self._listeners: Dict[str, List[Listener]] = {}
        self._events: Deque[TelemetryEvent] = deque(maxlen=max_events or Config.EVENT_HISTORY_SIZE)

    def on(self, event_type: str, callback: Listener) -> Callable[[], None]:
        """Subscribe to an event type. Returns an unsubscribe callable."""
        callbacks = self._listeners.setdefault(event_type, [])
        if callback not in callbacks:
            callbacks.append(callback)
        return lambda: self.off(event_type, callback)

    def off(self, event_type: str, callback: Listener) -> None:
        callbacks = self._listeners.get(event_type)
        if callbacks and callback in callbacks:
            callbacks.remove(callback)

    def emit(self, event_type: str, data: Any = None) -> TelemetryEvent:
        """
        Record and deliver an event.

        A failing listener is logged and skipped; the remaining listeners
        still receive the event.
        """
        event = TelemetryEvent(type=event_type, data=data if data is not None else {})
        self._events.append(event)

        # Copy so listeners may unsubscribe while being called
        for callback in list(self._listeners.get(event_type, [])):
            self._deliver(callback, event.data, event_type)
        for callback in list(self._listeners.get(WILDCARD, [])):
            self._deliver(callback, event, event_type)

        return event

    def _deliver(self, callback: Listener, payload: Any, event_type: str) -> None:
        try:
            callback(payload)
        except Exception as e:
            self.logger.error(f"[EVENTS] listener for '{event_type}' failed: {e}")

    def get_events(self, event_type: Optional[str] = None) -> List[TelemetryEvent]:
        """Get recorded events, oldest first, optionally filtered by type"""
        if event_type is None:
            return list(self._events)
        return [e for e in self._events if e.type == event_type]

    def clear(self) -> None:
        """Clear recorded history (listeners are kept)"""
        self._events.clear()


def format_event(event: TelemetryEvent) -> str:
    """Render an event for a telemetry panel"""
    when = datetime.fromtimestamp(event.timestamp / 1000).strftime("%H:%M:%S")
    data = json.dumps(event.data, indent=2, ensure_ascii=False, default=str)
    return f"[{when}] {event.type}\n{data}"
