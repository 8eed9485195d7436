"""
State management for intent sessions.
Defines the Intent -> Approval -> Execute state machine and its snapshot.
"""
from enum import Enum
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Optional
import time


class SessionStatus(Enum):
    """State machine states"""
    IDLE = "idle"
    PENDING = "pending"
    APPROVAL = "approval"
    EXECUTING = "executing"
    DONE = "done"
    REJECTED = "rejected"
    ERROR = "error"


TERMINAL_STATUSES = frozenset({SessionStatus.DONE, SessionStatus.REJECTED, SessionStatus.ERROR})


@dataclass
class SessionState:
    """Snapshot of an intent session"""
    status: SessionStatus = SessionStatus.IDLE
    intent: Optional[Any] = None
    approval: Optional[Any] = None
    result: Any = None
    error: Optional[BaseException] = None
    last_state_change: float = field(default_factory=time.time)

    def transition_to(self, new_status: SessionStatus) -> None:
        """Transition to a new status"""
        self.status = new_status
        self.last_state_change = time.time()

        if new_status == SessionStatus.PENDING:
            self.approval = None
            self.result = None
            self.error = None

    def is_in_state(self, status: SessionStatus) -> bool:
        """Check if currently in given status"""
        return self.status == status

    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    def get_time_in_current_state(self) -> float:
        """Get time spent in current status (seconds)"""
        return time.time() - self.last_state_change

    def snapshot(self) -> "SessionState":
        return replace(self)

    def to_dict(self) -> Dict[str, Any]:
        intent = self.intent.to_dict() if hasattr(self.intent, "to_dict") else self.intent
        approval = self.approval.to_dict() if hasattr(self.approval, "to_dict") else self.approval
        return {
            "status": self.status.value,
            "intent": intent,
            "approval": approval,
            "result": self.result,
            "error": str(self.error) if self.error is not None else None,
        }
