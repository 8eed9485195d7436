"""nura.policy

Confirmation policy for destructive commands.

This package provides:
- Deterministic yes/no reply classification (es/en)
- The single-slot pending action store (ContextManager)
- PendingActionCoordinator, which owns the slots for one user/device

HARD RULES:
- All decisions are deterministic (no model involvement)
- Pending actions live in memory only
"""

from nura.policy.pending_confirmation import (
    ConfirmationResult,
    ContextManager,
    PendingAction,
    PendingActionCoordinator,
    is_no,
    is_yes,
)

__all__ = [
    "ConfirmationResult",
    "ContextManager",
    "PendingAction",
    "PendingActionCoordinator",
    "is_no",
    "is_yes",
]
