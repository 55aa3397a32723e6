"""
Rollback data structures.

ReversalAction is the planner's output. QueuedCommand, SecurityEvent and
RollbackResult describe what the rollback workflow hands to its collaborators
and returns to its caller.
"""

from __future__ import annotations

import datetime
from dataclasses import dataclass, field
from typing import List


@dataclass(frozen=True, slots=True)
class ReversalAction:
    """A counter-command undoing one previously executed command.

    Attributes:
        original_log_id: ID of the log entry being reversed.
        command: The inverse command, verb lower-cased, e.g. ``":unban user1"``.
        reason: Provenance string, ``"Rollback of <original command>"``.
    """
    original_log_id: str
    command: str
    reason: str


@dataclass(frozen=True, slots=True)
class QueuedCommand:
    """A command handed to the game server command queue."""
    server_id: str
    command: str
    priority: int
    requested_by: str
    target_user_id: str | None = None


def _utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


@dataclass(frozen=True, slots=True)
class SecurityEvent:
    """An entry for the security audit log."""
    event: str
    user_id: str | None
    details: str
    source: str = "raidguard"
    created_at: datetime.datetime = field(default_factory=_utcnow)


@dataclass(slots=True)
class RollbackResult:
    """Outcome of a rollback request."""
    server_id: str
    target_user_id: str
    reversals: List[ReversalAction] = field(default_factory=list)
    queued: int = 0
    message: str = ""
