"""Interfaces of the systems raidguard talks to.

The log store, command queue, audit log and alert channel live outside this
package. Anything implementing these protocols can be plugged into the
rollback service and the raid monitor.
"""

from __future__ import annotations

import datetime
from typing import List, Protocol, Sequence, runtime_checkable

from raidguard.datatypes.command_datatypes import CommandLogEntry
from raidguard.datatypes.detection_datatypes import Detection
from raidguard.datatypes.rollback_datatypes import QueuedCommand, SecurityEvent


@runtime_checkable
class CommandLogStore(Protocol):
    async def fetch_command_logs(
        self,
        server_id: str,
        *,
        since: datetime.datetime,
        player_id: str | None = None,
        limit: int | None = None,
    ) -> List[CommandLogEntry]:
        """Return command logs created at or after ``since``, newest first."""
        ...

    async def fetch_authorized_user_ids(self, server_id: str) -> List[str]:
        """Return the player IDs allowed to run sensitive commands on a server."""
        ...


@runtime_checkable
class CommandQueue(Protocol):
    async def enqueue(self, command: QueuedCommand) -> None:
        ...


@runtime_checkable
class AuditLog(Protocol):
    async def record(self, event: SecurityEvent) -> None:
        ...


@runtime_checkable
class AlertNotifier(Protocol):
    async def notify(self, server_id: str, detections: Sequence[Detection]) -> None:
        ...
