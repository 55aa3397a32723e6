"""
In-memory implementations of the collaborator protocols.

Useful for tests, local dry runs and embedding raidguard in a process that
already holds its logs in memory. Command log rows are stored with the time
they were recorded so time-range queries behave like the real store.
"""

from __future__ import annotations

import asyncio
import datetime
from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, Iterable, List, Sequence, Tuple

from raidguard.datatypes.command_datatypes import CommandLogEntry
from raidguard.datatypes.detection_datatypes import Detection
from raidguard.datatypes.rollback_datatypes import QueuedCommand, SecurityEvent


def _utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


@dataclass(frozen=True, slots=True)
class StoredLog:
    server_id: str
    entry: CommandLogEntry
    created_at: datetime.datetime


class InMemoryCommandLogStore:
    """Command log store backed by a list."""

    def __init__(self) -> None:
        self._rows: List[StoredLog] = []
        self._authorized: Dict[str, List[str]] = defaultdict(list)

    def add(self, server_id: str, entry: CommandLogEntry, created_at: datetime.datetime | None = None) -> None:
        """Record a log entry. ``created_at`` falls back to the entry's game
        timestamp, then to now."""
        if created_at is None:
            if entry.prc_timestamp is not None:
                created_at = datetime.datetime.fromtimestamp(entry.prc_timestamp, datetime.timezone.utc)
            else:
                created_at = _utcnow()
        self._rows.append(StoredLog(server_id, entry, created_at))

    def extend(self, server_id: str, entries: Iterable[CommandLogEntry]) -> None:
        for entry in entries:
            self.add(server_id, entry)

    def set_authorized_user_ids(self, server_id: str, user_ids: Iterable[str]) -> None:
        self._authorized[server_id] = [str(uid) for uid in user_ids]

    async def fetch_command_logs(
        self,
        server_id: str,
        *,
        since: datetime.datetime,
        player_id: str | None = None,
        limit: int | None = None,
    ) -> List[CommandLogEntry]:
        rows = [
            row for row in self._rows
            if row.server_id == server_id
            and row.created_at >= since
            and (player_id is None or row.entry.player_id == player_id)
        ]
        rows.sort(key=lambda row: row.created_at, reverse=True)
        if limit is not None:
            rows = rows[:limit]
        return [row.entry for row in rows]

    async def fetch_authorized_user_ids(self, server_id: str) -> List[str]:
        return list(self._authorized.get(server_id, []))


class InMemoryCommandQueue:
    """Priority queue of commands waiting to be sent to a game server.

    Higher priority is dequeued first; equal priorities keep insertion order.
    """

    def __init__(self) -> None:
        self._items: List[Tuple[int, int, QueuedCommand]] = []
        self._counter = 0
        self._lock = asyncio.Lock()

    async def enqueue(self, command: QueuedCommand) -> None:
        async with self._lock:
            self._items.append((-command.priority, self._counter, command))
            self._counter += 1
            self._items.sort(key=lambda item: (item[0], item[1]))

    async def dequeue(self) -> QueuedCommand | None:
        async with self._lock:
            if not self._items:
                return None
            return self._items.pop(0)[2]

    @property
    def pending(self) -> List[QueuedCommand]:
        return [item[2] for item in self._items]

    def __len__(self) -> int:
        return len(self._items)


class InMemoryAuditLog:
    """Append-only list of security events."""

    def __init__(self) -> None:
        self.events: List[SecurityEvent] = []

    async def record(self, event: SecurityEvent) -> None:
        self.events.append(event)


class RecordingAlertNotifier:
    """Alert notifier that keeps every batch it was asked to send."""

    def __init__(self) -> None:
        self.alerts: List[Tuple[str, List[Detection]]] = []

    async def notify(self, server_id: str, detections: Sequence[Detection]) -> None:
        self.alerts.append((server_id, list(detections)))
