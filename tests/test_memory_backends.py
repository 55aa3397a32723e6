"""Tests for the in-memory collaborator implementations."""

import datetime

import pytest

from raidguard.datatypes.command_datatypes import CommandLogEntry
from raidguard.datatypes.rollback_datatypes import QueuedCommand, SecurityEvent
from raidguard.services.collaborators import AlertNotifier, AuditLog, CommandLogStore, CommandQueue
from raidguard.services.memory_backends import (
    InMemoryAuditLog,
    InMemoryCommandLogStore,
    InMemoryCommandQueue,
    RecordingAlertNotifier,
)

UTC = datetime.timezone.utc
BASE = datetime.datetime(2024, 1, 1, tzinfo=UTC)


def test_backends_satisfy_protocols():
    assert isinstance(InMemoryCommandLogStore(), CommandLogStore)
    assert isinstance(InMemoryCommandQueue(), CommandQueue)
    assert isinstance(InMemoryAuditLog(), AuditLog)
    assert isinstance(RecordingAlertNotifier(), AlertNotifier)


@pytest.mark.asyncio
async def test_log_store_filters_and_orders_newest_first():
    store = InMemoryCommandLogStore()
    for minute, (player, command) in enumerate([("a", ":ban x"), ("b", ":kick y"), ("a", ":unmod z")]):
        store.add("srv", CommandLogEntry(player, command, id=str(minute)), created_at=BASE + datetime.timedelta(minutes=minute))
    store.add("other", CommandLogEntry("a", ":ban w"), created_at=BASE)

    everything = await store.fetch_command_logs("srv", since=BASE)
    only_a = await store.fetch_command_logs("srv", since=BASE, player_id="a")
    limited = await store.fetch_command_logs("srv", since=BASE, limit=1)
    recent = await store.fetch_command_logs("srv", since=BASE + datetime.timedelta(minutes=1))

    assert [e.id for e in everything] == ["2", "1", "0"]
    assert [e.command for e in only_a] == [":unmod z", ":ban x"]
    assert [e.id for e in limited] == ["2"]
    assert [e.id for e in recent] == ["2", "1"]


@pytest.mark.asyncio
async def test_log_store_uses_game_timestamp_when_no_created_at():
    store = InMemoryCommandLogStore()
    stamp = int(BASE.timestamp())
    store.extend("srv", [CommandLogEntry("a", ":ban x", prc_timestamp=stamp)])

    assert await store.fetch_command_logs("srv", since=BASE) != []
    assert await store.fetch_command_logs("srv", since=BASE + datetime.timedelta(seconds=1)) == []


@pytest.mark.asyncio
async def test_authorized_ids_per_server():
    store = InMemoryCommandLogStore()
    store.set_authorized_user_ids("srv", [1, "2"])

    assert await store.fetch_authorized_user_ids("srv") == ["1", "2"]
    assert await store.fetch_authorized_user_ids("unknown") == []


@pytest.mark.asyncio
async def test_queue_orders_by_priority_then_insertion():
    queue = InMemoryCommandQueue()
    await queue.enqueue(QueuedCommand("srv", ":m low", priority=1, requested_by="x"))
    await queue.enqueue(QueuedCommand("srv", ":unban a", priority=10, requested_by="x"))
    await queue.enqueue(QueuedCommand("srv", ":unban b", priority=10, requested_by="x"))

    drained = [await queue.dequeue() for _ in range(3)]

    assert [c.command for c in drained] == [":unban a", ":unban b", ":m low"]
    assert await queue.dequeue() is None


@pytest.mark.asyncio
async def test_audit_log_and_notifier_record():
    audit = InMemoryAuditLog()
    notifier = RecordingAlertNotifier()

    await audit.record(SecurityEvent("RAID_ROLLBACK", "admin", "details"))
    await notifier.notify("srv", ())

    assert audit.events[0].created_at.tzinfo is not None
    assert notifier.alerts == [("srv", [])]
