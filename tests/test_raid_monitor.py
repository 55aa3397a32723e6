"""Tests for the periodic RaidMonitor."""

import asyncio
import datetime
from unittest.mock import AsyncMock, MagicMock

import pytest

from raidguard.configuration.raid_settings import RaidMonitorSettings
from raidguard.datatypes.command_datatypes import CommandLogEntry
from raidguard.datatypes.detection_datatypes import Detection, DetectionType
from raidguard.services.memory_backends import InMemoryAuditLog, InMemoryCommandLogStore, RecordingAlertNotifier
from raidguard.services.raid_monitor import DETECTION_EVENT, RaidMonitor, alert_key
from raidguard.util.ttl_cache import TTLCache

NOW = datetime.datetime(2024, 5, 1, 12, 0, tzinfo=datetime.timezone.utc)


class FakeClock:
    def __init__(self) -> None:
        self.value = 0.0

    def __call__(self) -> float:
        return self.value


def _seconds_ago(seconds: int) -> datetime.datetime:
    return NOW - datetime.timedelta(seconds=seconds)


@pytest.fixture()
def store() -> InMemoryCommandLogStore:
    store = InMemoryCommandLogStore()
    store.set_authorized_user_ids("srv", ["mod-1"])
    store.add("srv", CommandLogEntry("raider", ":ban all", prc_timestamp=1), created_at=_seconds_ago(5))
    store.add("srv", CommandLogEntry("mod-1", ":kick troll", prc_timestamp=2), created_at=_seconds_ago(4))
    store.add("srv", CommandLogEntry("ghost", ":ban old", prc_timestamp=0), created_at=_seconds_ago(600))
    return store


@pytest.fixture()
def notifier() -> RecordingAlertNotifier:
    return RecordingAlertNotifier()


@pytest.fixture()
def cache_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def monitor(store, notifier, cache_clock) -> RaidMonitor:
    return RaidMonitor(
        store,
        notifier,
        server_ids=lambda: ["srv"],
        audit_log=InMemoryAuditLog(),
        alert_cache=TTLCache(300, clock=cache_clock),
        clock=lambda: NOW,
    )


@pytest.mark.asyncio
async def test_scan_server_alerts_recent_findings(monitor, notifier):
    fresh = await monitor.scan_server("srv")

    types = {(d.type, d.user_id) for d in fresh}
    assert types == {(DetectionType.MASS_ACTION, "raider"), (DetectionType.UNAUTHORIZED, "raider")}
    assert notifier.alerts == [("srv", fresh)]
    assert [e.event for e in monitor.audit_log.events] == [DETECTION_EVENT, DETECTION_EVENT]


@pytest.mark.asyncio
async def test_repeat_findings_suppressed_until_cooldown_expires(monitor, notifier, cache_clock):
    await monitor.scan_server("srv")
    assert await monitor.scan_server("srv") == []
    assert len(notifier.alerts) == 1

    cache_clock.value = 301
    again = await monitor.scan_server("srv")

    assert len(again) == 2
    assert len(notifier.alerts) == 2


@pytest.mark.asyncio
async def test_no_logs_no_alert(notifier):
    monitor = RaidMonitor(InMemoryCommandLogStore(), notifier, server_ids=lambda: ["srv"], clock=lambda: NOW)

    assert await monitor.scan_server("srv") == []
    assert notifier.alerts == []


@pytest.mark.asyncio
async def test_scan_all_continues_after_server_failure(notifier):
    store = MagicMock()
    store.fetch_command_logs = AsyncMock(side_effect=[RuntimeError("offline"), [CommandLogEntry("x", ":ban all", 1)]])
    store.fetch_authorized_user_ids = AsyncMock(return_value=["x"])
    monitor = RaidMonitor(store, notifier, server_ids=lambda: ["bad", "good"], clock=lambda: NOW)

    await monitor.scan_all()

    assert [server for server, _ in notifier.alerts] == ["good"]


@pytest.mark.asyncio
async def test_lookback_follows_settings(notifier):
    store = MagicMock()
    store.fetch_command_logs = AsyncMock(return_value=[])
    settings = RaidMonitorSettings({"scan_lookback_seconds": 30})
    monitor = RaidMonitor(store, notifier, server_ids=lambda: [], settings=settings, clock=lambda: NOW)

    await monitor.scan_server("srv")

    store.fetch_command_logs.assert_awaited_once_with("srv", since=_seconds_ago(30))


def test_alert_key_format():
    detection = Detection(type=DetectionType.MASS_ACTION, user_id="raider")
    assert alert_key("srv", detection) == "srv:MASS_ACTION:raider"


def test_default_cache_uses_cooldown_setting(store, notifier):
    settings = RaidMonitorSettings({"alert_cooldown_seconds": 42})
    monitor = RaidMonitor(store, notifier, server_ids=lambda: [], settings=settings)

    assert monitor.alert_cache.ttl_seconds == 42


@pytest.mark.asyncio
async def test_start_and_shutdown(monitor, notifier):
    monitor.settings = RaidMonitorSettings({"interval_seconds": 0.01})
    monitor.start()
    assert monitor.running

    for _ in range(50):
        if notifier.alerts:
            break
        await asyncio.sleep(0.01)

    await monitor.shutdown()

    assert not monitor.running
    assert notifier.alerts


@pytest.mark.asyncio
async def test_start_twice_keeps_single_task(monitor):
    monitor.settings = RaidMonitorSettings({"interval_seconds": 60})
    monitor.start()
    task = monitor._task
    monitor.start()

    assert monitor._task is task
    await monitor.shutdown()


@pytest.mark.asyncio
async def test_failed_notify_does_not_start_cooldown(store):
    notifier = MagicMock()
    notifier.notify = AsyncMock(side_effect=[RuntimeError("discord down"), None])
    monitor = RaidMonitor(store, notifier, server_ids=lambda: ["srv"], clock=lambda: NOW)

    await monitor.scan_all()
    retried = await monitor.scan_server("srv")

    assert len(retried) == 2
    assert notifier.notify.await_count == 2
    assert "srv:MASS_ACTION:raider" in monitor.alert_cache


@pytest.mark.asyncio
async def test_audit_failure_does_not_drop_remaining_events(store, notifier):
    audit_log = MagicMock()
    audit_log.record = AsyncMock(side_effect=[RuntimeError("db locked"), None])
    monitor = RaidMonitor(store, notifier, server_ids=lambda: ["srv"], audit_log=audit_log, clock=lambda: NOW)

    fresh = await monitor.scan_server("srv")

    assert len(fresh) == 2
    assert audit_log.record.await_count == 2
    assert audit_log.record.await_args.args[0].event == DETECTION_EVENT
