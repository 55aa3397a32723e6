"""Periodic raid scanning across game servers.

Runs an asyncio background task that, on a fixed interval, pulls each
server's recent command logs, runs the raid detector and alerts on findings
that were not already reported within the cooldown.
"""

from __future__ import annotations

import asyncio
import datetime
from typing import TYPE_CHECKING, Callable, Iterable, List

from raidguard.configuration.raid_settings import RaidMonitorSettings
from raidguard.datatypes.detection_datatypes import Detection
from raidguard.datatypes.rollback_datatypes import SecurityEvent
from raidguard.detection.raid_detector import RaidDetector
from raidguard.services.collaborators import AlertNotifier, AuditLog, CommandLogStore
from raidguard.util.logger import get_logger
from raidguard.util.ttl_cache import TTLCache

if TYPE_CHECKING:
    from raidguard.configuration.app_configuration import AppConfig

logger = get_logger("raid_monitor")

DETECTION_EVENT = "RAID_DETECTED"


def _utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


def alert_key(server_id: str, detection: Detection) -> str:
    return f"{server_id}:{detection.type}:{detection.user_id}"


class RaidMonitor:
    """
    Background scheduler scanning every server for raids.

    Args:
        log_store: Source of command logs and allow-lists.
        notifier: Receives new findings per server.
        server_ids: Callable returning the servers to scan on each tick.
        detector: Detector to run; a default one is built when omitted.
        audit_log: Optional sink for RAID_DETECTED security events.
        settings: Interval, lookback and cooldown.
        alert_cache: Remembers recently alerted findings. Built from
            ``settings.alert_cooldown_seconds`` when omitted.
        clock: Returns the current UTC time; injectable for tests.
    """

    def __init__(
        self,
        log_store: CommandLogStore,
        notifier: AlertNotifier,
        server_ids: Callable[[], Iterable[str]],
        detector: RaidDetector | None = None,
        audit_log: AuditLog | None = None,
        settings: RaidMonitorSettings | None = None,
        alert_cache: TTLCache | None = None,
        clock: Callable[[], datetime.datetime] = _utcnow,
    ) -> None:
        self.log_store = log_store
        self.notifier = notifier
        self.detector = detector or RaidDetector()
        self.audit_log = audit_log
        self.settings = settings or RaidMonitorSettings()
        self.alert_cache = alert_cache if alert_cache is not None else TTLCache(self.settings.alert_cooldown_seconds)
        self._server_ids = server_ids
        self._clock = clock
        self._task: asyncio.Task | None = None

    @classmethod
    def from_config(
        cls,
        config: "AppConfig",
        log_store: CommandLogStore,
        notifier: AlertNotifier,
        server_ids: Callable[[], Iterable[str]],
        audit_log: AuditLog | None = None,
    ) -> "RaidMonitor":
        return cls(
            log_store,
            notifier,
            server_ids,
            detector=RaidDetector.from_config(config),
            audit_log=audit_log,
            settings=config.raid_monitor,
        )

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def scan_server(self, server_id: str) -> List[Detection]:
        """Scan one server and alert on new findings. Returns the new findings."""
        since = self._clock() - datetime.timedelta(seconds=self.settings.scan_lookback_seconds)
        logs = await self.log_store.fetch_command_logs(server_id, since=since)
        if not logs:
            return []

        authorized = await self.log_store.fetch_authorized_user_ids(server_id)
        detections = self.detector.scan(logs, authorized)

        fresh = [d for d in detections if alert_key(server_id, d) not in self.alert_cache]

        if not fresh:
            if detections:
                logger.debug("[RAID MONITOR] %d finding(s) on server %s still in cooldown", len(detections), server_id)
            return []

        logger.warning("[RAID MONITOR] %d new finding(s) on server %s", len(fresh), server_id)
        await self.notifier.notify(server_id, fresh)

        # Only delivered alerts start a cooldown; a failed notify retries next scan.
        for detection in fresh:
            self.alert_cache.set(alert_key(server_id, detection), detection)

        if self.audit_log is not None:
            for detection in fresh:
                await self._record_detection(server_id, detection)
        return fresh

    async def _record_detection(self, server_id: str, detection: Detection) -> None:
        try:
            await self.audit_log.record(
                SecurityEvent(
                    event=DETECTION_EVENT,
                    user_id=detection.user_id,
                    details=f"{detection.type} on server {server_id}: {detection.details}",
                )
            )
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            logger.warning(
                "[RAID MONITOR] Failed to record %s for user %s on server %s: %s",
                detection.type, detection.user_id, server_id, exc,
            )

    async def scan_all(self) -> None:
        """Scan every server once; one failing server does not stop the rest."""
        for server_id in list(self._server_ids()):
            try:
                await self.scan_server(server_id)
            except asyncio.CancelledError:
                raise
            except Exception as exc:
                logger.warning("[RAID MONITOR] Failed to scan server %s: %s", server_id, exc)
        self.alert_cache.purge_expired()

    async def _run_loop(self, interval: float) -> None:
        logger.info("[RAID MONITOR] Starting periodic scan (interval=%.1fs)", interval)
        try:
            while True:
                try:
                    await self.scan_all()
                except asyncio.CancelledError:
                    raise
                except Exception as exc:
                    logger.error("[RAID MONITOR] Unexpected error during scan: %s", exc)
                await asyncio.sleep(interval)
        except asyncio.CancelledError:
            logger.info("[RAID MONITOR] Periodic scan cancelled")
            raise

    def start(self) -> None:
        """Start the background scan task if not already running."""
        if self.running:
            logger.warning("[RAID MONITOR] Scan task already running")
            return
        self._task = asyncio.create_task(self._run_loop(self.settings.interval_seconds))

    async def shutdown(self) -> None:
        """Cancel the background task and wait for it to finish."""
        if self._task and not self._task.done():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        self._task = None
        logger.info("[RAID MONITOR] Shutdown complete")
