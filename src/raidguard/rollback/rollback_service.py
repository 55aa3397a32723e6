"""
Rollback workflow: undo the recent commands of one actor on one server.

Fetches the actor's command logs, plans reversals, queues them at high
priority for the game server and records a security event. Permission checks
are the caller's job.
"""

from __future__ import annotations

import datetime
from typing import TYPE_CHECKING, Callable

from raidguard.configuration.raid_settings import RollbackSettings
from raidguard.datatypes.rollback_datatypes import QueuedCommand, RollbackResult, SecurityEvent
from raidguard.rollback.rollback_planner import RollbackPlanner
from raidguard.services.collaborators import AuditLog, CommandLogStore, CommandQueue
from raidguard.util.errors import RollbackError
from raidguard.util.logger import get_logger

if TYPE_CHECKING:
    from raidguard.configuration.app_configuration import AppConfig

logger = get_logger("rollback_service")

ROLLBACK_EVENT = "RAID_ROLLBACK"


def _utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


class RollbackService:
    """
    Coordinates a rollback across the log store, command queue and audit log.

    Args:
        log_store: Source of command logs.
        command_queue: Receives the reversal commands.
        audit_log: Receives the RAID_ROLLBACK security event.
        planner: Planner used to compute reversals.
        settings: Lookback window, fetch limits and queue priority.
        clock: Returns the current UTC time; injectable for tests.
    """

    def __init__(
        self,
        log_store: CommandLogStore,
        command_queue: CommandQueue,
        audit_log: AuditLog,
        planner: RollbackPlanner | None = None,
        settings: RollbackSettings | None = None,
        clock: Callable[[], datetime.datetime] = _utcnow,
    ) -> None:
        self.log_store = log_store
        self.command_queue = command_queue
        self.audit_log = audit_log
        self.planner = planner or RollbackPlanner()
        self.settings = settings or RollbackSettings()
        self._clock = clock

    @classmethod
    def from_config(
        cls,
        config: "AppConfig",
        log_store: CommandLogStore,
        command_queue: CommandQueue,
        audit_log: AuditLog,
    ) -> "RollbackService":
        return cls(log_store, command_queue, audit_log, settings=config.rollback)

    async def rollback_actor(
        self,
        server_id: str,
        target_user_id: str,
        requested_by: str,
        since: datetime.datetime | None = None,
    ) -> RollbackResult:
        """
        Reverse the commands ``target_user_id`` ran on ``server_id``.

        Without ``since`` the lookback is ``default_lookback_hours`` and at
        most ``default_log_limit`` logs are read. An explicit ``since`` raises
        the limit to ``explicit_log_limit``.

        Raises:
            ValueError: If ``server_id`` or ``target_user_id`` is blank.
            RollbackError: If fetching, queueing or auditing fails.
        """
        if not server_id or not target_user_id:
            raise ValueError("server_id and target_user_id are required")

        if since is None:
            start = self._clock() - datetime.timedelta(hours=self.settings.default_lookback_hours)
            limit = self.settings.default_log_limit
        else:
            start = since
            limit = self.settings.explicit_log_limit

        result = RollbackResult(server_id=server_id, target_user_id=target_user_id)

        try:
            logs = await self.log_store.fetch_command_logs(
                server_id, since=start, player_id=target_user_id, limit=limit
            )
        except Exception as exc:
            logger.error("[ROLLBACK] Failed to fetch logs for %s on server %s: %s", target_user_id, server_id, exc)
            raise RollbackError(
                f"Could not fetch logs: {exc}", server_id=server_id, target_user_id=target_user_id
            ) from exc

        if not logs:
            logger.info("[ROLLBACK] No logs for %s on server %s since %s", target_user_id, server_id, start.isoformat())
            result.message = "No logs found"
            return result

        result.reversals = self.planner.calculate_reversals(logs)

        for reversal in result.reversals:
            queued = QueuedCommand(
                server_id=server_id,
                command=reversal.command,
                priority=self.settings.command_priority,
                requested_by=requested_by,
                target_user_id=target_user_id,
            )
            try:
                await self.command_queue.enqueue(queued)
            except Exception as exc:
                logger.error(
                    "[ROLLBACK] Failed to queue %r for server %s after %d command(s): %s",
                    reversal.command, server_id, result.queued, exc,
                )
                raise RollbackError(
                    f"Could not queue reversal {reversal.command!r}: {exc}",
                    server_id=server_id,
                    target_user_id=target_user_id,
                    queued=result.queued,
                ) from exc
            result.queued += 1

        details = f"Rolled back {len(result.reversals)} actions for target {target_user_id} on server {server_id}"
        try:
            await self.audit_log.record(SecurityEvent(event=ROLLBACK_EVENT, user_id=requested_by, details=details))
        except Exception as exc:
            logger.error("[ROLLBACK] Failed to record security event for server %s: %s", server_id, exc)
            raise RollbackError(
                f"Could not record security event: {exc}",
                server_id=server_id,
                target_user_id=target_user_id,
                queued=result.queued,
            ) from exc

        result.message = details
        logger.info("[ROLLBACK] %s (requested by %s, %d log(s) scanned)", details, requested_by, len(logs))
        return result
