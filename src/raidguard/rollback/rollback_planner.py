"""Computes the counter-commands that undo previously executed commands."""

from __future__ import annotations

from types import MappingProxyType
from typing import FrozenSet, Iterable, List, Mapping, Union

from raidguard.datatypes.command_datatypes import CommandLogEntry, RollbackLogEntry
from raidguard.datatypes.rollback_datatypes import ReversalAction
from raidguard.util.command_parsing import normalize_verb, parse_command
from raidguard.util.logger import get_logger

logger = get_logger("rollback_planner")

# Grant verbs (":admin", ":mod") have no entry, so grants are never reversed.
INVERSE_VERBS: Mapping[str, str] = MappingProxyType({
    ":ban": ":unban",
    ":unban": ":ban",
    ":unadmin": ":admin",
    ":unmod": ":mod",
})

LogEntry = Union[RollbackLogEntry, CommandLogEntry]


class RollbackPlanner:
    """
    Maps each invertible log entry to a ReversalAction.

    The verb table is plain data; pass ``inverse_verbs`` to extend or replace
    it. Planning is pure and keeps input order.
    """

    def __init__(self, inverse_verbs: Mapping[str, str] | None = None) -> None:
        table = INVERSE_VERBS if inverse_verbs is None else inverse_verbs
        self._inverse_verbs = {normalize_verb(k): normalize_verb(v) for k, v in table.items()}

    @property
    def invertible_verbs(self) -> FrozenSet[str]:
        return frozenset(self._inverse_verbs)

    def plan_for(self, entry: LogEntry) -> ReversalAction | None:
        """Return the reversal for a single entry, or None if it cannot be reversed."""
        if not entry.command:
            return None

        parsed = parse_command(entry.command)
        if parsed is None or parsed.target is None:
            return None

        inverse = self._inverse_verbs.get(parsed.verb)
        if inverse is None:
            return None

        return ReversalAction(
            original_log_id=entry.id,
            command=f"{inverse} {parsed.target}",
            reason=f"Rollback of {entry.command}",
        )

    def calculate_reversals(self, logs: Iterable[LogEntry]) -> List[ReversalAction]:
        """
        Compute reversal commands for a batch of logs.

        Entries with an empty command, no target, or a verb outside the table
        are skipped silently.

        Args:
            logs: Log entries, already filtered by time by the caller.

        Returns:
            One ReversalAction per reversible entry, in input order.
        """
        reversals: List[ReversalAction] = []
        skipped = 0
        for entry in logs:
            action = self.plan_for(entry)
            if action is None:
                skipped += 1
                continue
            reversals.append(action)

        logger.debug("[ROLLBACK PLANNER] Planned %d reversal(s), skipped %d entries", len(reversals), skipped)
        return reversals
