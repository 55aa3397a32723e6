"""
Command log data structures.

This module defines the value objects describing commands issued on an ERLC
server: the log entries fed to the raid detector and the rollback planner, and
the parsed form of a raw command string.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Tuple


def _first_present(mapping: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        value = mapping.get(key)
        if value is not None:
            return value
    return None


def _coerce_timestamp(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


@dataclass(frozen=True, slots=True)
class CommandLogEntry:
    """A single command issued on a game server.

    Attributes:
        player_id: Identifier of the actor who issued the command. Opaque string.
        command: Raw command text, usually ``:verb [args...]``. May be empty.
        prc_timestamp: Unix seconds reported by the game server, if known.
        id: Identifier of the stored log row, used for rollback traceability.
        player_name: Display name of the actor, if known.
    """
    player_id: str
    command: str
    prc_timestamp: int | None = None
    id: str = ""
    player_name: str | None = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "CommandLogEntry":
        """Build an entry from a raw log record.

        Accepts both the camelCase keys used by the game server API and
        snake_case keys. Missing fields become empty strings or ``None``.
        """
        player_id = _first_present(data, "playerId", "player_id")
        command = _first_present(data, "command")
        player_name = _first_present(data, "playerName", "player_name")
        log_id = _first_present(data, "id")
        return cls(
            player_id=str(player_id) if player_id is not None else "",
            command=str(command) if command is not None else "",
            prc_timestamp=_coerce_timestamp(_first_present(data, "prcTimestamp", "prc_timestamp")),
            id=str(log_id) if log_id is not None else "",
            player_name=str(player_name) if player_name is not None else None,
        )


@dataclass(frozen=True, slots=True)
class RollbackLogEntry:
    """The minimal ``{id, command}`` view of a log row used for rollbacks."""
    id: str
    command: str

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "RollbackLogEntry":
        log_id = data.get("id")
        command = data.get("command")
        return cls(
            id=str(log_id) if log_id is not None else "",
            command=str(command) if command is not None else "",
        )


@dataclass(frozen=True, slots=True)
class ParsedCommand:
    """A command string split into its verb and arguments.

    Attributes:
        raw: The original command text, untouched.
        verb: Lower-cased verb including the sigil, e.g. ``":ban"``.
        args: Remaining whitespace-separated tokens with case preserved.
    """
    raw: str
    verb: str
    args: Tuple[str, ...] = ()

    @property
    def target(self) -> str | None:
        """The first argument, which ERLC commands treat as the target."""
        return self.args[0] if self.args else None
