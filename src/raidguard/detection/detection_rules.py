"""Raid detection heuristics.

Each rule is an independent pass over a batch of command logs. The detector
runs them in sequence and concatenates their findings, so adding a heuristic
means adding a class here and registering it, never editing another rule.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterable, List, Protocol, Sequence, Tuple

from raidguard.datatypes.command_datatypes import CommandLogEntry, ParsedCommand
from raidguard.datatypes.detection_datatypes import UNKNOWN_USER_NAME, Detection, DetectionType
from raidguard.configuration.raid_settings import DEFAULT_MASS_ACTION_KEYWORDS, DEFAULT_SENSITIVE_COMMANDS
from raidguard.util.command_parsing import has_mass_target, normalize_verbs, parse_command


class SensitiveCommandClassifier:
    """Decides whether a command is a moderation-level ("sensitive") action.

    Matching is on the parsed verb only, against a configured verb set.
    """

    def __init__(self, verbs: Iterable[str] = DEFAULT_SENSITIVE_COMMANDS) -> None:
        self._verbs = normalize_verbs(verbs)

    @property
    def verbs(self) -> FrozenSet[str]:
        return self._verbs

    def classify(self, command: str) -> ParsedCommand | None:
        """Return the parsed command if it is sensitive, otherwise None."""
        parsed = parse_command(command)
        if parsed is None or parsed.verb not in self._verbs:
            return None
        return parsed

    def is_sensitive(self, command: str) -> bool:
        return self.classify(command) is not None


@dataclass(frozen=True, slots=True)
class ScanContext:
    """Per-scan inputs shared by every rule.

    ``authorized_user_ids`` is None when the caller supplied no allow-list.
    """
    classifier: SensitiveCommandClassifier
    authorized_user_ids: FrozenSet[str] | None = None

    def is_authorized(self, player_id: str) -> bool:
        if not self.authorized_user_ids:
            return False
        return player_id in self.authorized_user_ids


class DetectionRule(Protocol):
    detection_type: str

    def evaluate(self, entries: Sequence[CommandLogEntry], context: ScanContext) -> List[Detection]:
        ...


def _display_name(entry: CommandLogEntry) -> str:
    return entry.player_name or UNKNOWN_USER_NAME


class HighFrequencyRule:
    """Flags an actor issuing ``threshold`` sensitive commands within ``window_seconds``.

    The window is inclusive: six commands stamped ``t-5 .. t`` fall inside a
    five second window. At most one finding per actor per scan.
    """

    detection_type = DetectionType.HIGH_FREQUENCY

    def __init__(self, threshold: int = 6, window_seconds: int = 5) -> None:
        self.threshold = max(1, int(threshold))
        self.window_seconds = max(0, int(window_seconds))

    def evaluate(self, entries: Sequence[CommandLogEntry], context: ScanContext) -> List[Detection]:
        by_player: Dict[str, List[CommandLogEntry]] = defaultdict(list)
        for entry in entries:
            if not entry.player_id or entry.prc_timestamp is None:
                continue
            if context.classifier.is_sensitive(entry.command):
                by_player[entry.player_id].append(entry)

        detections: List[Detection] = []
        for player_id, commands in by_player.items():
            ordered = sorted(commands, key=lambda e: e.prc_timestamp)
            window = self._first_burst(ordered)
            if window is None:
                continue
            detections.append(
                Detection(
                    type=self.detection_type,
                    user_id=player_id,
                    user_name=_display_name(window[-1]),
                    details=f"High frequency detected: {len(window)} commands in {self.window_seconds} seconds",
                    pattern=", ".join(e.command for e in window),
                    count=len(window),
                    window_seconds=self.window_seconds,
                )
            )
        return detections

    def _first_burst(self, ordered: List[CommandLogEntry]) -> List[CommandLogEntry] | None:
        start = 0
        for end, entry in enumerate(ordered):
            while entry.prc_timestamp - ordered[start].prc_timestamp > self.window_seconds:
                start += 1
            if end - start + 1 >= self.threshold:
                # Grow the burst to every command still inside the window.
                stop = end + 1
                while stop < len(ordered) and ordered[stop].prc_timestamp - ordered[start].prc_timestamp <= self.window_seconds:
                    stop += 1
                return ordered[start:stop]
        return None


class MassActionRule:
    """Flags sensitive commands aimed at the whole server, e.g. ``:ban all``.

    A single command is enough. Repeats of the same command by the same actor
    within one scan produce one finding.
    """

    detection_type = DetectionType.MASS_ACTION

    def __init__(self, keywords: Iterable[str] = DEFAULT_MASS_ACTION_KEYWORDS) -> None:
        self.keywords: Tuple[str, ...] = tuple(str(k).strip().lower() for k in keywords if str(k).strip())

    def evaluate(self, entries: Sequence[CommandLogEntry], context: ScanContext) -> List[Detection]:
        detections: List[Detection] = []
        seen: set[Tuple[str, str]] = set()
        for entry in entries:
            parsed = context.classifier.classify(entry.command)
            if parsed is None or not has_mass_target(parsed, self.keywords):
                continue
            key = (entry.player_id, entry.command.strip())
            if key in seen:
                continue
            seen.add(key)
            detections.append(
                Detection(
                    type=self.detection_type,
                    user_id=entry.player_id,
                    user_name=_display_name(entry),
                    details=f"Mass action detected: {entry.command}",
                    pattern=entry.command,
                )
            )
        return detections


class UnauthorizedRule:
    """Flags actors running sensitive commands without being allow-listed.

    With no allow-list every actor is unauthorized. One finding per actor,
    carrying the number of offending commands and the first one seen.
    """

    detection_type = DetectionType.UNAUTHORIZED

    def evaluate(self, entries: Sequence[CommandLogEntry], context: ScanContext) -> List[Detection]:
        offenders: Dict[str, List[CommandLogEntry]] = {}
        for entry in entries:
            if not entry.player_id or not context.classifier.is_sensitive(entry.command):
                continue
            if context.is_authorized(entry.player_id):
                continue
            offenders.setdefault(entry.player_id, []).append(entry)

        detections: List[Detection] = []
        for player_id, commands in offenders.items():
            first = commands[0]
            details = f"Unauthorized command execution: {first.command}"
            if len(commands) > 1:
                details += f" (+{len(commands) - 1} more)"
            detections.append(
                Detection(
                    type=self.detection_type,
                    user_id=player_id,
                    user_name=_display_name(first),
                    details=details,
                    pattern=first.command,
                    count=len(commands),
                )
            )
        return detections
