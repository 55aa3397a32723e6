"""Raid detector: runs the detection rules over a batch of command logs."""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable, List, Sequence, Tuple

from raidguard.configuration.raid_settings import RaidDetectionSettings
from raidguard.datatypes.command_datatypes import CommandLogEntry
from raidguard.datatypes.detection_datatypes import Detection
from raidguard.detection.detection_rules import (
    DetectionRule,
    HighFrequencyRule,
    MassActionRule,
    ScanContext,
    SensitiveCommandClassifier,
    UnauthorizedRule,
)
from raidguard.util.logger import get_logger

if TYPE_CHECKING:
    from raidguard.configuration.app_configuration import AppConfig

logger = get_logger("raid_detector")


def default_rules(settings: RaidDetectionSettings) -> Tuple[DetectionRule, ...]:
    """Build the built-in rule set from configuration."""
    return (
        MassActionRule(settings.mass_action_keywords),
        HighFrequencyRule(settings.high_frequency_threshold, settings.high_frequency_window_seconds),
        UnauthorizedRule(),
    )


class RaidDetector:
    """
    Scans command logs for raid patterns.

    The detector holds only configuration; ``scan`` is a pure function of its
    arguments and is safe to call concurrently.

    Args:
        settings: Verb sets and thresholds. Defaults are used when omitted.
        rules: Explicit rule list, replacing the built-in rules.
    """

    def __init__(
        self,
        settings: RaidDetectionSettings | None = None,
        rules: Sequence[DetectionRule] | None = None,
    ) -> None:
        settings = settings or RaidDetectionSettings()
        self.classifier = SensitiveCommandClassifier(settings.sensitive_commands)
        self._rules: Tuple[DetectionRule, ...] = tuple(rules) if rules is not None else default_rules(settings)

    @classmethod
    def from_config(cls, config: "AppConfig") -> "RaidDetector":
        return cls(config.raid_detection)

    @property
    def rules(self) -> Tuple[DetectionRule, ...]:
        return self._rules

    def scan(
        self,
        logs: Iterable[CommandLogEntry],
        authorized_user_ids: Iterable[str] | None = None,
    ) -> List[Detection]:
        """
        Scan a batch of logs and return every finding.

        An omitted or empty ``authorized_user_ids`` trusts nobody, so every
        sensitive command is reported as unauthorized.

        Args:
            logs: Command log entries in any order. Not modified.
            authorized_user_ids: Player IDs allowed to run sensitive commands.

        Returns:
            List of Detection objects, grouped by rule in rule order.
        """
        entries = tuple(logs)
        if not entries:
            return []

        allowed = frozenset(str(uid) for uid in authorized_user_ids) if authorized_user_ids else None
        context = ScanContext(classifier=self.classifier, authorized_user_ids=allowed)

        detections: List[Detection] = []
        for rule in self._rules:
            try:
                found = rule.evaluate(entries, context)
            except Exception as exc:
                logger.error("[RAID DETECTOR] Rule %s failed: %s", type(rule).__name__, exc, exc_info=True)
                continue
            detections.extend(found)

        if detections:
            logger.warning(
                "[RAID DETECTOR] %d finding(s) in %d log entries: %s",
                len(detections),
                len(entries),
                ", ".join(sorted({d.type for d in detections})),
            )
        else:
            logger.debug("[RAID DETECTOR] No findings in %d log entries", len(entries))
        return detections
