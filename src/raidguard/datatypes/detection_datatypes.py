"""
Raid detection result types.

``Detection.type`` is a plain string tag rather than an Enum so that new
heuristics can introduce their own tags without touching this module.
"""

from __future__ import annotations

from dataclasses import dataclass


class DetectionType:
    """Tags used by the built-in detection rules."""

    HIGH_FREQUENCY = "HIGH_FREQUENCY"
    MASS_ACTION = "MASS_ACTION"
    UNAUTHORIZED = "UNAUTHORIZED"


UNKNOWN_USER_NAME = "Unknown"


@dataclass(frozen=True, slots=True)
class Detection:
    """A single raid finding produced by a detection rule.

    Attributes:
        type: Tag of the rule that produced the finding (see DetectionType).
        user_id: The offending actor's player ID.
        user_name: Display name of the actor, "Unknown" when not logged.
        details: Human readable summary for operators.
        pattern: The command text that matched, or the joined commands of a window.
        count: Number of commands backing the finding.
        window_seconds: Time window of the evidence, for time-based rules.
    """
    type: str
    user_id: str
    user_name: str = UNKNOWN_USER_NAME
    details: str = ""
    pattern: str | None = None
    count: int = 1
    window_seconds: int | None = None
