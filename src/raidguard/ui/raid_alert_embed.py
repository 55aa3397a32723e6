"""
Embed creation for raid alerts.

Turns a batch of detections for one server into a single Discord embed so a
burst of findings produces one alert message rather than one per finding.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Sequence

import discord

from raidguard.datatypes.detection_datatypes import Detection, DetectionType

# Discord embed limits. Anything larger is rejected outright.
MAX_EMBED_FIELDS = 25
MAX_FIELD_VALUE_CHARS = 1024
MAX_EMBED_CHARS = 6000
MAX_PATTERN_CHARS = 200
MAX_DETAILS_CHARS = 300

# Room kept free for the "N more finding(s) not shown" footer.
FOOTER_RESERVE_CHARS = 64

DETECTION_TITLES = {
    DetectionType.HIGH_FREQUENCY: "High frequency",
    DetectionType.MASS_ACTION: "Mass action",
    DetectionType.UNAUTHORIZED: "Unauthorized command",
}


def _shorten(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return text[:limit] + "..."


def describe_detection(detection: Detection) -> str:
    """Render the body of one detection field, clipped to Discord's field limit."""
    lines = [f"**Player:** {detection.user_name} (`{detection.user_id}`)"]
    if detection.details:
        lines.append(f"**Details:** {_shorten(detection.details, MAX_DETAILS_CHARS)}")
    if detection.pattern:
        lines.append(f"**Command:** `{_shorten(detection.pattern, MAX_PATTERN_CHARS)}`")
    if detection.count > 1:
        lines.append(f"**Commands:** {detection.count}")
    value = "\n".join(lines)
    if len(value) > MAX_FIELD_VALUE_CHARS:
        value = value[:MAX_FIELD_VALUE_CHARS - 3] + "..."
    return value


def build_raid_alert_embed(server_id: str, detections: Sequence[Detection]) -> discord.Embed:
    """
    Create the raid alert embed for a server.

    Args:
        server_id: Game server the detections were found on.
        detections: Findings to list, one field each.

    Returns:
        discord.Embed: Formatted embed. Findings that would push it past
        Discord's field or size limits are counted in the footer.
    """
    embed = discord.Embed(
        title="🚨 Possible Raid Detected",
        description=f"{len(detections)} suspicious finding(s) on server `{server_id}`.",
        color=discord.Color.red(),
        timestamp=datetime.now(timezone.utc),
    )

    budget = MAX_EMBED_CHARS - FOOTER_RESERVE_CHARS
    shown = 0
    for idx, detection in enumerate(detections[:MAX_EMBED_FIELDS], 1):
        title = DETECTION_TITLES.get(detection.type, detection.type.replace("_", " ").capitalize())
        name = f"#{idx}: {title}"
        value = describe_detection(detection)
        if len(embed) + len(name) + len(value) > budget:
            break
        embed.add_field(name=name, value=value, inline=False)
        shown += 1

    omitted = len(detections) - shown
    if omitted > 0:
        embed.set_footer(text=f"{omitted} more finding(s) not shown")
    return embed
