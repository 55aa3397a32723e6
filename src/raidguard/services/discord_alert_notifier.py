"""Delivers raid alerts to a Discord channel per game server."""

from __future__ import annotations

from typing import Mapping, Sequence

import discord

from raidguard.datatypes.detection_datatypes import Detection
from raidguard.ui.raid_alert_embed import build_raid_alert_embed
from raidguard.util.logger import get_logger

logger = get_logger("discord_alert_notifier")


class DiscordAlertNotifier:
    """
    AlertNotifier that posts an embed to each server's raid alert channel.

    Args:
        bot: Connected Discord bot used to resolve channels.
        channel_ids: Map of game server ID to Discord channel ID.
    """

    def __init__(self, bot: discord.Client, channel_ids: Mapping[str, int]) -> None:
        self.bot = bot
        self.channel_ids = dict(channel_ids)

    async def resolve_channel(self, server_id: str) -> discord.abc.Messageable | None:
        """Find the alert channel for ``server_id`` from the cache, then the API."""
        channel_id = self.channel_ids.get(server_id)
        if channel_id is None:
            logger.debug("[RAID ALERT] No alert channel configured for server %s", server_id)
            return None

        channel = self.bot.get_channel(channel_id)
        if channel is None:
            try:
                channel = await self.bot.fetch_channel(channel_id)
            except (discord.NotFound, discord.Forbidden) as exc:
                logger.warning("[RAID ALERT] Cannot access alert channel %s for server %s: %s", channel_id, server_id, exc)
                return None

        if not isinstance(channel, discord.abc.Messageable):
            logger.warning("[RAID ALERT] Channel %s for server %s cannot receive messages", channel_id, server_id)
            return None
        return channel

    async def notify(self, server_id: str, detections: Sequence[Detection]) -> None:
        if not detections:
            return

        channel = await self.resolve_channel(server_id)
        if channel is None:
            return

        embed = build_raid_alert_embed(server_id, detections)
        try:
            await channel.send(embed=embed)
            logger.info("[RAID ALERT] Sent %d finding(s) for server %s", len(detections), server_id)
        except discord.HTTPException as exc:
            logger.error("[RAID ALERT] Failed to send alert for server %s: %s", server_id, exc)
