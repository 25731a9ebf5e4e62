"""Direct messages to guild owners and members."""

from __future__ import annotations

import logging
from typing import Any

logger = logging.getLogger(__name__)


class Notifier:
    async def send_dm_to_user(self, user_id: int, guild: Any, message: str) -> None:
        """DM a guild member; unlike owner notices, failures propagate."""

        try:
            member = await guild.fetch_member(user_id)
            await member.send(message)
        except Exception as exc:
            logger.error("Failed to send DM to user %s: %r", user_id, exc)
            raise
        logger.info("Sent DM to user %s in %s", user_id, guild.name)

    async def notify_guild_owner(self, guild: Any, message: str) -> None:
        # A closed DM channel is common and must never break the caller.
        try:
            owner = guild.owner or await guild.fetch_member(guild.owner_id)
            await owner.send(message)
        except Exception as exc:
            logger.error("Could not DM guild owner in %s: %r", guild.name, exc)
            return
        logger.info("Notified guild owner in %s", guild.name)


__all__ = ["Notifier"]
