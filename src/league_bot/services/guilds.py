"""
Guild join/leave handling and startup synchronisation.

Joining a guild creates it on the backend and posts a welcome embed; the
outcome of the backend call decides whether the owner is told about a
failure. The coordinator mirrors every cached guild on startup, one
independent backend call per guild.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Iterable

from league_bot import embeds, errors
from league_bot.models import GuildSnapshot, SyncFailure, SyncResult

logger = logging.getLogger(__name__)

SETUP_FAILURE_MESSAGE = "There was an error setting up the bot. Please contact support."


def find_welcome_channel(guild: Any) -> Any | None:
    """
    Pick the channel for the welcome embed.

    Preference order: a text channel whose name contains "general", the
    first text channel the bot may send to, then the first text channel.
    """

    try:
        channels = sorted(guild.text_channels, key=lambda channel: channel.position)
        for channel in channels:
            if "general" in channel.name.lower():
                return channel

        me = guild.me
        for channel in channels:
            if me is not None and channel.permissions_for(me).send_messages:
                return channel

        if channels:
            return channels[0]
    except Exception:
        logger.exception("Error finding welcome channel in %s", guild.name)
        return None

    logger.warning("No suitable welcome channel found in %s", guild.name)
    return None


class GuildService:
    def __init__(self, backend: Any, notifier: Any, *, dashboard_url: str | None = None) -> None:
        self.backend = backend
        self.notifier = notifier
        self.dashboard_url = dashboard_url
        self._background: set[asyncio.Task] = set()

    async def handle_join(self, guild: Any) -> None:
        """
        Register a newly joined guild with the backend.

        A conflict means the guild is already known and counts as success.
        Permanent failures notify the owner, then propagate; transient
        failures propagate without notifying anyone.
        """

        logger.info("Bot joined guild: %s (%s)", guild.name, guild.id)

        try:
            await self.backend.create_guild(GuildSnapshot.from_guild(guild))
        except Exception as exc:
            classification = errors.classify(exc)
            if classification is errors.ErrorClassification.CONFLICT:
                logger.info("Guild %s already exists (conflict), treating as success", guild.id)
                self._welcome_later(guild)
                return

            logger.error("Error initializing guild %s: %r", guild.id, exc)
            if classification is errors.ErrorClassification.PERMANENT:
                await self.notifier.notify_guild_owner(guild, SETUP_FAILURE_MESSAGE)
            raise

        logger.info("Successfully initialized guild: %s", guild.name)
        self._welcome_later(guild)

    async def handle_leave(self, guild: Any) -> None:
        logger.info("Bot left guild: %s (%s)", guild.name, guild.id)
        try:
            await self.backend.remove_guild(guild.id)
        except Exception as exc:
            # Leaving must never take the bot down.
            logger.error("Error handling guild leave %s: %r", guild.id, exc)
            return
        logger.info("Successfully removed guild: %s", guild.name)

    def _welcome_later(self, guild: Any) -> asyncio.Task:
        task = asyncio.create_task(self.send_welcome(guild), name=f"welcome-{guild.id}")
        self._background.add(task)
        task.add_done_callback(self._background.discard)
        return task

    async def send_welcome(self, guild: Any) -> bool:
        """Post the welcome embed; returns ``False`` instead of raising."""

        channel = find_welcome_channel(guild)
        if channel is None:
            logger.warning(
                "Welcome message not sent for guild %s, but guild was initialized successfully",
                guild.name,
            )
            return False
        try:
            await channel.send(embed=embeds.welcome_embed(self.dashboard_url))
        except Exception as exc:
            logger.error("Failed to send welcome message to %s: %r", guild.name, exc)
            return False
        return True


class GuildSyncCoordinator:
    """Fan out one backend sync per guild and aggregate the outcomes."""

    def __init__(self, backend: Any) -> None:
        self.backend = backend

    async def sync_all(
        self,
        guilds: Iterable[Any],
        project: Callable[[Any], GuildSnapshot] | None = None,
    ) -> SyncResult:
        """
        Sync every guild concurrently; one guild's failure never stops the rest.

        ``project`` turns each item into a :class:`GuildSnapshot` inside that
        guild's own operation, so a failing projection is recorded against the
        guild it came from. Without it the items must already be snapshots.
        """

        items = list(guilds)
        result = SyncResult(total=len(items))
        logger.info("Starting sync for %d guilds", result.total)

        async def _settle(item: Any) -> BaseException | None:
            try:
                snapshot = project(item) if project is not None else item
            except Exception as exc:
                logger.error("Failed to collect guild %s for sync: %r", getattr(item, "id", None), exc)
                return exc
            try:
                await self.sync_one(snapshot)
            except Exception as exc:
                return exc
            return None

        outcomes = await asyncio.gather(*(_settle(item) for item in items))
        for item, error in zip(items, outcomes):
            if error is None:
                result.synced += 1
            else:
                result.failed += 1
                result.errors.append(SyncFailure(guild_id=getattr(item, "id", None), error=error))

        logger.info(
            "Guild sync complete: %d synced, %d failed out of %d total",
            result.synced,
            result.failed,
            result.total,
        )
        return result

    async def sync_one(self, snapshot: GuildSnapshot) -> None:
        """Push one guild; errors are logged and re-raised for the aggregator."""

        logger.info("Syncing guild: %s (%s)", snapshot.name, snapshot.id)
        try:
            if snapshot.members is None:
                await self.backend.upsert_guild(snapshot)
            else:
                roles = {"admin": snapshot.admin_roles} if snapshot.admin_roles else None
                await self.backend.sync_guild(
                    snapshot, [member.to_payload() for member in snapshot.members], roles
                )
        except Exception as exc:
            context = {
                "statusCode": errors.resolve_status(exc),
                "code": errors.resolve_code(exc),
                "guildInfo": snapshot.to_payload(),
            }
            if errors.is_database_schema_error(exc):
                logger.error(
                    "Database schema error detected for guild %s (%s): %s",
                    snapshot.name,
                    snapshot.id,
                    errors.database_schema_error_message(exc),
                    extra={"sync": context},
                )
            else:
                logger.error(
                    "Error syncing guild %s (%s): %r",
                    snapshot.name,
                    snapshot.id,
                    exc,
                    extra={"sync": context},
                )
            raise

        logger.info("Successfully synced guild %s", snapshot.name)


__all__ = [
    "GuildService",
    "GuildSyncCoordinator",
    "SETUP_FAILURE_MESSAGE",
    "find_welcome_channel",
]
