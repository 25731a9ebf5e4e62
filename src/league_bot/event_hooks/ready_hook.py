import logging

import discord

from league_bot.models import GuildSnapshot

logger = logging.getLogger(__name__)


async def handle(client: discord.Client):
    """Check backend health, then mirror every cached guild to it once per process."""
    logger.info(f"Logged in as {client.user.name} (ID: {client.user.id})")

    # on_ready fires again after a reconnect that could not resume the session
    if getattr(client, "initial_sync_done", False):
        logger.info("Reconnected; guilds already synced")
        return
    client.initial_sync_done = True

    services = client.services
    try:
        health = await services.backend.health_check()
        logger.info("API health check passed: %s", (health or {}).get("status", "unknown"))
    except Exception as e:
        # The bot keeps serving; the backend may come up later.
        logger.error("API health check failed: %r", e)

    result = await services.sync.sync_all(client.guilds, project=GuildSnapshot.full_from_guild)
    if result.failed:
        logger.warning(
            "Guild sync finished with %d failure(s): %s",
            result.failed,
            ", ".join(str(failure.guild_id) for failure in result.errors),
        )
