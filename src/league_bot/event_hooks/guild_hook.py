"""
Guild membership of the bot itself.
"""

import logging

import discord

logger = logging.getLogger(__name__)


async def handle_join(client: discord.Client, guild: discord.Guild) -> None:
    try:
        await client.services.guilds.handle_join(guild)
    except Exception as e:
        # Already classified and reported by the guild service.
        logger.error("Guild join for %s (%s) did not complete: %r", guild.name, guild.id, e)


async def handle_leave(client: discord.Client, guild: discord.Guild) -> None:
    await client.services.guilds.handle_leave(guild)
