"""
Member lifecycle events, forwarded to the member service.

Failures are logged by the service and re-raised; they stop here so one bad
event does not surface as an unhandled listener error.
"""

import logging

import discord

logger = logging.getLogger(__name__)


async def handle_join(client: discord.Client, member: discord.Member) -> None:
    if member.bot:
        return
    try:
        await client.services.members.handle_join(member)
    except Exception:
        logger.debug("Member join event for %s dropped", member.id)


async def handle_leave(client: discord.Client, member: discord.Member) -> None:
    if member.bot:
        return
    try:
        await client.services.members.handle_leave(member)
    except Exception:
        logger.debug("Member leave event for %s dropped", member.id)


async def handle_update(
    client: discord.Client, before: discord.Member, after: discord.Member
) -> None:
    if after.bot:
        return
    try:
        await client.services.members.handle_update(before, after)
    except Exception:
        logger.debug("Member update event for %s dropped", after.id)
