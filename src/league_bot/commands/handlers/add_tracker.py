from __future__ import annotations

import logging

import discord
from discord import app_commands
from discord.ext import commands

from league_bot import embeds
from league_bot.clients.backend import BackendError
from league_bot.models import CommandCategory, CommandMetadata

from .. import register_cog

logger = logging.getLogger(__name__)


@register_cog
class AddTracker(commands.Cog):
    """Add another tracker profile for a registered player (up to 4 in total)."""

    def __init__(self, bot: commands.Bot):
        self.bot = bot

    @app_commands.command(
        name="add-tracker",
        description="Add an additional tracker URL (up to 4 total)",
        extras={"metadata": CommandMetadata(category=CommandCategory.PUBLIC)},
    )
    @app_commands.describe(tracker_url="Your tracker profile URL")
    async def add_tracker(self, interaction: discord.Interaction, tracker_url: str) -> None:
        await interaction.response.defer(ephemeral=True)

        user = interaction.user
        user_data = {
            "username": user.name,
            "globalName": getattr(user, "global_name", None),
            "avatar": getattr(getattr(user, "avatar", None), "key", None),
        }
        backend = self.bot.services.backend
        try:
            tracker = await backend.add_tracker(user.id, tracker_url, user_data)
        except BackendError as exc:
            logger.error("Failed to add tracker for %s: %r", user.id, exc)
            message = exc.message or "An error occurred while adding the tracker. Please try again."
            await interaction.edit_original_response(embed=embeds.add_tracker_failed_embed(message))
            return

        await interaction.edit_original_response(
            embed=embeds.tracker_added_embed(tracker, tracker_url)
        )
