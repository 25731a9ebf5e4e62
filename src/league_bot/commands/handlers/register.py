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
class Register(commands.Cog):
    """Link a player's Rocket League tracker profile."""

    def __init__(self, bot: commands.Bot):
        self.bot = bot

    @app_commands.command(
        name="register",
        description="Register your Rocket League tracker URL",
        extras={"metadata": CommandMetadata(category=CommandCategory.PUBLIC)},
    )
    @app_commands.describe(
        tracker_url=(
            "Your tracker URL (e.g., https://rocketleague.tracker.network/"
            "rocket-league/profile/steam/username/overview)"
        )
    )
    async def register(self, interaction: discord.Interaction, tracker_url: str) -> None:
        """
        Register the caller's tracker with the backend.

        Backend failures are reported in the (ephemeral) deferred reply rather
        than raised, since the message from the backend is actionable.
        """

        await interaction.response.defer(ephemeral=True)

        user = interaction.user
        user_data = {
            "username": user.name,
            "globalName": getattr(user, "global_name", None),
            "avatar": getattr(getattr(user, "avatar", None), "key", None),
        }
        backend = self.bot.services.backend
        try:
            tracker = await backend.register_tracker(user.id, tracker_url, user_data)
        except BackendError as exc:
            logger.error("Failed to register tracker for %s: %r", user.id, exc)
            message = exc.message or "An error occurred during registration. Please try again."
            await interaction.edit_original_response(embed=embeds.tracker_failed_embed(message))
            return

        await interaction.edit_original_response(
            embed=embeds.tracker_registered_embed(tracker, tracker_url)
        )
