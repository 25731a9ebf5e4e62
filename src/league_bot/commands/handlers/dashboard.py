from __future__ import annotations

import discord
from discord import app_commands
from discord.ext import commands

from league_bot import embeds
from league_bot.config import core
from league_bot.models import CommandCategory, CommandMetadata

from .. import register_cog

ADMINISTRATOR = discord.Permissions(administrator=True).value


@register_cog
class Config(commands.Cog):
    """Point administrators at the web dashboard."""

    def __init__(self, bot: commands.Bot):
        self.bot = bot

    @app_commands.command(
        name="config",
        description="Get the dashboard link to configure the bot",
        extras={
            "metadata": CommandMetadata(
                required_permissions=ADMINISTRATOR,
                requires_guild=True,
                category=CommandCategory.ADMIN,
            )
        },
    )
    @app_commands.default_permissions(administrator=True)
    async def config(self, interaction: discord.Interaction) -> None:
        """Reply with the guild's dashboard link, or a notice when unset."""

        await interaction.response.send_message(
            embed=embeds.config_embed(core.DASHBOARD_URL, interaction.guild_id),
            ephemeral=True,
        )
