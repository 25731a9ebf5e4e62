from __future__ import annotations

import discord
from discord import app_commands
from discord.ext import commands

from league_bot import embeds

from .. import register_cog


@register_cog
class Help(commands.Cog):
    """List available slash commands."""

    def __init__(self, bot: commands.Bot):
        self.bot = bot

    @app_commands.command(name="help", description="Show all available bot commands")
    async def help(self, interaction: discord.Interaction) -> None:
        """Send an embed listing every registered command to the caller."""

        registry = self.bot.services.registry
        await interaction.response.send_message(
            embed=embeds.help_embed(registry.all()), ephemeral=True
        )
