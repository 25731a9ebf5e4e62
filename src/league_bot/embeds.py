"""Embed builders shared by commands and guild notifications."""

from __future__ import annotations

import datetime
from typing import Any, Dict, Iterable

import discord

from league_bot.models import CommandDescriptor

GREEN = discord.Colour(0x00FF00)
RED = discord.Colour(0xFF0000)

_SETUP_FIELD = ("⚙️ Setup", "Use `/config` to configure bot settings")
_HELP_FIELD = ("📖 Help", "Use `/help` to see available commands")
_TRACKER_TIP = (
    "Make sure your URL is in the format: "
    "https://rocketleague.tracker.network/rocket-league/profile/{platform}/{username}/overview"
)
_ADD_TRACKER_TIP = (
    "You can have up to 4 trackers total. "
    "Use /register if you haven't registered any trackers yet."
)


def welcome_embed(dashboard_url: str | None = None) -> discord.Embed:
    embed = discord.Embed(
        title="🚀 Rocket League Bot Joined!",
        description="I'm ready to help manage your Rocket League leagues!",
        colour=GREEN,
    )
    if dashboard_url:
        embed.add_field(
            name="🌐 Dashboard",
            value=f"[Click here to access the dashboard]({dashboard_url})",
            inline=False,
        )
    for name, value in (_SETUP_FIELD, _HELP_FIELD):
        embed.add_field(name=name, value=value, inline=False)
    embed.set_footer(text="Use /config to get started!")
    return embed


def help_embed(commands: Iterable[CommandDescriptor]) -> discord.Embed:
    embed = discord.Embed(
        title="📖 Bot Commands",
        description="Here are all available commands:",
        colour=GREEN,
    )
    for command in commands:
        embed.add_field(name=f"/{command.name}", value=command.description, inline=False)
    return embed


def config_embed(dashboard_url: str | None, guild_id: int | None) -> discord.Embed:
    embed = discord.Embed(title="⚙️ Bot Configuration", colour=GREEN)
    if dashboard_url and guild_id:
        embed.description = (
            "Configure the bot using the web dashboard:\n\n"
            f"[Open Dashboard]({dashboard_url}?guild={guild_id})"
        )
    else:
        embed.description = "Dashboard is not configured. Please contact the bot administrator."
    return embed


def _tracker_embed(title: str, description: str, tracker: Dict[str, Any], url: str) -> discord.Embed:
    embed = discord.Embed(
        title=title,
        description=description,
        colour=GREEN,
        timestamp=datetime.datetime.now(datetime.timezone.utc),
    )
    embed.add_field(name="Tracker URL", value=tracker.get("url") or url, inline=False)
    embed.add_field(name="Platform", value=tracker.get("platform") or "Unknown", inline=True)
    embed.add_field(name="Username", value=tracker.get("username") or "Unknown", inline=True)
    embed.add_field(name="Status", value=tracker.get("scrapingStatus") or "PENDING", inline=True)
    embed.set_footer(text="You can check your tracker status in the web dashboard.")
    return embed


def _failure_embed(title: str, message: str, tip: str) -> discord.Embed:
    embed = discord.Embed(
        title=title,
        description=message,
        colour=RED,
        timestamp=datetime.datetime.now(datetime.timezone.utc),
    )
    embed.add_field(name="Tip", value=tip, inline=False)
    return embed


def tracker_registered_embed(tracker: Dict[str, Any], url: str) -> discord.Embed:
    return _tracker_embed(
        "✅ Tracker Registered Successfully",
        "Your tracker has been registered. Data is being collected in the background.",
        tracker,
        url,
    )


def tracker_failed_embed(message: str) -> discord.Embed:
    return _failure_embed("❌ Registration Failed", message, _TRACKER_TIP)


def tracker_added_embed(tracker: Dict[str, Any], url: str) -> discord.Embed:
    return _tracker_embed(
        "✅ Tracker Added Successfully",
        "Your tracker has been added. Data is being collected in the background.",
        tracker,
        url,
    )


def add_tracker_failed_embed(message: str) -> discord.Embed:
    return _failure_embed("❌ Add Tracker Failed", message, _ADD_TRACKER_TIP)


__all__ = [
    "add_tracker_failed_embed",
    "config_embed",
    "help_embed",
    "tracker_added_embed",
    "tracker_failed_embed",
    "tracker_registered_embed",
    "welcome_embed",
]
