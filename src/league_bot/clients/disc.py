"""Discord bot bootstrap utilities."""

from __future__ import annotations

import logging

import discord
from discord import app_commands
from discord.ext import commands as discord_commands

from league_bot import commands as lb_commands
from league_bot import logsink, maintenance
from league_bot.config import Config, core, observability
from league_bot.dispatch import LeagueCommandTree
from league_bot.event_hooks import guild_hook, member_hook, ready_hook
from league_bot.services import Services, build_services

logger = logging.getLogger(__name__)

# --- Intents --------------------------------------------------------------- #
intents = discord.Intents.default()
intents.guilds = True
intents.members = True


class LeagueBot(discord_commands.Bot):
    """Slash-command bot; every command passes through the dispatch pipeline."""

    def __init__(self, services: Services | None = None) -> None:
        super().__init__(
            command_prefix=discord_commands.when_mentioned,
            intents=intents,
            tree_cls=LeagueCommandTree,
        )
        self.services = services or build_services(Config)
        self._log_handler: logsink.RemoteLogHandler | None = None
        self._log_flush_task = None
        self.initial_sync_done = False

    async def setup_hook(self) -> None:
        """Register slash commands, synchronise with Discord and start timers."""

        await lb_commands.setup(self, self.services.registry)

        try:
            synced = await self.tree.sync()
            logger.info("Synced %d application command(s)", len(synced))
        except Exception:
            logger.exception("Failed to sync application commands")

        self.services.cooldowns.start()

        self._log_handler = logsink.install(observability)
        if self._log_handler is not None:
            self._log_flush_task = maintenance.startup(
                self._log_handler.flush_remote,
                observability.LOG_FLUSH_INTERVAL,
                name="log-flush",
            )

    async def close(self) -> None:
        await self.services.cooldowns.stop()
        await maintenance.shutdown(self._log_flush_task)
        self._log_flush_task = None
        if self._log_handler is not None:
            await self._log_handler.flush_remote()
            logging.getLogger().removeHandler(self._log_handler)
            self._log_handler = None
        await self.services.backend.close()
        await super().close()


bot = LeagueBot()


@bot.event
async def on_ready() -> None:
    await ready_hook.handle(bot)


@bot.event
async def on_app_command_completion(
    interaction: discord.Interaction, command: app_commands.Command
) -> None:
    bot.services.pipeline.complete(interaction)


@bot.event
async def on_guild_join(guild: discord.Guild) -> None:
    await guild_hook.handle_join(bot, guild)


@bot.event
async def on_guild_remove(guild: discord.Guild) -> None:
    await guild_hook.handle_leave(bot, guild)


@bot.event
async def on_member_join(member: discord.Member) -> None:
    await member_hook.handle_join(bot, member)


@bot.event
async def on_member_remove(member: discord.Member) -> None:
    await member_hook.handle_leave(bot, member)


@bot.event
async def on_member_update(before: discord.Member, after: discord.Member) -> None:
    await member_hook.handle_update(bot, before, after)


def run() -> None:
    """Start the Discord bot using configuration from the environment."""

    try:
        bot.run(core.DISCORD_TOKEN, log_handler=None)
    except discord.LoginFailure as exc:
        logger.error("Login failed: %s", exc)
    except Exception as exc:
        logger.exception("Unexpected error while running client: %s", exc)
