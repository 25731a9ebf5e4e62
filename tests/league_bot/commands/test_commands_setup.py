import asyncio

import discord
from discord.ext import commands as discord_commands

from league_bot import commands as lb_commands
from league_bot.commands import CommandRegistry
from league_bot.models import CommandCategory


async def _setup_registry():
    bot = discord_commands.Bot(command_prefix="!", intents=discord.Intents.none())
    registry = CommandRegistry()
    try:
        await lb_commands.setup(bot, registry)
        return set(bot.cogs.keys()), registry
    finally:
        await bot.close()


def test_setup_registers_known_cogs_and_descriptors():
    cogs, registry = asyncio.run(_setup_registry())

    assert {"Help", "Config", "Register", "AddTracker"}.issubset(cogs)
    assert {"help", "config", "register", "add-tracker"} <= {descriptor.name for descriptor in registry}

    config = registry.get("config")
    assert config.metadata.requires_guild
    assert config.metadata.required_permissions == discord.Permissions(administrator=True).value
    assert config.category is CommandCategory.ADMIN

    assert registry.get("help").metadata is None
    assert registry.get("help").category is CommandCategory.PUBLIC
    assert registry.get("register").category is CommandCategory.PUBLIC
    assert registry.get("add-tracker").category is CommandCategory.PUBLIC


def test_registry_rejects_duplicates_and_keeps_order():
    from league_bot.models import CommandDescriptor

    registry = CommandRegistry()
    registry.register(CommandDescriptor("b", "second"))
    registry.register(CommandDescriptor("a", "first"))

    try:
        registry.register(CommandDescriptor("a", "again"))
    except ValueError as exc:
        assert "already registered" in str(exc)
    else:
        raise AssertionError("duplicate registration accepted")

    assert [descriptor.name for descriptor in registry.all()] == ["b", "a"]
    assert "a" in registry and len(registry) == 2
    assert registry.get("missing") is None
