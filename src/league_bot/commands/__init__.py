"""
Auto-discovery & registry for slash command cogs.

Any module inside ``commands/handlers`` that defines::

    from league_bot.commands import register_cog

    @register_cog
    class MyCog(commands.Cog): ...

is picked up automatically at import-time. Invoking :func:`setup` attaches
every registered cog to the bot and records a :class:`CommandDescriptor`
for each slash command in the bot's :class:`CommandRegistry`.

Permission requirements are declared on the command itself::

    @app_commands.command(
        name="config",
        description="...",
        extras={"metadata": CommandMetadata(requires_guild=True, ...)},
    )
"""

from __future__ import annotations

import logging
from importlib import import_module
from pathlib import Path
from pkgutil import iter_modules
from typing import Iterator, List, Optional, Type

from discord import app_commands
from discord.ext import commands as commands_ext

from league_bot.models import CommandDescriptor, CommandMetadata

logger = logging.getLogger(__name__)

_COG_CLASSES: List[Type[commands_ext.Cog]] = []


def register_cog(cls: Optional[Type[commands_ext.Cog]] = None):
    """Decorator registering a Cog class for later attachment to the bot."""

    def _register(cog_cls: Type[commands_ext.Cog]):
        if not issubclass(cog_cls, commands_ext.Cog):
            raise TypeError("register_cog expects a discord.ext.commands.Cog subclass")

        _COG_CLASSES.append(cog_cls)
        return cog_cls

    if cls is None:
        return _register
    return _register(cls)


class CommandRegistry:
    """Name-keyed command descriptors, kept in registration order."""

    def __init__(self) -> None:
        self._commands: dict[str, CommandDescriptor] = {}

    def register(self, descriptor: CommandDescriptor) -> None:
        if descriptor.name in self._commands:
            raise ValueError(f"Command '{descriptor.name}' already registered")
        self._commands[descriptor.name] = descriptor
        logger.info("Registered command: %s", descriptor.name)

    def get(self, name: str) -> CommandDescriptor | None:
        return self._commands.get(name)

    def all(self) -> List[CommandDescriptor]:
        return list(self._commands.values())

    def __contains__(self, name: object) -> bool:
        return name in self._commands

    def __iter__(self) -> Iterator[CommandDescriptor]:
        return iter(self._commands.values())

    def __len__(self) -> int:
        return len(self._commands)


def describe(command: app_commands.Command) -> CommandDescriptor:
    """Build a descriptor from a slash command and its ``extras`` metadata."""

    metadata = command.extras.get("metadata")
    if metadata is not None and not isinstance(metadata, CommandMetadata):
        raise TypeError(f"Command '{command.name}' declares invalid metadata: {metadata!r}")
    return CommandDescriptor(
        name=command.name,
        description=command.description,
        metadata=metadata,
    )


async def setup(bot: commands_ext.Bot, registry: CommandRegistry) -> None:
    """
    Attach registered cogs to ``bot`` and describe their commands.

    This must be invoked during the bot setup phase (typically inside
    ``commands.Bot.setup_hook``).
    """

    for cog_cls in _COG_CLASSES:
        if bot.get_cog(cog_cls.__name__):
            continue
        await bot.add_cog(cog_cls(bot))

    for command in bot.tree.get_commands():
        if isinstance(command, app_commands.Command) and command.name not in registry:
            registry.register(describe(command))

    if _COG_CLASSES:
        logger.info("Registered %d command cog(s)", len(_COG_CLASSES))
    else:
        logger.warning("No command cogs discovered; command tree is empty")


_pkg_path = Path(__file__).resolve().parent / "handlers"
for _, modname, _ in iter_modules([str(_pkg_path)]):
    if modname.startswith("_"):
        continue
    import_module(f"{__name__}.handlers.{modname}")


__all__ = [
    "CommandRegistry",
    "describe",
    "register_cog",
    "setup",
]
