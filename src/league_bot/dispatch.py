"""
Slash-command admission, completion and failure handling.

The pipeline runs in a fixed order for every invocation::

    resolve -> allow-list -> channel restriction -> cooldown -> permissions
            -> handler -> cooldown set | failure reply

discord.py drives the handler itself, so the stages are split across
:meth:`DispatchPipeline.admit` (called from
:meth:`LeagueCommandTree.interaction_check`), :meth:`DispatchPipeline.complete`
(``on_app_command_completion``) and :meth:`DispatchPipeline.report_failure`
(:meth:`LeagueCommandTree.on_error`). :meth:`DispatchPipeline.dispatch` chains
all of them around an arbitrary handler coroutine.
"""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Iterable

import discord
from discord import app_commands

from league_bot.commands import CommandRegistry
from league_bot.cooldowns import CooldownTracker
from league_bot.models import CommandDescriptor, InvocationContext
from league_bot.permissions import PermissionAuditLog, PermissionValidator, denial_message

logger = logging.getLogger(__name__)

FAILURE_MESSAGE = "There was an error executing this command!"
UNAUTHORIZED_MESSAGE = "You do not have permission to use this command"
REGISTER_CHANNEL_MESSAGE = (
    "The /register command can only be used in designated registration channels."
)
BOT_CHANNEL_MESSAGE = "This command can only be used in designated bot command channels."


def cooldown_message(remaining: int) -> str:
    unit = "second" if remaining == 1 else "seconds"
    return f"⏱️ Please wait {remaining} {unit} before using this command again."


def command_name(interaction: Any) -> str | None:
    command = getattr(interaction, "command", None)
    if command is not None:
        return command.name
    data = getattr(interaction, "data", None) or {}
    return data.get("name")


def build_context(interaction: Any, descriptor: CommandDescriptor) -> InvocationContext:
    """Project an interaction into the fields the checks and the audit need."""

    user = interaction.user
    permissions = None
    if interaction.guild_id is not None:
        guild_permissions = getattr(user, "guild_permissions", None)
        if guild_permissions is not None:
            permissions = guild_permissions.value
    return InvocationContext(
        user_id=user.id,
        username=user.name,
        guild_id=interaction.guild_id,
        channel_id=interaction.channel_id,
        command=descriptor,
        permissions=permissions,
    )


def _channel_ids(entries: Iterable[Any] | None) -> set[str]:
    ids = set()
    for entry in entries or ():
        value = entry.get("id") if isinstance(entry, dict) else entry
        if value is not None:
            ids.add(str(value))
    return ids


async def send_ephemeral(interaction: Any, message: str) -> None:
    """Reply, or follow up when the interaction was already answered or deferred."""

    if interaction.response.is_done():
        await interaction.followup.send(message, ephemeral=True)
    else:
        await interaction.response.send_message(message, ephemeral=True)


class DispatchPipeline:
    def __init__(
        self,
        *,
        registry: CommandRegistry,
        cooldowns: CooldownTracker,
        validator: PermissionValidator,
        audit: PermissionAuditLog,
        backend: Any,
        cooldown_for: Callable[[str, int | None], int],
        allowed_user_id: str | None = None,
    ) -> None:
        self.registry = registry
        self.cooldowns = cooldowns
        self.validator = validator
        self.audit = audit
        self.backend = backend
        self.cooldown_for = cooldown_for
        self.allowed_user_id = allowed_user_id

    def resolve(self, interaction: Any) -> CommandDescriptor | None:
        name = command_name(interaction)
        descriptor = self.registry.get(name) if name else None
        if descriptor is None:
            logger.warning("No command matching %s was found.", name)
        return descriptor

    async def admit(self, interaction: Any) -> InvocationContext | None:
        """
        Run every pre-execution gate.

        Returns the invocation context when the handler may run, ``None`` when
        the invocation was stopped (the user has already been answered, except
        for unknown commands which get no reply).
        """

        descriptor = self.resolve(interaction)
        if descriptor is None:
            return None

        context = build_context(interaction, descriptor)

        if self.allowed_user_id and str(context.user_id) != str(self.allowed_user_id):
            self.audit.record_unauthorized(context)
            await send_ephemeral(interaction, UNAUTHORIZED_MESSAGE)
            return None

        channel_denial = await self._check_channel(context)
        if channel_denial:
            await send_ephemeral(interaction, channel_denial)
            return None

        if self.cooldown_for(descriptor.name, context.guild_id) > 0:
            remaining = self.cooldowns.check_remaining(context.user_id, descriptor.name)
            if remaining > 0:
                await send_ephemeral(interaction, cooldown_message(remaining))
                return None

        result = self.validator.validate(context, descriptor.metadata)
        self.audit.record_execution(context, result)
        if not result.allowed:
            self.audit.record_denial(context, result.reason or "")
            await send_ephemeral(interaction, denial_message(result.reason))
            return None

        self.audit.record_grant(context)
        return context

    async def _check_channel(self, context: InvocationContext) -> str | None:
        if context.guild_id is None:
            return None

        try:
            settings = await self.backend.get_guild_settings(context.guild_id) or {}
        except Exception as exc:
            logger.warning("Failed to fetch settings for guild %s: %r", context.guild_id, exc)
            return None

        channel = str(context.channel_id)
        bot_channels = _channel_ids(settings.get("bot_command_channels"))

        if context.command.name == "register":
            register_channels = _channel_ids(settings.get("register_command_channels"))
            if register_channels:
                return None if channel in register_channels else REGISTER_CHANNEL_MESSAGE

        if bot_channels and channel not in bot_channels:
            return BOT_CHANNEL_MESSAGE
        return None

    def complete(self, interaction: Any) -> None:
        """Start the cooldown window after a successful run."""

        name = command_name(interaction)
        if not name or name not in self.registry:
            return
        duration = self.cooldown_for(name, interaction.guild_id)
        if duration > 0:
            self.cooldowns.set(interaction.user.id, name, duration)

    async def report_failure(self, interaction: Any, error: BaseException) -> None:
        logger.error(
            "Error executing command %s", command_name(interaction), exc_info=error
        )
        try:
            await send_ephemeral(interaction, FAILURE_MESSAGE)
        except Exception:
            logger.exception("Failed to send error reply")

    async def dispatch(
        self, interaction: Any, handler: Callable[[Any], Awaitable[None]]
    ) -> bool:
        """Run ``handler`` through the full pipeline; ``True`` when it completed."""

        if await self.admit(interaction) is None:
            return False
        try:
            await handler(interaction)
        except Exception as exc:
            await self.report_failure(interaction, exc)
            return False
        self.complete(interaction)
        return True


class LeagueCommandTree(app_commands.CommandTree):
    """Command tree that routes every slash command through the pipeline."""

    @property
    def pipeline(self) -> DispatchPipeline:
        return self.client.services.pipeline

    async def interaction_check(self, interaction: discord.Interaction) -> bool:
        if interaction.type is not discord.InteractionType.application_command:
            return True
        return await self.pipeline.admit(interaction) is not None

    async def on_error(
        self, interaction: discord.Interaction, error: app_commands.AppCommandError
    ) -> None:
        if isinstance(error, app_commands.CommandNotFound):
            logger.warning("No command matching %s was found.", error.name)
            return
        if isinstance(error, app_commands.CommandInvokeError):
            error = error.original
        await self.pipeline.report_failure(interaction, error)


__all__ = [
    "BOT_CHANNEL_MESSAGE",
    "DispatchPipeline",
    "FAILURE_MESSAGE",
    "LeagueCommandTree",
    "REGISTER_CHANNEL_MESSAGE",
    "UNAUTHORIZED_MESSAGE",
    "build_context",
    "command_name",
    "cooldown_message",
    "send_ephemeral",
]
