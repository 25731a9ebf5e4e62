"""Decide whether an invocation satisfies a command's declared requirements."""

from __future__ import annotations

import logging

import discord

from league_bot.models import CommandMetadata, InvocationContext, ValidationResult

logger = logging.getLogger(__name__)

GUILD_ONLY = "guild-only"
INSUFFICIENT_PERMISSION = "insufficient-permission"

DENIAL_MESSAGES = {
    GUILD_ONLY: "This command can only be used in servers",
    INSUFFICIENT_PERMISSION: "You do not have permission to use this command",
}


class PermissionValidator:
    """
    Pure permission policy; performs no I/O and never raises.

    Any failure while resolving member permissions is treated as a denial.
    """

    def validate(
        self, context: InvocationContext, metadata: CommandMetadata | None
    ) -> ValidationResult:
        if metadata is None:
            return ValidationResult(allowed=True)

        if metadata.requires_guild and context.guild_id is None:
            return ValidationResult(allowed=False, reason=GUILD_ONLY)

        # Outside a guild there is nothing left to check.
        if context.permissions is None:
            return ValidationResult(allowed=True)

        if metadata.required_permissions:
            if not self._has_permissions(context.permissions, metadata.required_permissions):
                return ValidationResult(allowed=False, reason=INSUFFICIENT_PERMISSION)

        return ValidationResult(allowed=True)

    @staticmethod
    def _has_permissions(granted: int, required: int) -> bool:
        try:
            held = discord.Permissions(int(granted))
            if held.administrator:
                return True
            return held >= discord.Permissions(int(required))
        except Exception:
            logger.exception("Error checking member permissions")
            return False


def denial_message(reason: str | None) -> str:
    return DENIAL_MESSAGES.get(reason or "", "You do not have permission to use this command.")


__all__ = [
    "DENIAL_MESSAGES",
    "GUILD_ONLY",
    "INSUFFICIENT_PERMISSION",
    "PermissionValidator",
    "denial_message",
]
