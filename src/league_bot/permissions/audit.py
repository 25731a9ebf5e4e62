"""Structured audit trail for command permission decisions."""

from __future__ import annotations

import logging
from typing import Any

from league_bot.models import InvocationContext, ValidationResult

_fallback = logging.getLogger(__name__)


class PermissionAuditLog:
    """
    Record validation outcomes to an injected logger.

    Recording never raises and never blocks the command flow; a broken sink
    is reported once per failure on this module's own logger.
    """

    def __init__(self, sink: logging.Logger | None = None) -> None:
        self._sink = sink or logging.getLogger("league_bot.audit")

    def _write(self, level: int, message: str, fields: dict[str, Any]) -> None:
        try:
            self._sink.log(level, "%s %s", message, fields, extra={"audit": fields})
        except Exception:
            _fallback.debug("Audit sink rejected %r", message, exc_info=True)

    def record_execution(self, context: InvocationContext, result: ValidationResult) -> None:
        self._write(
            logging.INFO,
            f"Command execution: {context.command.name}",
            {
                "userId": context.user_id,
                "guildId": context.guild_marker,
                "channelId": context.channel_id if context.channel_id is not None else "unknown",
                "allowed": result.allowed,
                "category": context.command.category.value,
            },
        )

    def record_denial(self, context: InvocationContext, reason: str) -> None:
        self._write(
            logging.WARNING,
            "Permission denied",
            {
                "userId": context.user_id,
                "guildId": context.guild_marker,
                "commandName": context.command.name,
                "reason": reason,
            },
        )

    def record_grant(self, context: InvocationContext) -> None:
        self._write(
            logging.INFO,
            "Permission granted",
            {
                "userId": context.user_id,
                "guildId": context.guild_marker,
                "commandName": context.command.name,
                "category": context.command.category.value,
            },
        )

    def record_unauthorized(self, context: InvocationContext) -> None:
        self._write(
            logging.WARNING,
            "Unauthorized command access attempt",
            {
                "userId": context.user_id,
                "username": context.username,
                "commandName": context.command.name,
                "guildId": context.guild_marker,
                "channelId": context.channel_id,
            },
        )


__all__ = ["PermissionAuditLog"]
