"""Command permission policy and its audit trail."""

from .audit import PermissionAuditLog
from .validator import (
    GUILD_ONLY,
    INSUFFICIENT_PERMISSION,
    PermissionValidator,
    denial_message,
)

__all__ = [
    "GUILD_ONLY",
    "INSUFFICIENT_PERMISSION",
    "PermissionAuditLog",
    "PermissionValidator",
    "denial_message",
]
