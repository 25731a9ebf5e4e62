"""Plain data carried between the dispatch pipeline, sync and the backend."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Dict, List


class CommandCategory(str, enum.Enum):
    ADMIN = "admin"
    USER = "user"
    PUBLIC = "public"


@dataclass(frozen=True, slots=True)
class CommandMetadata:
    """Declared requirements of a slash command."""

    required_permissions: int | None = None
    requires_guild: bool = False
    category: CommandCategory = CommandCategory.PUBLIC


@dataclass(frozen=True, slots=True)
class CommandDescriptor:
    """Registered command identity; ``metadata`` is ``None`` for public commands."""

    name: str
    description: str
    metadata: CommandMetadata | None = None

    @property
    def category(self) -> CommandCategory:
        return self.metadata.category if self.metadata else CommandCategory.PUBLIC


@dataclass(slots=True)
class InvocationContext:
    """Snapshot of a single slash-command invocation."""

    user_id: int
    username: str
    guild_id: int | None
    channel_id: int | None
    command: CommandDescriptor
    # Member permission bitmask; ``None`` outside a guild.
    permissions: int | None = None

    @property
    def guild_marker(self) -> int | str:
        return self.guild_id if self.guild_id is not None else "DM"


@dataclass(frozen=True, slots=True)
class ValidationResult:
    allowed: bool
    reason: str | None = None


@dataclass(slots=True)
class MemberSnapshot:
    user_id: int
    username: str
    roles: List[int]
    global_name: str | None = None
    avatar: str | None = None
    nickname: str | None = None

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "userId": str(self.user_id),
            "username": self.username,
            "roles": [str(role_id) for role_id in self.roles],
        }
        if self.global_name:
            payload["globalName"] = self.global_name
        if self.avatar:
            payload["avatar"] = self.avatar
        if self.nickname:
            payload["nickname"] = self.nickname
        return payload


@dataclass(slots=True)
class GuildSnapshot:
    """
    Point-in-time projection of a guild sent to the backend.

    ``members`` and ``admin_roles`` are only filled for a full sync; when
    ``members`` is ``None`` the guild is upserted on its own.
    """

    id: int
    name: str
    owner_id: int
    member_count: int
    icon: str | None = None
    members: List[MemberSnapshot] | None = None
    admin_roles: List[Dict[str, str]] | None = None

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "id": str(self.id),
            "name": self.name,
            "ownerId": str(self.owner_id),
            "memberCount": self.member_count,
        }
        if self.icon:
            payload["icon"] = self.icon
        return payload

    @classmethod
    def from_guild(cls, guild: Any) -> "GuildSnapshot":
        icon = getattr(guild, "icon", None)
        return cls(
            id=guild.id,
            name=guild.name,
            owner_id=guild.owner_id,
            member_count=getattr(guild, "member_count", None) or 0,
            icon=getattr(icon, "key", icon) or None,
        )

    @classmethod
    def full_from_guild(cls, guild: Any) -> "GuildSnapshot":
        """Snapshot including non-bot members and administrator roles."""

        snapshot = cls.from_guild(guild)
        snapshot.members = [
            member_snapshot(member, guild.id)
            for member in getattr(guild, "members", [])
            if not member.bot
        ]
        snapshot.admin_roles = [
            {"id": str(role.id), "name": role.name}
            for role in getattr(guild, "roles", [])
            if role.permissions.administrator
        ]
        return snapshot


def without_default_role(role_ids: List[int], guild_id: int) -> List[int]:
    """Drop the @everyone role, whose id equals the guild id."""

    return [role_id for role_id in role_ids if role_id != guild_id]


def member_snapshot(member: Any, guild_id: int) -> MemberSnapshot:
    avatar = getattr(member, "avatar", None)
    return MemberSnapshot(
        user_id=member.id,
        username=member.name,
        global_name=getattr(member, "global_name", None),
        avatar=getattr(avatar, "key", avatar) or None,
        nickname=getattr(member, "nick", None),
        roles=without_default_role([role.id for role in member.roles], guild_id),
    )


@dataclass(slots=True)
class SyncFailure:
    guild_id: int
    error: BaseException


@dataclass(slots=True)
class SyncResult:
    total: int = 0
    synced: int = 0
    failed: int = 0
    errors: List[SyncFailure] = field(default_factory=list)


__all__ = [
    "CommandCategory",
    "CommandDescriptor",
    "CommandMetadata",
    "GuildSnapshot",
    "InvocationContext",
    "MemberSnapshot",
    "SyncFailure",
    "SyncResult",
    "ValidationResult",
    "member_snapshot",
    "without_default_role",
]
