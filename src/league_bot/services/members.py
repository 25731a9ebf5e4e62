"""Mirror member join, leave and role changes to the backend."""

from __future__ import annotations

import logging
import re
from typing import Any

from league_bot.models import member_snapshot, without_default_role

logger = logging.getLogger(__name__)

_SNOWFLAKE = re.compile(r"^\d{17,20}$")


def is_valid_discord_id(value: Any) -> bool:
    return value is not None and bool(_SNOWFLAKE.match(str(value)))


def roles_changed(old_roles: list[int], new_roles: list[int]) -> bool:
    """Order-insensitive comparison of two role id lists."""

    return set(old_roles) != set(new_roles)


class MemberService:
    def __init__(self, backend: Any) -> None:
        self.backend = backend

    async def handle_join(self, member: Any) -> None:
        guild = member.guild
        logger.info("Member joined: %s in %s", member.name, guild.name)

        try:
            if not is_valid_discord_id(member.id) or not is_valid_discord_id(guild.id):
                raise ValueError("Invalid Discord ID format")

            snapshot = member_snapshot(member, guild.id)
            await self.backend.create_guild_member(
                guild.id,
                {
                    "userId": str(snapshot.user_id),
                    "username": snapshot.username,
                    "roles": [str(role_id) for role_id in snapshot.roles],
                },
            )
        except Exception:
            logger.exception("Error handling member join %s", member.id)
            raise

        logger.info("Successfully added member: %s", member.name)

    async def handle_leave(self, member: Any) -> None:
        user_id = getattr(member, "id", None)
        guild = getattr(member, "guild", None)
        guild_id = getattr(guild, "id", None)
        username = getattr(member, "name", None) or "Unknown"
        logger.info("Member left: %s from %s", username, getattr(guild, "name", None) or "guild")

        try:
            if not user_id or not guild_id:
                raise ValueError("Missing user or guild ID")
            await self.backend.remove_guild_member(guild_id, user_id)
        except Exception:
            logger.exception("Error handling member leave %s", user_id)
            raise

        logger.info("Successfully removed member: %s", username)

    async def handle_update(self, before: Any, after: Any) -> bool:
        """
        Push the new role list when it differs from the old one.

        Nickname, avatar and other profile changes are ignored. Returns
        whether an update was sent.
        """

        old_roles = [role.id for role in before.roles]
        new_roles = [role.id for role in after.roles]
        if not roles_changed(old_roles, new_roles):
            return False

        guild = after.guild
        logger.info("Member roles updated: %s in %s", after.name, guild.name)
        roles = without_default_role(new_roles, guild.id)
        try:
            await self.backend.update_guild_member(
                guild.id,
                after.id,
                {"username": after.name, "roles": [str(role_id) for role_id in roles]},
            )
        except Exception:
            logger.exception("Error handling member update %s", after.id)
            raise

        logger.info("Successfully updated member: %s", after.name)
        return True


__all__ = ["MemberService", "is_valid_discord_id", "roles_changed"]
