import os
from typing import Dict

from .loader import section

_DEFAULT_COOLDOWNS = "register=10"


def _parse_cooldowns(raw: str) -> Dict[str, int]:
    cooldowns: Dict[str, int] = {}
    for token in raw.split(","):
        name, sep, seconds = token.partition("=")
        if not sep or not name.strip():
            continue
        cooldowns[name.strip()] = int(seconds.strip())
    return cooldowns


class Commands:
    def __init__(self, config: dict | None = None) -> None:
        cmd_cfg = section(config, "commands")

        table = cmd_cfg.get("cooldowns")
        if table:
            self.COOLDOWNS: Dict[str, int] = {str(k): int(v) for k, v in table.items()}
        else:
            self.COOLDOWNS = _parse_cooldowns(os.getenv("COMMAND_COOLDOWNS", _DEFAULT_COOLDOWNS))

        # [leaguebot.commands.guild_cooldowns."<guild id>"] tables
        self.GUILD_COOLDOWNS: Dict[int, Dict[str, int]] = {
            int(guild_id): {str(k): int(v) for k, v in overrides.items()}
            for guild_id, overrides in (cmd_cfg.get("guild_cooldowns") or {}).items()
        }

    def cooldown_for(self, command_name: str, guild_id: int | None = None) -> int:
        """Cooldown in seconds for ``command_name``; guild overrides win."""

        if guild_id is not None:
            overrides = self.GUILD_COOLDOWNS.get(int(guild_id), {})
            if command_name in overrides:
                return max(overrides[command_name], 0)
        return max(self.COOLDOWNS.get(command_name, 0), 0)
