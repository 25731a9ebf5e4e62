import logging
import os
import re

from .loader import section

logger = logging.getLogger(__name__)

_SNOWFLAKE_RE = re.compile(r"^\d{17,19}$")
_ENVIRONMENTS = ("development", "production", "test")


class Core:
    def __init__(self, config: dict | None = None) -> None:
        discord_cfg = section(config, "discord")

        token_env = str(discord_cfg.get("token_env", "DISCORD_TOKEN"))
        self.DISCORD_TOKEN: str | None = os.getenv(token_env)

        allowed = discord_cfg.get("allowed_user_id") or os.getenv("ALLOWED_USER_ID") or ""
        allowed = str(allowed).strip()
        if allowed and not _SNOWFLAKE_RE.match(allowed):
            raise ValueError(
                f"ALLOWED_USER_ID must be a numeric Discord ID of 17-19 digits, got {allowed!r}"
            )
        self.ALLOWED_USER_ID: str | None = allowed or None

        dashboard = str(discord_cfg.get("dashboard_url", os.getenv("DASHBOARD_URL", "")) or "").strip()
        if dashboard and not dashboard.startswith(("http://", "https://")):
            raise ValueError(f"DASHBOARD_URL must be a valid URL, got {dashboard!r}")
        self.DASHBOARD_URL: str | None = dashboard or None

        environment = str(discord_cfg.get("environment", os.getenv("ENVIRONMENT", "development"))).lower()
        if environment not in _ENVIRONMENTS:
            raise ValueError(f"ENVIRONMENT must be one of {', '.join(_ENVIRONMENTS)}")
        self.ENVIRONMENT: str = environment

        if not self.DISCORD_TOKEN:
            raise ValueError("Missing environment variables: DISCORD_TOKEN")

        if self.ALLOWED_USER_ID:
            logger.warning("Command access restricted to user %s", self.ALLOWED_USER_ID)
