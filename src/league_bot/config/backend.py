import os

from .loader import section


class Backend:
    def __init__(self, config: dict | None = None) -> None:
        api_cfg = section(config, "backend")

        base_url = str(api_cfg.get("base_url", os.getenv("API_BASE_URL", "")) or "").strip()
        if not base_url:
            host = str(api_cfg.get("host", os.getenv("API_HOST", "")) or "").strip()
            if host:
                protocol = str(api_cfg.get("protocol", os.getenv("API_PROTOCOL", "http"))).lower()
                if protocol not in ("http", "https"):
                    raise ValueError("API_PROTOCOL must be http or https")
                port = str(api_cfg.get("port", os.getenv("API_PORT", "")) or "").strip()
                base_url = f"{protocol}://{host}:{port}" if port else f"{protocol}://{host}"

        if base_url and not base_url.startswith(("http://", "https://")):
            raise ValueError(f"API_BASE_URL must be a valid URL, got {base_url!r}")

        key_env = str(api_cfg.get("api_key_env", "BOT_API_KEY"))
        self.API_BASE_URL: str = base_url.rstrip("/")
        self.BOT_API_KEY: str | None = os.getenv(key_env)
        self.REQUEST_TIMEOUT: float = float(api_cfg.get("request_timeout", os.getenv("REQUEST_TIMEOUT", "10")))

        required = [
            ("API_BASE_URL", self.API_BASE_URL),
            ("BOT_API_KEY", self.BOT_API_KEY),
        ]
        missing = [name for name, val in required if not val]
        if missing:
            raise ValueError(f"Missing environment variables: {', '.join(missing)}")
