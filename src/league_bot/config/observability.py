import os

from .loader import section

_DEFAULT_LOG_ENDPOINT = "https://log-api.newrelic.com/log/v1"


class Observability:
    def __init__(self, config: dict | None = None) -> None:
        obs_cfg = section(config, "observability")

        self.NEW_RELIC_LICENSE_KEY: str | None = os.getenv(
            str(obs_cfg.get("license_key_env", "NEW_RELIC_LICENSE_KEY"))
        )
        self.NEW_RELIC_APP_NAME: str = str(obs_cfg.get("app_name", os.getenv("NEW_RELIC_APP_NAME", "league-bot")))
        self.NEW_RELIC_LOG_ENDPOINT: str = str(
            obs_cfg.get("log_endpoint", os.getenv("NEW_RELIC_LOG_ENDPOINT", _DEFAULT_LOG_ENDPOINT))
        )
        self.LOG_FLUSH_INTERVAL: float = float(obs_cfg.get("flush_interval", os.getenv("LOG_FLUSH_INTERVAL", "5")))
        self.LOG_BUFFER_SIZE: int = int(obs_cfg.get("buffer_size", os.getenv("LOG_BUFFER_SIZE", "1000")))

    @property
    def ENABLED(self) -> bool:
        return bool(self.NEW_RELIC_LICENSE_KEY)
