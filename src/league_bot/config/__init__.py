"""Bot configuration"""

import logging
from dotenv import load_dotenv

from .loader import load_raw_config
from .core import Core
from .backend import Backend
from .commands import Commands
from .observability import Observability

load_dotenv()

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] [%(name)s]: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

logging.basicConfig(format=LOG_FORMAT, datefmt=DATE_FORMAT, level=logging.INFO)
logging.getLogger("discord.http").setLevel(logging.WARNING)

_RAW_CONFIG = load_raw_config()

core = Core(_RAW_CONFIG)
backend = Backend(_RAW_CONFIG)
commands = Commands(_RAW_CONFIG)
observability = Observability(_RAW_CONFIG)


class Config:
    core = core
    backend = backend
    commands = commands
    observability = observability


__all__ = ["core", "backend", "commands", "observability", "Config"]
