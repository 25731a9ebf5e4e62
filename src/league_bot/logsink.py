"""
Ship log records to a New-Relic-style HTTP log endpoint.

Records are buffered in memory by :class:`RemoteLogHandler` and posted in
batches by :meth:`RemoteLogHandler.flush_remote`, which the bot schedules
with :func:`league_bot.maintenance.startup`. Logging must never break the
bot, so neither buffering nor shipping raises.
"""

from __future__ import annotations

import collections
import json
import logging
import time
from typing import Any, Deque, Dict, List, Mapping

import aiohttp

logger = logging.getLogger(__name__)

# Attributes every LogRecord carries; anything else arrived through ``extra=``.
_RESERVED = frozenset(logging.LogRecord("", 0, "", 0, "", (), None).__dict__) | {
    "message",
    "asctime",
}


def record_fields(record: logging.LogRecord) -> Dict[str, Any]:
    """The ``extra=`` fields of ``record`` that serialise to JSON."""

    fields: Dict[str, Any] = {}
    for key, value in record.__dict__.items():
        if key in _RESERVED or key.startswith("_"):
            continue
        if isinstance(value, (str, int, float, bool)) or value is None:
            fields[key] = value
        elif isinstance(value, (dict, list, tuple)):
            fields[key] = json.loads(json.dumps(value, default=str))
    return fields


class JsonFormatter(logging.Formatter):
    """Formatter that renders log records as JSON objects."""

    def __init__(self, static: Mapping[str, Any] | None = None) -> None:
        super().__init__()
        self._static = dict(static or {})

    def to_dict(self, record: logging.LogRecord) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "ts": time.strftime("%Y-%m-%dT%H:%M:%S", time.gmtime(record.created))
            + f".{int(record.msecs):03d}Z",
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        payload.update(self._static)
        for key, value in record_fields(record).items():
            payload.setdefault(key, value)
        return payload

    def format(self, record: logging.LogRecord) -> str:
        return json.dumps(self.to_dict(record), ensure_ascii=False, default=str)


class RemoteLogHandler(logging.Handler):
    """Bounded in-memory buffer of log entries awaiting shipment."""

    def __init__(
        self,
        *,
        endpoint: str,
        license_key: str,
        app_name: str,
        buffer_size: int = 1000,
        level: int = logging.INFO,
    ) -> None:
        super().__init__(level=level)
        self.endpoint = endpoint
        self.license_key = license_key
        self.app_name = app_name
        self._buffer: Deque[Dict[str, Any]] = collections.deque(maxlen=buffer_size)
        self.setFormatter(JsonFormatter({"service": app_name}))

    def emit(self, record: logging.LogRecord) -> None:
        # Our own shipping failures must not feed back into the buffer.
        if record.name == __name__:
            return
        try:
            attributes = self.formatter.to_dict(record)
            self._buffer.append(
                {
                    "timestamp": int(record.created * 1000),
                    "message": attributes.pop("msg"),
                    "attributes": attributes,
                }
            )
        except Exception:
            self.handleError(record)

    def drain(self) -> List[Dict[str, Any]]:
        batch = list(self._buffer)
        self._buffer.clear()
        return batch

    def __len__(self) -> int:
        return len(self._buffer)

    async def flush_remote(self, session: aiohttp.ClientSession | None = None) -> int:
        """
        Post every buffered entry in one request.

        Returns the number of entries shipped. On failure the batch is dropped
        and a warning is logged.
        """

        batch = self.drain()
        if not batch:
            return 0

        body = [{"common": {"attributes": {"service": self.app_name}}, "logs": batch}]
        headers = {"Api-Key": self.license_key, "Content-Type": "application/json"}
        owns_session = session is None
        session = session or aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=10))
        try:
            async with session.post(self.endpoint, json=body, headers=headers) as resp:
                resp.raise_for_status()
        except Exception as exc:
            logger.warning("Dropped %d log entries: %r", len(batch), exc)
            return 0
        finally:
            if owns_session:
                await session.close()
        return len(batch)


def install(settings: Any, root: logging.Logger | None = None) -> RemoteLogHandler | None:
    """Attach a :class:`RemoteLogHandler` to ``root`` when a licence key is configured."""

    if not settings.ENABLED:
        logger.info("Remote log sink disabled (no licence key configured)")
        return None

    handler = RemoteLogHandler(
        endpoint=settings.NEW_RELIC_LOG_ENDPOINT,
        license_key=settings.NEW_RELIC_LICENSE_KEY,
        app_name=settings.NEW_RELIC_APP_NAME,
        buffer_size=settings.LOG_BUFFER_SIZE,
    )
    (root or logging.getLogger()).addHandler(handler)
    logger.info("Remote log sink enabled for %s", settings.NEW_RELIC_APP_NAME)
    return handler


__all__ = ["JsonFormatter", "RemoteLogHandler", "install", "record_fields"]
