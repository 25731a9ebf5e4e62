"""In-memory per-user command cooldowns."""

from __future__ import annotations

import asyncio
import logging
import math
import time
from typing import Callable

from league_bot import maintenance

logger = logging.getLogger(__name__)

SWEEP_INTERVAL = 60.0


def _now_ms() -> int:
    return int(time.time() * 1000)


class CooldownTracker:
    """
    Track ``(user, command)`` cooldown expiries.

    An entry whose expiry is at or before "now" counts as absent even if the
    periodic sweep has not removed it yet; :meth:`check_remaining` deletes it
    on sight.
    """

    def __init__(
        self,
        *,
        clock: Callable[[], int] = _now_ms,
        sweep_interval: float = SWEEP_INTERVAL,
    ) -> None:
        self._clock = clock
        self._sweep_interval = sweep_interval
        self._expiries: dict[str, int] = {}
        self._sweep_task: asyncio.Task | None = None

    @staticmethod
    def _key(user_id: int | str, command_name: str) -> str:
        # Snowflakes are digits only, so ":" never occurs inside either part.
        return f"{user_id}:{command_name}"

    def check_remaining(self, user_id: int | str, command_name: str) -> int:
        """Seconds left on the cooldown (rounded up), ``0`` when free."""

        key = self._key(user_id, command_name)
        expires_at = self._expiries.get(key)
        if expires_at is None:
            return 0

        now = self._clock()
        if now >= expires_at:
            del self._expiries[key]
            return 0

        return math.ceil((expires_at - now) / 1000)

    def set(self, user_id: int | str, command_name: str, duration_seconds: float) -> None:
        key = self._key(user_id, command_name)
        self._expiries[key] = self._clock() + int(duration_seconds * 1000)
        logger.info("Cooldown set for %s on %s: %ss", user_id, command_name, duration_seconds)

    def clear(self, user_id: int | str, command_name: str) -> None:
        self._expiries.pop(self._key(user_id, command_name), None)

    def sweep(self) -> int:
        """Drop every expired entry and return how many were removed."""

        now = self._clock()
        expired = [key for key, expires_at in self._expiries.items() if now >= expires_at]
        for key in expired:
            del self._expiries[key]
        if expired:
            logger.info("Cleaned up %d expired cooldown entries", len(expired))
        return len(expired)

    def __len__(self) -> int:
        return len(self._expiries)

    # ----------------------------- lifecycle ----------------------------- #

    def start(self) -> asyncio.Task:
        """Schedule the periodic sweep on the running loop (idempotent)."""

        if self._sweep_task is None or self._sweep_task.done():
            self._sweep_task = maintenance.startup(
                self.sweep, self._sweep_interval, name="cooldown-sweep"
            )
        return self._sweep_task

    async def stop(self) -> None:
        """Cancel the sweep and forget every entry."""

        await maintenance.shutdown(self._sweep_task)
        self._sweep_task = None
        self._expiries.clear()


__all__ = ["CooldownTracker", "SWEEP_INTERVAL"]
