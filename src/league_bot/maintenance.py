"""
Periodic background jobs.

The cooldown sweep and the remote log flush both run on a fixed interval
independent of interaction traffic. They are scheduled here and cancelled on
bot shutdown so no timer handle outlives the event loop.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable

logger = logging.getLogger(__name__)


def startup(
    task_fn: Callable[[], Awaitable[None] | None], interval: float, *, name: str = "periodic"
) -> asyncio.Task:
    """
    Schedule ``task_fn`` to run every ``interval`` seconds.

    ``task_fn`` may be a plain function or a coroutine function. The first run
    happens one interval after scheduling. A failing cycle is logged and the
    loop keeps going.

    Returns the created :class:`asyncio.Task` handle.
    """

    async def _periodic() -> None:
        while True:
            await asyncio.sleep(interval)
            try:
                result = task_fn()
                if asyncio.iscoroutine(result):
                    await result
            except Exception:
                logger.exception("Periodic job %s failed", name)

    return asyncio.create_task(_periodic(), name=name)


async def shutdown(task: asyncio.Task | None) -> None:
    """
    Cancel a job started with :func:`startup` and wait for it to finish.

    Tolerates ``None`` and tasks that already completed.
    """

    if not task:
        return

    task.cancel()
    try:
        await task
    except asyncio.CancelledError:  # normal cancellation
        pass


__all__ = ["startup", "shutdown"]
