# src/context_queue/scheduling/task_api.py

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable

from ..core.ports import Task
from .context import Queue
from .task_models import AsyncFunctionTask

logger = logging.getLogger(__name__)


async def drain(queue: Queue) -> Queue:
    """
    Awaitable form of queue.run(done).

    Resolves once the selected context has no pending tasks left.
    Returns the context that ran.
    """
    target = queue.selected
    if target.running:
        # run() would drop our callback and the future would never resolve.
        raise RuntimeError(f"{target!r} is already running")

    loop = asyncio.get_running_loop()
    finished: asyncio.Future[None] = loop.create_future()

    def _done() -> None:
        if not finished.done():
            finished.set_result(None)

    ran = queue.run(_done)
    await finished
    logger.debug("drain finished: %r", ran)
    return ran


def push_async(queue: Queue, fn: Callable[[], Awaitable[Any]]) -> Task:
    """
    Queue a coroutine function; returns the generated task.

    Work queued while the coroutine is pending lands in its sub-context and
    drains before the task signals completion. Requires a running event loop
    when the task executes.
    """
    if not callable(fn):
        return queue.push(fn)
    task = AsyncFunctionTask(fn)
    queue.push_task(task)
    return task
