# src/context_queue/scheduling/task_models.py

from __future__ import annotations

import asyncio
import inspect
import logging
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Any, Awaitable, Callable

logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from ..core.ports import Done
    from .context import Queue


class ContextState(StrEnum):
    """
    Drain loop state of a single context.

    Idle -> Running -> Idle. A context never drains twice at once.
    """

    IDLE = "idle"
    RUNNING = "running"


@dataclass(slots=True, frozen=True)
class NoopTask:
    """
    Stand-in for malformed queue input.

    Signals completion immediately, so the drain loop advances without waiting.
    `source` keeps the rejected value for inspection.
    """

    source: Any = None

    def __call__(self, done: Done, context: Queue) -> None:
        done()


@dataclass(slots=True, frozen=True)
class FunctionTask:
    """
    Task built by Queue.push(fn).

    Runs `fn` inside a fresh sub-context of the context it runs under:
    - enter a sub-context (anything fn queues lands there),
    - call fn synchronously,
    - drain the sub-context, exit it, then signal completion.
    """

    fn: Callable[[], Any]

    def __call__(self, done: Done, context: Queue) -> None:
        context.enter()
        self.fn()
        context.run(lambda: context.exit(done))


@dataclass(slots=True, frozen=True)
class AsyncFunctionTask:
    """
    Coroutine flavour of FunctionTask, built by task_api.push_async().

    The sub-context stays selected while the coroutine is awaited; it is drained
    and exited once the coroutine returns. A coroutine that raises leaves the
    queue stalled, the same as a task that never calls `done`.
    """

    fn: Callable[[], Awaitable[Any]]

    def __call__(self, done: Done, context: Queue) -> None:
        asyncio.get_running_loop()  # RuntimeError without a loop, before anything is entered
        # Build the awaitable before entering, so a bad fn leaves the selection untouched.
        awaitable = self.fn()
        if not inspect.isawaitable(awaitable):
            raise TypeError(f"push_async() expects a coroutine function, {self.fn!r} returned {awaitable!r}")

        context.enter()
        fut = asyncio.ensure_future(awaitable)
        _inflight.add(fut)
        fut.add_done_callback(lambda f: self._resume(f, done, context))

    def _resume(self, fut: asyncio.Task, done: Done, context: Queue) -> None:
        _inflight.discard(fut)
        if fut.cancelled():
            logger.warning("Coroutine task %r was cancelled; %r stays stalled", self.fn, context)
            return
        exc = fut.exception()
        if exc is not None:
            logger.error("Coroutine task %r failed; %r stays stalled", self.fn, context, exc_info=exc)
            return
        context.run(lambda: context.exit(done))


# Strong references for coroutines scheduled by AsyncFunctionTask.
_inflight: set[asyncio.Task] = set()
