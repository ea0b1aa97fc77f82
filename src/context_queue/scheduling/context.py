# src/context_queue/scheduling/context.py

from __future__ import annotations

"""
Context-stacking task queue.

A Queue is one nesting level: a FIFO of tasks, a parent link and a running flag.
The instance an application holds is a stable handle: insertion, run, enter and
shift are always forwarded to the context currently selected below it (the leaf),
so nesting created by running tasks is transparent to callers.

Selection is a tagged reference:
- None  -> this context accepts and runs tasks itself
- Queue -> a child entered through enter(); calls are delegated to it
"""

import asyncio
import logging
from collections import deque
from typing import Any

from ..core.ports import Done, NextTick, Task
from ..core.tick import auto_next_tick
from .task_models import ContextState, FunctionTask, NoopTask

logger = logging.getLogger(__name__)


class _Continuation:
    """
    Single-shot `done` handed to a task by the drain loop.

    While the task call is still on the stack (inline), calling it only marks
    completion and the loop iterates. Called later, it resumes the loop.
    """

    __slots__ = ("_queue", "_done", "_called", "_inline", "_stall_handle")

    def __init__(self, queue: Queue, done: Done | None) -> None:
        self._queue = queue
        self._done = done
        self._called = False
        self._inline = True
        self._stall_handle: asyncio.TimerHandle | None = None

    @property
    def called(self) -> bool:
        return self._called

    def __call__(self) -> None:
        if self._called:
            logger.warning("Task continuation called more than once; ignoring (context=%r)", self._queue)
            return
        self._called = True

        if self._stall_handle is not None:
            self._stall_handle.cancel()
            self._stall_handle = None

        if not self._inline:
            self._queue._drain(self._done)

    def _leave_inline(self) -> None:
        self._inline = False

    def _arm_stall_warning(self, seconds: float | None, label: str) -> None:
        if not seconds or seconds <= 0:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # Timers need a loop; without one there is nothing to report from.
            return
        self._stall_handle = loop.call_later(seconds, self._warn_stalled, seconds, label)

    def _warn_stalled(self, seconds: float, label: str) -> None:
        self._stall_handle = None
        if self._called:
            return
        child = self._queue._selected
        if child is not None and child.running:
            # Waiting on its own draining sub-context; a stuck leaf task reports itself.
            return
        logger.warning(
            "Task %s has not signalled completion after %gs; %r stays running with %d pending",
            label,
            seconds,
            self._queue,
            len(self._queue._tasks),
        )


class Queue:
    """
    Cooperative FIFO scheduler with nested contexts.

    Tasks are callables `task(done, context)`; each must call `done()` exactly once.
    A task may call `context.enter()`, queue more work, `context.run(...)` and
    `context.exit(done)` so that the nested work finishes before its successors start.
    """

    def __init__(
        self,
        *,
        next_tick: NextTick | None = None,
        stall_warning_seconds: float | None = None,
    ) -> None:
        self._tasks: deque[Task] = deque()
        self._selected: Queue | None = None
        self._parent: Queue | None = None
        self._running = False

        self._next_tick: NextTick = next_tick or auto_next_tick
        self._stall_warning_seconds = stall_warning_seconds

    def __repr__(self) -> str:
        return (
            f"<Queue depth={self.depth} pending={len(self._tasks)} "
            f"state={self.state.value} nested={self._selected is not None}>"
        )

    # ---- Read-only views ----

    @property
    def parent(self) -> Queue | None:
        return self._parent

    @property
    def depth(self) -> int:
        n = 0
        node = self._parent
        while node is not None:
            n += 1
            node = node._parent
        return n

    @property
    def running(self) -> bool:
        """True while this context's own drain loop is active."""
        return self._running

    @property
    def state(self) -> ContextState:
        return ContextState.RUNNING if self._running else ContextState.IDLE

    @property
    def selected(self) -> Queue:
        """The leaf of the selection path (self when nothing is entered)."""
        node = self
        while node._selected is not None:
            node = node._selected
        return node

    @property
    def length(self) -> int:
        """Pending task count of the selected context, not necessarily this one."""
        return len(self.selected._tasks)

    @length.setter
    def length(self, value: int) -> None:
        tasks = self.selected._tasks
        if value < 0 or value > len(tasks):
            raise ValueError(f"length must be between 0 and {len(tasks)}, got {value}")
        while len(tasks) > value:
            tasks.pop()

    # ---- Insertion ----

    def push_task(self, task: Task | Any) -> Queue:
        """Append a task to the selected context. Non-callables become a NoopTask."""
        if self._selected is not None:
            self._selected.push_task(task)
            return self

        if not callable(task):
            logger.debug("Non-callable task %r replaced with a no-op", task)
            task = NoopTask(task)
        self._tasks.append(task)
        return self

    def push(self, fn: Any) -> Task:
        """
        Queue a plain callable; returns the generated task.

        Anything `fn` queues while it runs lands in a sub-context that drains
        before the generated task signals completion.
        """
        task: Task = FunctionTask(fn) if callable(fn) else NoopTask(fn)
        self.push_task(task)
        return task

    def shift(self) -> Task | None:
        """Remove and return the head task of the selected context (None if empty)."""
        if self._selected is not None:
            return self._selected.shift()
        return self._tasks.popleft() if self._tasks else None

    def clear(self) -> int:
        """Drop every pending task of the selected context; returns how many."""
        tasks = self.selected._tasks
        n = len(tasks)
        tasks.clear()
        return n

    # ---- Nesting ----

    def enter(self, context: Queue | None = None) -> Queue:
        """
        Select a child context below the current leaf and return it.

        A new Queue sharing this one's next-tick primitive is created unless
        `context` is given.
        """
        if self._selected is not None:
            return self._selected.enter(context)

        if context is None:
            child = Queue(next_tick=self._next_tick, stall_warning_seconds=self._stall_warning_seconds)
        else:
            child = context
            node: Queue | None = self
            while node is not None:
                if node is child:
                    raise ValueError("Cannot enter a context that is already on the selection path")
                node = node._parent

        child._parent = self
        self._selected = child
        logger.debug("enter: depth=%d", child.depth)
        return child

    def exit(self, done: Done | None = None) -> Queue:
        """
        Retract the selection path by one level, then call `done`.

        On a context that selects itself this is a no-op for the selection.
        """
        selected = self._selected
        if selected is not None:
            if selected._selected is None:
                self._selected = None
                logger.debug("exit: depth=%d", self.depth)
            else:
                selected.exit()

        if callable(done):
            done()
        return self

    # ---- Drain loop ----

    def run(self, done: Done | None = None) -> Queue:
        """
        Drain the selected context in FIFO order, then call `done`.

        The first task starts on the next tick. Calling run() on a context
        that is already running does nothing (the callback is dropped).
        Returns the context that runs.
        """
        if self._selected is not None:
            return self._selected.run(done)

        if self._running:
            logger.debug("run ignored, already running: %r", self)
            return self

        self._running = True
        if self._tasks:
            self._next_tick(lambda: self._drain(done))
        else:
            self._finish(done)
        return self

    def _drain(self, done: Done | None) -> None:
        while self._tasks:
            task = self._tasks.popleft()
            step = _Continuation(self, done)
            try:
                task(step, self)
            finally:
                step._leave_inline()

            if not step.called:
                # Resumed by the continuation once the task completes.
                step._arm_stall_warning(self._stall_warning_seconds, _task_label(task))
                return

        self._finish(done)

    def _finish(self, done: Done | None) -> None:
        self._running = False
        logger.debug("drained: %r", self)
        if callable(done):
            done()


def _task_label(task: Task) -> str:
    if isinstance(task, FunctionTask):
        task = task.fn  # type: ignore[assignment]
    return getattr(task, "__qualname__", None) or type(task).__name__
