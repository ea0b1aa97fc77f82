# src/context_queue/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the scheduler.

The queue depends on Protocols instead of concrete callables.
This keeps the next-tick primitive swappable and makes tests deterministic.
"""

from typing import TYPE_CHECKING, Callable, Protocol

if TYPE_CHECKING:
    from ..scheduling.context import Queue

Done = Callable[[], None]
# Completion continuation: call exactly once when the task is finished.


class Task(Protocol):
    """Unit of work: receives its continuation and the context it runs under."""
    def __call__(self, done: Done, context: Queue) -> None: ...


class NextTick(Protocol):
    """
    Host-side port: defer a zero-argument callback until the current
    synchronous execution has unwound.
    """

    def __call__(self, callback: Callable[[], None]) -> None: ...
