# src/context_queue/core/tick.py

"""
Next-tick primitives.

The drain loop never starts synchronously: it is posted to the host so that
callers finishing the same synchronous turn can queue related work first.

- asyncio_next_tick: post to the running event loop (loop.call_soon)
- sync_next_tick: call immediately (fallback when there is no loop)
- auto_next_tick: asyncio when a loop runs in this thread, sync otherwise
"""

from __future__ import annotations

import asyncio
from typing import Callable

from .ports import NextTick


def asyncio_next_tick(callback: Callable[[], None]) -> None:
    # Raises RuntimeError outside a running loop.
    loop = asyncio.get_running_loop()
    loop.call_soon(callback)


def sync_next_tick(callback: Callable[[], None]) -> None:
    callback()


def auto_next_tick(callback: Callable[[], None]) -> None:
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        callback()
        return
    loop.call_soon(callback)


_BY_NAME: dict[str, NextTick] = {
    "auto": auto_next_tick,
    "asyncio": asyncio_next_tick,
    "sync": sync_next_tick,
}


def resolve_next_tick(name: str | None) -> NextTick:
    """Map a settings value ("auto" | "asyncio" | "sync") to a primitive."""
    key = (name or "auto").strip().lower()
    try:
        return _BY_NAME[key]
    except KeyError:
        raise ValueError(f"Unknown next-tick primitive: {name!r}") from None
