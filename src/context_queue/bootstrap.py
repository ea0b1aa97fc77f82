# src/context_queue/bootstrap.py

"""
Composition root.

- loads settings once,
- configures logging from settings,
- wires the configured next-tick primitive and stall diagnostic into a root Queue.
"""

from __future__ import annotations

import logging
from pathlib import Path

from .config import Settings, get_settings
from .core.tick import resolve_next_tick
from .logging_setup import setup_logging
from .scheduling.context import Queue

logger = logging.getLogger(__name__)


def init_logging(settings: Settings | None = None) -> Path | None:
    if settings is None:
        settings = get_settings()

    console_level = getattr(logging, str(settings.log_level).upper(), logging.INFO)
    if not isinstance(console_level, int):
        console_level = logging.INFO

    log_file = setup_logging(
        log_dir=settings.log_dir,
        console_level=console_level,
        own_root=settings.log_own_root,
    )
    logger.debug("Logging to %s", log_file)
    return log_file


def create_queue(*, settings: Settings | None = None) -> Queue:
    """
    Create a root Queue from the provided settings.

    Settings stay injectable for tests; falls back to get_settings().
    Raises ValueError for an unknown next-tick name.
    """
    if settings is None:
        settings = get_settings()

    queue = Queue(
        next_tick=resolve_next_tick(settings.next_tick),
        stall_warning_seconds=settings.stall_warning_seconds,
    )
    logger.debug(
        "Created root queue (next_tick=%s, stall_warning_seconds=%s)",
        settings.next_tick,
        settings.stall_warning_seconds,
    )
    return queue
