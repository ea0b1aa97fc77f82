# tests/conftest.py

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from context_queue.config import Settings
from context_queue.logging_setup import PACKAGE_LOGGER, teardown_logging
from context_queue.scheduling.context import Queue

from .fakes import Counter, ManualTick, Recorder


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    """
    Settings built directly rather than from the environment,
    to keep unit tests isolated and deterministic.
    """
    return Settings(
        log_level="DEBUG",
        log_dir=tmp_path / "logs",
        next_tick="sync",
        stall_warning_seconds=None,
    )


@pytest.fixture()
def tick() -> ManualTick:
    return ManualTick()


@pytest.fixture()
def queue(tick: ManualTick) -> Queue:
    """Root queue whose drain loop only starts on tick.flush()."""
    return Queue(next_tick=tick)


@pytest.fixture()
def recorder() -> Recorder:
    return Recorder()


@pytest.fixture()
def counter() -> Counter:
    return Counter()


@pytest.fixture()
def restore_root_logging():
    """setup_logging() may replace root handlers; put pytest's back afterwards."""
    root = logging.getLogger()
    package = logging.getLogger(PACKAGE_LOGGER)
    handlers = list(root.handlers)
    saved = (root.level, package.level, package.propagate)
    yield root
    teardown_logging()
    for h in handlers:
        if h not in root.handlers:
            root.addHandler(h)
    root.setLevel(saved[0])
    package.setLevel(saved[1])
    package.propagate = saved[2]
    logging.captureWarnings(False)
