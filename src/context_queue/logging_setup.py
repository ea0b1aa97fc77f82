# src/context_queue/logging_setup.py

from __future__ import annotations

import logging
import sys
from pathlib import Path

PACKAGE_LOGGER = "context_queue"
LOG_FILE_NAME = "context_queue.log"

# Handlers installed by setup_logging(); replaced on the next call.
_installed: list[tuple[logging.Logger, logging.Handler]] = []


class _ConsoleNoiseFilter(logging.Filter):
    """
    Used when we own the root logger:
    - allow context_queue logs
    - suppress Python warnings (captured as 'py.warnings') unless ERROR+
    - suppress third-party noise unless ERROR+
    """

    def filter(self, record: logging.LogRecord) -> bool:
        name = record.name
        if name == PACKAGE_LOGGER or name.startswith(PACKAGE_LOGGER + "."):
            return True
        return record.levelno >= logging.ERROR


def teardown_logging() -> None:
    """Remove and close every handler installed by setup_logging()."""
    while _installed:
        target, h = _installed.pop()
        target.removeHandler(h)
        h.close()


def setup_logging(
    *,
    log_dir: str | Path | None = ".local/context_queue",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
    own_root: bool = False,
) -> Path | None:
    """
    Attach a console handler and (when log_dir is set) a file handler.

    Library mode (default): handlers go on the 'context_queue' logger, which
    stops propagating; the host's root configuration is left alone.

    own_root=True, for standalone scripts: every root handler is replaced,
    the console drops third-party records below ERROR and warnings.warn(...)
    is routed into logging.

    Safe to call again: only handlers from an earlier call are replaced.
    Returns the log file path, or None without a file handler.
    """
    teardown_logging()

    if own_root:
        target = logging.getLogger()
        for h in list(target.handlers):
            target.removeHandler(h)
    else:
        target = logging.getLogger(PACKAGE_LOGGER)
        target.propagate = False

    target.setLevel(min(console_level, file_level) if log_dir is not None else console_level)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    ch = logging.StreamHandler(sys.stderr)
    ch.setLevel(console_level)
    ch.setFormatter(fmt)
    if own_root:
        ch.addFilter(_ConsoleNoiseFilter())
    target.addHandler(ch)
    _installed.append((target, ch))

    log_file: Path | None = None
    if log_dir is not None:
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        log_file = log_dir / LOG_FILE_NAME

        fh = logging.FileHandler(str(log_file), encoding="utf-8")
        fh.setLevel(file_level)
        fh.setFormatter(fmt)
        target.addHandler(fh)
        _installed.append((target, fh))

    if own_root:
        logging.captureWarnings(True)
        # asyncio logs every slow callback at DEBUG; the drain loop runs inside them.
        logging.getLogger("asyncio").setLevel(logging.WARNING)

    return log_file
