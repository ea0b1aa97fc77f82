# src/context_queue/config.py

"""Settings loaded from environment variables (+ optional .env).

- One Settings object per process (get_settings()).
- Nothing is read at import time; the first get_settings() call loads .env.
- Bad values fall back to defaults instead of failing startup.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import find_dotenv, load_dotenv

ENV_PREFIX = "CTXQ"


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_float(name: str, default: float | None) -> float | None:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- Logging ----
    log_level: str
    log_dir: Path

    # ---- Scheduling ----
    next_tick: str
    stall_warning_seconds: float | None

    # Replace root handlers instead of configuring only the package logger.
    log_own_root: bool = False

    @staticmethod
    def from_env(*, load_env_file: bool = True) -> "Settings":
        if load_env_file:
            # Real environment wins over .env.
            load_dotenv(find_dotenv(usecwd=True), override=False)

        log_level = _env(_k("LOG_LEVEL"), "INFO").strip().upper() or "INFO"
        log_dir = _env_path(_k("LOG_DIR"), Path(".local/context_queue"))
        log_own_root = _env_bool(_k("LOG_OWN_ROOT"), False)

        next_tick = _env(_k("NEXT_TICK"), "auto").strip().lower() or "auto"

        stall = _env_float(_k("STALL_WARNING_SECONDS"), None)
        if stall is not None and stall <= 0:
            stall = None

        return Settings(
            log_level=log_level,
            log_dir=log_dir,
            next_tick=next_tick,
            stall_warning_seconds=stall,
            log_own_root=log_own_root,
        )


_SETTINGS: Settings | None = None


def get_settings() -> Settings:
    global _SETTINGS
    if _SETTINGS is None:
        _SETTINGS = Settings.from_env()
    return _SETTINGS
