# tests/test_config.py

from __future__ import annotations

from pathlib import Path

import pytest

from context_queue.config import Settings

_VARS = ("CTXQ_LOG_LEVEL", "CTXQ_LOG_DIR", "CTXQ_LOG_OWN_ROOT", "CTXQ_NEXT_TICK", "CTXQ_STALL_WARNING_SECONDS")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    # setenv first so monkeypatch restores values load_dotenv() writes behind its back.
    for name in _VARS:
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)


def test_defaults() -> None:
    s = Settings.from_env(load_env_file=False)
    assert s.log_level == "INFO"
    assert s.log_dir == Path(".local/context_queue")
    assert s.next_tick == "auto"
    assert s.stall_warning_seconds is None
    assert s.log_own_root is False


def test_values_from_environment(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setenv("CTXQ_LOG_LEVEL", "debug")
    monkeypatch.setenv("CTXQ_LOG_DIR", str(tmp_path))
    monkeypatch.setenv("CTXQ_NEXT_TICK", "SYNC")
    monkeypatch.setenv("CTXQ_STALL_WARNING_SECONDS", "2.5")
    monkeypatch.setenv("CTXQ_LOG_OWN_ROOT", "yes")

    s = Settings.from_env(load_env_file=False)
    assert s.log_level == "DEBUG"
    assert s.log_dir == tmp_path
    assert s.next_tick == "sync"
    assert s.stall_warning_seconds == 2.5
    assert s.log_own_root is True


@pytest.mark.parametrize("raw", ["abc", "0", "-3", ""])
def test_bad_or_disabled_stall_value_turns_diagnostic_off(monkeypatch, raw: str) -> None:
    monkeypatch.setenv("CTXQ_STALL_WARNING_SECONDS", raw)
    assert Settings.from_env(load_env_file=False).stall_warning_seconds is None


def test_dotenv_file_is_loaded_without_overriding(monkeypatch, tmp_path: Path) -> None:
    (tmp_path / ".env").write_text("CTXQ_NEXT_TICK=asyncio\nCTXQ_LOG_LEVEL=WARNING\n", "utf-8")
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("CTXQ_LOG_LEVEL", "ERROR")

    s = Settings.from_env()

    assert s.next_tick == "asyncio"
    assert s.log_level == "ERROR"


def test_get_settings_is_cached(monkeypatch, tmp_path: Path) -> None:
    from context_queue import config

    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(config, "_SETTINGS", None)

    first = config.get_settings()
    assert config.get_settings() is first
