from __future__ import annotations

from pathlib import Path

import pytest

from dogchase.debug import debug_enabled, set_debug_enabled
from dogchase.debug_log import close_debug_log, debug_log, debug_log_path, init_debug_log


def test_debug_log_writes_events_to_file(tmp_path: Path) -> None:
    log_path = init_debug_log(base_dir=tmp_path, role="Server", bind="0.0.0.0", port=31994)
    debug_log("net_join", addr="127.0.0.1:5000", players=1)

    assert debug_log_path() == log_path
    assert log_path.parent == tmp_path / "logs"
    assert log_path.name.startswith("server-pid")
    text = log_path.read_text(encoding="utf-8")
    assert "event=init" in text
    assert "role=server" in text
    assert "port=31994" in text
    assert "event=net_join" in text
    assert "players=1" in text

    close_debug_log()
    assert debug_log_path() is None


def test_debug_log_is_a_noop_until_initialized(tmp_path: Path) -> None:
    debug_log("orphan", value=1)
    assert debug_log_path() is None
    assert not (tmp_path / "logs").exists()


def test_debug_log_escapes_newlines(tmp_path: Path) -> None:
    log_path = init_debug_log(base_dir=tmp_path, role="client")
    debug_log("note", text="a\nb")
    lines = log_path.read_text(encoding="utf-8").splitlines()
    assert lines[-1].endswith("text=a\\nb")


def test_debug_flag_reads_env_until_overridden(monkeypatch: pytest.MonkeyPatch) -> None:
    assert debug_enabled() is False
    monkeypatch.setenv("DOGCHASE_DEBUG", "yes")
    assert debug_enabled() is True
    set_debug_enabled(False)
    assert debug_enabled() is False
