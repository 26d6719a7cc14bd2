from __future__ import annotations

import sys
from pathlib import Path

import pytest


def pytest_addoption(parser: pytest.Parser) -> None:
    parser.addoption(
        "--run-net",
        action="store_true",
        default=False,
        help="run tests that bind real UDP sockets on loopback",
    )


def pytest_configure(config: pytest.Config) -> None:
    # Ensure the local `src/` tree wins over any other editable install that may exist
    # (e.g. a different git worktree pointing at the same project).
    src_dir = Path(__file__).resolve().parents[1] / "src"
    src_str = str(src_dir)
    if src_str not in sys.path:
        sys.path.insert(0, src_str)
    config.addinivalue_line("markers", "net: tests that open real UDP sockets (opt-in)")


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    if config.getoption("--run-net"):
        return
    skip_net = pytest.mark.skip(reason="use --run-net to run loopback socket tests")
    for item in items:
        if "net" in item.keywords:
            item.add_marker(skip_net)


@pytest.fixture(autouse=True)
def _isolated_debug_log(monkeypatch: pytest.MonkeyPatch):
    from dogchase.debug_log import close_debug_log

    monkeypatch.setattr("dogchase.debug._DEBUG_OVERRIDE", None)
    monkeypatch.delenv("DOGCHASE_DEBUG", raising=False)
    close_debug_log()
    yield
    close_debug_log()
