from __future__ import annotations

"""Append-only `key=value` event log for chasing down session and roster bugs.

Nothing is written until `init_debug_log` picks a file; afterwards every
`debug_log` call appends one line, from any thread.
"""

import datetime as dt
import os
from pathlib import Path
from threading import Lock


_lock = Lock()
_log_path: Path | None = None


def _utc_now() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


def _escape(value: object) -> str:
    # One event per line.
    return str(value).replace("\n", "\\n")


def _render_line(event: str, fields: dict[str, object]) -> str:
    stamp = _utc_now().isoformat(timespec="milliseconds")
    pairs = " ".join(f"{key}={_escape(fields[key])}" for key in sorted(fields))
    head = f"{stamp} event={str(event).strip()}"
    return f"{head} {pairs}\n" if pairs else f"{head}\n"


def debug_log_path() -> Path | None:
    with _lock:
        return _log_path


def init_debug_log(*, base_dir: Path, role: str, **fields: object) -> Path:
    """Start a fresh log under `base_dir/logs`, one file per process and role."""
    global _log_path
    role_name = str(role).strip().lower() or "unknown"
    pid = os.getpid()
    started = _utc_now().strftime("%Y%m%dT%H%M%S.%fZ")
    path = Path(base_dir) / "logs" / f"{role_name}-pid{pid}-{started}.log"
    path.parent.mkdir(parents=True, exist_ok=True)
    with _lock:
        _log_path = path
    debug_log("init", role=role_name, pid=pid, **fields)
    return path


def debug_log(event: str, **fields: object) -> None:
    line = _render_line(event, fields)
    with _lock:
        if _log_path is None:
            return
        with _log_path.open("a", encoding="utf-8") as handle:
            handle.write(line)


def close_debug_log() -> None:
    global _log_path
    with _lock:
        _log_path = None


__all__ = [
    "close_debug_log",
    "debug_log",
    "debug_log_path",
    "init_debug_log",
]
