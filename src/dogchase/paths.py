from __future__ import annotations

import os
from pathlib import Path

RUNTIME_DIR_ENV = "DOGCHASE_RUNTIME_DIR"


def default_runtime_dir() -> Path:
    """Per-user directory for config and logs; `DOGCHASE_RUNTIME_DIR` overrides it."""
    override = os.environ.get(RUNTIME_DIR_ENV, "").strip()
    if override:
        return Path(override).expanduser()
    return Path.home() / ".dogchase"
