from __future__ import annotations

import os

DEBUG_ENV = "DOGCHASE_DEBUG"
_TRUTHY = frozenset({"1", "true", "yes", "on"})

# Set by `--debug`; wins over the environment for the rest of the process.
_DEBUG_OVERRIDE: bool | None = None


def set_debug_enabled(enabled: bool) -> None:
    global _DEBUG_OVERRIDE
    _DEBUG_OVERRIDE = bool(enabled)


def debug_enabled() -> bool:
    override = _DEBUG_OVERRIDE
    if override is None:
        return os.environ.get(DEBUG_ENV, "").strip().lower() in _TRUTHY
    return override
