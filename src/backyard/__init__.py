from __future__ import annotations

__all__ = [
    "color",
    "config",
    "geom",
    "math",
]
