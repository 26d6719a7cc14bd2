from __future__ import annotations

"""Scalar helpers shared by the simulation and the renderer."""

import math


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def clamp01(value: float) -> float:
    return max(0.0, min(1.0, value))


def lerp(start: float, end: float, t: float) -> float:
    return start + (end - start) * t


def finite_or_zero(value: float) -> float:
    """Coerce to float and map NaN or infinities to 0.0."""
    number = float(value)
    return number if math.isfinite(number) else 0.0


def wrap01(value: float) -> float:
    """Fold into [0, 1); exactly 1.0 folds back to 0.0."""
    folded = float(value) % 1.0
    return 0.0 if folded >= 1.0 else folded
