from __future__ import annotations

from dataclasses import dataclass
import time


@dataclass(slots=True)
class FrameClock:
    """Elapsed real time between simulation steps."""

    max_dt: float = 0.1
    last_s: float | None = None

    def __post_init__(self) -> None:
        max_dt = float(self.max_dt)
        if not (max_dt > 0.0):
            raise ValueError(f"max_dt must be positive, got {max_dt}")
        self.max_dt = max_dt

    def reset(self) -> None:
        self.last_s = None

    def tick(self, now_s: float | None = None) -> float:
        if now_s is None:
            now_s = time.monotonic()
        now_s = float(now_s)
        last_s = self.last_s
        self.last_s = now_s
        if last_s is None:
            return 0.0
        dt = now_s - last_s
        if dt <= 0.0:
            return 0.0
        # Clamp long stalls (window drag, suspended tab) so dogs never teleport.
        if dt > self.max_dt:
            dt = self.max_dt
        return dt
