from __future__ import annotations

"""Float colors for the yard palette, converted to raylib bytes at draw time."""

from dataclasses import dataclass
from typing import TYPE_CHECKING

from .math import clamp01, lerp

if TYPE_CHECKING:
    import pyray as rl


def _to_byte(channel: float) -> int:
    return int(clamp01(channel) * 255.0 + 0.5)


@dataclass(slots=True, frozen=True)
class RGBA:
    r: float = 1.0
    g: float = 1.0
    b: float = 1.0
    a: float = 1.0

    @classmethod
    def from_hex(cls, packed: int) -> RGBA:
        """Opaque color from a `0xRRGGBB` literal."""
        packed = int(packed) & 0xFFFFFF
        red, green, blue = packed >> 16, (packed >> 8) & 0xFF, packed & 0xFF
        return cls(red / 255.0, green / 255.0, blue / 255.0, 1.0)

    @staticmethod
    def lerp(start: RGBA, end: RGBA, t: float) -> RGBA:
        t = float(t)
        mixed = [lerp(lo, hi, t) for lo, hi in zip(start.to_tuple(), end.to_tuple())]
        return RGBA(*mixed)

    def shaded(self, ambient: float) -> RGBA:
        # Darken toward black; alpha is left alone so ghosts stay translucent.
        scale = clamp01(float(ambient))
        return RGBA(self.r * scale, self.g * scale, self.b * scale, self.a)

    def to_tuple(self) -> tuple[float, float, float, float]:
        return (self.r, self.g, self.b, self.a)

    def to_hex(self) -> int:
        return (_to_byte(self.r) << 16) | (_to_byte(self.g) << 8) | _to_byte(self.b)

    def to_rl(self) -> rl.Color:
        import pyray as rl

        return rl.Color(_to_byte(self.r), _to_byte(self.g), _to_byte(self.b), _to_byte(self.a))
