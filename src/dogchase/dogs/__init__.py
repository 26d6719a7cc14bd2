from __future__ import annotations

from .ai import dog_chase_step, dog_pursues, update_dogs

__all__ = [
    "dog_chase_step",
    "dog_pursues",
    "update_dogs",
]
