"""Small geometry helpers shared by the viewport and the hit test."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

Point = Tuple[float, float]
Size = Tuple[float, float]


@dataclass(frozen=True)
class Rect:
    """Axis-aligned rectangle. Containment is inclusive on all four edges."""

    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    def contains(self, point: Point) -> bool:
        px, py = point
        return self.x <= px <= self.right and self.y <= py <= self.bottom


def is_degenerate(size: Size) -> bool:
    """True when either dimension is zero or negative."""
    return size[0] <= 0 or size[1] <= 0
