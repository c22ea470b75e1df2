"""
vector.py - 2D Vector Value Type
=================================
Single-cell view of the flow field. The grids themselves are stored as
(H, W, 2) float32 arrays; Vec2D is what you get when you pull one cell out.
"""

import math
from typing import NamedTuple


class Vec2D(NamedTuple):
    x: float
    y: float

    def length(self) -> float:
        return math.sqrt(self.x * self.x + self.y * self.y)
