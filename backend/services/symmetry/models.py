"""Shared geometric value types for the symmetry proof engine.

All coordinates are pixels in the source image's own coordinate space, never
the zoomed display space of the frontend.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Tuple

import numpy as np


class ProofType(str, Enum):
    NONE = "none"
    ROTATION = "rotation"
    MIRROR = "mirror"
    GLIDE = "glide"


@dataclass(frozen=True)
class Point:
    x: float
    y: float

    def to_tuple(self) -> Tuple[float, float]:
        return self.x, self.y

    def to_dict(self) -> Dict[str, float]:
        return {"x": float(self.x), "y": float(self.y)}


@dataclass(frozen=True)
class Line:
    """Directed segment; the direction signs the axis for reflections and glides."""

    x1: float
    y1: float
    x2: float
    y2: float

    @property
    def midpoint(self) -> Point:
        return Point((self.x1 + self.x2) / 2, (self.y1 + self.y2) / 2)

    @property
    def is_degenerate(self) -> bool:
        return self.x1 == self.x2 and self.y1 == self.y2

    def to_tuple(self) -> Tuple[float, float, float, float]:
        return self.x1, self.y1, self.x2, self.y2

    def to_dict(self) -> Dict[str, float]:
        return {"x1": float(self.x1), "y1": float(self.y1), "x2": float(self.x2), "y2": float(self.y2)}


@dataclass(frozen=True, eq=False)
class PatchSample:
    """Square crop of the source image used as the comparison unit of a proof.

    `origin` is the crop's top-left corner in image space, `relative_focus` the
    requested focus expressed relative to `origin`. `size` may be smaller than
    the requested side when the image is small.
    """

    buffer: np.ndarray
    origin: Point
    relative_focus: Point
    size: int

    def to_dict(self) -> Dict[str, object]:
        return {
            "origin": self.origin.to_dict(),
            "relativeFocus": self.relative_focus.to_dict(),
            "size": int(self.size),
        }
