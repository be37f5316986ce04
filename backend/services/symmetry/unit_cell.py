"""User-adjustable parallelogram overlay marking one repeating tile."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Dict, Mapping, Union

from services.symmetry.models import Point


CORNERS = ("A", "B", "C", "D")

PointLike = Union[Point, Mapping[str, float]]


def _clamp_unit(point: PointLike) -> Point:
    if isinstance(point, Point):
        x, y = point.x, point.y
    else:
        x, y = point["x"], point["y"]
    return Point(min(max(float(x), 0.0), 1.0), min(max(float(y), 0.0), 1.0))


@dataclass(frozen=True)
class UnitCell:
    """Corners in normalised image coordinates, each kept inside [0, 1].

    The outline runs A-B-D-C; AD and BC are the diagonals.
    """

    A: Point = Point(0.15, 0.15)
    B: Point = Point(0.45, 0.15)
    C: Point = Point(0.2, 0.45)
    D: Point = Point(0.5, 0.45)

    @classmethod
    def from_corners(cls, corners: Mapping[str, PointLike]) -> "UnitCell":
        return cls(**{name: _clamp_unit(corners[name]) for name in CORNERS})

    def move_corner(self, corner: str, point: PointLike) -> "UnitCell":
        if corner not in CORNERS:
            raise ValueError(f"Unknown unit cell corner: {corner!r}")
        return replace(self, **{corner: _clamp_unit(point)})

    def to_dict(self) -> Dict[str, Dict[str, float]]:
        return {name: getattr(self, name).to_dict() for name in CORNERS}
