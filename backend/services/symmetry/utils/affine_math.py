from __future__ import annotations

import math
from typing import Tuple

import numpy as np


Matrix = np.ndarray
LineTuple = Tuple[float, float, float, float]


def translation(dx: float, dy: float) -> Matrix:
    return np.array([[1.0, 0.0, dx], [0.0, 1.0, dy], [0.0, 0.0, 1.0]], dtype=float)


def rotation(angle_rad: float) -> Matrix:
    """Rotation about the origin. Positive angles turn clockwise on screen (y points down)."""
    c = math.cos(angle_rad)
    s = math.sin(angle_rad)
    return np.array([[c, -s, 0.0], [s, c, 0.0], [0.0, 0.0, 1.0]], dtype=float)


def scaling(sx: float, sy: float) -> Matrix:
    return np.array([[sx, 0.0, 0.0], [0.0, sy, 0.0], [0.0, 0.0, 1.0]], dtype=float)


def axis_angle(line: LineTuple) -> float:
    x1, y1, x2, y2 = line
    return math.atan2(y2 - y1, x2 - x1)


def rotation_about(cx: float, cy: float, angle_deg: float) -> Matrix:
    """Rotate the plane by `angle_deg` around (cx, cy)."""
    return translation(cx, cy) @ rotation(math.radians(angle_deg)) @ translation(-cx, -cy)


def glide_along(line: LineTuple, distance: float) -> Matrix:
    """Reflect across the infinite line through `line`, then slide `distance` along it.

    The slide direction follows the line from its first endpoint to its second.
    """
    x1, y1, _, _ = line
    angle = axis_angle(line)
    return (
        translation(x1, y1)
        @ rotation(angle)
        @ scaling(1.0, -1.0)
        @ translation(distance, 0.0)
        @ rotation(-angle)
        @ translation(-x1, -y1)
    )


def reflection_across(line: LineTuple) -> Matrix:
    return glide_along(line, 0.0)


def apply(matrix: Matrix, x: float, y: float) -> Tuple[float, float]:
    out = matrix @ np.array([x, y, 1.0], dtype=float)
    return float(out[0]), float(out[1])


def patch_warp_matrix(transform: Matrix, origin: Tuple[float, float]) -> np.ndarray:
    """Build the 2x3 cv2 warp for rendering `transform` into a patch window.

    `transform` acts on continuous image coordinates, where pixel (i, j) covers
    [i, i + 1) x [j, j + 1). cv2 addresses pixel centres at integer positions, so
    the result is conjugated by a half-pixel shift.
    """
    ox, oy = origin
    to_patch = translation(-ox, -oy) @ transform
    index_space = translation(-0.5, -0.5) @ to_patch @ translation(0.5, 0.5)
    return index_space[:2, :].astype(np.float64)
