"""Read-only raster wrapper handed to the proof engine."""

from __future__ import annotations

from pathlib import Path
from typing import Tuple, Union

import cv2
import numpy as np

from services.symmetry.utils.affine_math import Matrix, patch_warp_matrix
from services.symmetry.utils.image_io import decode_image


Rect = Tuple[int, int, int, int]


class RasterImage:
    """Loaded source image with known pixel dimensions.

    The pixel array is copied on construction and marked read-only; every
    operation allocates a new buffer.
    """

    def __init__(self, pixels: np.ndarray, name: str = ""):
        array = np.array(pixels, dtype=np.uint8, copy=True)
        if array.size == 0:
            array = np.zeros(array.shape[:2] + (4,), dtype=np.uint8)
        elif array.ndim == 3 and array.shape[2] == 3:
            array = cv2.cvtColor(array, cv2.COLOR_RGB2RGBA)
        elif array.ndim == 2:
            array = cv2.cvtColor(array, cv2.COLOR_GRAY2RGBA)
        array.setflags(write=False)
        self.pixels = array
        self.name = name

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "RasterImage":
        path = Path(path)
        return cls(decode_image(path), name=path.name)

    @property
    def pixel_width(self) -> int:
        return int(self.pixels.shape[1]) if self.pixels.ndim >= 2 else 0

    @property
    def pixel_height(self) -> int:
        return int(self.pixels.shape[0]) if self.pixels.ndim >= 2 else 0

    @property
    def is_usable(self) -> bool:
        return self.pixel_width > 0 and self.pixel_height > 0

    @property
    def max_dimension(self) -> int:
        return max(self.pixel_width, self.pixel_height)

    def draw_region(self, src_rect: Rect, dest_size: Tuple[int, int]) -> np.ndarray:
        """Blit the axis-aligned `src_rect` (x, y, w, h) into a new (dest_w, dest_h) buffer."""
        x, y, w, h = (int(v) for v in src_rect)
        dest_w, dest_h = (int(v) for v in dest_size)
        region = self.pixels[y:y + h, x:x + w]
        if (w, h) == (dest_w, dest_h):
            return region.copy()
        return cv2.resize(region, (dest_w, dest_h), interpolation=cv2.INTER_LINEAR)

    def render(self, transform: Matrix, origin: Tuple[float, float], size: int) -> np.ndarray:
        """Render the whole image under `transform` and crop the `size` window at `origin`.

        Areas mapped from outside the image stay fully transparent.
        """
        warp = patch_warp_matrix(transform, origin)
        return cv2.warpAffine(
            self.pixels,
            warp,
            (int(size), int(size)),
            flags=cv2.INTER_LINEAR,
            borderMode=cv2.BORDER_CONSTANT,
            borderValue=(0, 0, 0, 0),
        )


def generate_demo_pattern(width: int = 640, height: int = 480, tile: int = 80) -> RasterImage:
    """Generate a tiled pattern with square (p4m) symmetry for demo sessions."""
    cell = np.zeros((tile, tile, 3), dtype=np.uint8)
    cell[:] = (238, 228, 205)
    c = tile // 2
    r = tile // 2 - 1

    cv2.rectangle(cell, (c - r // 2, c - r // 2), (c + r // 2, c + r // 2), (40, 70, 140), -1)
    cv2.circle(cell, (c, c), r // 3, (220, 160, 40), -1)
    cv2.line(cell, (0, 0), (tile - 1, tile - 1), (120, 30, 30), 2)
    cv2.line(cell, (tile - 1, 0), (0, tile - 1), (120, 30, 30), 2)
    for corner in ((0, 0), (tile - 1, 0), (0, tile - 1), (tile - 1, tile - 1)):
        cv2.circle(cell, corner, r // 4, (30, 110, 60), -1)

    reps_y = -(-height // tile)
    reps_x = -(-width // tile)
    pattern = np.tile(cell, (reps_y, reps_x, 1))[:height, :width]
    return RasterImage(pattern, name="demo-p4m")
