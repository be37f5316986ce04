"""Square patch extraction around a focal point."""

from __future__ import annotations

import logging
import math
from typing import Dict, Optional

from services.symmetry.models import PatchSample, Point
from services.symmetry.raster import RasterImage

logger = logging.getLogger(__name__)

PATCH_SIZE = 280

# Slider bounds used before an image is loaded.
DEFAULT_PATCH_LIMITS: Dict[str, float] = {"min": 60.0, "max": 600.0}


def round_half_up(value: float) -> int:
    """Round halves up (40.5 -> 41), not to even."""
    return int(math.floor(value + 0.5))


def _clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


def sample_patch(image: Optional[RasterImage], focus: Point, requested_size: int = PATCH_SIZE) -> Optional[PatchSample]:
    """Crop a square patch centred on `focus`, shifted to stay inside the image.

    Returns None when the image is missing or has a zero dimension.
    """
    if image is None or not image.is_usable:
        logger.warning("Patch requested on an unusable image")
        return None

    width, height = image.pixel_width, image.pixel_height
    size = int(min(int(requested_size), width, height))
    if size <= 0:
        return None

    half = size / 2
    start_x = round_half_up(_clamp(focus.x - half, 0, width - size))
    start_y = round_half_up(_clamp(focus.y - half, 0, height - size))

    buffer = image.draw_region((start_x, start_y, size, size), (size, size))
    return PatchSample(
        buffer=buffer,
        origin=Point(start_x, start_y),
        relative_focus=Point(focus.x - start_x, focus.y - start_y),
        size=size,
    )


def patch_size_limits(image: Optional[RasterImage]) -> Dict[str, float]:
    """Bounds for the patch-size control, derived from the smaller image side."""
    if image is None or not image.is_usable:
        return dict(DEFAULT_PATCH_LIMITS)

    min_dim = min(image.pixel_width, image.pixel_height)
    upper = max(80.0, float(min_dim))
    lower = max(40.0, min(upper - 20.0, min_dim * 0.2))
    return {"min": lower, "max": upper}


def clamp_patch_size(size: float, image: Optional[RasterImage]) -> int:
    limits = patch_size_limits(image)
    return round_half_up(_clamp(float(size), limits["min"], limits["max"]))
