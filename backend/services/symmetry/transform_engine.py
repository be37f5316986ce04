"""Rotation, mirror and glide renderings of a patch window.

Each function renders what would appear inside the patch window if the whole
image were transformed by the symmetry operation. The result has the same
dimensions as the patch buffer, so "before" and "after" compare directly.
None of these functions retain state.
"""

from __future__ import annotations

import logging

import cv2
import numpy as np

from services.symmetry.models import Line, PatchSample
from services.symmetry.raster import RasterImage
from services.symmetry.utils.affine_math import (
    Matrix,
    glide_along,
    reflection_across,
    rotation_about,
)

logger = logging.getLogger(__name__)


def _render(sample: PatchSample, transform: Matrix, image: RasterImage) -> np.ndarray:
    try:
        return image.render(transform, sample.origin.to_tuple(), sample.size)
    except cv2.error as e:
        logger.warning("Warp failed, returning untransformed patch: %s", e)
        return sample.buffer.copy()


def rotate_patch(sample: PatchSample, angle_deg: float, image: RasterImage) -> np.ndarray:
    """Rotate the plane by `angle_deg` about the patch focus."""
    cx = sample.origin.x + sample.relative_focus.x
    cy = sample.origin.y + sample.relative_focus.y
    return _render(sample, rotation_about(cx, cy, angle_deg), image)


def reflect_patch(sample: PatchSample, line: Line, image: RasterImage) -> np.ndarray:
    """Reflect the plane across the infinite line through `line`'s endpoints."""
    if line.is_degenerate:
        logger.warning("Zero-length mirror axis at (%.1f, %.1f); reflection skipped", line.x1, line.y1)
        return sample.buffer.copy()
    return _render(sample, reflection_across(line.to_tuple()), image)


def glide_patch(sample: PatchSample, line: Line, distance_px: float, image: RasterImage) -> np.ndarray:
    """Reflect across `line`, then slide `distance_px` pixels along its direction."""
    if line.is_degenerate:
        logger.warning("Zero-length glide axis at (%.1f, %.1f); glide skipped", line.x1, line.y1)
        return sample.buffer.copy()
    return _render(sample, glide_along(line.to_tuple(), float(distance_px)), image)
