"""Utility helpers for the symmetry proof engine."""

from services.symmetry.utils.affine_math import glide_along, reflection_across, rotation_about
from services.symmetry.utils.image_io import ImageDecodeError, buffer_to_base64, decode_image

__all__ = [
    "glide_along",
    "reflection_across",
    "rotation_about",
    "ImageDecodeError",
    "buffer_to_base64",
    "decode_image",
]
