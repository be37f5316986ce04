"""Raster decoding and encoding helpers shared by the session and routers."""

from __future__ import annotations

import base64
from io import BytesIO
from pathlib import Path
from typing import Optional, Union

import numpy as np
from PIL import Image, UnidentifiedImageError


SUPPORTED_SUFFIXES = (".png", ".jpg", ".jpeg", ".bmp", ".gif", ".webp", ".tif", ".tiff")


class ImageDecodeError(ValueError):
    """Raised when bytes or a file cannot be decoded into a raster."""


def decode_image(source: Union[bytes, str, Path]) -> np.ndarray:
    """Decode image bytes or a file path into an RGBA uint8 array of shape (h, w, 4)."""
    try:
        if isinstance(source, (bytes, bytearray)):
            image = Image.open(BytesIO(source))
        else:
            image = Image.open(Path(source))
        image.load()
    except (UnidentifiedImageError, OSError) as e:
        raise ImageDecodeError(f"Could not decode image: {e}") from e

    return np.array(image.convert("RGBA"), dtype=np.uint8)


def decode_base64_image(payload: str) -> np.ndarray:
    # Accept data URLs as sent by browsers.
    if payload.startswith("data:") and "," in payload:
        payload = payload.split(",", 1)[1]
    try:
        raw = base64.b64decode(payload, validate=True)
    except (ValueError, TypeError) as e:
        raise ImageDecodeError(f"Invalid base64 image payload: {e}") from e
    return decode_image(raw)


def buffer_to_base64(buffer: Optional[np.ndarray]) -> Optional[str]:
    """Encode a pixel buffer as a base64 PNG string for frontend display."""
    if buffer is None:
        return None

    # Mode is inferred from the array shape: (h, w), (h, w, 3) or (h, w, 4).
    image = Image.fromarray(np.ascontiguousarray(buffer, dtype=np.uint8))

    out = BytesIO()
    image.save(out, format="PNG")
    return base64.b64encode(out.getvalue()).decode("utf-8")
