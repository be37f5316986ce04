"""Proof state variants and their transitions.

A proof is one of four variants (none, rotation, mirror, glide). Every
transition is a pure function: it reads the current state, recomputes buffers
from the canonical stored parameters and returns a replacement state. Calls
that do not apply to the current variant return the state unchanged.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import ClassVar, Optional, Union

import numpy as np

from services.symmetry.models import Line, PatchSample, Point, ProofType
from services.symmetry.patch_sampler import PATCH_SIZE, clamp_patch_size, round_half_up, sample_patch
from services.symmetry.raster import RasterImage
from services.symmetry.transform_engine import glide_patch, reflect_patch, rotate_patch

logger = logging.getLogger(__name__)

DEFAULT_ROTATION_ANGLE = 180.0
DEFAULT_GLIDE_DISTANCE = 0.5

# Drawn axes at or below this length (image pixels) are discarded by the frontend.
MIN_LINE_LENGTH = 8.0


@dataclass(frozen=True, eq=False)
class ProofBase:
    proof_type: ClassVar[ProofType]

    ready: bool = False
    before: Optional[np.ndarray] = None
    after: Optional[np.ndarray] = None
    patch_size: int = PATCH_SIZE
    patch_sample: Optional[PatchSample] = None

    @property
    def has_input(self) -> bool:
        return False


@dataclass(frozen=True, eq=False)
class NoneProof(ProofBase):
    proof_type: ClassVar[ProofType] = ProofType.NONE


@dataclass(frozen=True, eq=False)
class RotationProof(ProofBase):
    proof_type: ClassVar[ProofType] = ProofType.ROTATION

    center: Optional[Point] = None
    angle_deg: float = DEFAULT_ROTATION_ANGLE
    repeats: int = 1

    @property
    def has_input(self) -> bool:
        return self.center is not None

    @property
    def effective_angle(self) -> float:
        return self.angle_deg * self.repeats


@dataclass(frozen=True, eq=False)
class MirrorProof(ProofBase):
    proof_type: ClassVar[ProofType] = ProofType.MIRROR

    line: Optional[Line] = None

    @property
    def has_input(self) -> bool:
        return self.line is not None


@dataclass(frozen=True, eq=False)
class GlideProof(ProofBase):
    proof_type: ClassVar[ProofType] = ProofType.GLIDE

    line: Optional[Line] = None
    # Fraction of a reference length, not pixels.
    distance: float = DEFAULT_GLIDE_DISTANCE

    @property
    def has_input(self) -> bool:
        return self.line is not None


ProofState = Union[NoneProof, RotationProof, MirrorProof, GlideProof]


def create_proof_state(proof_type: Union[ProofType, str], rotation_angle_deg: Optional[float] = None) -> ProofState:
    """Fresh state for `proof_type` with default parameters."""
    proof_type = ProofType(proof_type)
    if proof_type is ProofType.ROTATION:
        angle = DEFAULT_ROTATION_ANGLE if rotation_angle_deg is None else float(rotation_angle_deg)
        return RotationProof(angle_deg=angle)
    if proof_type is ProofType.MIRROR:
        return MirrorProof()
    if proof_type is ProofType.GLIDE:
        return GlideProof()
    return NoneProof(ready=True)


def rotation_order(angle_deg: float) -> int:
    """Number of turns by `angle_deg` that make up a full revolution."""
    if not angle_deg:
        return 1
    return max(1, round_half_up(360.0 / float(angle_deg)))


def glide_pixels_for_line(distance: float, sample: PatchSample) -> float:
    """Slide length used while the axis is being drawn: a fraction of half the patch."""
    return distance * (sample.size / 2)


def glide_pixels_for_slider(distance: float, image: RasterImage) -> float:
    """Slide length used by the distance slider and patch resizing: a fraction of the larger image side."""
    return distance * image.max_dimension


def supply_rotation_point(state: ProofState, point: Point, image: Optional[RasterImage]) -> ProofState:
    if not isinstance(state, RotationProof) or image is None:
        return state

    sample = sample_patch(image, point, state.patch_size)
    if sample is None:
        return state

    rotated = rotate_patch(sample, state.effective_angle, image)
    return replace(
        state,
        before=sample.buffer,
        after=rotated,
        center=point,
        patch_sample=sample,
        ready=True,
    )


def supply_line(
    state: ProofState,
    line: Line,
    kind: Union[ProofType, str],
    image: Optional[RasterImage],
    is_final: bool = True,
) -> ProofState:
    """Record a mirror or glide axis and recompute the preview.

    Drafts (`is_final=False`) refresh the buffers but never flip readiness on.
    """
    try:
        kind = ProofType(kind)
    except ValueError:
        logger.warning("Ignoring axis of unknown kind %r", kind)
        return state
    if image is None:
        return state
    if line.is_degenerate:
        logger.warning("Ignoring zero-length %s axis at (%.1f, %.1f)", kind.value, line.x1, line.y1)
        return state

    if kind is ProofType.MIRROR and isinstance(state, MirrorProof):
        sample = sample_patch(image, line.midpoint, state.patch_size)
        if sample is None:
            return state
        after = reflect_patch(sample, line, image)
    elif kind is ProofType.GLIDE and isinstance(state, GlideProof):
        sample = sample_patch(image, line.midpoint, state.patch_size)
        if sample is None:
            return state
        after = glide_patch(sample, line, glide_pixels_for_line(state.distance, sample), image)
    else:
        return state

    return replace(
        state,
        before=sample.buffer,
        after=after,
        line=line,
        patch_sample=sample,
        ready=True if is_final else state.ready,
    )


def adjust_glide_distance(state: ProofState, fraction: float, image: Optional[RasterImage]) -> ProofState:
    if image is None or not isinstance(state, GlideProof):
        return state
    if state.patch_sample is None or state.line is None:
        return state

    fraction = max(0.0, min(1.0, float(fraction)))
    after = glide_patch(state.patch_sample, state.line, glide_pixels_for_slider(fraction, image), image)
    return replace(state, distance=fraction, after=after)


def adjust_rotation_repeats(state: ProofState, repeats: int, image: Optional[RasterImage]) -> ProofState:
    """Compose the base rotation `repeats` times without resampling the patch."""
    if image is None or not isinstance(state, RotationProof):
        return state
    if state.center is None or state.patch_sample is None:
        return state

    repeats = max(1, int(repeats))
    after = rotate_patch(state.patch_sample, state.angle_deg * repeats, image)
    return replace(state, repeats=repeats, after=after)


def resize_patch(state: ProofState, size: float, image: Optional[RasterImage]) -> ProofState:
    """Resample the patch at the committed input with the current parameters.

    The clamped size is stored even before any input exists, so the next pick
    uses it. Readiness is left alone.
    """
    size = clamp_patch_size(size, image)
    if image is None or not state.has_input:
        return replace(state, patch_size=size)

    if isinstance(state, RotationProof):
        sample = sample_patch(image, state.center, size)
        if sample is None:
            return replace(state, patch_size=size)
        after = rotate_patch(sample, state.effective_angle, image)
    elif isinstance(state, MirrorProof):
        sample = sample_patch(image, state.line.midpoint, size)
        if sample is None:
            return replace(state, patch_size=size)
        after = reflect_patch(sample, state.line, image)
    elif isinstance(state, GlideProof):
        sample = sample_patch(image, state.line.midpoint, size)
        if sample is None:
            return replace(state, patch_size=size)
        after = glide_patch(sample, state.line, glide_pixels_for_slider(state.distance, image), image)
    else:
        return replace(state, patch_size=size)

    logger.debug("Patch resized to %d for %s proof", sample.size, state.proof_type.value)
    return replace(state, before=sample.buffer, after=after, patch_sample=sample, patch_size=size)
