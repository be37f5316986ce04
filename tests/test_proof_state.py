"""
Tests for proof state variants and their transitions.

Covers:
- Variant defaults and angle overrides
- Readiness: set once by a committed input, never cleared by later edits
- Glide distance conversion (patch half-size vs. larger image side)
- Repeats and patch resizing recompute from stored parameters
- Calls that do not match the variant leave the state untouched
"""
import numpy as np
import pytest

from services.symmetry.models import Line, Point, ProofType
from services.symmetry.patch_sampler import sample_patch
from services.symmetry.proof_state import (
    GlideProof,
    MirrorProof,
    NoneProof,
    RotationProof,
    adjust_glide_distance,
    adjust_rotation_repeats,
    create_proof_state,
    resize_patch,
    rotation_order,
    supply_line,
    supply_rotation_point,
)
from services.symmetry.transform_engine import glide_patch, reflect_patch, rotate_patch


AXIS = Line(400, 200, 600, 200)


# ══════════════════════════════════════════════════════════════════════════
# Initialisation
# ══════════════════════════════════════════════════════════════════════════

class TestCreate:

    def test_none_is_ready_immediately(self):
        state = create_proof_state("none")
        assert isinstance(state, NoneProof)
        assert state.ready

    def test_rotation_defaults(self):
        state = create_proof_state(ProofType.ROTATION)
        assert isinstance(state, RotationProof)
        assert state.angle_deg == 180.0
        assert state.repeats == 1
        assert state.center is None
        assert not state.ready

    def test_rotation_angle_override(self):
        assert create_proof_state("rotation", 90).angle_deg == 90.0

    def test_mirror_and_glide_defaults(self):
        mirror = create_proof_state("mirror")
        glide = create_proof_state("glide")
        assert isinstance(mirror, MirrorProof) and mirror.line is None and not mirror.ready
        assert isinstance(glide, GlideProof) and glide.distance == 0.5 and not glide.ready
        assert glide.patch_size == 280
        assert glide.before is None and glide.after is None and glide.patch_sample is None

    def test_unknown_type_rejected(self):
        with pytest.raises(ValueError):
            create_proof_state("spiral")

    @pytest.mark.parametrize("angle, order", [(60, 6), (90, 4), (120, 3), (144, 3), (180, 2), (0, 1)])
    def test_rotation_order(self, angle, order):
        assert rotation_order(angle) == order


# ══════════════════════════════════════════════════════════════════════════
# Rotation
# ══════════════════════════════════════════════════════════════════════════

class TestRotation:

    def test_point_computes_buffers_and_readiness(self, noise_image):
        state = supply_rotation_point(create_proof_state("rotation", 90), Point(30, 30), noise_image)
        assert state.ready
        assert state.center == Point(30, 30)
        expected_patch = sample_patch(noise_image, Point(30, 30), 280)
        np.testing.assert_array_equal(state.before, expected_patch.buffer)
        np.testing.assert_array_equal(state.after, rotate_patch(expected_patch, 90.0, noise_image))

    def test_dragging_recomputes(self, noise_image):
        state = create_proof_state("rotation")
        state = resize_patch(state, 40, noise_image)
        first = supply_rotation_point(state, Point(20, 20), noise_image)
        second = supply_rotation_point(first, Point(44, 40), noise_image)
        assert second.center == Point(44, 40)
        assert second.patch_sample.origin == Point(24, 20)
        assert second.ready

    def test_point_ignored_by_other_variants(self, noise_image):
        state = create_proof_state("mirror")
        assert supply_rotation_point(state, Point(5, 5), noise_image) is state

    def test_point_ignored_without_image(self):
        state = create_proof_state("rotation")
        assert supply_rotation_point(state, Point(5, 5), None) is state

    def test_repeats_compose_without_resampling(self, noise_image):
        state = supply_rotation_point(create_proof_state("rotation", 90), Point(32, 32), noise_image)
        repeated = adjust_rotation_repeats(state, 3, noise_image)
        assert repeated.repeats == 3
        assert repeated.patch_sample is state.patch_sample
        assert repeated.before is state.before
        np.testing.assert_array_equal(repeated.after, rotate_patch(state.patch_sample, 270.0, noise_image))

    def test_repeats_floor_at_one(self, noise_image):
        state = supply_rotation_point(create_proof_state("rotation", 90), Point(32, 32), noise_image)
        assert adjust_rotation_repeats(state, 0, noise_image).repeats == 1

    def test_repeats_need_a_center(self, noise_image):
        state = create_proof_state("rotation", 90)
        assert adjust_rotation_repeats(state, 2, noise_image) is state

    def test_repeats_apply_to_later_points(self, noise_image):
        state = supply_rotation_point(create_proof_state("rotation", 60), Point(32, 32), noise_image)
        state = adjust_rotation_repeats(state, 2, noise_image)
        moved = supply_rotation_point(state, Point(30, 31), noise_image)
        np.testing.assert_array_equal(moved.after, rotate_patch(moved.patch_sample, 120.0, noise_image))


# ══════════════════════════════════════════════════════════════════════════
# Mirror / glide lines
# ══════════════════════════════════════════════════════════════════════════

class TestLines:

    def test_draft_line_previews_without_readiness(self, noise_image):
        state = supply_line(create_proof_state("mirror"), Line(10, 10, 50, 40), "mirror", noise_image, is_final=False)
        assert not state.ready
        assert state.before is not None and state.after is not None
        assert state.line == Line(10, 10, 50, 40)

    def test_ready_set_once_and_kept(self, noise_image):
        state = create_proof_state("mirror")
        state = supply_line(state, Line(10, 10, 50, 40), "mirror", noise_image, is_final=False)
        assert not state.ready
        state = supply_line(state, Line(10, 10, 50, 40), "mirror", noise_image, is_final=True)
        assert state.ready
        state = supply_line(state, Line(12, 10, 52, 40), "mirror", noise_image, is_final=False)
        assert state.ready

    def test_patch_centered_on_line_midpoint(self, noise_image):
        state = resize_patch(create_proof_state("mirror"), 40, noise_image)
        state = supply_line(state, Line(10, 20, 50, 40), "mirror", noise_image)
        assert state.patch_sample.size == 40
        assert state.patch_sample.origin == Point(10, 10)
        np.testing.assert_array_equal(state.after, reflect_patch(state.patch_sample, state.line, noise_image))

    def test_kind_must_match_variant(self, noise_image):
        mirror = create_proof_state("mirror")
        glide = create_proof_state("glide")
        rotation = create_proof_state("rotation")
        line = Line(10, 10, 50, 40)
        assert supply_line(mirror, line, "glide", noise_image) is mirror
        assert supply_line(glide, line, "mirror", noise_image) is glide
        assert supply_line(rotation, line, "mirror", noise_image) is rotation

    def test_unknown_kind_is_ignored(self, noise_image):
        mirror = supply_line(create_proof_state("mirror"), Line(10, 10, 50, 40), "mirror", noise_image)
        assert supply_line(mirror, Line(12, 10, 52, 40), "spiral", noise_image) is mirror
        rotation = create_proof_state("rotation")
        assert supply_line(rotation, Line(12, 10, 52, 40), "spiral", noise_image) is rotation

    def test_zero_length_line_rejected(self, noise_image):
        state = create_proof_state("mirror")
        assert supply_line(state, Line(20, 20, 20, 20), "mirror", noise_image) is state

    def test_glide_line_uses_patch_half_size(self, wide_image):
        state = supply_line(create_proof_state("glide"), AXIS, "glide", wide_image)
        sample = state.patch_sample
        assert sample.size == 280
        np.testing.assert_array_equal(state.after, glide_patch(sample, AXIS, 0.5 * 140, wide_image))


# ══════════════════════════════════════════════════════════════════════════
# Glide slider
# ══════════════════════════════════════════════════════════════════════════

class TestGlideDistance:

    def test_slider_uses_larger_image_side(self, wide_image):
        state = supply_line(create_proof_state("glide"), AXIS, "glide", wide_image)
        adjusted = adjust_glide_distance(state, 0.5, wide_image)
        assert adjusted.distance == 0.5
        np.testing.assert_array_equal(adjusted.after, glide_patch(state.patch_sample, AXIS, 500.0, wide_image))

    def test_slider_keeps_readiness(self, wide_image):
        state = supply_line(create_proof_state("glide"), AXIS, "glide", wide_image, is_final=False)
        assert not adjust_glide_distance(state, 0.2, wide_image).ready

        final = supply_line(state, AXIS, "glide", wide_image)
        assert adjust_glide_distance(final, 0.2, wide_image).ready

    def test_slider_needs_a_line(self, wide_image):
        state = create_proof_state("glide")
        assert adjust_glide_distance(state, 0.3, wide_image) is state

    def test_slider_clamps_fraction(self, wide_image):
        state = supply_line(create_proof_state("glide"), AXIS, "glide", wide_image)
        assert adjust_glide_distance(state, 1.7, wide_image).distance == 1.0
        assert adjust_glide_distance(state, -0.5, wide_image).distance == 0.0

    def test_slider_ignored_by_mirror(self, wide_image):
        state = supply_line(create_proof_state("mirror"), AXIS, "mirror", wide_image)
        assert adjust_glide_distance(state, 0.3, wide_image) is state


# ══════════════════════════════════════════════════════════════════════════
# Patch resizing
# ══════════════════════════════════════════════════════════════════════════

class TestResize:

    def test_size_clamped_to_limits(self, wide_image):
        state = create_proof_state("mirror")
        assert resize_patch(state, 1000, wide_image).patch_size == 400
        assert resize_patch(state, 10, wide_image).patch_size == 80

    def test_without_input_only_stores_size(self, wide_image):
        state = resize_patch(create_proof_state("rotation"), 120, wide_image)
        assert state.patch_size == 120
        assert state.patch_sample is None and state.after is None

    def test_resamples_at_existing_input(self, wide_image):
        state = supply_rotation_point(create_proof_state("rotation", 90), Point(500, 200), wide_image)
        resized = resize_patch(state, 120, wide_image)
        assert resized.patch_sample.size == 120
        assert resized.center == Point(500, 200)
        assert resized.ready
        np.testing.assert_array_equal(resized.after, rotate_patch(resized.patch_sample, 90.0, wide_image))

    def test_does_not_grant_readiness(self, wide_image):
        state = supply_line(create_proof_state("mirror"), AXIS, "mirror", wide_image, is_final=False)
        assert not resize_patch(state, 120, wide_image).ready

    def test_glide_resize_uses_larger_image_side(self, wide_image):
        state = supply_line(create_proof_state("glide"), AXIS, "glide", wide_image)
        resized = resize_patch(state, 200, wide_image)
        np.testing.assert_array_equal(resized.after, glide_patch(resized.patch_sample, AXIS, 500.0, wide_image))

    def test_resize_then_slide_matches_slide_then_resize(self, wide_image):
        base = supply_line(create_proof_state("glide"), AXIS, "glide", wide_image)

        a = adjust_glide_distance(resize_patch(base, 160, wide_image), 0.3, wide_image)
        b = resize_patch(adjust_glide_distance(base, 0.3, wide_image), 160, wide_image)

        assert a.distance == b.distance == 0.3
        assert a.patch_size == b.patch_size == 160
        np.testing.assert_array_equal(a.before, b.before)
        np.testing.assert_array_equal(a.after, b.after)

    def test_resize_then_repeats_matches_repeats_then_resize(self, wide_image):
        base = supply_rotation_point(create_proof_state("rotation", 60), Point(480, 210), wide_image)

        a = adjust_rotation_repeats(resize_patch(base, 150, wide_image), 4, wide_image)
        b = resize_patch(adjust_rotation_repeats(base, 4, wide_image), 150, wide_image)

        assert a.repeats == b.repeats == 4
        np.testing.assert_array_equal(a.after, b.after)
