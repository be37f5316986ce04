"""
Shared fixtures for the Wallpaper Symmetry Lab backend tests.

Provides deterministic rasters, a compact decision tree and fresh sessions.
"""
import os
import sys

import numpy as np
import pytest

# Ensure backend/ is on the path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'backend'))


# ── Compact decision tree ───────────────────────────────────────────────

SMALL_TREE = {
    "start": "n1",
    "nodes": {
        "n1": {
            "type": "question",
            "questionText": "Is there a mirror line?",
            "proofType": "mirror",
            "note": "Draw the mirror axis.",
            "answers": [
                {"key": "mirror", "label": "Yes", "next": "n2"},
                {"key": "skip", "label": "No", "next": "n2", "proofType": "none"},
                {"key": "turn", "label": "Quarter turn", "next": "n3", "proofType": "rotation", "rotationAngleDeg": 90},
            ],
        },
        "n2": {
            "type": "question",
            "questionText": "Is there a glide reflection?",
            "proofType": "glide",
            "needsUnitCell": True,
            "answers": [
                {"key": "glide", "label": "Yes", "next": "leaf_a"},
                {"key": "rot", "label": "Half turn", "next": "leaf_b", "proofType": "rotation"},
            ],
        },
        "n3": {
            "type": "question",
            "questionText": "Anything else?",
            "note": ["First note", "Second note"],
            "answers": [
                {"key": "plain", "label": "No", "next": "leaf_b"},
                {"key": "mirror", "label": "Mirror", "next": "leaf_a", "proofType": "mirror"},
            ],
        },
        "leaf_a": {"type": "leaf", "groupCode": "pg", "description": "Glides only."},
        "leaf_b": {"type": "leaf", "groupCode": "p2"},
    },
}


def make_noise_pixels(width, height, seed=0):
    """Opaque RGBA noise so every pixel is distinguishable."""
    rng = np.random.default_rng(seed)
    pixels = rng.integers(0, 256, size=(height, width, 4), dtype=np.uint8)
    pixels[:, :, 3] = 255
    return pixels


def assert_pixels_close(actual, expected, tolerance=1):
    assert actual.shape == expected.shape
    diff = np.abs(actual.astype(int) - expected.astype(int))
    assert diff.max() <= tolerance


@pytest.fixture
def small_tree_data():
    """Raw JSON form of the compact tree"""
    import copy
    return copy.deepcopy(SMALL_TREE)


@pytest.fixture
def small_tree(small_tree_data):
    """Parsed compact tree"""
    from services.symmetry.decision_tree import parse_decision_tree
    return parse_decision_tree(small_tree_data)


@pytest.fixture
def noise_pixels():
    """64x64 opaque RGBA noise"""
    return make_noise_pixels(64, 64)


@pytest.fixture
def noise_image(noise_pixels):
    from services.symmetry.raster import RasterImage
    return RasterImage(noise_pixels, name="noise")


@pytest.fixture
def wide_image():
    """1000x400 raster for reference-length checks"""
    from services.symmetry.raster import RasterImage
    return RasterImage(make_noise_pixels(1000, 400, seed=3), name="wide")


@pytest.fixture
def session(small_tree, noise_image):
    """Session on the compact tree with a 64x64 image loaded"""
    from services.symmetry.navigation import ClassificationSession
    s = ClassificationSession(small_tree)
    s.load_image(noise_image)
    return s
