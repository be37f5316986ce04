"""Geometric proof engine for wallpaper symmetry classification."""

from services.symmetry.decision_tree import DecisionTree, load_decision_tree, parse_decision_tree
from services.symmetry.models import Line, PatchSample, Point, ProofType
from services.symmetry.navigation import ClassificationSession, HistoryEntry
from services.symmetry.patch_sampler import patch_size_limits, sample_patch
from services.symmetry.proof_state import (
    GlideProof,
    MirrorProof,
    NoneProof,
    ProofState,
    RotationProof,
    create_proof_state,
)
from services.symmetry.raster import RasterImage, generate_demo_pattern
from services.symmetry.transform_engine import glide_patch, reflect_patch, rotate_patch
from services.symmetry.unit_cell import UnitCell

__all__ = [
    "ClassificationSession",
    "DecisionTree",
    "GlideProof",
    "HistoryEntry",
    "Line",
    "MirrorProof",
    "NoneProof",
    "PatchSample",
    "Point",
    "ProofState",
    "ProofType",
    "RasterImage",
    "RotationProof",
    "UnitCell",
    "create_proof_state",
    "generate_demo_pattern",
    "glide_patch",
    "load_decision_tree",
    "parse_decision_tree",
    "patch_size_limits",
    "reflect_patch",
    "rotate_patch",
    "sample_patch",
]
