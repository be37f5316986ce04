"""Navigation, history and draft bookkeeping for one classification session.

The session owns the current proof state and the per-(node, answer) draft
store. Every mutation replaces the proof state wholesale and writes it through
to the draft of the selected answer. Operations that do not apply to the
current situation leave the session untouched.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Union

from services.symmetry.decision_tree import (
    DecisionTree,
    DecisionTreeNode,
    LeafNode,
    QuestionNode,
    load_decision_tree,
)
from services.symmetry.models import Line, Point, ProofType
from services.symmetry.patch_sampler import patch_size_limits
from services.symmetry.proof_state import (
    NoneProof,
    ProofState,
    adjust_glide_distance,
    adjust_rotation_repeats,
    create_proof_state,
    resize_patch,
    supply_line,
    supply_rotation_point,
)
from services.symmetry.raster import RasterImage
from services.symmetry.unit_cell import PointLike, UnitCell

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HistoryEntry:
    node_id: str
    selected_answer_key: Optional[str]


DraftStore = Dict[str, Dict[str, ProofState]]


class ClassificationSession:
    """Walks the decision tree, one geometric proof per answered question."""

    def __init__(self, tree: Optional[DecisionTree] = None):
        self.tree = tree if tree is not None else load_decision_tree()
        self.image: Optional[RasterImage] = None
        self.current_node_id: str = self.tree.start
        self.selected_answer_key: Optional[str] = None
        self.proof_state: ProofState = create_proof_state(ProofType.NONE)
        self.history: List[HistoryEntry] = []
        self.drafts: DraftStore = {}
        self.unit_cell = UnitCell()

    # ------------------------------------------------------------------
    # Derived state
    # ------------------------------------------------------------------

    @property
    def current_node(self) -> Optional[DecisionTreeNode]:
        return self.tree.get(self.current_node_id)

    @property
    def image_ready(self) -> bool:
        return self.image is not None and self.image.is_usable

    @property
    def is_leaf(self) -> bool:
        return isinstance(self.current_node, LeafNode)

    @property
    def can_go_back(self) -> bool:
        return len(self.history) > 0

    @property
    def interactions_enabled(self) -> bool:
        return self.image_ready and self.selected_answer_key is not None and not self.is_leaf

    @property
    def show_unit_cell_guides(self) -> bool:
        node = self.current_node
        return isinstance(node, QuestionNode) and node.needs_unit_cell

    @property
    def patch_size_limits(self) -> Dict[str, float]:
        return patch_size_limits(self.image if self.image_ready else None)

    def _question(self) -> Optional[QuestionNode]:
        node = self.current_node
        return node if isinstance(node, QuestionNode) else None

    def _proof_for(self, node: QuestionNode, answer_key: str) -> ProofState:
        proof_type, angle = node.resolve_proof(node.answer(answer_key))
        return create_proof_state(proof_type, angle)

    # ------------------------------------------------------------------
    # State replacement
    # ------------------------------------------------------------------

    def _commit(self, state: ProofState) -> None:
        """Replace the proof state, write the draft through, then apply auto-confirm."""
        self.proof_state = state
        if self.selected_answer_key is not None:
            node_drafts = self.drafts.setdefault(self.current_node_id, {})
            node_drafts[self.selected_answer_key] = state
        self._auto_confirm()

    def _auto_confirm(self) -> None:
        # An answer that needs no proof advances immediately.
        if (
            self.selected_answer_key is not None
            and isinstance(self.proof_state, NoneProof)
            and self._question() is not None
        ):
            logger.debug("Auto-confirming %s/%s", self.current_node_id, self.selected_answer_key)
            self.confirm_answer()

    # ------------------------------------------------------------------
    # Session lifecycle
    # ------------------------------------------------------------------

    def _reset_navigation(self) -> None:
        self.current_node_id = self.tree.start
        self.selected_answer_key = None
        self.history = []
        self.proof_state = create_proof_state(ProofType.NONE)
        self.drafts = {}
        self.unit_cell = UnitCell()

    def load_image(self, image: RasterImage) -> None:
        """Attach a new source image and start the classification over."""
        self.image = image
        self._reset_navigation()
        if image.is_usable:
            logger.info("Loaded image %s (%dx%d)", image.name or "<unnamed>", image.pixel_width, image.pixel_height)
        else:
            logger.warning("Loaded image %s has no pixels; interactions disabled", image.name or "<unnamed>")

    def restart(self) -> None:
        """Back to the start node, keeping the loaded image."""
        self._reset_navigation()
        logger.debug("Session restarted at %s", self.current_node_id)

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def select_answer(self, answer_key: str) -> None:
        if not self.image_ready:
            return
        node = self._question()
        if node is None or node.answer(answer_key) is None:
            return

        self.selected_answer_key = answer_key
        draft = self.drafts.get(self.current_node_id, {}).get(answer_key)
        state = draft if draft is not None else self._proof_for(node, answer_key)
        logger.debug(
            "Selected %s/%s (%s, %s)",
            self.current_node_id,
            answer_key,
            state.proof_type.value,
            "draft" if draft is not None else "fresh",
        )
        self._commit(state)

    def confirm_answer(self) -> None:
        node = self._question()
        if node is None or self.selected_answer_key is None or not self.proof_state.ready:
            return
        answer = node.answer(self.selected_answer_key)
        if answer is None:
            return

        self.history.append(HistoryEntry(node.id, self.selected_answer_key))
        self.current_node_id = answer.next
        self.selected_answer_key = None
        self.proof_state = create_proof_state(ProofType.NONE)
        self.drafts.setdefault(answer.next, {})
        logger.debug("Confirmed %s/%s -> %s", node.id, answer.key, answer.next)

    def change_answer(self) -> None:
        """Drop the selection; the draft of the previous answer stays stored."""
        self.selected_answer_key = None
        self.proof_state = create_proof_state(ProofType.NONE)

    def back(self) -> None:
        if not self.history:
            return

        last = self.history.pop()
        self.current_node_id = last.node_id
        self.selected_answer_key = last.selected_answer_key
        logger.debug("Back to %s (answer %s)", last.node_id, last.selected_answer_key)

        node = self.tree.get(last.node_id)
        if isinstance(node, QuestionNode) and last.selected_answer_key:
            draft = self.drafts.get(last.node_id, {}).get(last.selected_answer_key)
            self._commit(draft if draft is not None else self._proof_for(node, last.selected_answer_key))
        else:
            self.proof_state = create_proof_state(ProofType.NONE)

    # ------------------------------------------------------------------
    # Proof input
    # ------------------------------------------------------------------

    def reset_proof(self) -> None:
        node = self._question()
        if node is None or self.selected_answer_key is None or node.answer(self.selected_answer_key) is None:
            return
        self._commit(self._proof_for(node, self.selected_answer_key))

    def supply_rotation_point(self, point: Point) -> None:
        if not self.image_ready:
            return
        self._commit(supply_rotation_point(self.proof_state, point, self.image))

    def supply_line(self, line: Line, kind: Union[ProofType, str], is_final: bool = True) -> None:
        if not self.image_ready:
            return
        self._commit(supply_line(self.proof_state, line, kind, self.image, is_final=is_final))

    def adjust_glide_distance(self, fraction: float) -> None:
        if not self.image_ready:
            return
        self._commit(adjust_glide_distance(self.proof_state, fraction, self.image))

    def adjust_rotation_repeats(self, repeats: int) -> None:
        if not self.image_ready:
            return
        self._commit(adjust_rotation_repeats(self.proof_state, repeats, self.image))

    def resize_patch(self, size: float) -> None:
        image = self.image if self.image_ready else None
        self._commit(resize_patch(self.proof_state, size, image))

    # ------------------------------------------------------------------
    # Unit cell
    # ------------------------------------------------------------------

    def set_unit_cell(self, corners: Mapping[str, PointLike]) -> None:
        self.unit_cell = UnitCell.from_corners(corners)

    def move_unit_cell_corner(self, corner: str, point: PointLike) -> None:
        self.unit_cell = self.unit_cell.move_corner(corner, point)
