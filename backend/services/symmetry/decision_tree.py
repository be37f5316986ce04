"""Read-only decision tree guiding the classification."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from services.symmetry.models import ProofType


DEFAULT_TREE_PATH = Path(__file__).resolve().parent / "wallpaper_tree.json"


@dataclass(frozen=True)
class Answer:
    key: str
    label: str
    next: str
    proof_type: Optional[ProofType] = None
    rotation_angle_deg: Optional[float] = None


@dataclass(frozen=True)
class QuestionNode:
    id: str
    question_text: str
    answers: Tuple[Answer, ...]
    proof_type: Optional[ProofType] = None
    notes: Tuple[str, ...] = ()
    needs_unit_cell: bool = False

    is_leaf: bool = field(default=False, init=False)

    def answer(self, key: str) -> Optional[Answer]:
        for candidate in self.answers:
            if candidate.key == key:
                return candidate
        return None

    def resolve_proof(self, answer: Optional[Answer]) -> Tuple[ProofType, Optional[float]]:
        """Effective proof requirement: answer override, then node default, then none."""
        if answer is not None and answer.proof_type is not None:
            proof_type = answer.proof_type
        elif self.proof_type is not None:
            proof_type = self.proof_type
        else:
            proof_type = ProofType.NONE
        return proof_type, answer.rotation_angle_deg if answer is not None else None


@dataclass(frozen=True)
class LeafNode:
    id: str
    group_code: str
    description: Optional[str] = None

    is_leaf: bool = field(default=True, init=False)


DecisionTreeNode = Union[QuestionNode, LeafNode]


@dataclass(frozen=True)
class DecisionTree:
    start: str
    nodes: Mapping[str, DecisionTreeNode]

    def get(self, node_id: Optional[str]) -> Optional[DecisionTreeNode]:
        if node_id is None:
            return None
        return self.nodes.get(node_id)


def _parse_proof_type(raw: Any, where: str) -> Optional[ProofType]:
    if raw is None:
        return None
    try:
        return ProofType(raw)
    except ValueError:
        raise ValueError(f"Unknown proof type {raw!r} in {where}")


def _parse_notes(raw: Any) -> Tuple[str, ...]:
    if raw is None:
        return ()
    if isinstance(raw, str):
        return (raw,)
    if isinstance(raw, list):
        return tuple(str(item) for item in raw)
    raise ValueError(f"Unsupported note value: {raw!r}")


def _parse_node(node_id: str, raw: Dict[str, Any]) -> DecisionTreeNode:
    node_type = raw.get("type")
    if node_type == "leaf":
        return LeafNode(
            id=node_id,
            group_code=str(raw["groupCode"]),
            description=raw.get("description"),
        )
    if node_type != "question":
        raise ValueError(f"Node {node_id} has unknown type {node_type!r}")

    answers = []
    seen = set()
    for item in raw.get("answers", []):
        key = str(item["key"])
        if key in seen:
            raise ValueError(f"Duplicate answer key {key!r} in node {node_id}")
        seen.add(key)
        angle = item.get("rotationAngleDeg")
        answers.append(
            Answer(
                key=key,
                label=str(item.get("label", key)),
                next=str(item["next"]),
                proof_type=_parse_proof_type(item.get("proofType"), f"{node_id}/{key}"),
                rotation_angle_deg=float(angle) if angle is not None else None,
            )
        )

    return QuestionNode(
        id=node_id,
        question_text=str(raw.get("questionText") or raw.get("text") or ""),
        answers=tuple(answers),
        proof_type=_parse_proof_type(raw.get("proofType"), node_id),
        notes=_parse_notes(raw.get("note")),
        needs_unit_cell=bool(raw.get("needsUnitCell", False)),
    )


def parse_decision_tree(data: Dict[str, Any]) -> DecisionTree:
    """Build and validate a tree from its JSON form `{start, nodes: {id: node}}`."""
    raw_nodes = data.get("nodes")
    if not isinstance(raw_nodes, dict) or not raw_nodes:
        raise ValueError("Decision tree has no nodes")

    nodes = {node_id: _parse_node(node_id, raw) for node_id, raw in raw_nodes.items()}

    start = data.get("start")
    if start not in nodes:
        raise ValueError(f"Start node {start!r} is not defined")
    for node in nodes.values():
        if isinstance(node, QuestionNode):
            for answer in node.answers:
                if answer.next not in nodes:
                    raise ValueError(f"Answer {node.id}/{answer.key} points to unknown node {answer.next!r}")

    return DecisionTree(start=str(start), nodes=MappingProxyType(nodes))


def load_decision_tree(path: Optional[Union[str, Path]] = None) -> DecisionTree:
    tree_path = Path(path) if path else DEFAULT_TREE_PATH
    with tree_path.open("r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"Expected JSON object at {tree_path}")
    return parse_decision_tree(data)
