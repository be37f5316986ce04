"""Classification router: decision-tree navigation and geometric proofs."""

from typing import Callable, Dict, List, Literal, Optional

from fastapi import APIRouter
from pydantic import BaseModel, Field

from services.session_store import get_session
from services.symmetry.decision_tree import DecisionTreeNode, QuestionNode
from services.symmetry.models import Line, Point
from services.symmetry.navigation import ClassificationSession
from services.symmetry.proof_state import MIN_LINE_LENGTH, GlideProof, MirrorProof, RotationProof, rotation_order
from services.symmetry.utils.image_io import buffer_to_base64

router = APIRouter()


class XYPoint(BaseModel):
    x: float
    y: float


class LineInput(BaseModel):
    x1: float
    y1: float
    x2: float
    y2: float


class AnswerInfo(BaseModel):
    key: str
    label: str
    next: str
    proofType: Optional[str] = None
    rotationAngleDeg: Optional[float] = None


class NodeInfo(BaseModel):
    id: str
    type: Literal["question", "leaf"]
    questionText: Optional[str] = None
    notes: List[str] = []
    needsUnitCell: bool = False
    proofType: Optional[str] = None
    answers: List[AnswerInfo] = []
    groupCode: Optional[str] = None
    description: Optional[str] = None


class PatchInfo(BaseModel):
    origin: XYPoint
    relativeFocus: XYPoint
    size: int


class ProofInfo(BaseModel):
    type: Literal["none", "rotation", "mirror", "glide"]
    ready: bool
    patchSize: int
    patchSample: Optional[PatchInfo] = None
    before: Optional[str] = None
    after: Optional[str] = None
    center: Optional[XYPoint] = None
    angleDeg: Optional[float] = None
    repeats: Optional[int] = None
    rotationOrder: Optional[int] = None
    line: Optional[LineInput] = None
    distance: Optional[float] = None


class HistoryItem(BaseModel):
    nodeId: str
    selectedAnswerKey: Optional[str] = None


class SessionState(BaseModel):
    imageLoaded: bool
    imageWidth: int = 0
    imageHeight: int = 0
    currentNode: Optional[NodeInfo] = None
    selectedAnswerKey: Optional[str] = None
    proof: ProofInfo
    history: List[HistoryItem] = []
    canGoBack: bool = False
    interactionsEnabled: bool = False
    showUnitCellGuides: bool = False
    patchSizeLimits: Dict[str, float] = Field(default_factory=dict)
    unitCell: Dict[str, XYPoint] = Field(default_factory=dict)


class SessionStateResponse(BaseModel):
    success: bool
    data: Optional[SessionState] = None
    error: Optional[str] = None


def node_info(node: DecisionTreeNode) -> NodeInfo:
    if isinstance(node, QuestionNode):
        return NodeInfo(
            id=node.id,
            type="question",
            questionText=node.question_text,
            notes=list(node.notes),
            needsUnitCell=node.needs_unit_cell,
            proofType=node.proof_type.value if node.proof_type else None,
            answers=[
                AnswerInfo(
                    key=a.key,
                    label=a.label,
                    next=a.next,
                    proofType=a.proof_type.value if a.proof_type else None,
                    rotationAngleDeg=a.rotation_angle_deg,
                )
                for a in node.answers
            ],
        )
    return NodeInfo(id=node.id, type="leaf", groupCode=node.group_code, description=node.description)


def proof_info(session: ClassificationSession) -> ProofInfo:
    state = session.proof_state
    sample = state.patch_sample
    info = ProofInfo(
        type=state.proof_type.value,
        ready=state.ready,
        patchSize=state.patch_size,
        patchSample=PatchInfo(**sample.to_dict()) if sample is not None else None,
        before=buffer_to_base64(state.before),
        after=buffer_to_base64(state.after),
    )
    if isinstance(state, RotationProof):
        info.center = XYPoint(**state.center.to_dict()) if state.center else None
        info.angleDeg = state.angle_deg
        info.repeats = state.repeats
        info.rotationOrder = rotation_order(state.angle_deg)
    elif isinstance(state, (MirrorProof, GlideProof)):
        info.line = LineInput(**state.line.to_dict()) if state.line else None
        if isinstance(state, GlideProof):
            info.distance = state.distance
    return info


def session_state(session: ClassificationSession) -> SessionState:
    node = session.current_node
    image = session.image
    return SessionState(
        imageLoaded=session.image_ready,
        imageWidth=image.pixel_width if image is not None else 0,
        imageHeight=image.pixel_height if image is not None else 0,
        currentNode=node_info(node) if node is not None else None,
        selectedAnswerKey=session.selected_answer_key,
        proof=proof_info(session),
        history=[HistoryItem(nodeId=h.node_id, selectedAnswerKey=h.selected_answer_key) for h in session.history],
        canGoBack=session.can_go_back,
        interactionsEnabled=session.interactions_enabled,
        showUnitCellGuides=session.show_unit_cell_guides,
        patchSizeLimits=session.patch_size_limits,
        unitCell={name: XYPoint(**corner) for name, corner in session.unit_cell.to_dict().items()},
    )


def apply_to_session(action: Callable[[ClassificationSession], None]) -> SessionStateResponse:
    """Run `action` on the shared session and wrap the resulting state."""
    try:
        session = get_session()
        action(session)
        return SessionStateResponse(success=True, data=session_state(session))
    except Exception as e:
        return SessionStateResponse(success=False, error=str(e))


@router.get("/tree")
async def get_tree():
    """Get the whole decision tree."""
    try:
        tree = get_session().tree
        return {
            "success": True,
            "start": tree.start,
            "minLineLength": MIN_LINE_LENGTH,
            "nodes": {node_id: node_info(node).model_dump() for node_id, node in tree.nodes.items()},
        }
    except Exception as e:
        return {"success": False, "error": str(e)}


@router.get("/state", response_model=SessionStateResponse)
async def get_state():
    """Get the current node, selection and proof state."""
    return apply_to_session(lambda session: None)


class SelectAnswerRequest(BaseModel):
    answerKey: str


@router.post("/answer/select", response_model=SessionStateResponse)
async def select_answer(request: SelectAnswerRequest):
    """Select an answer; answers needing no proof advance immediately."""
    return apply_to_session(lambda session: session.select_answer(request.answerKey))


@router.post("/answer/confirm", response_model=SessionStateResponse)
async def confirm_answer():
    """Confirm the selected answer once its proof is ready."""
    return apply_to_session(lambda session: session.confirm_answer())


@router.post("/answer/change", response_model=SessionStateResponse)
async def change_answer():
    """Clear the selection, keeping its draft."""
    return apply_to_session(lambda session: session.change_answer())


@router.post("/back", response_model=SessionStateResponse)
async def go_back():
    """Return to the previous question and restore its proof."""
    return apply_to_session(lambda session: session.back())


@router.post("/proof/rotation-point", response_model=SessionStateResponse)
async def set_rotation_point(request: XYPoint):
    """Place (or drag) the rotation centre in image coordinates."""
    return apply_to_session(lambda session: session.supply_rotation_point(Point(request.x, request.y)))


class LineRequest(BaseModel):
    line: LineInput
    kind: Literal["mirror", "glide"]
    isFinal: bool = True


@router.post("/proof/line", response_model=SessionStateResponse)
async def set_line(request: LineRequest):
    """Draw a mirror or glide axis; set isFinal=false while dragging."""
    line = Line(request.line.x1, request.line.y1, request.line.x2, request.line.y2)
    return apply_to_session(lambda session: session.supply_line(line, request.kind, is_final=request.isFinal))


class GlideDistanceRequest(BaseModel):
    distance: float = Field(..., ge=0.0, le=1.0)


@router.post("/proof/glide-distance", response_model=SessionStateResponse)
async def set_glide_distance(request: GlideDistanceRequest):
    """Adjust the glide slide as a fraction of the larger image side."""
    return apply_to_session(lambda session: session.adjust_glide_distance(request.distance))


class RotationRepeatsRequest(BaseModel):
    repeats: int = Field(..., ge=1)


@router.post("/proof/rotation-repeats", response_model=SessionStateResponse)
async def set_rotation_repeats(request: RotationRepeatsRequest):
    """Compose the rotation several times."""
    return apply_to_session(lambda session: session.adjust_rotation_repeats(request.repeats))


class PatchSizeRequest(BaseModel):
    size: float


@router.post("/proof/patch-size", response_model=SessionStateResponse)
async def set_patch_size(request: PatchSizeRequest):
    """Resize the comparison patch (clamped to the image-dependent limits)."""
    return apply_to_session(lambda session: session.resize_patch(request.size))


@router.post("/proof/reset", response_model=SessionStateResponse)
async def reset_proof():
    """Clear the current proof back to its defaults."""
    return apply_to_session(lambda session: session.reset_proof())
