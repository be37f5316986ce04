"""Session router for image loading, restart and the unit cell overlay."""

from pathlib import Path
from typing import Dict, Literal, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from routers.classification import SessionStateResponse, XYPoint, apply_to_session
from services.session_store import get_session
from services.symmetry.raster import RasterImage, generate_demo_pattern
from services.symmetry.utils.image_io import SUPPORTED_SUFFIXES, decode_base64_image

router = APIRouter()


class ImageLoadRequest(BaseModel):
    filePath: Optional[str] = None
    imageBase64: Optional[str] = None
    name: Optional[str] = None


class ImageInfo(BaseModel):
    name: str
    width: int
    height: int


class ImageLoadResponse(BaseModel):
    success: bool
    data: Optional[ImageInfo] = None
    error: Optional[str] = None


def _image_response(image: RasterImage) -> ImageLoadResponse:
    return ImageLoadResponse(
        success=True,
        data=ImageInfo(name=image.name, width=image.pixel_width, height=image.pixel_height),
    )


@router.post("/image", response_model=ImageLoadResponse)
async def load_image(request: ImageLoadRequest):
    """Load a pattern image from a local path or a base64 payload."""
    try:
        if request.filePath == "demo" or request.filePath == "__demo__":
            image = generate_demo_pattern()
        elif request.filePath:
            file_path = Path(request.filePath)
            if not file_path.exists():
                raise HTTPException(status_code=404, detail=f"File not found: {request.filePath}")
            if file_path.suffix.lower() not in SUPPORTED_SUFFIXES:
                raise HTTPException(
                    status_code=400,
                    detail=f"Invalid file type. Expected one of {', '.join(SUPPORTED_SUFFIXES)}",
                )
            image = RasterImage.from_path(file_path)
        elif request.imageBase64:
            image = RasterImage(decode_base64_image(request.imageBase64), name=request.name or "upload")
        else:
            raise HTTPException(status_code=400, detail="Provide filePath or imageBase64")

        get_session().load_image(image)
        return _image_response(image)
    except HTTPException:
        raise
    except Exception as e:
        return ImageLoadResponse(success=False, error=str(e))


@router.post("/demo", response_model=ImageLoadResponse)
async def load_demo_image():
    """Load the generated demo pattern."""
    image = generate_demo_pattern()
    get_session().load_image(image)
    return _image_response(image)


@router.get("/status")
async def get_session_status():
    """Get the status of the loaded image."""
    session = get_session()
    image = session.image

    return {
        "loaded": session.image_ready,
        "name": image.name if image is not None else None,
        "width": image.pixel_width if image is not None else 0,
        "height": image.pixel_height if image is not None else 0,
        "currentNodeId": session.current_node_id,
    }


@router.post("/restart", response_model=SessionStateResponse)
async def restart_session():
    """Restart the classification, keeping the loaded image."""
    return apply_to_session(lambda session: session.restart())


class UnitCellRequest(BaseModel):
    A: XYPoint
    B: XYPoint
    C: XYPoint
    D: XYPoint


class UnitCellCornerRequest(BaseModel):
    corner: Literal["A", "B", "C", "D"]
    x: float
    y: float


@router.get("/unit-cell")
async def get_unit_cell() -> Dict[str, Dict[str, float]]:
    """Get the unit cell corners in normalised image coordinates."""
    return get_session().unit_cell.to_dict()


@router.put("/unit-cell", response_model=SessionStateResponse)
async def set_unit_cell(request: UnitCellRequest):
    """Replace all four corners; values are clamped to [0, 1]."""
    corners = {name: getattr(request, name).model_dump() for name in ("A", "B", "C", "D")}
    return apply_to_session(lambda session: session.set_unit_cell(corners))


@router.post("/unit-cell/corner", response_model=SessionStateResponse)
async def move_unit_cell_corner(request: UnitCellCornerRequest):
    """Drag a single corner; the value is clamped to [0, 1]."""
    return apply_to_session(
        lambda session: session.move_unit_cell_corner(request.corner, {"x": request.x, "y": request.y})
    )
