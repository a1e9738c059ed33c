import logging
from dataclasses import asdict

from fastapi import APIRouter, HTTPException
from fastapi.responses import Response

from backend import config
from backend.models import DxfRequest, StatsRequest, StatsResponse
from dxfbuilder.exporter import generate_dxf
from dxfbuilder.models import parse_elements, parse_export_request
from dxfbuilder.stats import calculate_stats

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["dxf"])


@router.post("/dxf")
def create_dxf(request: DxfRequest):
    """Generate a DXF drawing from OSM elements and an optional terrain grid.

    Uses ``def`` (not ``async def``) so FastAPI runs the CPU-bound export
    in a threadpool instead of on the event loop.
    """
    label = request.center.label or f"{request.center.lat}, {request.center.lng}"
    logger.info(f"Generating DXF for {label}...")

    try:
        features, center, terrain, options = parse_export_request(request.model_dump())
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc))

    try:
        text = generate_dxf(features, center, terrain, options)
    except Exception:
        logger.exception("DXF generation failed")
        raise HTTPException(status_code=500, detail="Failed to generate DXF")

    return Response(
        content=text,
        media_type=config.DXF_MEDIA_TYPE,
        headers={"Content-Disposition": f"attachment; filename={config.DXF_FILENAME}"},
    )


@router.post("/stats", response_model=StatsResponse)
def feature_stats(request: StatsRequest):
    """Building/road/nature counts and height summary for a feature set."""
    try:
        features = parse_elements(request.elements)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    return StatsResponse(**asdict(calculate_stats(features)))
