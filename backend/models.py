from pydantic import BaseModel
from typing import Any, Dict, List, Optional


class Location(BaseModel):
    lat: float
    lng: float
    label: Optional[str] = None


class TerrainSample(BaseModel):
    lat: float
    lng: float
    elevation: Optional[float] = 0.0


class ExportOptionsModel(BaseModel):
    simplify: bool = False
    tolerance: Optional[float] = None


class DxfRequest(BaseModel):
    elements: List[Dict[str, Any]] = []  # raw Overpass elements
    center: Location
    terrain: Optional[List[List[TerrainSample]]] = None
    options: ExportOptionsModel = ExportOptionsModel()


class StatsRequest(BaseModel):
    elements: List[Dict[str, Any]] = []


class StatsResponse(BaseModel):
    total_buildings: int
    total_roads: int
    total_nature: int
    avg_height: float
    max_height: float
