"""Data classes for map features, terrain samples and export options.

Features arrive as Overpass ``out geom`` JSON.  The parse helpers turn those
dicts into the typed variants below; the export engine only ever sees the
typed form.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, NamedTuple, Optional, Union

logger = logging.getLogger(__name__)

Tags = Optional[Dict[str, str]]


@dataclass(frozen=True)
class GeoPoint:
    lat: float
    lng: float


class ProjectedPoint(NamedTuple):
    """Local tangent-plane coordinates in metres."""
    x: float
    y: float


@dataclass(frozen=True)
class Layer:
    name: str
    color: int


@dataclass
class Node:
    id: int
    position: GeoPoint
    tags: Tags = None


@dataclass
class Way:
    id: int
    nodes: List[int] = field(default_factory=list)
    geometry: List[GeoPoint] = field(default_factory=list)
    tags: Tags = None


@dataclass
class Member:
    type: str
    ref: int
    role: str
    geometry: List[GeoPoint] = field(default_factory=list)


@dataclass
class Relation:
    id: int
    members: List[Member] = field(default_factory=list)
    tags: Tags = None


Feature = Union[Node, Way, Relation]


@dataclass(frozen=True)
class TerrainPoint:
    lat: float
    lng: float
    elevation: float


TerrainGrid = List[List[TerrainPoint]]


@dataclass(frozen=True)
class ExportOptions:
    simplify: bool = False
    tolerance: float = 0.8   # metres, RDP deviation bound


@dataclass
class AnalysisStats:
    total_buildings: int = 0
    total_roads: int = 0
    total_nature: int = 0
    avg_height: float = 0.0
    max_height: float = 0.0


# ── JSON parsing ────────────────────────────────────────────────────────

def _float(raw: dict, key: str, what: str) -> float:
    try:
        return float(raw[key])
    except (KeyError, TypeError, ValueError):
        raise ValueError(f"{what}: missing or non-numeric '{key}'") from None


def _elevation(raw: dict, what: str) -> float:
    # Elevation services report gaps as null
    if isinstance(raw, dict) and raw.get('elevation') is None:
        return 0.0
    return _float(raw, 'elevation', what)


def _int(value, what: str, field_name: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValueError(f"{what}: non-integer {field_name} {value!r}") from None


def _list(value, what: str, field_name: str) -> list:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValueError(f"{what}: '{field_name}' must be an array")
    return value


def _tags(raw: dict, what: str) -> Tags:
    tags = raw.get('tags')
    if tags is None:
        return None
    if not isinstance(tags, dict):
        raise ValueError(f"{what}: 'tags' must be an object")
    return {str(k): str(v) for k, v in tags.items()}


def _geometry(raw_geom, what: str) -> List[GeoPoint]:
    """Parse an Overpass geometry list of ``{lat, lon}`` objects."""
    if not raw_geom:
        return []
    return [GeoPoint(_float(p, 'lat', what), _float(p, 'lon', what))
            for p in _list(raw_geom, what, 'geometry')]


def _member(raw, what: str) -> Member:
    if not isinstance(raw, dict):
        raise ValueError(f"{what}: member must be an object, "
                         f"got {type(raw).__name__}")
    return Member(
        type=str(raw.get('type', '')),
        ref=_int(raw.get('ref', 0), what, 'member ref'),
        role=str(raw.get('role', '')),
        geometry=_geometry(raw.get('geometry'), what),
    )


def parse_element(raw: dict) -> Optional[Feature]:
    """Convert one Overpass element dict to a Node, Way or Relation.

    Returns None for element types the exporter does not understand.
    Raises ValueError when a known element is missing required fields.
    """
    if not isinstance(raw, dict):
        raise ValueError(f"element must be an object, got {type(raw).__name__}")

    kind = raw.get('type')
    what = f"{kind} {raw.get('id')}"
    try:
        el_id = int(raw['id'])
    except (KeyError, TypeError, ValueError):
        raise ValueError(f"{what}: missing or non-integer 'id'") from None

    if kind == 'node':
        position = GeoPoint(_float(raw, 'lat', what), _float(raw, 'lon', what))
        return Node(id=el_id, position=position, tags=_tags(raw, what))

    if kind == 'way':
        return Way(
            id=el_id,
            nodes=[_int(n, what, 'node ref')
                   for n in _list(raw.get('nodes'), what, 'nodes')],
            geometry=_geometry(raw.get('geometry'), what),
            tags=_tags(raw, what),
        )

    if kind == 'relation':
        members = [_member(m, what)
                   for m in _list(raw.get('members'), what, 'members')]
        return Relation(id=el_id, members=members, tags=_tags(raw, what))

    logger.debug(f"Ignoring element of unknown type {kind!r}")
    return None


def parse_elements(raw_elements) -> List[Feature]:
    """Parse an Overpass ``elements`` array, dropping unknown types."""
    features = []
    for raw in _list(raw_elements, 'request', 'elements'):
        feature = parse_element(raw)
        if feature is not None:
            features.append(feature)
    return features


def parse_center(raw: dict) -> GeoPoint:
    """Parse a ``{lat, lng}`` location (an optional ``label`` is ignored)."""
    if not isinstance(raw, dict):
        raise ValueError("center must be an object with 'lat' and 'lng'")
    return GeoPoint(_float(raw, 'lat', 'center'), _float(raw, 'lng', 'center'))


def parse_terrain(raw_grid) -> Optional[TerrainGrid]:
    """Parse a row-major list of rows of ``{lat, lng, elevation}`` samples."""
    if raw_grid is None:
        return None
    grid = []
    for i, row in enumerate(_list(raw_grid, 'terrain', 'terrain')):
        what = f"terrain row {i}"
        grid.append([
            TerrainPoint(_float(p, 'lat', what), _float(p, 'lng', what),
                         _elevation(p, what))
            for p in _list(row, what, 'row')
        ])
    return grid


def parse_options(raw: Optional[dict]) -> ExportOptions:
    if not raw:
        return ExportOptions()
    if not isinstance(raw, dict):
        raise ValueError("options must be an object")
    tolerance = raw.get('tolerance')
    if tolerance is None:
        return ExportOptions(simplify=bool(raw.get('simplify', False)))
    return ExportOptions(simplify=bool(raw.get('simplify', False)),
                         tolerance=_float(raw, 'tolerance', 'options'))


def parse_export_request(body: dict):
    """Split an export request body into engine inputs.

    ``body`` has the shape ``{elements, center, terrain?, options?}``.
    Returns (features, center, terrain, options).
    """
    if not isinstance(body, dict):
        raise ValueError("request body must be a JSON object")
    if 'center' not in body:
        raise ValueError("request body is missing 'center'")
    return (parse_elements(body.get('elements')),
            parse_center(body['center']),
            parse_terrain(body.get('terrain')),
            parse_options(body.get('options')))
