"""Export pipeline: features plus an optional terrain grid into one DXF document.

Order of the ENTITIES section is fixed: terrain faces first, then one
entity per drawable feature in input order.  The pipeline holds no state
between calls and never mutates its inputs, so identical inputs always
produce byte-identical output.
"""

import logging
import time
from typing import Iterable, Optional

from . import dxf
from .constants import LAYERS, LINETYPE_CONTINUOUS, MARKER_RADII, GENERATOR_NAME
from .geometry import project, project_many, simplify_points
from .models import (
    ExportOptions, Feature, GeoPoint, Node, Relation, TerrainGrid, Way,
)
from .tags import get_height, get_layer, get_layer_offset, get_linetype, is_closed
from .terrain import center_elevation, elevation_at, is_valid_grid, mesh_terrain

logger = logging.getLogger(__name__)


class _ExportContext:
    """Per-call values shared by every entity of one export."""

    def __init__(self, center: GeoPoint, terrain: Optional[TerrainGrid],
                 options: ExportOptions):
        self.center = center
        self.terrain = terrain if is_valid_grid(terrain) else None
        if terrain and self.terrain is None:
            logger.warning("Terrain grid is not rectangular, ignoring elevations")
        self.options = options
        self.center_elev = center_elevation(self.terrain)

    def base_elevation(self, point: GeoPoint) -> float:
        return elevation_at(point.lat, point.lng, self.terrain, self.center_elev)


def _marker_radius(tags) -> Optional[float]:
    if not tags:
        return None
    for (key, value), radius in MARKER_RADII.items():
        if tags.get(key) == value:
            return radius
    return None


def _emit_outline(w: dxf.DxfWriter, ctx: _ExportContext, geometry,
                  layer: str, closed: bool, height: float,
                  layer_offset: float, linetype: str):
    projected = project_many(geometry, ctx.center)
    if ctx.options.simplify and len(projected) > 2:
        projected = simplify_points(projected, ctx.options.tolerance)

    z_base = ctx.base_elevation(geometry[0]) + layer_offset
    dxf.write_polyline(w, layer, projected.tolist(), closed,
                       elevation=z_base, height=height, linetype=linetype)


def _emit_way(w, ctx, way: Way) -> int:
    if not way.geometry:
        logger.debug(f"way {way.id}: no geometry, skipped")
        return 0
    _emit_outline(w, ctx, way.geometry,
                  layer=get_layer(way.tags).name,
                  closed=is_closed(way),
                  height=get_height(way.tags),
                  layer_offset=get_layer_offset(way.tags),
                  linetype=get_linetype(way.tags))
    return 1


def _emit_relation(w, ctx, rel: Relation) -> int:
    if not (rel.tags and rel.tags.get('building')):
        logger.debug(f"relation {rel.id}: not a building, skipped")
        return 0

    height = get_height(rel.tags)
    layer_offset = get_layer_offset(rel.tags)
    count = 0
    for member in rel.members:
        if member.type == 'way' and member.role == 'outer' and member.geometry:
            _emit_outline(w, ctx, member.geometry,
                          layer=LAYERS['BUILDINGS'].name,
                          closed=True,
                          height=height,
                          layer_offset=layer_offset,
                          linetype=LINETYPE_CONTINUOUS)
            count += 1
    return count


def _emit_node(w, ctx, node: Node) -> int:
    radius = _marker_radius(node.tags)
    if radius is None:
        return 0
    x, y = project(node.position.lat, node.position.lng, ctx.center)
    dxf.write_circle(w, get_layer(node.tags).name, x, y,
                     ctx.base_elevation(node.position),
                     radius=radius, height=get_height(node.tags))
    return 1


def _metadata(center: GeoPoint, options: ExportOptions):
    return [
        f"DXF Generated by {GENERATOR_NAME}",
        "System: Python",
        f"Origin: Lat {dxf.fmt_plain(center.lat)}, Lng {dxf.fmt_plain(center.lng)}",
        f"Simplify: {'true' if options.simplify else 'false'}",
    ]


def generate_dxf(features: Iterable[Feature], center: GeoPoint,
                 terrain: Optional[TerrainGrid] = None,
                 options: Optional[ExportOptions] = None) -> str:
    """Build the complete DXF document.

    Parameters
    ----------
    features : iterable of Node / Way / Relation
        Drawn in the given order.  Elements without usable geometry are
        skipped silently.
    center : GeoPoint
        Projection origin; becomes (0, 0) in the drawing.
    terrain : TerrainGrid, optional
        Row-major elevation samples.  Ragged grids are ignored.
    options : ExportOptions, optional
        ``simplify`` enables RDP with ``tolerance`` metres.

    Returns
    -------
    str
        DXF text, never empty.
    """
    t0 = time.perf_counter()
    options = options or ExportOptions()
    ctx = _ExportContext(center, terrain, options)

    w = dxf.DxfWriter()
    dxf.write_preamble(w, _metadata(center, options))
    dxf.write_header(w)
    dxf.write_tables(w)
    dxf.begin_section(w, 'ENTITIES')

    faces = mesh_terrain(ctx.terrain, center, ctx.center_elev)
    terrain_layer = LAYERS['TERRAIN'].name
    for face in faces:
        dxf.write_face(w, terrain_layer, face.color, face.vertices)

    n_features = 0
    n_entities = 0
    for feature in features:
        n_features += 1
        if isinstance(feature, Way):
            n_entities += _emit_way(w, ctx, feature)
        elif isinstance(feature, Relation):
            n_entities += _emit_relation(w, ctx, feature)
        elif isinstance(feature, Node):
            n_entities += _emit_node(w, ctx, feature)
        else:
            logger.debug(f"Skipping unsupported feature {type(feature).__name__}")

    dxf.end_section(w)
    dxf.write_eof(w)

    text = w.to_string()
    logger.info(f"DXF export: {n_features} features → {n_entities} entities, "
                f"{len(faces)} terrain faces, {len(text)} bytes "
                f"in {time.perf_counter() - t0:.2f}s")
    return text
