"""dxfbuilder package: 2.5D DXF drawings from OpenStreetMap features.

Import constants FIRST so logging and environment overrides are set up
before any other module logs.
"""

from dxfbuilder import constants as _constants  # noqa: F401

from dxfbuilder.exporter import generate_dxf
from dxfbuilder.models import (
    GeoPoint, Node, Way, Member, Relation, TerrainPoint, ExportOptions,
)
