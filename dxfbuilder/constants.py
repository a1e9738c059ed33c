"""Configuration constants: layer registry, slope bands, tag heights, logging."""

import os
import logging
from types import MappingProxyType

from dotenv import load_dotenv

from .models import Layer

# Load environment variables
load_dotenv()

# ── Projection ──────────────────────────────────────────────────────────
EARTH_RADIUS = 6378137.0  # metres

# ── Layer registry ──────────────────────────────────────────────────────
# AutoCAD Color Index per layer.  Order is the order of the LAYER table.
LAYERS = MappingProxyType({
    'BUILDINGS': Layer('BUILDINGS', 2),             # yellow

    # Road hierarchy
    'ROADS_HIGHWAY': Layer('ROADS_HIGHWAY', 1),     # red (motorways)
    'ROADS_MAJOR': Layer('ROADS_MAJOR', 6),         # magenta (primary/secondary)
    'ROADS_MINOR': Layer('ROADS_MINOR', 30),        # orange (residential/tertiary)
    'ROADS_SERVICE': Layer('ROADS_SERVICE', 252),   # gray (service/alley)
    'ROADS_CYCLEWAY': Layer('ROADS_CYCLEWAY', 130),
    'ROADS_FOOTWAY': Layer('ROADS_FOOTWAY', 9),     # light gray
    'ROADS_OTHER': Layer('ROADS_OTHER', 7),         # white

    # Structures
    'BRIDGES': Layer('BRIDGES', 4),                 # cyan
    'TUNNELS': Layer('TUNNELS', 8),                 # dark grey

    # Street furniture
    'FURNITURE': Layer('FURNITURE', 34),
    'SIGNALS': Layer('SIGNALS', 1),

    'NATURE': Layer('NATURE', 3),                   # green
    'WATER': Layer('WATER', 5),                     # blue
    'DETAILS': Layer('DETAILS', 4),
    'TERRAIN': Layer('TERRAIN', 252),               # overridden per face by slope
    'DEFAULT': Layer('0', 7),
})

LINETYPE_CONTINUOUS = 'CONTINUOUS'
LINETYPE_DASHED = 'DASHED'

# ── Terrain slope bands ─────────────────────────────────────────────────
SLOPE_THRESHOLDS = MappingProxyType({
    'FLAT': 5.0,       # 0-5 degrees
    'MILD': 15.0,      # 5-15 degrees
    'MODERATE': 30.0,  # 15-30 degrees, steeper is STEEP
})

SLOPE_COLORS = MappingProxyType({
    'FLAT': 112,       # light green
    'MILD': 2,         # yellow
    'MODERATE': 30,    # orange
    'STEEP': 1,        # red
})

# ── Tag inference ───────────────────────────────────────────────────────
LEVEL_HEIGHT = 3.2         # metres per building:levels
MIN_LEVELS_HEIGHT = 3.0
LAYER_OFFSET_STEP = 5.0    # metres per OSM layer step

BUILDING_TYPE_HEIGHTS = MappingProxyType({
    'apartments': 15.0,
    'house': 6.0,
    'retail': 6.0,
    'office': 14.0,
    'industrial': 9.0,
    'church': 18.0,
    'hospital': 20.0,
    'skyscraper': 80.0,
})
DEFAULT_BUILDING_HEIGHT = 6.0

# Point features drawn as circle markers: (tag key, tag value) → radius (m)
MARKER_RADII = MappingProxyType({
    ('natural', 'tree'): 1.5,
    ('highway', 'street_lamp'): 0.2,
})

# ── Terrain sampling lattice ────────────────────────────────────────────
MIN_RADIUS = 10.0
MAX_RADIUS = 2000.0
DEFAULT_GRID_SIZE = 12

# ── Document metadata ───────────────────────────────────────────────────
GENERATOR_NAME = os.environ.get("DXFBUILDER_GENERATOR", "dxfbuilder")

# Configure logging
LOG_LEVEL = os.environ.get("DXFBUILDER_LOG_LEVEL", "INFO").upper()
logging.basicConfig(level=LOG_LEVEL, format='%(asctime)s - %(levelname)s - %(message)s')
