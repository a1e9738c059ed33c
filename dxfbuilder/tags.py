"""OSM tag inference: extrusion height, vertical offset, layer and linetype.

Every resolver is a pure function of the tag mapping.  ``tags=None`` means
the element carried no tags at all and yields the inert defaults.  Numeric
tags are parsed leniently (leading number, trailing junk ignored); values
with no leading number fall through to the next rule.
"""

import re
from typing import Optional

from .constants import (
    LAYERS, BUILDING_TYPE_HEIGHTS, DEFAULT_BUILDING_HEIGHT,
    LEVEL_HEIGHT, MIN_LEVELS_HEIGHT, LAYER_OFFSET_STEP,
    LINETYPE_CONTINUOUS, LINETYPE_DASHED,
)
from .models import Layer, Tags, Way

_LEADING_FLOAT = re.compile(r'\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)')
_NOT_NUMERIC = re.compile(r'[^\d.]')

_HIGHWAY_CLASSES = (
    (frozenset({'motorway', 'trunk', 'motorway_link'}), 'ROADS_HIGHWAY'),
    (frozenset({'primary', 'secondary'}), 'ROADS_MAJOR'),
    (frozenset({'tertiary', 'residential', 'unclassified'}), 'ROADS_MINOR'),
    (frozenset({'service', 'escape'}), 'ROADS_SERVICE'),
)
_FOOTWAYS = frozenset({'footway', 'pedestrian', 'steps'})
_FURNITURE = frozenset({'bench', 'waste_basket', 'post_box'})


def parse_number(value) -> Optional[float]:
    """Parse the leading number of a tag value, or None if there is none."""
    if value is None:
        return None
    m = _LEADING_FLOAT.match(str(value))
    if not m:
        return None
    return float(m.group(1))


def _is_bridge(tags) -> bool:
    return tags.get('bridge') in ('yes', 'viaduct')


def is_tunnel(tags: Tags) -> bool:
    return bool(tags) and tags.get('tunnel') in ('yes', 'building_passage')


# ── Height ──────────────────────────────────────────────────────────────

def get_height(tags: Tags) -> float:
    """Extrusion height in metres, first matching rule wins."""
    if not tags:
        return 0.0

    if tags.get('height'):
        # "12 m", "12.5m" → strip everything but digits and dots first
        h = parse_number(_NOT_NUMERIC.sub('', tags['height']))
        if h is not None:
            return h

    if tags.get('building:levels'):
        levels = parse_number(tags['building:levels'])
        if levels is not None:
            return max(levels * LEVEL_HEIGHT, MIN_LEVELS_HEIGHT)

    if tags.get('building'):
        return BUILDING_TYPE_HEIGHTS.get(tags['building'], DEFAULT_BUILDING_HEIGHT)

    if tags.get('barrier'):
        return 2.5 if tags['barrier'] in ('wall', 'fence') else 1.0
    if tags.get('man_made') == 'chimney':
        return 30.0
    if tags.get('power') == 'pole':
        return 8.0
    if tags.get('natural') == 'tree':
        return 6.0
    return 0.0


# ── Vertical offset ─────────────────────────────────────────────────────

def get_layer_offset(tags: Tags) -> float:
    """Elevation shift separating bridges and tunnels from ground level."""
    if not tags:
        return 0.0

    layer = parse_number(tags.get('layer'))
    if layer is not None:
        return layer * LAYER_OFFSET_STEP
    if _is_bridge(tags) or tags.get('man_made') == 'bridge':
        return LAYER_OFFSET_STEP
    if is_tunnel(tags):
        return -LAYER_OFFSET_STEP
    return 0.0


# ── Drawing layer ───────────────────────────────────────────────────────

def _highway_layer(tags) -> Layer:
    highway = tags['highway']
    for values, key in _HIGHWAY_CLASSES:
        if highway in values:
            return LAYERS[key]
    if highway == 'cycleway' or tags.get('bicycle') == 'designated':
        return LAYERS['ROADS_CYCLEWAY']
    if highway in _FOOTWAYS or tags.get('foot') == 'designated':
        return LAYERS['ROADS_FOOTWAY']
    return LAYERS['ROADS_OTHER']


def get_layer(tags: Tags) -> Layer:
    """Pick the drawing layer for a feature, first matching rule wins."""
    if not tags:
        return LAYERS['DEFAULT']
    if tags.get('building'):
        return LAYERS['BUILDINGS']
    if _is_bridge(tags):
        return LAYERS['BRIDGES']
    if tags.get('tunnel') == 'yes':
        return LAYERS['TUNNELS']
    if tags.get('highway') == 'traffic_signals':
        return LAYERS['SIGNALS']
    if tags.get('amenity') in _FURNITURE:
        return LAYERS['FURNITURE']
    if tags.get('highway'):
        return _highway_layer(tags)
    if tags.get('natural') or tags.get('landuse') == 'grass':
        return LAYERS['NATURE']
    if tags.get('waterway') or tags.get('natural') == 'water':
        return LAYERS['WATER']
    if tags.get('amenity') or tags.get('man_made'):
        return LAYERS['DETAILS']
    return LAYERS['DEFAULT']


def get_linetype(tags: Tags) -> str:
    return LINETYPE_DASHED if is_tunnel(tags) else LINETYPE_CONTINUOUS


def is_closed(way: Way) -> bool:
    """A way is drawn closed if it is a building or its node ring closes."""
    if way.tags and way.tags.get('building'):
        return True
    return bool(way.nodes) and way.nodes[0] == way.nodes[-1]
