"""Quick summary counts for a feature set, shown before exporting."""

import logging
from typing import Iterable

from .constants import LEVEL_HEIGHT
from .models import AnalysisStats, Feature
from .tags import parse_number

logger = logging.getLogger(__name__)


def _rough_height(tags) -> float:
    """Height from explicit tags only; no type-based estimates."""
    if tags.get('height'):
        h = parse_number(tags['height'])
        return h if h is not None else 0.0
    if tags.get('building:levels'):
        levels = parse_number(tags['building:levels'])
        return levels * LEVEL_HEIGHT if levels is not None else 0.0
    return 0.0


def calculate_stats(features: Iterable[Feature]) -> AnalysisStats:
    stats = AnalysisStats()
    total_height = 0.0
    height_count = 0

    for feature in features:
        tags = feature.tags
        if not tags:
            continue
        if tags.get('building'):
            stats.total_buildings += 1
        if tags.get('highway'):
            stats.total_roads += 1
        if tags.get('natural') or tags.get('landuse'):
            stats.total_nature += 1

        h = _rough_height(tags)
        if h > 0:
            total_height += h
            height_count += 1
            stats.max_height = max(stats.max_height, h)

    if height_count:
        stats.avg_height = total_height / height_count
    logger.debug(f"Stats: {stats}")
    return stats
