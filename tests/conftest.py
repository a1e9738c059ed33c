"""Shared fixtures for the dxfbuilder test suite."""

import pytest

from dxfbuilder.models import GeoPoint, TerrainPoint

ORIGIN = GeoPoint(lat=-23.5505, lng=-46.6333)


def dxf_pairs(text):
    """Split DXF text into (code, value) pairs."""
    lines = text.split('\n')
    assert lines[-1] == '', "DXF text must end with a newline"
    lines = lines[:-1]
    assert len(lines) % 2 == 0, "DXF text must consist of line pairs"
    return [(int(lines[i]), lines[i + 1]) for i in range(0, len(lines), 2)]


def entity_records(text):
    """Group the ENTITIES section into lists of pairs, one per entity."""
    pairs = dxf_pairs(text)
    start = pairs.index((2, 'ENTITIES')) + 1
    records = []
    for code, value in pairs[start:]:
        if code == 0:
            if value == 'ENDSEC':
                break
            records.append([(code, value)])
        else:
            records[-1].append((code, value))
    return records


@pytest.fixture
def origin():
    return ORIGIN


def make_grid(elevations, lat0=0.0, lng0=0.0, step=0.001):
    """Build a row-major TerrainGrid from a nested list of elevations."""
    return [
        [TerrainPoint(lat0 + i * step, lng0 + j * step, float(e))
         for j, e in enumerate(row)]
        for i, row in enumerate(elevations)
    ]


@pytest.fixture
def grid_factory():
    return make_grid
