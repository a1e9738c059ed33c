"""DXF (AC1015) group-code writer.

A DXF text file is a flat sequence of line pairs: an integer group code
followed by its value.  :class:`DxfWriter` appends those pairs to an
in-memory buffer; the ``write_*`` helpers emit complete sections and
entities in the exact layout CAD consumers of this exporter rely on.

Usage:
    from dxfbuilder.dxf import DxfWriter
    w = DxfWriter()
    write_header(w)
    write_tables(w)
    ...
    text = w.to_string()
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, List, Sequence

from .constants import LAYERS, LINETYPE_CONTINUOUS, LINETYPE_DASHED

ACAD_VERSION = 'AC1015'   # AutoCAD 2000
INSUNITS_METERS = 6


def _fixed(value: float, places: str) -> str:
    # Exact binary value, ties away from zero; negative zero prints unsigned
    if value == 0:
        value = 0
    d = Decimal(value).quantize(Decimal(places), rounding=ROUND_HALF_UP)
    return f'{d:f}'


def fmt_xy(value: float) -> str:
    """Planar coordinate: 4 decimals."""
    return _fixed(value, '0.0001')


def fmt_z(value: float) -> str:
    """Elevation, thickness and z coordinate: 2 decimals."""
    return _fixed(value, '0.01')


def fmt_num(value: float) -> str:
    """Shortest plain form: 1.5 → '1.5', 2.0 → '2'."""
    return f'{value:g}'


def fmt_plain(value: float) -> str:
    """Full-precision number without a trailing '.0' for whole values."""
    value = float(value)
    if value.is_integer():
        return str(int(value))
    return repr(value)


class DxfWriter:
    """Append-only buffer of group-code/value pairs."""

    def __init__(self):
        self._lines: List[str] = []

    def group(self, code: int, value) -> 'DxfWriter':
        self._lines.append(str(code))
        self._lines.append(str(value))
        return self

    def comment(self, text: str) -> 'DxfWriter':
        return self.group(999, text)

    def pairs(self):
        """Yield the buffered (code, value) pairs, mainly for tests."""
        it = iter(self._lines)
        for code, value in zip(it, it):
            yield int(code), value

    def __len__(self):
        return len(self._lines) // 2

    def to_string(self) -> str:
        if not self._lines:
            return ''
        return '\n'.join(self._lines) + '\n'


# ── Sections ────────────────────────────────────────────────────────────

def write_preamble(w: DxfWriter, comments: Iterable[str]):
    for text in comments:
        w.comment(text)


def begin_section(w: DxfWriter, name: str):
    w.group(0, 'SECTION').group(2, name)


def end_section(w: DxfWriter):
    w.group(0, 'ENDSEC')


def write_header(w: DxfWriter):
    begin_section(w, 'HEADER')
    w.group(9, '$ACADVER').group(1, ACAD_VERSION)
    w.group(9, '$INSUNITS').group(70, INSUNITS_METERS)
    end_section(w)


def _write_dashed_ltype(w: DxfWriter):
    w.group(0, 'LTYPE')
    w.group(2, LINETYPE_DASHED)
    w.group(70, 0)
    w.group(3, 'Dashed __ __ __ __')
    w.group(72, 65)           # alignment 'A'
    w.group(73, 2)            # dash elements
    w.group(40, '2.0')        # total pattern length
    w.group(49, '1.25').group(74, 0)
    w.group(49, '-0.75').group(74, 0)


def write_tables(w: DxfWriter, layers=None):
    """LTYPE table with DASHED, then one LAYER record per registry entry."""
    layers = list((layers or LAYERS).values())

    begin_section(w, 'TABLES')

    w.group(0, 'TABLE').group(2, 'LTYPE').group(70, 1)
    _write_dashed_ltype(w)
    w.group(0, 'ENDTAB')

    w.group(0, 'TABLE').group(2, 'LAYER').group(70, len(layers))
    for layer in layers:
        w.group(0, 'LAYER')
        w.group(2, layer.name)
        w.group(70, 0)
        w.group(62, layer.color)
        w.group(6, LINETYPE_CONTINUOUS)
    w.group(0, 'ENDTAB')

    end_section(w)


def write_eof(w: DxfWriter):
    w.group(0, 'EOF')


# ── Entities ────────────────────────────────────────────────────────────

def write_face(w: DxfWriter, layer: str, color: int,
               vertices: Sequence[Sequence[float]]):
    """3DFACE from a triangle; the fourth corner repeats the third."""
    w.group(0, '3DFACE').group(8, layer).group(62, color)
    corners = list(vertices) + [vertices[-1]]
    for i, (x, y, z) in enumerate(corners):
        w.group(10 + i, fmt_xy(x))
        w.group(20 + i, fmt_xy(y))
        w.group(30 + i, fmt_z(z))


def write_polyline(w: DxfWriter, layer: str, points, closed: bool,
                   elevation: float, height: float,
                   linetype: str = LINETYPE_CONTINUOUS):
    """LWPOLYLINE at a constant ``elevation``, extruded by ``height``."""
    w.group(0, 'LWPOLYLINE')
    w.group(8, layer)
    w.group(6, linetype)
    w.group(90, len(points))
    w.group(70, 1 if closed else 0)
    w.group(38, fmt_z(elevation))
    w.group(39, fmt_z(height))
    for x, y in points:
        w.group(10, fmt_xy(x)).group(20, fmt_xy(y))


def write_circle(w: DxfWriter, layer: str, x: float, y: float, z: float,
                 radius: float, height: float = 0.0):
    """CIRCLE marker; thickness is only written for a positive height."""
    w.group(0, 'CIRCLE')
    w.group(8, layer)
    w.group(10, fmt_xy(x)).group(20, fmt_xy(y)).group(30, fmt_z(z))
    w.group(40, fmt_num(radius))
    if height > 0:
        w.group(39, fmt_z(height))
