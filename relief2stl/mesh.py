"""
HeightField → closed, outward-oriented triangle mesh.

The solid is built from six surfaces:

  • top relief   – one quad per 2×2 block of samples, split along the
                   (x1,y0)-(x0,y1) diagonal, normals +Z
  • flat base    – the same quad grid at Z = -base_thickness, normals -Z
  • four walls   – one quad per boundary segment joining the relief edge
                   to the base edge (front -Y, back +Y, left -X, right +X)

Facets are produced lazily straight from the height samples; no vertex
grid is ever built.  Every edge is shared by exactly two facets that
traverse it in opposite directions, so the result is watertight and
consistently wound.
"""

import math
import warnings
from dataclasses import dataclass
from typing import Iterator, NamedTuple, Tuple

from .errors import DegenerateFacet, GeometryTooSmall
from .heightfield import HeightField

Vec3 = Tuple[float, float, float]

ZERO_NORMAL = (0.0, 0.0, 0.0)


class Facet(NamedTuple):
    normal: Vec3
    v1: Vec3
    v2: Vec3
    v3: Vec3


@dataclass
class MeshConfig:
    """Physical size of the printed relief, all in millimetres."""
    model_width: float = 50.0
    model_thickness: float = 5.0
    base_thickness: float = 2.0

    def __post_init__(self):
        for name in ("model_width", "model_thickness", "base_thickness"):
            value = getattr(self, name)
            if not value > 0:
                raise ValueError(f"[mesh] {name} must be > 0 (got {value})")

    def pixel_size(self, width: int) -> float:
        return self.model_width / width


def facet_normal(v1: Vec3, v2: Vec3, v3: Vec3) -> Vec3:
    """Unit normal of (v2 - v1) × (v3 - v1); the zero vector for degenerate facets."""
    ax, ay, az = v2[0] - v1[0], v2[1] - v1[1], v2[2] - v1[2]
    bx, by, bz = v3[0] - v1[0], v3[1] - v1[1], v3[2] - v1[2]

    nx = ay * bz - az * by
    ny = az * bx - ax * bz
    nz = ax * by - ay * bx

    length = math.sqrt(nx * nx + ny * ny + nz * nz)
    if length == 0.0:
        return ZERO_NORMAL
    return nx / length, ny / length, nz / length


def make_facet(v1: Vec3, v2: Vec3, v3: Vec3) -> Facet:
    normal = facet_normal(v1, v2, v3)
    if normal is ZERO_NORMAL:
        warnings.warn(f"[mesh] Degenerate facet at {v1}, {v2}, {v3}; writing a zero normal",
                      DegenerateFacet, stacklevel=2)
    return Facet(normal, v1, v2, v3)


def facet_count(width: int, height: int) -> int:
    """Exact number of facets generate_facets() yields for a width × height field."""
    quads = (width - 1) * (height - 1)
    return 2 * quads + 2 * quads + 4 * (width - 1) + 4 * (height - 1)


def generate_facets(field: HeightField, cfg: MeshConfig = None) -> Iterator[Facet]:
    """
    Lazily yield every facet of the relief solid.

    Order: top surface (row-major), base (row-major), front/back walls
    (per column segment), left/right walls (per row segment).

    Raises GeometryTooSmall immediately – before the first facet is
    requested – when the field is smaller than 2×2.
    """
    cfg = cfg or MeshConfig()
    w, h = field.width, field.height
    if w < 2 or h < 2:
        raise GeometryTooSmall(
            f"Height field must be at least 2x2 samples (got {w}x{h})",
            {"width": w, "height": h},
        )
    return _iter_facets(field, cfg)


def _iter_facets(field: HeightField, cfg: MeshConfig) -> Iterator[Facet]:
    w, h = field.width, field.height
    p = cfg.pixel_size(w)
    scale = cfg.model_thickness / 255.0
    z_base = -cfg.base_thickness

    def x_at(col):
        return col * p

    def y_at(row):
        # Row 0 (image top) is the far edge; the last row sits on Y = 0.
        return (h - row - 1) * p

    def z_at(col, row):
        return field.at(col, row) * scale

    # ── top relief ────────────────────────────────────────────────────────
    for row in range(h - 1):
        y0, y1 = y_at(row), y_at(row + 1)
        for col in range(w - 1):
            x0, x1 = x_at(col), x_at(col + 1)
            z00, z10 = z_at(col, row), z_at(col + 1, row)
            z01, z11 = z_at(col, row + 1), z_at(col + 1, row + 1)

            yield make_facet((x0, y0, z00), (x0, y1, z01), (x1, y0, z10))
            yield make_facet((x1, y0, z10), (x0, y1, z01), (x1, y1, z11))

    # ── flat base (reversed winding → -Z) ─────────────────────────────────
    for row in range(h - 1):
        y0, y1 = y_at(row), y_at(row + 1)
        for col in range(w - 1):
            x0, x1 = x_at(col), x_at(col + 1)

            yield make_facet((x0, y0, z_base), (x1, y0, z_base), (x0, y1, z_base))
            yield make_facet((x1, y0, z_base), (x1, y1, z_base), (x0, y1, z_base))

    # ── front (last row, Y = 0) / back (row 0) walls ──────────────────────
    y_front, y_back = y_at(h - 1), y_at(0)
    for col in range(w - 1):
        x0, x1 = x_at(col), x_at(col + 1)

        z1, z2 = z_at(col, h - 1), z_at(col + 1, h - 1)
        yield make_facet((x0, y_front, z_base), (x1, y_front, z_base), (x0, y_front, z1))
        yield make_facet((x1, y_front, z_base), (x1, y_front, z2), (x0, y_front, z1))

        z1, z2 = z_at(col, 0), z_at(col + 1, 0)
        yield make_facet((x0, y_back, z_base), (x0, y_back, z1), (x1, y_back, z_base))
        yield make_facet((x1, y_back, z_base), (x0, y_back, z1), (x1, y_back, z2))

    # ── left (col 0) / right (last col) walls ─────────────────────────────
    x_left, x_right = x_at(0), x_at(w - 1)
    for row in range(h - 1):
        y0, y1 = y_at(row), y_at(row + 1)

        z1, z2 = z_at(0, row), z_at(0, row + 1)
        yield make_facet((x_left, y0, z_base), (x_left, y1, z_base), (x_left, y0, z1))
        yield make_facet((x_left, y1, z_base), (x_left, y1, z2), (x_left, y0, z1))

        z1, z2 = z_at(w - 1, row), z_at(w - 1, row + 1)
        yield make_facet((x_right, y0, z_base), (x_right, y0, z1), (x_right, y1, z_base))
        yield make_facet((x_right, y1, z_base), (x_right, y0, z1), (x_right, y1, z2))
