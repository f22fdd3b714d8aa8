"""
ASCII STL writer / reader.

The writer streams facets straight from the generator to a binary sink –
one record per facet, nothing buffered beyond the sink's own buffer – so
arbitrarily large reliefs export in constant memory.
"""

import os
from typing import Iterable, List, Tuple

from .errors import SinkWriteError
from .mesh import Facet

SOLID_NAME = "relief_model"

_FACET_TEMPLATE = (
    "  facet normal {n[0]:f} {n[1]:f} {n[2]:f}\n"
    "    outer loop\n"
    "      vertex {a[0]:f} {a[1]:f} {a[2]:f}\n"
    "      vertex {b[0]:f} {b[1]:f} {b[2]:f}\n"
    "      vertex {c[0]:f} {c[1]:f} {c[2]:f}\n"
    "    endloop\n"
    "  endfacet\n"
)


def format_facet(facet: Facet) -> str:
    return _FACET_TEMPLATE.format(n=facet.normal, a=facet.v1, b=facet.v2, c=facet.v3)


def _write(sink, text: str, index: int) -> None:
    try:
        sink.write(text.encode("ascii"))
    except OSError as exc:
        raise SinkWriteError(
            f"Output stream failed after {index} facets: {exc}",
            {"facet_index": index},
        ) from exc


def write_ascii_stl(facets: Iterable[Facet], sink, name: str = SOLID_NAME) -> int:
    """
    Stream ``facets`` to the binary file-like ``sink``.

    Returns the number of facets written.  Any OSError raised by the sink
    is re-raised as SinkWriteError straight away.  The sink is flushed
    whether or not writing succeeds.
    """
    count = 0
    try:
        _write(sink, f"solid {name}\n", count)
        for facet in facets:
            _write(sink, format_facet(facet), count)
            count += 1
        _write(sink, f"endsolid {name}\n", count)
    except BaseException:
        try:
            sink.flush()
        except OSError:
            pass    # keep the original error
        raise
    try:
        sink.flush()
    except OSError as exc:
        raise SinkWriteError(f"Failed to flush output stream: {exc}", {"facet_index": count}) from exc
    return count


def save_stl(facets: Iterable[Facet], path, name: str = SOLID_NAME) -> int:
    """Write an ASCII STL file; the file is closed whether or not writing succeeds."""
    try:
        f = open(path, "wb")
    except OSError as exc:
        raise SinkWriteError(f"Cannot open {path}: {exc}", {"path": os.fspath(path)}) from exc

    print(f"[stl] Writing {path} …")
    with f:
        count = write_ascii_stl(facets, f, name)
    print(f"[stl] Done → {path}  ({count:,} facets)")
    return count


# ──────────────────────────────────────────────────────────────────────────────
# Reader
# ──────────────────────────────────────────────────────────────────────────────

def _floats(tokens: List[str], keyword: str, line_no: int) -> Tuple[float, float, float]:
    if len(tokens) != 3:
        raise ValueError(f"[stl] line {line_no}: '{keyword}' needs 3 numbers, got {len(tokens)}")
    try:
        return float(tokens[0]), float(tokens[1]), float(tokens[2])
    except ValueError:
        raise ValueError(f"[stl] line {line_no}: bad number in '{keyword}'") from None


def read_ascii_stl(stream) -> Tuple[str, List[Facet]]:
    """
    Parse an ASCII STL from a text or binary stream.

    Returns
    -------
    name   : str          the solid name
    facets : list[Facet]
    """
    name = None
    facets = []
    normal = None
    verts = []
    ended = False

    for line_no, raw in enumerate(stream, start=1):
        if isinstance(raw, bytes):
            raw = raw.decode("ascii")
        tokens = raw.split()
        if not tokens:
            continue
        keyword = tokens[0]

        if name is None:
            if keyword != "solid":
                raise ValueError(f"[stl] line {line_no}: expected 'solid', got '{keyword}'")
            name = " ".join(tokens[1:])
        elif ended:
            raise ValueError(f"[stl] line {line_no}: content after 'endsolid'")
        elif keyword == "facet":
            if normal is not None or len(tokens) < 2 or tokens[1] != "normal":
                raise ValueError(f"[stl] line {line_no}: unexpected 'facet'")
            normal = _floats(tokens[2:], "facet normal", line_no)
            verts = []
        elif keyword == "vertex":
            if normal is None or len(verts) == 3:
                raise ValueError(f"[stl] line {line_no}: unexpected 'vertex'")
            verts.append(_floats(tokens[1:], "vertex", line_no))
        elif keyword == "endfacet":
            if normal is None or len(verts) != 3:
                raise ValueError(f"[stl] line {line_no}: incomplete facet")
            facets.append(Facet(normal, verts[0], verts[1], verts[2]))
            normal = None
        elif keyword in ("outer", "endloop"):
            if normal is None:
                raise ValueError(f"[stl] line {line_no}: '{keyword}' outside a facet")
        elif keyword == "endsolid":
            if normal is not None:
                raise ValueError(f"[stl] line {line_no}: 'endsolid' inside a facet")
            ended = True
        else:
            raise ValueError(f"[stl] line {line_no}: unknown keyword '{keyword}'")

    if name is None or not ended:
        raise ValueError("[stl] Truncated STL: missing 'solid' or 'endsolid'")
    return name, facets
