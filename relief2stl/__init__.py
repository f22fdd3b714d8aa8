"""Image → relief height field → watertight ASCII STL."""

from .depth import DepthConfig, extract_depth, to_grayscale
from .errors import (
    DecodeError,
    DegenerateFacet,
    GeometryTooSmall,
    PreprocessError,
    Relief2StlError,
    RemovalError,
    SinkWriteError,
)
from .heightfield import HeightField
from .mesh import Facet, MeshConfig, facet_count, generate_facets
from .stl import read_ascii_stl, save_stl, write_ascii_stl

__all__ = [
    "DepthConfig",
    "extract_depth",
    "to_grayscale",
    "HeightField",
    "Facet",
    "MeshConfig",
    "facet_count",
    "generate_facets",
    "read_ascii_stl",
    "save_stl",
    "write_ascii_stl",
    "Relief2StlError",
    "GeometryTooSmall",
    "DegenerateFacet",
    "SinkWriteError",
    "RemovalError",
    "DecodeError",
    "PreprocessError",
]
