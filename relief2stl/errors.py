"""
Error taxonomy shared by every stage of the image → relief → STL pipeline.

Fatal errors derive from Relief2StlError and carry the stage that raised
them plus an optional ``details`` dict (coordinates, sizes, facet index).
Each one also subclasses the builtin it most resembles, so callers that
only know ValueError / OSError / RuntimeError still catch them.
"""


class Relief2StlError(Exception):
    """Base class for fatal pipeline errors."""

    stage = "relief2stl"

    def __init__(self, message: str, details: dict = None):
        super().__init__(f"[{self.stage}] {message}")
        self.message = message
        self.details = details or {}


class GeometryTooSmall(Relief2StlError, ValueError):
    """Height field narrower or shorter than 2 samples."""

    stage = "mesh"


class SinkWriteError(Relief2StlError, OSError):
    """The STL output stream failed mid-write."""

    stage = "stl"


class RemovalError(Relief2StlError, RuntimeError):
    """The background-removal collaborator failed."""

    stage = "rembg"


class DecodeError(Relief2StlError, ValueError):
    """The input image could not be fetched or decoded."""

    stage = "source"


class PreprocessError(Relief2StlError, ValueError):
    """Subject preprocessing could not find anything to keep."""

    stage = "preprocess"


class DegenerateFacet(UserWarning):
    """A zero-area facet was written with a zero normal."""
