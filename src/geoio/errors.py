"""Errors raised by geoio itself.

Codec, I/O and network errors are never wrapped; they reach the caller
exactly as the underlying library raised them.
"""


class GeoIOError(Exception):
    """Base class for errors raised by geoio."""


class UnsupportedGeometryKind(GeoIOError, TypeError):
    """A geometry value has a kind the converter cannot map."""

    def __init__(self, kind: str, detail: str | None = None):
        self.kind = kind
        message = f"Unsupported geometry kind: {kind}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class InconsistentDimensionality(GeoIOError, ValueError):
    """Coordinates of mixed dimension (2D and 3D) in one geometry or table."""


class InvalidGeometry(GeoIOError, ValueError):
    """A geometry violates a structural invariant (e.g. a degenerate ring)."""


class MissingGeometryColumn(GeoIOError, KeyError):
    """The expected geometry column is not present in the table."""

    def __init__(self, column: str, columns: list[str]):
        self.column = column
        self.columns = columns
        super().__init__(f"Geometry column {column!r} not found in columns {columns}")

    def __str__(self) -> str:
        # KeyError quotes its argument, keep the message readable.
        return str(self.args[0])


class UnsupportedTargetFormat(GeoIOError, ValueError):
    """The target format cannot represent the data being written."""
