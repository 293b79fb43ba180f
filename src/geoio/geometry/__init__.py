"""Canonical geometry model and conversions."""

from geoio.geometry.conversion import TARGETS, from_canonical, to_canonical
from geoio.geometry.decimation import decimate, decimate_geometry
from geoio.geometry.types import (
    DOMAIN_KINDS,
    VECTOR_KINDS,
    Chain,
    Geometry,
    Grid,
    Mesh,
    MultiChain,
    MultiPoint,
    MultiPolygon,
    Point,
    Polygon,
    check_dimensionality,
)

__all__ = [
    "Chain",
    "DOMAIN_KINDS",
    "Geometry",
    "Grid",
    "Mesh",
    "MultiChain",
    "MultiPoint",
    "MultiPolygon",
    "Point",
    "Polygon",
    "TARGETS",
    "VECTOR_KINDS",
    "check_dimensionality",
    "decimate",
    "decimate_geometry",
    "from_canonical",
    "to_canonical",
]
