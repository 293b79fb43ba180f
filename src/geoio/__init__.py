"""Load and save geospatial tables with one canonical geometry model."""

from geoio.errors import (
    GeoIOError,
    InconsistentDimensionality,
    InvalidGeometry,
    MissingGeometryColumn,
    UnsupportedGeometryKind,
    UnsupportedTargetFormat,
)
from geoio.geometry import (
    Chain,
    Grid,
    Mesh,
    MultiChain,
    MultiPoint,
    MultiPolygon,
    Point,
    Polygon,
    decimate,
    from_canonical,
    to_canonical,
)
from geoio.geotable import GeometrySet, GeoTable, LazyGeometryView, from_grid_or_mesh, unwrap, wrap
from geoio.io import Format, fetch_region, gadm, load, save

__version__ = "0.1.0"
__all__ = [
    "Chain",
    "Format",
    "GeoIOError",
    "GeoTable",
    "GeometrySet",
    "Grid",
    "InconsistentDimensionality",
    "InvalidGeometry",
    "LazyGeometryView",
    "Mesh",
    "MissingGeometryColumn",
    "MultiChain",
    "MultiPoint",
    "MultiPolygon",
    "Point",
    "Polygon",
    "UnsupportedGeometryKind",
    "UnsupportedTargetFormat",
    "decimate",
    "fetch_region",
    "from_canonical",
    "from_grid_or_mesh",
    "gadm",
    "load",
    "save",
    "to_canonical",
    "unwrap",
    "wrap",
]
