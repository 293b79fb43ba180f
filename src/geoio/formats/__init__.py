"""File format codecs, one module per third-party library."""

from geoio.formats.gdal import GDALCodec
from geoio.formats.geojson import GeoJSONCodec
from geoio.formats.image import ImageCodec
from geoio.formats.parquet import GeoParquetCodec
from geoio.formats.ply import PLYCodec
from geoio.formats.shp import ShapefileCodec

__all__ = [
    "GDALCodec",
    "GeoJSONCodec",
    "GeoParquetCodec",
    "ImageCodec",
    "PLYCodec",
    "ShapefileCodec",
]
