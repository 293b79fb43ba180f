"""Load and save geo-tables, routing on the file extension.

Extensions map to a :class:`Format`, and each format to a codec in a
registry. Unknown extensions use the GDAL fallback. Adding a format means
adding an ``EXTENSIONS`` entry and registering a codec.
"""

from __future__ import annotations

import logging
import math
from enum import Enum
from pathlib import Path
from typing import Any, Protocol

import pandas as pd

from geoio.errors import UnsupportedTargetFormat
from geoio.formats import (
    GDALCodec,
    GeoJSONCodec,
    GeoParquetCodec,
    ImageCodec,
    PLYCodec,
    ShapefileCodec,
)
from geoio.formats import gadm as gadm_client
from geoio.geometry.decimation import decimate
from geoio.geotable import GeometrySet, GeoTable, wrap

logger = logging.getLogger(__name__)


class Format(Enum):
    """Codec families selected by file extension."""

    IMAGE = "image"
    PLY = "ply"
    SHAPEFILE = "shapefile"
    GEOJSON = "geojson"
    PARQUET = "parquet"
    GDAL = "gdal"


EXTENSIONS: dict[str, Format] = {
    ".png": Format.IMAGE,
    ".jpg": Format.IMAGE,
    ".jpeg": Format.IMAGE,
    ".tif": Format.IMAGE,
    ".tiff": Format.IMAGE,
    ".ply": Format.PLY,
    ".shp": Format.SHAPEFILE,
    ".geojson": Format.GEOJSON,
    ".parquet": Format.PARQUET,
}

# Formats with a dedicated writer; everything else is written by GDAL.
WRITABLE: frozenset[Format] = frozenset({Format.SHAPEFILE, Format.GEOJSON, Format.PARQUET})


class Codec(Protocol):
    """Reader/writer for one format family."""

    def read(
        self, path: str | Path, *, layer: int = 0, **options: Any
    ) -> pd.DataFrame | GeoTable: ...

    def write(self, path: str | Path, geotable: GeoTable, **options: Any) -> None: ...


_CODEC_REGISTRY: dict[Format, Codec] = {
    Format.IMAGE: ImageCodec(),
    Format.PLY: PLYCodec(),
    Format.SHAPEFILE: ShapefileCodec(),
    Format.GEOJSON: GeoJSONCodec(),
    Format.PARQUET: GeoParquetCodec(),
    Format.GDAL: GDALCodec(),
}


def register_codec(fmt: Format, codec: Codec) -> None:
    """Register (or replace) the codec for a format."""
    _CODEC_REGISTRY[fmt] = codec


def get_codec(fmt: Format) -> Codec:
    """Return the codec for *fmt*, falling back to the GDAL codec."""
    return _CODEC_REGISTRY.get(fmt, _CODEC_REGISTRY[Format.GDAL])


def format_for(path: str | Path) -> Format:
    """Return the format for *path* by case-insensitive suffix match."""
    name = str(path).lower()
    for ext, fmt in EXTENSIONS.items():
        if name.endswith(ext):
            return fmt
    return Format.GDAL


def load(path: str | Path, layer: int = 0, lazy: bool = False, **options: Any) -> GeoTable:
    """Load a geospatial file as a :class:`GeoTable`.

    Args:
        path: File to read. The extension picks the codec: images
            (``.png``, ``.jpg``, ``.jpeg``, ``.tif``, ``.tiff``), ``.ply``,
            ``.shp``, ``.geojson``, ``.parquet``, and GDAL for the rest.
        layer: Layer to read from multi-layer GDAL datasets.
        lazy: Convert geometries on access instead of up front. Ignored for
            images and meshes.
        **options: Passed unchanged to the codec's underlying reader.

    Errors raised by the codec propagate unchanged.
    """
    fmt = format_for(path)
    codec = get_codec(fmt)
    logger.debug("Loading %s with %s codec", path, fmt.value)

    result = codec.read(path, layer=layer, **options)
    if isinstance(result, GeoTable):
        return result
    return wrap(result, lazy=lazy)


def save(path: str | Path, geotable: GeoTable, **options: Any) -> None:
    """Save a vector :class:`GeoTable`.

    ``.shp``, ``.geojson`` and ``.parquet`` have dedicated writers; every
    other extension is written by GDAL. ``options`` are passed to the
    writer, e.g. ``force=True`` to overwrite an existing shapefile.

    Raises:
        UnsupportedTargetFormat: if *geotable* has a grid or mesh domain.
    """
    fmt = format_for(path)
    if fmt not in WRITABLE:
        fmt = Format.GDAL
    if not geotable.is_vector:
        raise UnsupportedTargetFormat(
            f"Cannot save a {type(geotable.domain).__name__} domain to {path}: "
            f"{fmt.value} only stores vector geometries"
        )
    logger.debug("Saving %s with %s codec", path, fmt.value)
    get_codec(fmt).write(path, geotable, **options)


def fetch_region(
    country: str,
    *subregions: str,
    depth: int = 0,
    tolerance: float | None = None,
    min_vertices: int = 3,
    max_vertices: float = math.inf,
    max_iterations: int = 10,
    **options: Any,
) -> GeoTable:
    """Download GADM boundaries and decimate them.

    Args:
        country: ISO 3166-1 alpha-3 country code.
        *subregions: Nested region names below the country.
        depth: Levels below the named region to return.
        tolerance: Decimation tolerance; ``None`` searches for one that
            keeps rings within ``[min_vertices, max_vertices]``.
        min_vertices: Minimum vertices per ring after decimation.
        max_vertices: Target maximum vertices per ring.
        max_iterations: Cap on the tolerance search per ring.
        **options: Passed to the GADM HTTP request.

    Errors from the download propagate unchanged.
    """
    table = gadm_client.get(country, *subregions, depth=depth, **options)
    geotable = wrap(table)
    domain = decimate(
        geotable.domain,
        tolerance,
        min_vertices=min_vertices,
        max_vertices=max_vertices,
        max_iterations=max_iterations,
    )
    crs = geotable.crs if geotable.crs is not None else "EPSG:4326"
    return GeoTable(GeometrySet(domain), geotable.values, crs=crs)


gadm = fetch_region
