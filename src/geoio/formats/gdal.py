"""Fallback codec: any format GDAL understands, through geopandas."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import geopandas as gpd

from geoio.geotable import GEOMETRY_COLUMN, GeoTable, unwrap

logger = logging.getLogger(__name__)


def to_geodataframe(geotable: GeoTable) -> gpd.GeoDataFrame:
    """Convert a vector GeoTable to a GeoDataFrame of shapely geometries."""
    table = unwrap(geotable, "shapely")
    return gpd.GeoDataFrame(table, geometry=GEOMETRY_COLUMN, crs=geotable.crs)


def normalize_geometry_name(frame: gpd.GeoDataFrame) -> gpd.GeoDataFrame:
    """Rename the active geometry column to ``"geometry"``."""
    if frame.geometry.name != GEOMETRY_COLUMN:
        frame = frame.rename_geometry(GEOMETRY_COLUMN)
    return frame


class GDALCodec:
    """Reads and writes through ``geopandas.read_file`` / ``to_file``.

    GDAL sniffs the format itself, so this codec handles every extension
    without a dedicated codec.
    """

    def read(self, path: str | Path, *, layer: int = 0, **options: Any) -> gpd.GeoDataFrame:
        """Read *layer* (an index or a name) of a GDAL vector dataset."""
        frame = gpd.read_file(path, layer=layer, **options)
        logger.info("Read %d features from layer %s of %s", len(frame), layer, path)
        return normalize_geometry_name(frame)

    def write(self, path: str | Path, geotable: GeoTable, **options: Any) -> None:
        """Write with GDAL; the driver is inferred from the extension unless given."""
        frame = to_geodataframe(geotable)
        frame.to_file(path, **options)
        logger.info("Wrote %d features to %s", len(frame), path)
