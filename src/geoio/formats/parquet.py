"""GeoParquet files via geopandas and pyarrow."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import geopandas as gpd

from geoio.formats.gdal import normalize_geometry_name, to_geodataframe
from geoio.geotable import GeoTable

logger = logging.getLogger(__name__)


class GeoParquetCodec:
    """Reads and writes ``.parquet`` files with a WKB geometry column."""

    def read(self, path: str | Path, *, layer: int = 0, **options: Any) -> gpd.GeoDataFrame:
        frame = gpd.read_parquet(path, **options)
        logger.info("Read %d rows from %s", len(frame), path)
        return normalize_geometry_name(frame)

    def write(self, path: str | Path, geotable: GeoTable, **options: Any) -> None:
        frame = to_geodataframe(geotable)
        frame.to_parquet(path, **options)
        logger.info("Wrote %d rows to %s", len(frame), path)
