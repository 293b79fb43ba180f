"""GeoJSON files via geopandas.

Features are parsed into a GeoDataFrame with
``GeoDataFrame.from_features`` and written back with
``GeoDataFrame.to_geo_dict``. Top-level feature ids survive the round trip
in an ``"id"`` column.
"""

from __future__ import annotations

import datetime
import json
import logging
from pathlib import Path
from typing import Any

import geopandas as gpd
import pandas as pd

from geoio.geotable import GEOMETRY_COLUMN, GeoTable, unwrap

logger = logging.getLogger(__name__)

# ``attrs`` key naming the column that holds top-level feature ids.
FEATURE_ID = "feature_id"

# RFC 7946 coordinates are always WGS 84.
DEFAULT_CRS = "EPSG:4326"


def read_bytes(path: str | Path) -> bytes:
    """Read a whole file; the handle is closed even if reading fails."""
    with open(path, "rb") as fh:
        return fh.read()


def _features(data: dict[str, Any]) -> list[dict[str, Any]]:
    kind = data.get("type")
    if kind == "FeatureCollection":
        features = list(data.get("features") or [])
    elif kind == "Feature":
        features = [data]
    else:
        features = [{"type": "Feature", "geometry": data}]
    # from_features needs both members, null or not.
    return [{"geometry": None, "properties": None, **f} for f in features]


def features_to_table(data: dict[str, Any]) -> gpd.GeoDataFrame:
    """Build a GeoDataFrame from a parsed GeoJSON object.

    Accepts a FeatureCollection, a single Feature or a bare geometry.
    Feature ``id`` members are kept in an ``"id"`` column unless a property
    already uses that name. Null geometries stay ``None``.
    """
    features = _features(data)
    # Pre-RFC 7946 files may name their CRS.
    crs = (data.get("crs") or {}).get("properties", {}).get("name") or DEFAULT_CRS
    if not features:
        return gpd.GeoDataFrame({GEOMETRY_COLUMN: []}, geometry=GEOMETRY_COLUMN, crs=crs)
    table = gpd.GeoDataFrame.from_features(features, crs=crs)

    if any("id" in f for f in features) and "id" not in table.columns:
        table.insert(0, "id", [f.get("id") for f in features])
        table.attrs[FEATURE_ID] = "id"
    return table


def _isoformat(value: Any) -> str:
    if isinstance(value, (datetime.date, datetime.time)):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


class GeoJSONCodec:
    """Reads and writes ``.geojson`` feature collections."""

    def read(self, path: str | Path, *, layer: int = 0, **options: Any) -> gpd.GeoDataFrame:
        """Read a GeoJSON file. ``options`` go to ``json.loads``."""
        data = json.loads(read_bytes(path), **options)
        table = features_to_table(data)
        logger.info("Read %d features from %s", len(table), path)
        return table

    def write(self, path: str | Path, geotable: GeoTable, **options: Any) -> None:
        """Write a FeatureCollection. ``options`` go to ``json.dumps``."""
        table = unwrap(geotable, "shapely")
        id_column = geotable.values.attrs.get(FEATURE_ID)
        ids = table.pop(id_column).tolist() if id_column in table.columns else None

        frame = gpd.GeoDataFrame(table, geometry=GEOMETRY_COLUMN, crs=geotable.crs)
        data = frame.to_geo_dict(na="null", drop_id=True)
        if ids is not None:
            for feature, fid in zip(data["features"], ids):
                if not pd.isna(fid):
                    feature["id"] = fid

        options.setdefault("default", _isoformat)
        Path(path).write_text(json.dumps(data, **options), encoding="utf-8")
        logger.info("Wrote %d features to %s", len(frame), path)
