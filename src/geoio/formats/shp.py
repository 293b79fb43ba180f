"""ESRI shapefiles via pyshp."""

from __future__ import annotations

import datetime
import logging
import math
from pathlib import Path
from typing import Any

import numpy as np
import pandas as pd
import shapefile
from pyproj import CRS

from geoio.errors import UnsupportedTargetFormat
from geoio.geotable import GEOMETRY_COLUMN, GeoTable, unwrap

logger = logging.getLogger(__name__)

# dBASE limits
_MAX_CHAR_SIZE = 254
_NUMBER_SIZE = 18
_FLOAT_SIZE = 19
_FLOAT_DECIMALS = 11


def _field_spec(name: str, column: pd.Series) -> tuple[str, str, int, int]:
    """Pick a dBASE field (name, type, size, decimals) for a column."""
    if pd.api.types.is_bool_dtype(column):
        return name, "L", 1, 0
    if pd.api.types.is_integer_dtype(column):
        return name, "N", _NUMBER_SIZE, 0
    if pd.api.types.is_float_dtype(column):
        return name, "F", _FLOAT_SIZE, _FLOAT_DECIMALS
    if pd.api.types.is_datetime64_any_dtype(column):
        return name, "D", 8, 0

    present = column.dropna()
    if len(present) and all(isinstance(v, datetime.date) for v in present):
        return name, "D", 8, 0
    if len(present) and all(isinstance(v, bool) for v in present):
        return name, "L", 1, 0
    width = max((len(str(v)) for v in present), default=1)
    return name, "C", min(max(width, 1), _MAX_CHAR_SIZE), 0


def _record_value(value: Any) -> Any:
    if value is None or value is pd.NaT:
        return None
    if isinstance(value, float) and math.isnan(value):
        return None
    if isinstance(value, pd.Timestamp):
        return value.date()
    if isinstance(value, np.generic):
        return value.item()
    return value


def _esri_wkt(crs: Any) -> str:
    return CRS.from_user_input(crs).to_wkt("WKT1_ESRI")


class ShapefileCodec:
    """Reads and writes ``.shp`` (with its ``.shx``/``.dbf``/``.prj`` siblings)."""

    def read(self, path: str | Path, *, layer: int = 0, **options: Any) -> pd.DataFrame:
        """Read a shapefile into a DataFrame of ``shapefile.Shape`` values.

        ``options`` go to ``shapefile.Reader`` (e.g. ``encoding``).
        """
        path = Path(path)
        with shapefile.Reader(str(path), **options) as reader:
            # The first field is the dBASE deletion flag.
            names = [f[0] for f in reader.fields[1:]]
            rows = []
            shapes = []
            for shape_record in reader.iterShapeRecords():
                rows.append(list(shape_record.record))
                shapes.append(shape_record.shape)

        table = pd.DataFrame(rows, columns=names)
        table[GEOMETRY_COLUMN] = pd.Series(shapes, index=table.index, dtype=object)

        prj = path.with_suffix(".prj")
        if prj.exists():
            table.attrs["crs"] = prj.read_text(encoding="utf-8").strip()

        logger.info("Read %d shapes from %s", len(table), path)
        return table

    def write(
        self,
        path: str | Path,
        geotable: GeoTable,
        *,
        force: bool = False,
        **options: Any,
    ) -> None:
        """Write a GeoTable as a shapefile.

        Args:
            path: Target ``.shp`` path.
            geotable: Vector GeoTable.
            force: Overwrite an existing file.
            **options: Passed to ``shapefile.Writer``.

        Raises:
            FileExistsError: if *path* exists and *force* is false.
            UnsupportedTargetFormat: if the table mixes shape types.
        """
        path = Path(path)
        if path.exists() and not force:
            raise FileExistsError(f"{path} already exists, pass force=True to overwrite it")

        table = unwrap(geotable, "shapefile")
        shapes = table.pop(GEOMETRY_COLUMN)
        # NULL records fit in a shapefile of any type.
        shape_types = {s.shapeType for s in shapes if s.shapeType != shapefile.NULL}
        if len(shape_types) > 1:
            raise UnsupportedTargetFormat(
                f"A shapefile holds a single shape type, got {sorted(shape_types)}"
            )
        shape_type = shape_types.pop() if shape_types else shapefile.NULL
        if table.columns.empty:
            # dBASE files need at least one field.
            table["FID"] = range(len(table))

        with shapefile.Writer(str(path), shapeType=shape_type, **options) as writer:
            for name in table.columns:
                writer.field(*_field_spec(str(name), table[name]))
            for shape, record in zip(shapes, table.itertuples(index=False, name=None)):
                writer.shape(shape)
                writer.record(*[_record_value(v) for v in record])

        if geotable.crs is not None:
            path.with_suffix(".prj").write_text(_esri_wkt(geotable.crs), encoding="utf-8")

        logger.info("Wrote %d shapes to %s", len(shapes), path)
