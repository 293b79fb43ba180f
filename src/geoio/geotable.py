"""Geo-tables: a geometry domain paired with an attribute table.

``wrap`` turns a row-oriented table (a pandas DataFrame whose geometry
column holds library geometry values) into a :class:`GeoTable`, and
``unwrap`` turns a GeoTable back into a DataFrame for a given writer.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence
from typing import Any, overload

import geopandas as gpd
import pandas as pd

from geoio.errors import MissingGeometryColumn, UnsupportedTargetFormat
from geoio.geometry.conversion import from_canonical, to_canonical
from geoio.geometry.types import (
    DOMAIN_KINDS,
    Geometry,
    Grid,
    Mesh,
    check_dimensionality,
)

logger = logging.getLogger(__name__)

GEOMETRY_COLUMN = "geometry"


class GeometrySet(Sequence):
    """Eagerly converted, index-addressable sequence of canonical geometries."""

    def __init__(self, geometries: Sequence[Geometry]):
        self._geometries = tuple(geometries)

    @overload
    def __getitem__(self, index: int) -> Geometry: ...

    @overload
    def __getitem__(self, index: slice) -> GeometrySet: ...

    def __getitem__(self, index):
        if isinstance(index, slice):
            return GeometrySet(self._geometries[index])
        return self._geometries[index]

    def __len__(self) -> int:
        return len(self._geometries)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, GeometrySet):
            return self._geometries == other._geometries
        return NotImplemented

    def __repr__(self) -> str:
        return f"GeometrySet({len(self)} geometries)"


class LazyGeometryView(Sequence):
    """Read-only view converting geometries of a source table on access.

    The view keeps a reference to the source table and converts
    ``table[column].iloc[i]`` every time element ``i`` is read. Nothing is
    cached. The source table must not be mutated while the view is in use.
    """

    def __init__(self, table: pd.DataFrame, column: str = GEOMETRY_COLUMN):
        self._table = table
        self._column = column

    def __getitem__(self, index: int) -> Geometry:
        if isinstance(index, slice):
            return GeometrySet([self[i] for i in range(*index.indices(len(self)))])
        n = len(self)
        if not -n <= index < n:
            raise IndexError(f"Geometry index {index} out of range for {n} rows")
        return to_canonical(self._table[self._column].iloc[index])

    def __len__(self) -> int:
        return len(self._table)

    def __repr__(self) -> str:
        return f"LazyGeometryView({len(self)} rows, column={self._column!r})"


class GeoTable:
    """A domain of geometries with one attribute row per element.

    Attributes:
        domain: :class:`GeometrySet`, :class:`LazyGeometryView`,
            :class:`~geoio.geometry.types.Grid` or
            :class:`~geoio.geometry.types.Mesh`.
        values: Attribute table, row ``i`` describes element ``i``.
        vertex_values: Per-vertex attributes of mesh domains.
        crs: Coordinate reference system metadata, passed through to
            writers that understand it.
    """

    def __init__(
        self,
        domain: Sequence[Geometry] | Grid | Mesh,
        values: pd.DataFrame | None = None,
        vertex_values: pd.DataFrame | None = None,
        crs: Any = None,
    ):
        if values is None:
            values = pd.DataFrame(index=pd.RangeIndex(len(domain)))
        if len(domain) != len(values):
            raise ValueError(
                f"Domain has {len(domain)} elements but attribute table has {len(values)} rows"
            )
        self.domain = domain
        self.values = values.reset_index(drop=True)
        self.values.attrs = dict(values.attrs)
        self.vertex_values = vertex_values
        self.crs = crs

    @property
    def is_lazy(self) -> bool:
        return isinstance(self.domain, LazyGeometryView)

    @property
    def is_vector(self) -> bool:
        return not isinstance(self.domain, DOMAIN_KINDS)

    @property
    def columns(self) -> list[str]:
        return list(self.values.columns)

    def geometry(self, index: int) -> Geometry:
        """Return element *index* of the domain as a canonical geometry."""
        if isinstance(self.domain, DOMAIN_KINDS):
            return self.domain.element(index)
        return self.domain[index]

    def materialize(self) -> GeoTable:
        """Return an eager copy of a lazy table (or ``self`` if already eager)."""
        if not self.is_lazy:
            return self
        domain = GeometrySet(list(self.domain))
        check_dimensionality(domain)
        return GeoTable(domain, self.values, self.vertex_values, self.crs)

    def __len__(self) -> int:
        return len(self.domain)

    def __getitem__(self, index: int) -> tuple[Geometry, dict[str, Any]]:
        return self.geometry(index), self.values.iloc[index].to_dict()

    def __iter__(self) -> Iterator[tuple[Geometry, dict[str, Any]]]:
        for i in range(len(self)):
            yield self[i]

    def __repr__(self) -> str:
        kind = type(self.domain).__name__
        return f"GeoTable({len(self)} rows, domain={kind}, columns={self.columns})"


def wrap(
    table: pd.DataFrame,
    geometry_column: str = GEOMETRY_COLUMN,
    lazy: bool = False,
    crs: Any = None,
) -> GeoTable:
    """Wrap a row-oriented table as a :class:`GeoTable`.

    Args:
        table: DataFrame with a column of library geometry values.
        geometry_column: Name of that column.
        lazy: Build a :class:`LazyGeometryView` instead of converting
            every geometry now.
        crs: CRS metadata. Defaults to ``table.crs`` for GeoDataFrames and
            ``table.attrs["crs"]`` otherwise.

    Raises:
        MissingGeometryColumn: if *geometry_column* is absent.
        InconsistentDimensionality: in eager mode, if 2D and 3D geometries
            are mixed.
    """
    if geometry_column not in table.columns:
        raise MissingGeometryColumn(geometry_column, list(table.columns))

    if crs is None:
        if isinstance(table, gpd.GeoDataFrame):
            crs = table.crs
        else:
            crs = table.attrs.get("crs")

    values = pd.DataFrame(table.drop(columns=[geometry_column]))
    values.attrs = dict(table.attrs)

    if lazy:
        domain: Sequence[Geometry] = LazyGeometryView(table, geometry_column)
    else:
        domain = GeometrySet([to_canonical(g) for g in table[geometry_column]])
        check_dimensionality(domain)

    logger.debug("Wrapped %d rows (lazy=%s)", len(table), lazy)
    return GeoTable(domain, values, crs=crs)


def unwrap(
    geotable: GeoTable,
    target: str,
    geometry_column: str = GEOMETRY_COLUMN,
) -> pd.DataFrame:
    """Rebuild a row-oriented table for a writer.

    Attribute columns keep their order and the geometry column, converted
    with :func:`~geoio.geometry.conversion.from_canonical`, is appended
    last.

    Raises:
        UnsupportedTargetFormat: for grid and mesh domains, which have no
            vector representation.
    """
    if not geotable.is_vector:
        raise UnsupportedTargetFormat(
            f"{type(geotable.domain).__name__} domains cannot be written as {target} geometries"
        )
    table = geotable.values.copy()
    geometries = [from_canonical(g, target) for g in geotable.domain]
    table[geometry_column] = pd.Series(geometries, index=table.index, dtype=object)
    return table


def from_grid_or_mesh(
    domain: Grid | Mesh,
    values: pd.DataFrame | None = None,
    vertex_values: pd.DataFrame | None = None,
) -> GeoTable:
    """Build a GeoTable for raster and mesh sources."""
    if not isinstance(domain, DOMAIN_KINDS):
        raise TypeError(f"Expected a Grid or Mesh domain, got {type(domain).__name__}")
    if vertex_values is not None and isinstance(domain, Mesh):
        if len(vertex_values) != len(domain.vertices):
            raise ValueError(
                f"Mesh has {len(domain.vertices)} vertices "
                f"but vertex table has {len(vertex_values)} rows"
            )
    return GeoTable(domain, values, vertex_values=vertex_values)
