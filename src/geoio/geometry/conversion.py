"""Conversion between library geometry values and canonical geometries.

Each supported library gets one adapter. ``to_canonical`` finds the adapter
that recognizes a value; ``from_canonical`` looks the adapter up by target
name. All three targets store rings closed, so the adapters append the
closing vertex that canonical rings leave out.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Protocol

import shapefile
from shapely import geometry as sg
from shapely.geometry.base import BaseGeometry

from geoio.errors import UnsupportedGeometryKind, UnsupportedTargetFormat
from geoio.geometry.types import (
    VECTOR_KINDS,
    Chain,
    Coordinate,
    Geometry,
    MultiChain,
    MultiPoint,
    MultiPolygon,
    Point,
    Polygon,
)


def _closed(ring: Sequence[Coordinate]) -> list[Coordinate]:
    return [*ring, ring[0]]


def _signed_area(ring: Sequence[Sequence[float]]) -> float:
    """Shoelace area; negative for clockwise rings."""
    area = 0.0
    for (x0, y0, *_), (x1, y1, *_) in zip(ring, [*ring[1:], ring[0]]):
        area += x0 * y1 - x1 * y0
    return area / 2.0


def _oriented(ring: Sequence[Coordinate], clockwise: bool) -> list[Coordinate]:
    """Return *ring* wound in the requested direction, keeping its first vertex."""
    if (_signed_area(ring) < 0) != clockwise:
        return [ring[0], *reversed(ring[1:])]
    return list(ring)


class GeometryAdapter(Protocol):
    """Translation boundary between one library and canonical geometries."""

    name: str

    def accepts(self, value: Any) -> bool: ...

    def to_canonical(self, value: Any) -> Geometry: ...

    def from_canonical(self, geometry: Geometry) -> Any: ...

    def null(self) -> Any: ...


class ShapelyAdapter:
    """shapely geometries, as produced by geopandas."""

    name = "shapely"

    def accepts(self, value: Any) -> bool:
        return isinstance(value, BaseGeometry)

    def to_canonical(self, value: BaseGeometry) -> Geometry:
        if value.is_empty:
            raise UnsupportedGeometryKind(f"shapely {value.geom_type}", "empty geometry")
        if isinstance(value, sg.Point):
            return Point(value.coords[0])
        if isinstance(value, sg.MultiPoint):
            return MultiPoint(tuple(p.coords[0] for p in value.geoms))
        if isinstance(value, (sg.LineString, sg.LinearRing)):
            return Chain(tuple(value.coords))
        if isinstance(value, sg.MultiLineString):
            return MultiChain(tuple(tuple(line.coords) for line in value.geoms))
        if isinstance(value, sg.Polygon):
            return self._polygon(value)
        if isinstance(value, sg.MultiPolygon):
            return MultiPolygon(tuple(self._polygon(p) for p in value.geoms))
        raise UnsupportedGeometryKind(f"shapely {value.geom_type}")

    @staticmethod
    def _polygon(value: sg.Polygon) -> Polygon:
        return Polygon(
            tuple(value.exterior.coords),
            tuple(tuple(ring.coords) for ring in value.interiors),
        )

    def from_canonical(self, geometry: Geometry) -> BaseGeometry:
        if isinstance(geometry, Point):
            return sg.Point(geometry.coords)
        if isinstance(geometry, MultiPoint):
            return sg.MultiPoint([p.coords for p in geometry.points])
        if isinstance(geometry, Chain):
            return sg.LineString(geometry.vertices)
        if isinstance(geometry, MultiChain):
            return sg.MultiLineString([c.vertices for c in geometry.chains])
        if isinstance(geometry, Polygon):
            return self._to_polygon(geometry)
        if isinstance(geometry, MultiPolygon):
            return sg.MultiPolygon([self._to_polygon(p) for p in geometry.polygons])
        raise UnsupportedTargetFormat(f"shapely cannot represent {type(geometry).__name__}")

    @staticmethod
    def _to_polygon(geometry: Polygon) -> sg.Polygon:
        return sg.Polygon(_closed(geometry.outer), [_closed(h) for h in geometry.holes])

    def null(self) -> None:
        return None


class GeoJSONAdapter:
    """GeoJSON geometry mappings (``{"type": ..., "coordinates": ...}``)."""

    name = "geojson"

    def accepts(self, value: Any) -> bool:
        return isinstance(value, Mapping) and "type" in value

    def to_canonical(self, value: Mapping[str, Any]) -> Geometry:
        geom_type = value.get("type")
        coords = value.get("coordinates")
        if geom_type == "GeometryCollection" or coords is None:
            raise UnsupportedGeometryKind(f"GeoJSON {geom_type}")
        if geom_type == "Point":
            return Point(coords)
        if geom_type == "MultiPoint":
            return MultiPoint(tuple(coords))
        if geom_type == "LineString":
            return Chain(tuple(coords))
        if geom_type == "MultiLineString":
            return MultiChain(tuple(tuple(line) for line in coords))
        if geom_type == "Polygon":
            return Polygon(coords[0], tuple(coords[1:]))
        if geom_type == "MultiPolygon":
            return MultiPolygon(tuple(Polygon(rings[0], tuple(rings[1:])) for rings in coords))
        raise UnsupportedGeometryKind(f"GeoJSON {geom_type}")

    def from_canonical(self, geometry: Geometry) -> dict[str, Any]:
        if isinstance(geometry, Point):
            return {"type": "Point", "coordinates": list(geometry.coords)}
        if isinstance(geometry, MultiPoint):
            return {"type": "MultiPoint", "coordinates": [list(p.coords) for p in geometry.points]}
        if isinstance(geometry, Chain):
            return {"type": "LineString", "coordinates": [list(v) for v in geometry.vertices]}
        if isinstance(geometry, MultiChain):
            return {
                "type": "MultiLineString",
                "coordinates": [[list(v) for v in c.vertices] for c in geometry.chains],
            }
        if isinstance(geometry, Polygon):
            return {"type": "Polygon", "coordinates": self._rings(geometry)}
        if isinstance(geometry, MultiPolygon):
            return {
                "type": "MultiPolygon",
                "coordinates": [self._rings(p) for p in geometry.polygons],
            }
        raise UnsupportedTargetFormat(f"GeoJSON cannot represent {type(geometry).__name__}")

    @staticmethod
    def _rings(geometry: Polygon) -> list[list[list[float]]]:
        return [[list(v) for v in _closed(ring)] for ring in geometry.rings]

    def null(self) -> None:
        return None


class ShapefileAdapter:
    """pyshp ``shapefile.Shape`` records.

    Measure (M) values are dropped; Z values are merged into the
    coordinates. NULL shapes map to ``None``. Polygon parts are grouped by
    orientation: a clockwise ring starts a new polygon and counter-clockwise
    rings are holes of the polygon before them. Written rings are wound the
    same way whatever their canonical orientation.
    """

    name = "shapefile"

    _POINT = (shapefile.POINT, shapefile.POINTM, shapefile.POINTZ)
    _MULTIPOINT = (shapefile.MULTIPOINT, shapefile.MULTIPOINTM, shapefile.MULTIPOINTZ)
    _POLYLINE = (shapefile.POLYLINE, shapefile.POLYLINEM, shapefile.POLYLINEZ)
    _POLYGON = (shapefile.POLYGON, shapefile.POLYGONM, shapefile.POLYGONZ)
    _Z_TYPES = (shapefile.POINTZ, shapefile.MULTIPOINTZ, shapefile.POLYLINEZ, shapefile.POLYGONZ)

    def accepts(self, value: Any) -> bool:
        return isinstance(value, shapefile.Shape)

    def to_canonical(self, value: shapefile.Shape) -> Geometry | None:
        shape_type = value.shapeType
        if shape_type == shapefile.NULL:
            return None
        points = self._points(value)
        if shape_type in self._POINT:
            return Point(points[0])
        if shape_type in self._MULTIPOINT:
            return MultiPoint(tuple(points))
        if shape_type in self._POLYLINE:
            parts = self._parts(value, points)
            if len(parts) == 1:
                return Chain(tuple(parts[0]))
            return MultiChain(tuple(tuple(p) for p in parts))
        if shape_type in self._POLYGON:
            return self._polygons(self._parts(value, points))
        raise UnsupportedGeometryKind(f"shapefile {getattr(value, 'shapeTypeName', shape_type)}")

    def _points(self, value: shapefile.Shape) -> list[tuple[float, ...]]:
        if value.shapeType not in self._Z_TYPES:
            return [tuple(p[:2]) for p in value.points]
        z = getattr(value, "z", None)
        if z is not None and len(z) == len(value.points):
            return [(p[0], p[1], zi) for p, zi in zip(value.points, z)]
        # Shapes built in memory carry z as the third component.
        return [tuple(p[:3]) for p in value.points]

    @staticmethod
    def _parts(
        value: shapefile.Shape, points: list[tuple[float, ...]]
    ) -> list[list[tuple[float, ...]]]:
        starts = list(value.parts) or [0]
        ends = [*starts[1:], len(points)]
        return [points[start:end] for start, end in zip(starts, ends)]

    @staticmethod
    def _polygons(rings: list[list[tuple[float, ...]]]) -> Polygon | MultiPolygon:
        groups: list[list[list[tuple[float, ...]]]] = []
        for ring in rings:
            if _signed_area(ring) < 0 or not groups:
                groups.append([ring])
            else:
                groups[-1].append(ring)
        polygons = tuple(Polygon(group[0], tuple(group[1:])) for group in groups)
        if len(polygons) == 1:
            return polygons[0]
        return MultiPolygon(polygons)

    def from_canonical(self, geometry: Geometry) -> shapefile.Shape:
        z = geometry.dim == 3
        if isinstance(geometry, Point):
            return self._shape(shapefile.POINTZ if z else shapefile.POINT, [geometry.coords])
        if isinstance(geometry, MultiPoint):
            shape_type = shapefile.MULTIPOINTZ if z else shapefile.MULTIPOINT
            return self._shape(shape_type, [p.coords for p in geometry.points])
        shape_type = None
        if isinstance(geometry, Chain):
            parts = [list(geometry.vertices)]
            shape_type = shapefile.POLYLINEZ if z else shapefile.POLYLINE
        elif isinstance(geometry, MultiChain):
            parts = [list(c.vertices) for c in geometry.chains]
            shape_type = shapefile.POLYLINEZ if z else shapefile.POLYLINE
        elif isinstance(geometry, Polygon):
            parts = self._rings(geometry)
            shape_type = shapefile.POLYGONZ if z else shapefile.POLYGON
        elif isinstance(geometry, MultiPolygon):
            parts = [ring for p in geometry.polygons for ring in self._rings(p)]
            shape_type = shapefile.POLYGONZ if z else shapefile.POLYGON
        else:
            raise UnsupportedTargetFormat(f"Shapefiles cannot represent {type(geometry).__name__}")
        return self._shape(shape_type, parts=parts)

    @staticmethod
    def _rings(polygon: Polygon) -> list[list[Coordinate]]:
        # Outer ring clockwise, holes counter-clockwise.
        return [_closed(_oriented(ring, i == 0)) for i, ring in enumerate(polygon.rings)]

    def null(self) -> shapefile.Shape:
        return shapefile.Shape(shapeType=shapefile.NULL)

    @staticmethod
    def _shape(
        shape_type: int, points: list | None = None, parts: list | None = None
    ) -> shapefile.Shape:
        if parts is None:
            return shapefile.Shape(shapeType=shape_type, points=[list(p) for p in points])
        offsets, flat = [], []
        for part in parts:
            offsets.append(len(flat))
            flat.extend(list(p) for p in part)
        return shapefile.Shape(shapeType=shape_type, points=flat, parts=offsets)


class GeoInterfaceAdapter:
    """Any other object exposing ``__geo_interface__``."""

    name = "geo_interface"

    def __init__(self, geojson: GeoJSONAdapter):
        self._geojson = geojson

    def accepts(self, value: Any) -> bool:
        return hasattr(value, "__geo_interface__")

    def to_canonical(self, value: Any) -> Geometry:
        return self._geojson.to_canonical(value.__geo_interface__)

    def from_canonical(self, geometry: Geometry) -> Any:
        raise UnsupportedTargetFormat("__geo_interface__ is a read-only protocol")


_GEOJSON = GeoJSONAdapter()

# Lookup order for to_canonical; the generic protocol comes last because
# shapely and pyshp objects implement it too.
_ADAPTERS: list[GeometryAdapter] = [
    ShapelyAdapter(),
    ShapefileAdapter(),
    _GEOJSON,
    GeoInterfaceAdapter(_GEOJSON),
]

_TARGETS: dict[str, GeometryAdapter] = {
    adapter.name: adapter for adapter in _ADAPTERS if adapter.name != "geo_interface"
}

TARGETS = tuple(_TARGETS)


def to_canonical(value: Any) -> Geometry | None:
    """Convert a library geometry value to a canonical geometry.

    Canonical geometries are returned unchanged. Missing geometries (``None``
    or a pyshp NULL shape) convert to ``None``.

    Raises:
        UnsupportedGeometryKind: if no adapter recognizes *value* or the
            adapter cannot map its geometry type.
    """
    if value is None:
        return None
    if isinstance(value, VECTOR_KINDS):
        return value
    for adapter in _ADAPTERS:
        if adapter.accepts(value):
            return adapter.to_canonical(value)
    raise UnsupportedGeometryKind(type(value).__name__)


def from_canonical(geometry: Geometry | None, target: str) -> Any:
    """Convert a canonical geometry to the representation of *target*.

    ``None`` becomes the target's missing value: ``None`` for shapely and
    GeoJSON, a NULL shape for shapefiles.

    Args:
        geometry: A canonical vector geometry.
        target: One of :data:`TARGETS` (``"shapely"``, ``"geojson"``,
            ``"shapefile"``).

    Raises:
        UnsupportedTargetFormat: for unknown targets and for geometries
            the target cannot represent (grids, meshes).
    """
    adapter = _TARGETS.get(target)
    if adapter is None:
        raise UnsupportedTargetFormat(
            f"Unknown geometry target {target!r}, expected one of {TARGETS}"
        )
    if geometry is None:
        return adapter.null()
    return adapter.from_canonical(geometry)
