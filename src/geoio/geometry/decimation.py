"""Vertex-count reduction for canonical geometries.

Simplification itself is shapely's Douglas-Peucker implementation. This
module decides which tolerance to use:

- With an explicit ``tolerance`` every chain and ring is simplified once.
- Without one, a bisection over ``[0, bbox diagonal]`` looks for a
  tolerance that lands the vertex count in ``[min_vertices, max_vertices]``
  and gives up after ``max_iterations`` steps.

``min_vertices`` always wins: a result never has fewer vertices than that
(and never fewer than 3 for a ring). ``max_iterations`` wins over
``max_vertices``: when the search runs out of steps the closest candidate
above ``min_vertices`` is returned even if it is still above the maximum.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable

from shapely.geometry import LineString

from geoio.errors import UnsupportedGeometryKind
from geoio.geometry.types import (
    Chain,
    Coordinate,
    Geometry,
    MultiChain,
    MultiPoint,
    MultiPolygon,
    Point,
    Polygon,
)

logger = logging.getLogger(__name__)

Vertices = tuple[Coordinate, ...]


def _simplify(vertices: Vertices, closed: bool, tolerance: float) -> Vertices:
    coords = [*vertices, vertices[0]] if closed else list(vertices)
    simplified = LineString(coords).simplify(tolerance, preserve_topology=False)
    out = tuple(tuple(c) for c in simplified.coords)
    if closed and len(out) > 1 and out[0] == out[-1]:
        out = out[:-1]
    return out


def _count(vertices: Vertices) -> int:
    return len(set(vertices))


def _diagonal(vertices: Vertices) -> float:
    xs = [v[0] for v in vertices]
    ys = [v[1] for v in vertices]
    return math.hypot(max(xs) - min(xs), max(ys) - min(ys))


def _decimate_vertices(
    vertices: Vertices,
    closed: bool,
    tolerance: float | None,
    min_vertices: int,
    max_vertices: float,
    max_iterations: int,
) -> Vertices:
    floor = max(min_vertices, 3 if closed else 2)

    if tolerance is not None:
        candidate = _simplify(vertices, closed, tolerance)
        if _count(candidate) < floor:
            logger.warning(
                "Tolerance %g leaves %d of %d vertices, keeping original",
                tolerance,
                _count(candidate),
                len(vertices),
            )
            return vertices
        return candidate

    if len(vertices) <= max_vertices or len(vertices) <= floor:
        return vertices

    low, high = 0.0, _diagonal(vertices)
    best = vertices
    for _ in range(max_iterations):
        mid = (low + high) / 2.0
        candidate = _simplify(vertices, closed, mid)
        n = _count(candidate)
        if n < floor:
            high = mid
            continue
        best = candidate
        if n > max_vertices:
            low = mid
        else:
            return candidate
    return best


def decimate_geometry(
    geometry: Geometry | None,
    tolerance: float | None = None,
    *,
    min_vertices: int = 3,
    max_vertices: float = math.inf,
    max_iterations: int = 10,
) -> Geometry | None:
    """Reduce the number of vertices of a single geometry.

    Points and missing geometries pass through unchanged. Each chain and
    each polygon ring is decimated on its own.
    """

    def reduce(vertices: Vertices, closed: bool) -> Vertices:
        return _decimate_vertices(
            vertices, closed, tolerance, min_vertices, max_vertices, max_iterations
        )

    def reduce_polygon(polygon: Polygon) -> Polygon:
        return Polygon(reduce(polygon.outer, True), tuple(reduce(h, True) for h in polygon.holes))

    if geometry is None or isinstance(geometry, (Point, MultiPoint)):
        return geometry
    if isinstance(geometry, Chain):
        return Chain(reduce(geometry.vertices, False))
    if isinstance(geometry, MultiChain):
        return MultiChain(tuple(Chain(reduce(c.vertices, False)) for c in geometry.chains))
    if isinstance(geometry, Polygon):
        return reduce_polygon(geometry)
    if isinstance(geometry, MultiPolygon):
        return MultiPolygon(tuple(reduce_polygon(p) for p in geometry.polygons))
    raise UnsupportedGeometryKind(
        type(geometry).__name__, "only vector geometries can be decimated"
    )


def decimate(
    geometries: Iterable[Geometry],
    tolerance: float | None = None,
    *,
    min_vertices: int = 3,
    max_vertices: float = math.inf,
    max_iterations: int = 10,
) -> list[Geometry]:
    """Decimate every geometry of a domain.

    Args:
        geometries: Canonical vector geometries.
        tolerance: Douglas-Peucker tolerance. ``None`` searches for one.
        min_vertices: Lower bound on vertices per chain or ring.
        max_vertices: Upper bound targeted by the search.
        max_iterations: Bisection steps per chain or ring.

    Returns:
        The decimated geometries, in the same order.
    """
    geometries = list(geometries)
    result = [
        decimate_geometry(
            g,
            tolerance,
            min_vertices=min_vertices,
            max_vertices=max_vertices,
            max_iterations=max_iterations,
        )
        for g in geometries
    ]
    before = sum(g.nvertices() for g in geometries if g is not None)
    after = sum(g.nvertices() for g in result if g is not None)
    logger.debug("Decimated %d geometries from %d to %d vertices", len(result), before, after)
    return result
