"""Canonical geometry types.

Every reader converts its library's geometry values into these frozen
dataclasses and every writer converts them back. Coordinates are tuples of
floats with 2 or 3 components. Rings are stored open: the closing vertex
that most formats repeat at the end of a ring is dropped on construction
and added back by the writers that need it.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from math import prod
from typing import Union

from geoio.errors import InconsistentDimensionality, InvalidGeometry

Coordinate = tuple[float, ...]


def _coordinate(values: Iterable[float]) -> Coordinate:
    coord = tuple(float(v) for v in values)
    if len(coord) not in (2, 3):
        raise InvalidGeometry(f"Coordinates must have 2 or 3 components, got {len(coord)}")
    return coord


def _common_dim(coords: Iterable[Coordinate], default: int = 2) -> int:
    dims = {len(c) for c in coords}
    if len(dims) > 1:
        raise InconsistentDimensionality(f"Mixed coordinate dimensions {sorted(dims)}")
    return dims.pop() if dims else default


def _ring(vertices: Iterable[Iterable[float]]) -> tuple[Coordinate, ...]:
    """Normalize a ring: drop the closing vertex, require 3 distinct vertices."""
    ring = tuple(_coordinate(v) for v in vertices)
    if len(ring) > 1 and ring[0] == ring[-1]:
        ring = ring[:-1]
    if len(set(ring)) < 3:
        raise InvalidGeometry(f"A ring needs at least 3 distinct vertices, got {len(set(ring))}")
    return ring


@dataclass(frozen=True)
class Point:
    """A single position."""

    coords: Coordinate

    def __post_init__(self) -> None:
        object.__setattr__(self, "coords", _coordinate(self.coords))

    @property
    def kind(self) -> str:
        return type(self).__name__

    @property
    def dim(self) -> int:
        return len(self.coords)

    def nvertices(self) -> int:
        return 1


@dataclass(frozen=True)
class MultiPoint:
    """An unordered collection of points."""

    points: tuple[Point, ...]

    def __post_init__(self) -> None:
        points = tuple(p if isinstance(p, Point) else Point(p) for p in self.points)
        _common_dim(p.coords for p in points)
        object.__setattr__(self, "points", points)

    @property
    def kind(self) -> str:
        return type(self).__name__

    @property
    def dim(self) -> int:
        return _common_dim(p.coords for p in self.points)

    def nvertices(self) -> int:
        return len(self.points)


@dataclass(frozen=True)
class Chain:
    """An open polyline through an ordered sequence of vertices."""

    vertices: tuple[Coordinate, ...]

    def __post_init__(self) -> None:
        vertices = tuple(_coordinate(v) for v in self.vertices)
        if len(vertices) < 2:
            raise InvalidGeometry(f"A chain needs at least 2 vertices, got {len(vertices)}")
        _common_dim(vertices)
        object.__setattr__(self, "vertices", vertices)

    @property
    def kind(self) -> str:
        return type(self).__name__

    @property
    def dim(self) -> int:
        return len(self.vertices[0])

    def nvertices(self) -> int:
        return len(self.vertices)


@dataclass(frozen=True)
class MultiChain:
    """Several polylines treated as one geometry."""

    chains: tuple[Chain, ...]

    def __post_init__(self) -> None:
        chains = tuple(c if isinstance(c, Chain) else Chain(c) for c in self.chains)
        _common_dim(c.vertices[0] for c in chains)
        object.__setattr__(self, "chains", chains)

    @property
    def kind(self) -> str:
        return type(self).__name__

    @property
    def dim(self) -> int:
        return _common_dim(c.vertices[0] for c in self.chains)

    def nvertices(self) -> int:
        return sum(c.nvertices() for c in self.chains)


@dataclass(frozen=True)
class Polygon:
    """An outer ring with zero or more holes, all stored open."""

    outer: tuple[Coordinate, ...]
    holes: tuple[tuple[Coordinate, ...], ...] = ()

    def __post_init__(self) -> None:
        outer = _ring(self.outer)
        holes = tuple(_ring(h) for h in self.holes)
        _common_dim(c for ring in (outer, *holes) for c in ring)
        object.__setattr__(self, "outer", outer)
        object.__setattr__(self, "holes", holes)

    @property
    def kind(self) -> str:
        return type(self).__name__

    @property
    def dim(self) -> int:
        return len(self.outer[0])

    @property
    def rings(self) -> tuple[tuple[Coordinate, ...], ...]:
        """Outer ring first, holes after in their original order."""
        return (self.outer, *self.holes)

    def nvertices(self) -> int:
        return sum(len(r) for r in self.rings)


@dataclass(frozen=True)
class MultiPolygon:
    """Several polygons treated as one geometry."""

    polygons: tuple[Polygon, ...]

    def __post_init__(self) -> None:
        polygons = tuple(self.polygons)
        for p in polygons:
            if not isinstance(p, Polygon):
                raise InvalidGeometry(
                    f"MultiPolygon members must be Polygon, got {type(p).__name__}"
                )
        _common_dim(p.outer[0] for p in polygons)
        object.__setattr__(self, "polygons", polygons)

    @property
    def kind(self) -> str:
        return type(self).__name__

    @property
    def dim(self) -> int:
        return _common_dim(p.outer[0] for p in self.polygons)

    def nvertices(self) -> int:
        return sum(p.nvertices() for p in self.polygons)


@dataclass(frozen=True)
class Grid:
    """A regular raster grid.

    Cells are numbered in row-major order: ``i = y * dims[0] + x``, so the
    x index varies fastest.
    """

    dims: tuple[int, ...]
    origin: Coordinate = (0.0, 0.0)
    spacing: tuple[float, ...] = (1.0, 1.0)

    def __post_init__(self) -> None:
        dims = tuple(int(d) for d in self.dims)
        origin = _coordinate(self.origin)
        spacing = tuple(float(s) for s in self.spacing)
        if not (len(dims) == len(origin) == len(spacing)):
            raise InvalidGeometry("Grid dims, origin and spacing must have the same length")
        if any(d < 0 for d in dims) or any(s <= 0 for s in spacing):
            raise InvalidGeometry(f"Invalid grid dims={dims} spacing={spacing}")
        object.__setattr__(self, "dims", dims)
        object.__setattr__(self, "origin", origin)
        object.__setattr__(self, "spacing", spacing)

    @property
    def kind(self) -> str:
        return type(self).__name__

    @property
    def dim(self) -> int:
        return len(self.dims)

    def __len__(self) -> int:
        return prod(self.dims)

    def element(self, index: int) -> Polygon:
        """Return cell *index* of a 2D grid as a polygon."""
        if self.dim != 2:
            raise InvalidGeometry("Only 2D grid cells can be returned as polygons")
        if not -len(self) <= index < len(self):
            raise IndexError(f"Cell index {index} out of range for grid of {len(self)} cells")
        index %= len(self)
        x, y = index % self.dims[0], index // self.dims[0]
        (ox, oy), (sx, sy) = self.origin, self.spacing
        x0, y0 = ox + x * sx, oy + y * sy
        return Polygon(((x0, y0), (x0 + sx, y0), (x0 + sx, y0 + sy), (x0, y0 + sy)))


@dataclass(frozen=True)
class Mesh:
    """An explicit set of vertices and polygonal faces indexing into them."""

    vertices: tuple[Coordinate, ...]
    faces: tuple[tuple[int, ...], ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        vertices = tuple(_coordinate(v) for v in self.vertices)
        _common_dim(vertices)
        faces = tuple(tuple(int(i) for i in f) for f in self.faces)
        for face in faces:
            if len(face) < 3:
                raise InvalidGeometry(f"A face needs at least 3 vertices, got {len(face)}")
            if any(i < 0 or i >= len(vertices) for i in face):
                raise InvalidGeometry(f"Face {face} references a missing vertex")
        object.__setattr__(self, "vertices", vertices)
        object.__setattr__(self, "faces", faces)

    @property
    def kind(self) -> str:
        return type(self).__name__

    @property
    def dim(self) -> int:
        return _common_dim(self.vertices)

    def nvertices(self) -> int:
        return len(self.vertices)

    def __len__(self) -> int:
        return len(self.faces)

    def element(self, index: int) -> Polygon:
        """Return face *index* as a polygon."""
        return Polygon(tuple(self.vertices[i] for i in self.faces[index]))


Geometry = Union[Point, MultiPoint, Chain, MultiChain, Polygon, MultiPolygon]
Domain = Union[Grid, Mesh]

VECTOR_KINDS: tuple[type, ...] = (Point, MultiPoint, Chain, MultiChain, Polygon, MultiPolygon)
DOMAIN_KINDS: tuple[type, ...] = (Grid, Mesh)


def check_dimensionality(geometries: Sequence[Geometry]) -> int | None:
    """Return the shared dimension of *geometries*, ignoring missing ones.

    Raises:
        InconsistentDimensionality: if 2D and 3D geometries are mixed.
    """
    dims = {g.dim for g in geometries if g is not None}
    if len(dims) > 1:
        raise InconsistentDimensionality(f"Table mixes {sorted(dims)}D geometries")
    return dims.pop() if dims else None
