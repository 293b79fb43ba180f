"""Pytest configuration and fixtures for geoio tests."""

import pandas as pd
import pytest
import shapefile

from geoio import io as geoio_io

# Clockwise, as shapefiles store outer rings.
SQUARE = [(0.0, 0.0), (0.0, 1.0), (1.0, 1.0), (1.0, 0.0)]
# Counter-clockwise hole inside SQUARE.
HOLE = [(0.25, 0.25), (0.75, 0.25), (0.75, 0.75), (0.25, 0.75)]


@pytest.fixture
def square_shapefile(tmp_path):
    """A one-record polygon shapefile whose ring has 4 unique vertices."""
    path = tmp_path / "square.shp"
    with shapefile.Writer(str(path), shapeType=shapefile.POLYGON) as writer:
        writer.field("name", "C", size=20)
        writer.field("value", "N", size=10, decimal=0)
        writer.poly([[*SQUARE, SQUARE[0]]])
        writer.record("square", 7)
    return path


@pytest.fixture
def geojson_table():
    """A row table of GeoJSON geometries with the geometry column last."""
    return pd.DataFrame(
        {
            "name": ["a", "b", "c"],
            "population": [10, 20, 30],
            "geometry": [
                {"type": "Point", "coordinates": [1.0, 2.0]},
                {"type": "LineString", "coordinates": [[0.0, 0.0], [1.0, 1.0], [2.0, 0.0]]},
                {
                    "type": "Polygon",
                    "coordinates": [
                        [[0.0, 0.0], [0.0, 1.0], [1.0, 1.0], [1.0, 0.0], [0.0, 0.0]],
                    ],
                },
            ],
        }
    )


class RecordingCodec:
    """Fake codec that records calls and returns a canned result."""

    def __init__(self, result=None):
        self.result = result
        self.reads = []
        self.writes = []

    def read(self, path, *, layer=0, **options):
        self.reads.append((str(path), layer, options))
        return self.result

    def write(self, path, geotable, **options):
        self.writes.append((str(path), geotable, options))


@pytest.fixture
def fake_codecs(monkeypatch, geojson_table):
    """Replace every registered codec with a RecordingCodec."""
    codecs = {fmt: RecordingCodec(geojson_table) for fmt in geoio_io.Format}
    for fmt, codec in codecs.items():
        monkeypatch.setitem(geoio_io._CODEC_REGISTRY, fmt, codec)
    return codecs
