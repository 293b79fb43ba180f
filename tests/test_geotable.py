"""Tests for wrapping row tables as geo-tables and back."""

from unittest.mock import patch

import geopandas as gpd
import pandas as pd
import pytest
from shapely import geometry as sg

from geoio.errors import InconsistentDimensionality, MissingGeometryColumn, UnsupportedTargetFormat
from geoio.geometry.types import Chain, Grid, Mesh, Point, Polygon
from geoio.geotable import (
    GeometrySet,
    GeoTable,
    LazyGeometryView,
    from_grid_or_mesh,
    unwrap,
    wrap,
)


class TestWrap:
    def test_eager_converts_all_rows(self, geojson_table):
        geotable = wrap(geojson_table)
        assert isinstance(geotable.domain, GeometrySet)
        assert geotable.domain[0] == Point((1, 2))
        assert isinstance(geotable.domain[1], Chain)
        assert isinstance(geotable.domain[2], Polygon)

    def test_attribute_table_drops_geometry(self, geojson_table):
        geotable = wrap(geojson_table)
        assert geotable.columns == ["name", "population"]
        assert len(geotable.values) == len(geotable.domain) == 3

    def test_missing_geometry_column(self, geojson_table):
        with pytest.raises(MissingGeometryColumn, match="geom"):
            wrap(geojson_table, geometry_column="geom")

    def test_custom_geometry_column(self, geojson_table):
        table = geojson_table.rename(columns={"geometry": "shape"})
        geotable = wrap(table, geometry_column="shape")
        assert geotable.columns == ["name", "population"]

    def test_mixed_dimensionality_rejected(self):
        table = pd.DataFrame(
            {
                "geometry": [
                    {"type": "Point", "coordinates": [0.0, 0.0]},
                    {"type": "Point", "coordinates": [0.0, 0.0, 1.0]},
                ]
            }
        )
        with pytest.raises(InconsistentDimensionality):
            wrap(table)

    def test_crs_taken_from_geodataframe(self):
        frame = gpd.GeoDataFrame({"a": [1]}, geometry=[sg.Point(0, 0)], crs="EPSG:4326")
        geotable = wrap(frame)
        assert geotable.crs == frame.crs
        assert list(geotable.values.columns) == ["a"]

    def test_crs_taken_from_attrs(self, geojson_table):
        geojson_table.attrs["crs"] = "EPSG:3857"
        assert wrap(geojson_table).crs == "EPSG:3857"


class TestLazy:
    def test_lazy_builds_view(self, geojson_table):
        geotable = wrap(geojson_table, lazy=True)
        assert isinstance(geotable.domain, LazyGeometryView)
        assert geotable.is_lazy

    def test_no_conversion_until_access(self, geojson_table):
        with patch("geoio.geotable.to_canonical") as convert:
            wrap(geojson_table, lazy=True)
            convert.assert_not_called()

    def test_lazy_matches_eager(self, geojson_table):
        eager = wrap(geojson_table)
        lazy = wrap(geojson_table, lazy=True)
        for i in range(len(geojson_table)):
            assert lazy.domain[i] == eager.domain[i]

    def test_view_reads_source_rows_by_position(self, geojson_table):
        table = geojson_table.set_axis([10, 20, 30])
        geotable = wrap(table, lazy=True)
        assert geotable.domain[0] == Point((1, 2))
        assert geotable.values.index.tolist() == [0, 1, 2]

    def test_negative_and_out_of_range_indices(self, geojson_table):
        view = wrap(geojson_table, lazy=True).domain
        assert view[-1] == view[2]
        with pytest.raises(IndexError):
            view[3]

    def test_materialize(self, geojson_table):
        lazy = wrap(geojson_table, lazy=True)
        eager = lazy.materialize()
        assert not eager.is_lazy
        assert eager.domain == wrap(geojson_table).domain
        assert eager.materialize() is eager


class TestUnwrap:
    def test_round_trip(self, geojson_table):
        result = unwrap(wrap(geojson_table), "geojson")
        assert list(result.columns) == list(geojson_table.columns)
        assert result["geometry"].tolist() == geojson_table["geometry"].tolist()
        pd.testing.assert_frame_equal(
            result.drop(columns=["geometry"]), geojson_table.drop(columns=["geometry"])
        )

    def test_lazy_round_trip(self, geojson_table):
        result = unwrap(wrap(geojson_table, lazy=True), "geojson")
        assert result["geometry"].tolist() == geojson_table["geometry"].tolist()

    def test_geometry_column_appended_last(self, geojson_table):
        table = geojson_table[["geometry", "name", "population"]]
        result = unwrap(wrap(table), "shapely")
        assert list(result.columns) == ["name", "population", "geometry"]
        assert isinstance(result["geometry"][0], sg.Point)

    def test_grid_cannot_be_unwrapped(self):
        geotable = from_grid_or_mesh(Grid((2, 2)))
        with pytest.raises(UnsupportedTargetFormat):
            unwrap(geotable, "geojson")


class TestGeoTable:
    def test_length_mismatch_rejected(self):
        with pytest.raises(ValueError, match="attribute table"):
            GeoTable(GeometrySet([Point((0, 0))]), pd.DataFrame({"a": [1, 2]}))

    def test_default_values_are_empty_columns(self):
        geotable = GeoTable(GeometrySet([Point((0, 0)), Point((1, 1))]))
        assert len(geotable.values) == 2
        assert geotable.columns == []

    def test_rows(self, geojson_table):
        geometry, row = wrap(geojson_table)[0]
        assert geometry == Point((1, 2))
        assert row == {"name": "a", "population": 10}

    def test_grid_rows_are_cells(self):
        geotable = from_grid_or_mesh(Grid((2, 1)), pd.DataFrame({"color": [0, 255]}))
        geometry, row = geotable[1]
        assert geometry.outer[0] == (1.0, 0.0)
        assert row == {"color": 255}
        assert not geotable.is_vector

    def test_mesh_vertex_values_checked(self):
        mesh = Mesh([(0, 0), (1, 0), (0, 1)], [(0, 1, 2)])
        with pytest.raises(ValueError, match="vertex table"):
            from_grid_or_mesh(mesh, vertex_values=pd.DataFrame({"red": [1, 2]}))

    def test_from_grid_or_mesh_rejects_vector_domains(self):
        with pytest.raises(TypeError):
            from_grid_or_mesh(GeometrySet([Point((0, 0))]))
