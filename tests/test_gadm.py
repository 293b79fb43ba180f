"""Tests for GADM downloads. HTTP is mocked."""

import io
import json
import math
import zipfile
from unittest.mock import MagicMock, patch

import pytest
import requests

from geoio.config import settings
from geoio.formats import gadm
from geoio.geometry.types import Polygon
from geoio.io import fetch_region


def ring(n, cx=0.0, cy=0.0):
    coords = [
        [cx + math.cos(2 * math.pi * i / n), cy + math.sin(2 * math.pi * i / n)] for i in range(n)
    ]
    return [*coords, coords[0]]


def feature(geometry_ring, **properties):
    return {
        "type": "Feature",
        "properties": properties,
        "geometry": {"type": "Polygon", "coordinates": [geometry_ring]},
    }


STATES = {
    "type": "FeatureCollection",
    "features": [
        feature(ring(64), GID_1="BRA.1_1", NAME_1="Minas Gerais"),
        feature(ring(8, 5, 5), GID_1="BRA.2_1", NAME_1="Bahia"),
    ],
}

MUNICIPALITIES = {
    "type": "FeatureCollection",
    "features": [
        feature(ring(8), NAME_1="Minas Gerais", NAME_2="Uberaba"),
        feature(ring(8, 3, 3), NAME_1="Minas Gerais", NAME_2="Araxá"),
        feature(ring(8, 9, 9), NAME_1="Bahia", NAME_2="Salvador"),
    ],
}


def response(payload=None, content=None, status=200):
    mock = MagicMock()
    mock.content = content if content is not None else json.dumps(payload).encode()
    if status >= 400:
        mock.raise_for_status.side_effect = requests.HTTPError(f"{status} Client Error")
    return mock


def zipped(payload, name="gadm41_BRA_2.json"):
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        archive.writestr(name, json.dumps(payload))
    return buffer.getvalue()


class TestDatasetUrl:
    def test_country_level_is_plain_json(self):
        url = gadm.dataset_url("bra", 0)
        assert url == "https://geodata.ucdavis.edu/gadm/gadm4.1/json/gadm41_BRA_0.json"

    def test_deeper_levels_are_zipped(self):
        assert gadm.dataset_url("BRA", 2).endswith("gadm41_BRA_2.json.zip")

    def test_base_url_from_settings(self, monkeypatch):
        monkeypatch.setattr(settings, "gadm_base_url", "http://mirror.local/gadm/")
        assert gadm.dataset_url("BRA", 1) == "http://mirror.local/gadm/gadm41_BRA_1.json.zip"


class TestGet:
    def test_country_with_depth(self):
        with patch("geoio.formats.gadm.requests.get", return_value=response(STATES)) as get:
            table = gadm.get("BRA", depth=1)
        assert get.call_args.args[0].endswith("gadm41_BRA_1.json.zip")
        assert get.call_args.kwargs["timeout"] == settings.gadm_timeout_seconds
        assert table["NAME_1"].tolist() == ["Minas Gerais", "Bahia"]

    def test_subregion_filter(self):
        with patch("geoio.formats.gadm.requests.get", return_value=response(MUNICIPALITIES)):
            table = gadm.get("BRA", "Minas Gerais", depth=1)
        assert table["NAME_2"].tolist() == ["Uberaba", "Araxá"]
        assert list(table.index) == [0, 1]

    def test_unknown_subregion(self):
        with patch("geoio.formats.gadm.requests.get", return_value=response(STATES)):
            with pytest.raises(gadm.RegionNotFound, match="Atlantis"):
                gadm.get("BRA", "Atlantis")

    def test_zipped_payload(self):
        payload = zipped(MUNICIPALITIES)
        with patch("geoio.formats.gadm.requests.get", return_value=response(content=payload)):
            table = gadm.get("BRA", "Bahia", "Salvador")
        assert table["NAME_2"].tolist() == ["Salvador"]

    def test_archive_without_json(self):
        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w") as archive:
            archive.writestr("readme.txt", "license")
        with patch(
            "geoio.formats.gadm.requests.get", return_value=response(content=buffer.getvalue())
        ):
            with pytest.raises(ValueError, match="no .json member"):
                gadm.get("BRA", "Bahia")

    def test_request_options_forwarded(self):
        with patch("geoio.formats.gadm.requests.get", return_value=response(STATES)) as get:
            gadm.get("BRA", depth=1, timeout=5, headers={"User-Agent": "test"})
        assert get.call_args.kwargs == {"timeout": 5, "headers": {"User-Agent": "test"}}


class TestFetchRegion:
    def test_unknown_country_propagates_http_error(self):
        not_found = response(status=404, content=b"")
        with patch("geoio.formats.gadm.requests.get", return_value=not_found):
            with pytest.raises(requests.HTTPError):
                fetch_region("XXX")

    def test_returns_decimated_geotable(self):
        with patch("geoio.formats.gadm.requests.get", return_value=response(STATES)):
            geotable = fetch_region("BRA", depth=1, max_vertices=10)
        assert len(geotable) == 2
        assert geotable.columns == ["GID_1", "NAME_1"]
        for polygon in geotable.domain:
            assert isinstance(polygon, Polygon)
            assert 3 <= polygon.nvertices() <= 10
        assert geotable.crs == "EPSG:4326"

    def test_fixed_tolerance(self):
        with patch("geoio.formats.gadm.requests.get", return_value=response(STATES)):
            geotable = fetch_region("BRA", "Bahia", tolerance=0.0)
        assert geotable.domain[0].nvertices() == 8

    def test_min_vertices_respected(self):
        with patch("geoio.formats.gadm.requests.get", return_value=response(STATES)):
            geotable = fetch_region("BRA", "Minas Gerais", min_vertices=8, max_vertices=10)
        assert 8 <= geotable.domain[0].nvertices() <= 10
