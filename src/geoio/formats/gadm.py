"""GADM administrative boundaries.

Datasets are the per-country GeoJSON files of GADM 4.1, one file per
administrative level. Level 0 files are served as plain ``.json``; deeper
levels are zipped. Features carry ``NAME_1``, ``NAME_2``, ... properties
naming the regions they belong to.
"""

from __future__ import annotations

import io
import json
import logging
import zipfile
from typing import Any

import pandas as pd
import requests

from geoio.config import settings
from geoio.formats.geojson import features_to_table

logger = logging.getLogger(__name__)


class RegionNotFound(LookupError):
    """No GADM feature matches the requested subregions."""


def dataset_url(country: str, level: int) -> str:
    """URL of the GADM dataset for *country* at administrative *level*."""
    suffix = ".json" if level == 0 else ".json.zip"
    name = f"gadm{settings.gadm_version}_{country.upper()}_{level}{suffix}"
    return f"{settings.gadm_base_url.rstrip('/')}/{name}"


def _decode(payload: bytes) -> dict[str, Any]:
    if zipfile.is_zipfile(io.BytesIO(payload)):
        with zipfile.ZipFile(io.BytesIO(payload)) as archive:
            names = archive.namelist()
            member = next((n for n in names if n.endswith(".json")), None)
            if member is None:
                raise ValueError(f"GADM archive has no .json member, found {names}")
            payload = archive.read(member)
    return json.loads(payload)


def download(country: str, level: int, **options: Any) -> dict[str, Any]:
    """Download and parse one GADM dataset.

    ``options`` go to ``requests.get``. HTTP errors (404 for unknown
    country codes) propagate from ``raise_for_status``.
    """
    url = dataset_url(country, level)
    options.setdefault("timeout", settings.gadm_timeout_seconds)
    logger.info("Downloading GADM level %d for %s from %s", level, country, url)
    response = requests.get(url, **options)
    response.raise_for_status()
    return _decode(response.content)


def get(country: str, *subregions: str, depth: int = 0, **options: Any) -> pd.DataFrame:
    """Fetch the GADM table for a region.

    Args:
        country: ISO 3166-1 alpha-3 code, e.g. ``"BRA"``.
        *subregions: Nested region names, e.g. ``"Minas Gerais"``.
        depth: How many levels below the named region to return.
        **options: Passed to ``requests.get``.

    Returns:
        Row table whose ``geometry`` column holds GeoJSON mappings.

    Raises:
        RegionNotFound: if no feature matches *subregions*.
        requests.HTTPError: if the dataset cannot be downloaded.
    """
    level = len(subregions) + depth
    table = features_to_table(download(country, level, **options))

    for i, name in enumerate(subregions, start=1):
        column = f"NAME_{i}"
        if column not in table.columns:
            raise RegionNotFound(f"GADM level {level} data for {country} has no {column} column")
        table = table[table[column] == name]
        if table.empty:
            raise RegionNotFound(f"Could not find {name!r} at level {i} of {country}")

    logger.info("GADM %s %s depth=%d: %d regions", country, list(subregions), depth, len(table))
    return table.reset_index(drop=True)
