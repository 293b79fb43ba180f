"""Raster images as grid GeoTables."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import numpy as np
import pandas as pd
from PIL import Image

from geoio.geometry.types import Grid
from geoio.geotable import GeoTable, from_grid_or_mesh

logger = logging.getLogger(__name__)


def pixel_colors(pixels: np.ndarray) -> list[Any]:
    """Flatten an (H, W) or (H, W, bands) array to one color per cell.

    Single-band images give scalars, multi-band images give tuples. Cells
    are in row-major order, x varying fastest.
    """
    if pixels.ndim == 2:
        return pixels.reshape(-1).tolist()
    height, width, bands = pixels.shape
    return [tuple(px) for px in pixels.reshape(height * width, bands).tolist()]


class ImageCodec:
    """Reads PNG, JPEG and TIFF images with Pillow."""

    def read(self, path: str | Path, *, layer: int = 0, **options: Any) -> GeoTable:
        """Read an image into a ``Grid((width, height))`` with a ``color`` column.

        ``options`` go to ``PIL.Image.open`` (e.g. ``formats``).
        """
        with Image.open(path, **options) as image:
            pixels = np.asarray(image)
        height, width = pixels.shape[:2]
        domain = Grid((width, height))
        values = pd.DataFrame({"color": pixel_colors(pixels)})
        logger.info("Read %dx%d image from %s", width, height, path)
        return from_grid_or_mesh(domain, values)
