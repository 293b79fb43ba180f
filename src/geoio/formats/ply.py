"""PLY meshes via meshio."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import meshio
import numpy as np
import pandas as pd

from geoio.geometry.types import Mesh
from geoio.geotable import GeoTable, from_grid_or_mesh

logger = logging.getLogger(__name__)

# meshio cell types that describe faces; edges ("line") and point cells
# ("vertex") have no polygon representation.
_FACE_TYPES = {"triangle", "quad", "polygon"}


def _column(data: np.ndarray) -> list[Any]:
    data = np.asarray(data)
    if data.ndim == 1:
        return data.tolist()
    return [tuple(row) for row in data.reshape(len(data), -1).tolist()]


class PLYCodec:
    """Reads ``.ply`` files into mesh GeoTables."""

    def read(self, path: str | Path, *, layer: int = 0, **options: Any) -> GeoTable:
        """Read vertices, faces and their properties.

        Vertex properties other than the coordinates become
        ``vertex_values``; face properties become ``values``.
        """
        mesh = meshio.read(path, file_format="ply", **options)

        faces: list[tuple[int, ...]] = []
        face_blocks = []
        for index, block in enumerate(mesh.cells):
            if block.type not in _FACE_TYPES:
                continue
            faces.extend(tuple(face) for face in block.data.tolist())
            face_blocks.append(index)

        domain = Mesh(tuple(map(tuple, mesh.points.tolist())), tuple(faces))

        vertex_values = pd.DataFrame(
            {name: _column(data) for name, data in mesh.point_data.items()},
            index=pd.RangeIndex(len(domain.vertices)),
        )
        values = pd.DataFrame(
            {
                name: _column(np.concatenate([blocks[i] for i in face_blocks]))
                for name, blocks in mesh.cell_data.items()
                if face_blocks
            },
            index=pd.RangeIndex(len(faces)),
        )

        logger.info(
            "Read mesh with %d vertices and %d faces from %s",
            len(domain.vertices),
            len(faces),
            path,
        )
        return from_grid_or_mesh(domain, values, vertex_values)
