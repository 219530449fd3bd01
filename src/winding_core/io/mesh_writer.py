"""
Debug Mesh Export
=================

Writes offending geometry for inspection in an external viewer. Never
required for correctness: propagation calls these only when a dump
directory is configured.

Formats follow the file extension (trimesh exporters): .obj, .ply, .stl.
"""

import logging
from pathlib import Path
from typing import Dict, List

import numpy as np
import trimesh

from ..spec.constants import DEBUG_COMPONENT_FILE, DEBUG_CELL_PATTERN

logger = logging.getLogger(__name__)


def write_mesh(path, V: np.ndarray, F: np.ndarray) -> Path:
    """
    Write a triangle mesh as given (no merging, no reordering).

    Returns:
        the path written
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    mesh = trimesh.Trimesh(vertices=np.asarray(V, dtype=float),
                           faces=np.asarray(F, dtype=np.int64), process=False)
    mesh.export(str(path))
    logger.info("Wrote %d faces to %s", len(F), path)
    return path


def dump_component(dump_dir, V: np.ndarray, F: np.ndarray) -> Path:
    """Write an inconsistent component as debug_wn.obj."""
    return write_mesh(Path(dump_dir) / DEBUG_COMPONENT_FILE, V, F)


def dump_cells(dump_dir, V: np.ndarray, F: np.ndarray,
               cell_faces: Dict[int, np.ndarray]) -> List[Path]:
    """
    Write the boundary of each cell as cell_<id>.ply.

    Args:
        cell_faces: cell id → face indices, e.g. from cells_on_cycle()
    """
    F = np.asarray(F)
    return [write_mesh(Path(dump_dir) / DEBUG_CELL_PATTERN.format(c), V, F[faces])
            for c, faces in cell_faces.items()]
