"""
Cell Decomposition — volumetric regions bounded by patches
==========================================================

A CELL is a maximal connected region of space bounded by patches. Each
patch side (FRONT or BACK) faces exactly one cell.

Two patch sides face the same cell when they bound a common wedge around
some non-manifold edge: consecutive incidences i, i+1 in the cyclic order
look at each other through the wedge between them. Patch sides are
merged across every wedge of every non-manifold edge.

    node(p, side) = 2·p + side
    cell          = connected component of the side graph

NOTE:
    Valid for ONE facet component only. Separate components never share a
    wedge, so the region around a disjoint component would be counted as
    two different cells; nesting is resolved afterwards by ambient
    corrections.
"""

import logging
import numpy as np
from typing import List, Tuple

from scipy.sparse import coo_matrix
from scipy.sparse.csgraph import connected_components

from ..spec.constants import FRONT, BACK
from .curve_order import order_edge, side_facing

logger = logging.getLogger(__name__)


def extract_cells(V: np.ndarray, F: np.ndarray, P: np.ndarray,
                  uE: np.ndarray, uE2E: List[List[int]],
                  curves: List[List[int]]) -> Tuple[int, np.ndarray]:
    """
    Partition patch sides into cells.

    Args:
        V, F: mesh of a single facet component
        P: (m,) patch index per face
        uE, uE2E: unique edge map
        curves: intersection curves (unique edge index lists)

    Returns:
        n_cells: number of cells
        per_patch_cells: (n_patches, 2) int, [p, FRONT] and [p, BACK] cell ids
    """
    P = np.asarray(P)
    n_patches = int(P.max()) + 1 if len(P) else 0
    rows, cols = [], []
    for curve in curves:
        for u in curve:
            faces, orientation = order_edge(V, F, uE, uE2E, u)
            k = len(faces)
            for j in range(k):
                nxt = (j + 1) % k
                rows.append(2 * P[faces[j]] + side_facing(orientation[j], True))
                cols.append(2 * P[faces[nxt]] + side_facing(orientation[nxt], False))

    n_nodes = 2 * n_patches
    data = np.ones(len(rows), dtype=np.int8)
    graph = coo_matrix((data, (np.asarray(rows, dtype=np.int64), np.asarray(cols, dtype=np.int64))),
                       shape=(n_nodes, n_nodes)).tocsr()
    n_cells, labels = connected_components(graph, directed=False)

    per_patch_cells = np.stack([labels[FRONT::2], labels[BACK::2]], axis=1).astype(np.int64)
    logger.debug("%d patches → %d cells", n_patches, n_cells)
    return int(n_cells), per_patch_cells
