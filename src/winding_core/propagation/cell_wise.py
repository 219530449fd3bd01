"""
Cell-Wise Winding Number Propagation
====================================

Breadth-first propagation over the cell graph of ONE facet component.
No curve ordering is consulted once the cells are known.

    cell_W: (n_cells, L) int, winding number of each label in each cell

    seed:      the cell in front of the outer face (behind it when flipped)
               is infinity, all zeros
    forward:   BACK cell → FRONT cell of patch p, label(p) changes by -1
    backward:  FRONT cell → BACK cell of patch p, label(p) changes by +1

Face vectors are read off the two cells of the face's patch:

    W[f, 2k + FRONT] = cell_W[front_cell(P[f]), k]
    W[f, 2k + BACK]  = cell_W[back_cell(P[f]), k]

REVISITS:
    On a bipartite cell graph a revisit that disagrees with the stored
    vector is an internal invariant violation and raises. On a graph
    already reported as non-bipartite the first assignment is kept and
    the result is marked inconsistent.
"""

import logging
import numpy as np
from collections import deque
from typing import List, Tuple, Dict, Any

from ..spec.constants import INVALID, FRONT, BACK
from ..spec.errors import PropagationError, WindingInvariantError
from ..operators.parity import build_cell_adjacency, check_cell_parity

logger = logging.getLogger(__name__)


def infinity_cell(per_patch_cells: np.ndarray, outer_patch: int, flipped: bool) -> int:
    """Cell on the unbounded side of the outer face."""
    return int(per_patch_cells[outer_patch, BACK if flipped else FRONT])


def propagate_cells(adjacency: List[List[Tuple[int, bool, int]]],
                    labels_per_patch: np.ndarray, seed: int,
                    is_bipartite: bool = True) -> Tuple[np.ndarray, bool]:
    """
    BFS over cells from the infinity cell.

    Args:
        adjacency: from build_cell_adjacency()
        labels_per_patch: (n_patches,) label per patch
        seed: infinity cell
        is_bipartite: result of the parity check on the same graph

    Returns:
        cell_W: (n_cells, L) int
        is_consistent: no revisit mismatch

    Raises:
        WindingInvariantError: revisit mismatch on a bipartite graph
        PropagationError: if some cell cannot be reached
    """
    labels_per_patch = np.asarray(labels_per_patch, dtype=np.int64)
    n_cells = len(adjacency)
    n_labels = int(labels_per_patch.max()) + 1

    cell_W = np.full((n_cells, n_labels), INVALID, dtype=np.int64)
    cell_W[seed] = 0
    assigned = np.zeros(n_cells, dtype=bool)
    assigned[seed] = True
    is_consistent = True

    queue = deque([seed])
    while queue:
        curr = queue.popleft()
        for neighbor, forward, patch in adjacency[curr]:
            w = cell_W[curr].copy()
            w[labels_per_patch[patch]] += -1 if forward else 1
            if not assigned[neighbor]:
                cell_W[neighbor] = w
                assigned[neighbor] = True
                queue.append(neighbor)
            elif not np.array_equal(cell_W[neighbor], w):
                if is_bipartite:
                    raise WindingInvariantError(
                        f"Cell {neighbor} reached from cell {curr} across patch {patch} with "
                        f"{w.tolist()}, previously assigned {cell_W[neighbor].tolist()}. "
                        f"The cell graph passed the parity check, so this is an internal error."
                    )
                if is_consistent:
                    logger.warning("Cell %d revisited with a different winding vector across "
                                   "patch %d; keeping the first assignment", neighbor, patch)
                is_consistent = False

    if not np.all(assigned):
        unreached = np.where(~assigned)[0]
        raise PropagationError(
            f"{len(unreached)} of {n_cells} cells unreachable from infinity cell {seed}: "
            f"{unreached[:10].tolist()}"
        )

    return cell_W, is_consistent


def cell_to_face_winding(cell_W: np.ndarray, per_patch_cells: np.ndarray,
                         P: np.ndarray) -> np.ndarray:
    """Interleave front and back cell vectors into a (m, 2·L) face table."""
    P = np.asarray(P)
    n_labels = cell_W.shape[1]
    W = np.empty((len(P), 2 * n_labels), dtype=np.int64)
    W[:, FRONT::2] = cell_W[per_patch_cells[P, FRONT]]
    W[:, BACK::2] = cell_W[per_patch_cells[P, BACK]]
    return W


def propagate_cell_wise(P: np.ndarray, labels_per_patch: np.ndarray,
                        per_patch_cells: np.ndarray, n_cells: int,
                        outer_patch: int, flipped: bool) -> Tuple[np.ndarray, bool, Dict[str, Any]]:
    """
    Face winding table of one component from its cell decomposition.

    Args:
        P: (m,) patch index per face
        labels_per_patch: (n_patches,) label per patch
        per_patch_cells: (n_patches, 2) [front_cell, back_cell]
        n_cells: number of cells
        outer_patch: patch holding the outer face
        flipped: outer face normal points into the bounded side

    Returns:
        W: (m, 2·L) int
        is_consistent: bipartite cell graph and no revisit mismatch
        parity: dict from check_cell_parity()
    """
    per_patch_cells = np.asarray(per_patch_cells, dtype=np.int64)
    adjacency = build_cell_adjacency(per_patch_cells, n_cells)
    parity = check_cell_parity(adjacency)

    seed = infinity_cell(per_patch_cells, outer_patch, flipped)
    cell_W, no_mismatch = propagate_cells(adjacency, labels_per_patch, seed,
                                          is_bipartite=parity['is_bipartite'])

    logger.debug("Cell-wise propagation: %d cells, infinity cell %d", n_cells, seed)
    W = cell_to_face_winding(cell_W, per_patch_cells, P)
    return W, parity['is_bipartite'] and no_mismatch, parity
