"""
Cell Graph and Parity (2-Coloring) Validation
==============================================

The cell graph has one node per cell and one edge per patch: the patch
separates its BACK cell from its FRONT cell.

DEFINITION:
    adjacency[c] = sorted list of (neighbor_cell, forward, patch)

        forward = True   crossing from the BACK cell into the FRONT cell
        forward = False  crossing from the FRONT cell into the BACK cell

    Every patch contributes one entry to each of its two cells. A patch
    whose two sides face the same cell contributes a self-loop.

PARITY:
    Crossing any patch changes the winding number of its label by ±1, so
    the parity of the TOTAL winding number alternates across every patch.
    A valid arrangement therefore has a bipartite cell graph.

    An odd cycle (including a self-loop) means the arrangement is
    geometrically invalid. It is reported together with the traced cycle;
    it does not stop propagation.
"""

import logging
import numpy as np
from collections import deque
from typing import List, Tuple, Dict, Any

logger = logging.getLogger(__name__)


def build_cell_adjacency(per_patch_cells: np.ndarray,
                         n_cells: int = None) -> List[List[Tuple[int, bool, int]]]:
    """
    Build the cell adjacency list.

    Args:
        per_patch_cells: (n_patches, 2) [front_cell, back_cell] per patch
        n_cells: number of cells (default: max cell id + 1)

    Returns:
        adjacency: list indexed by cell of sorted (neighbor, forward, patch)
    """
    per_patch_cells = np.asarray(per_patch_cells, dtype=np.int64).reshape(-1, 2)
    if n_cells is None:
        n_cells = int(per_patch_cells.max()) + 1 if len(per_patch_cells) else 0

    adjacency = [[] for _ in range(n_cells)]
    for p, (front, back) in enumerate(per_patch_cells):
        front, back = int(front), int(back)
        adjacency[front].append((back, False, p))
        adjacency[back].append((front, True, p))

    for entries in adjacency:
        entries.sort()
    return adjacency


def _trace_parents(parents: np.ndarray, c: int) -> List[int]:
    """Path c → root through the BFS parent array."""
    path = [c]
    while parents[path[-1]] != path[-1]:
        path.append(int(parents[path[-1]]))
    return path


def _odd_cycle(parents: np.ndarray, a: int, b: int) -> List[int]:
    """Closed walk through the tree path a..b plus the conflicting edge (a, b)."""
    path_a = _trace_parents(parents, a)
    path_b = _trace_parents(parents, b)
    # Drop the shared tail above the lowest common ancestor
    while len(path_a) > 1 and len(path_b) > 1 and path_a[-2] == path_b[-2]:
        path_a.pop()
        path_b.pop()
    return path_a[::-1] + path_b[:-1]


def check_cell_parity(adjacency: List[List[Tuple[int, bool, int]]]) -> Dict[str, Any]:
    """
    Two-color the cell graph by BFS.

    Args:
        adjacency: from build_cell_adjacency()

    Returns:
        dict with:
            'is_bipartite': bool
            'colors': (n_cells,) ±1
            'parents': (n_cells,) BFS parent of each cell (roots are their own parent)
            'odd_cycle': list of cell ids on the first odd cycle found, [] if none
            'n_conflicts': number of edges joining equally colored cells
    """
    n_cells = len(adjacency)
    colors = np.zeros(n_cells, dtype=np.int64)
    parents = np.arange(n_cells, dtype=np.int64)
    odd_cycle = []
    n_conflicts = 0

    for start in range(n_cells):
        if colors[start] != 0:
            continue
        colors[start] = 1
        queue = deque([start])
        while queue:
            curr = queue.popleft()
            for neighbor, _, _ in adjacency[curr]:
                if colors[neighbor] == 0:
                    colors[neighbor] = -colors[curr]
                    parents[neighbor] = curr
                    queue.append(neighbor)
                elif colors[neighbor] == colors[curr]:
                    n_conflicts += 1
                    if not odd_cycle:
                        odd_cycle = _odd_cycle(parents, curr, neighbor)

    if odd_cycle:
        logger.warning("Cell graph is not bipartite: odd cycle through cells %s", odd_cycle)

    return {
        'is_bipartite': n_conflicts == 0,
        'colors': colors,
        'parents': parents,
        'odd_cycle': odd_cycle,
        'n_conflicts': n_conflicts,
    }


def cells_on_cycle(per_patch_cells: np.ndarray, P: np.ndarray,
                   cycle: List[int]) -> Dict[int, np.ndarray]:
    """
    Faces bounding each cell of a cycle, for diagnostic export.

    Returns:
        dict cell_id → face indices whose patch has the cell on either side
    """
    per_patch_cells = np.asarray(per_patch_cells)
    P = np.asarray(P)
    result = {}
    for c in dict.fromkeys(cycle):
        patches = np.where(np.any(per_patch_cells == c, axis=1))[0]
        result[int(c)] = np.where(np.isin(P, patches))[0]
    return result
