"""
Patch-Wise Winding Number Propagation
=====================================

Breadth-first propagation over manifold patches of ONE facet component,
stepping across intersection curves in their cyclic angular order.

TABLE:
    patch_W: (n_patches, 2·L) int, L = number of labels
    patch_W[p, 2k + FRONT], patch_W[p, 2k + BACK]

CROSSING RULE:
    Two consecutive incidences around a curve look at each other through
    the wedge between them, so the winding vector in that wedge is shared:

        W[a, 2k + side_a] == W[b, 2k + side_b]     for every label k

    where side_a is the side of a facing b and side_b the side of b facing
    a. The other side of b follows from b's own label (BACK = FRONT + 1),
    and every other label is equal on both sides of b.

SEED:
    The patch holding the outer face touches infinity (all zeros) on the
    side its normal points to when not flipped:

        not flipped: own label (FRONT, BACK) = (0, 1)
        flipped:     own label (FRONT, BACK) = (-1, 0)

CLOSURE:
    After traversal, every wedge of every curve is re-checked. A mismatch
    marks the result inconsistent; it is returned, not raised.
"""

import logging
import numpy as np
from collections import deque
from typing import List, Tuple

from ..spec.constants import INVALID, FRONT, BACK
from ..spec.errors import PropagationError
from ..analysis.curve_order import side_facing

logger = logging.getLogger(__name__)


def derive_neighbor_winding(w_curr: np.ndarray, side_curr: int,
                            label_next: int, side_next: int) -> np.ndarray:
    """
    Winding vector of a neighbouring patch across a shared wedge.

    Args:
        w_curr: (2·L,) winding vector of the current patch
        side_curr: side of the current patch facing the wedge
        label_next: label of the neighbour
        side_next: side of the neighbour facing the wedge

    Returns:
        (2·L,) winding vector of the neighbour
    """
    shared = np.asarray(w_curr)[side_curr::2]
    w_next = np.repeat(shared, 2)
    other = 2 * label_next + (BACK if side_next == FRONT else FRONT)
    w_next[other] += 1 if side_next == FRONT else -1
    return w_next


def seed_outer_patch(n_patches: int, n_labels: int, outer_patch: int,
                     outer_label: int, flipped: bool) -> np.ndarray:
    """Unassigned table with the outer patch seeded next to infinity."""
    patch_W = np.full((n_patches, 2 * n_labels), INVALID, dtype=np.int64)
    patch_W[outer_patch] = 0
    if flipped:
        patch_W[outer_patch, 2 * outer_label + FRONT] = -1
    else:
        patch_W[outer_patch, 2 * outer_label + BACK] = 1
    return patch_W


def closure_mismatches(patch_W: np.ndarray, orders: List[np.ndarray],
                       orientations: List[np.ndarray]) -> List[Tuple[int, int]]:
    """
    Wedges where the shared-winding law fails.

    Returns:
        list of (curve index, position j) with the wedge between j and j+1
    """
    mismatches = []
    for ci, (order, orientation) in enumerate(zip(orders, orientations)):
        k = len(order)
        for j in range(k):
            nxt = (j + 1) % k
            here = patch_W[order[j], side_facing(orientation[j], True)::2]
            there = patch_W[order[nxt], side_facing(orientation[nxt], False)::2]
            if not np.array_equal(here, there):
                mismatches.append((ci, j))
    return mismatches


def propagate_patch_wise(n_patches: int, labels_per_patch: np.ndarray,
                         orders: List[np.ndarray], orientations: List[np.ndarray],
                         patch_curves: List[List[int]], outer_patch: int,
                         flipped: bool) -> Tuple[np.ndarray, bool]:
    """
    Assign a winding vector to every patch.

    Args:
        n_patches: number of patches
        labels_per_patch: (n_patches,) label per patch
        orders, orientations, patch_curves: from order_curves()
        outer_patch: patch holding the outer face
        flipped: outer face normal points into the bounded side

    Returns:
        patch_W: (n_patches, 2·L) int
        is_consistent: closure holds on every wedge of every curve

    Raises:
        PropagationError: if some patch cannot be reached
    """
    labels_per_patch = np.asarray(labels_per_patch, dtype=np.int64)
    n_labels = int(labels_per_patch.max()) + 1
    patch_W = seed_outer_patch(n_patches, n_labels, outer_patch,
                               int(labels_per_patch[outer_patch]), flipped)

    assigned = np.zeros(n_patches, dtype=bool)
    assigned[outer_patch] = True
    queue = deque([outer_patch])

    while queue:
        curr = queue.popleft()
        for ci in patch_curves[curr]:
            order = orders[ci]
            orientation = orientations[ci]
            k = len(order)
            for i in np.where(order == curr)[0]:
                for toward_next in (True, False):
                    j = (i + 1) % k if toward_next else (i - 1) % k
                    neighbor = int(order[j])
                    if assigned[neighbor]:
                        continue
                    patch_W[neighbor] = derive_neighbor_winding(
                        patch_W[curr],
                        side_facing(orientation[i], toward_next),
                        int(labels_per_patch[neighbor]),
                        side_facing(orientation[j], not toward_next),
                    )
                    assigned[neighbor] = True
                    queue.append(neighbor)

    if not np.all(assigned):
        unreached = np.where(~assigned)[0]
        raise PropagationError(
            f"{len(unreached)} of {n_patches} patches unreachable from outer patch "
            f"{outer_patch}: {unreached[:10].tolist()}. The patches do not form one "
            f"connected arrangement."
        )

    mismatches = closure_mismatches(patch_W, orders, orientations)
    if mismatches:
        ci, j = mismatches[0]
        logger.debug("Closure fails at %d wedges; first at curve %d position %d",
                     len(mismatches), ci, j)

    logger.debug("Patch-wise propagation: %d patches, %d curves, %d labels",
                 n_patches, len(orders), n_labels)
    return patch_W, len(mismatches) == 0
