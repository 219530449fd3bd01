"""
Curve Ordering — cyclic (patch, orientation) incidences around intersection curves
===================================================================================

Wraps the angular-order predicate so that every consumer sees the same
representation of an intersection curve:

    order[i]        incidence (face or patch) at position i around the edge
    orientation[i]  True if that face traverses d → s (positive)

Side pairing (see predicates.py):
    positive face: FRONT faces position i+1, BACK faces position i-1
    negative face: FRONT faces position i-1, BACK faces position i+1

The cycle is closed: position k-1 is followed by position 0.
"""

import numpy as np
from typing import List, Tuple

from ..operators.incidence import signed_face_index
from ..spec.constants import FRONT, BACK
from .predicates import order_faces_around_edge


def side_facing(orientation: bool, toward_next: bool) -> int:
    """
    Which side of an incidence looks at its next (or previous) neighbour.

    Args:
        orientation: True for a positive incidence
        toward_next: True for the neighbour at i+1, False for i-1

    Returns:
        FRONT or BACK
    """
    if toward_next:
        return FRONT if orientation else BACK
    return BACK if orientation else FRONT


def edge_incidences(F: np.ndarray, uE: np.ndarray, uE2E: List[List[int]],
                    u: int) -> Tuple[int, int, np.ndarray]:
    """
    Signed faces around unique edge u.

    Returns:
        s, d: edge end points (s < d), the canonical curve direction s → d
        signed_faces: (k,) ±(f + 1), positive when face f traverses d → s
    """
    m = len(F)
    s, d = int(uE[u, 0]), int(uE[u, 1])
    signed_faces = np.array([signed_face_index(F, ei % m, s, d) for ei in uE2E[u]],
                            dtype=np.int64)
    return s, d, signed_faces


def order_edge(V: np.ndarray, F: np.ndarray, uE: np.ndarray, uE2E: List[List[int]],
               u: int) -> Tuple[np.ndarray, np.ndarray]:
    """
    Cyclic face order around unique edge u.

    Returns:
        faces: (k,) face index at each position
        orientation: (k,) bool, True for positive incidences
    """
    s, d, signed_faces = edge_incidences(F, uE, uE2E, u)
    order = order_faces_around_edge(V, F, s, d, signed_faces)
    ordered = signed_faces[order]
    return np.abs(ordered) - 1, ordered > 0


def order_curves(V: np.ndarray, F: np.ndarray, uE: np.ndarray, uE2E: List[List[int]],
                 curves: List[List[int]], P: np.ndarray,
                 n_patches: int) -> Tuple[List[np.ndarray], List[np.ndarray], List[List[int]]]:
    """
    Cyclic patch order around every intersection curve.

    Each curve is ordered at its first edge; all edges of one curve are
    bounded by the same patches in the same order.

    Args:
        V, F: mesh
        uE, uE2E: unique edge map
        curves: list of curves (unique edge index lists)
        P: (m,) patch index per face
        n_patches: number of patches

    Returns:
        orders: per curve, (k,) patch index at each position
        orientations: per curve, (k,) bool
        patch_curves: per patch, indices of curves it touches (no repeats)
    """
    orders, orientations = [], []
    patch_curves = [[] for _ in range(n_patches)]
    for ci, curve in enumerate(curves):
        faces, orientation = order_edge(V, F, uE, uE2E, curve[0])
        patches = np.asarray(P)[faces]
        orders.append(patches)
        orientations.append(orientation)
        for p in np.unique(patches):
            patch_curves[int(p)].append(ci)
    return orders, orientations, patch_curves
