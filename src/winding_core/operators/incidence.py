"""
Edge Incidence, Manifold Patches and Intersection Curves
=========================================================

Pure combinatorics - NO geometry.

DEFINITIONS:
    half-edge ei:  edge opposite corner c of face f,  ei = c·m + f
                   runs from F[f, (c+1)%3] to F[f, (c+2)%3]
    unique edge u: unordered vertex pair (s, d) with s < d
    degree(u):     number of half-edges in uE2E[u]

    degree = 2       manifold edge
    degree > 2, even non-manifold junction (intersection curve)
    degree odd       invalid input - cannot bound a volume

DECOMPOSITION:
    facet component: faces joined across ANY shared unique edge
    manifold patch:  faces joined across degree-2 edges only
    curve:           maximal chain of non-manifold unique edges, broken
                     at vertices where the non-manifold valence is not 2

    Every patch lies in exactly one facet component, and every curve
    touches only patches of one component.

ORIENTATION:
    Face f is POSITIVELY oriented w.r.t. the directed edge (s, d) when its
    boundary traverses d → s. Signed face index: ±(f + 1).
"""

import logging
import numpy as np
from collections import deque
from typing import List, Tuple, Dict, Any

from scipy.sparse import coo_matrix
from scipy.sparse.csgraph import connected_components

from ..spec.errors import InvalidTopologyError

logger = logging.getLogger(__name__)


def unique_edge_map(F: np.ndarray) -> Tuple[np.ndarray, np.ndarray, np.ndarray, List[List[int]]]:
    """
    Build directed half-edges and group them into unique edges.

    Args:
        F: (m, 3) triangles

    Returns:
        E: (3m, 2) directed half-edges, row ei = c·m + f
        uE: (n_uE, 2) unique edges, each row sorted (s < d)
        EMAP: (3m,) half-edge → unique edge index
        uE2E: list of n_uE lists of half-edge indices

    PROPERTY:
        sum(len(uE2E[u])) = 3m
    """
    F = np.asarray(F, dtype=np.int64)
    m = len(F)
    if m == 0:
        empty = np.zeros((0, 2), dtype=np.int64)
        return empty, empty.copy(), np.zeros(0, dtype=np.int64), []

    E = np.concatenate([F[:, [1, 2]], F[:, [2, 0]], F[:, [0, 1]]], axis=0)
    sorted_E = np.sort(E, axis=1)
    uE, EMAP = np.unique(sorted_E, axis=0, return_inverse=True)
    EMAP = np.asarray(EMAP).reshape(-1)

    order = np.argsort(EMAP, kind='stable')
    counts = np.bincount(EMAP, minlength=len(uE))
    groups = np.split(order, np.cumsum(counts)[:-1])
    uE2E = [[int(ei) for ei in g] for g in groups]

    return E, uE, EMAP, uE2E


def edge_degree_histogram(uE2E: List[List[int]]) -> Dict[str, Any]:
    """
    Universal check: how many half-edges meet at each unique edge.

    Returns:
        dict with:
            'valid': bool - every degree is even
            'min': int - minimum degree
            'max': int - maximum degree
            'n_manifold': int - edges of degree 2
            'n_non_manifold': int - edges of even degree > 2
            'odd_edges': list of unique edge indices with odd degree
            'histogram': dict - {degree: n_edges_with_that_degree}
    """
    degrees = np.array([len(g) for g in uE2E], dtype=np.int64)
    if len(degrees) == 0:
        return {
            'valid': True, 'min': 0, 'max': 0,
            'n_manifold': 0, 'n_non_manifold': 0,
            'odd_edges': [], 'histogram': {},
        }

    unique, counts = np.unique(degrees, return_counts=True)
    histogram = {int(u): int(c) for u, c in zip(unique, counts)}
    odd_edges = [int(u) for u in np.where(degrees % 2 == 1)[0]]

    return {
        'valid': len(odd_edges) == 0,
        'min': int(degrees.min()),
        'max': int(degrees.max()),
        'n_manifold': int(np.sum(degrees == 2)),
        'n_non_manifold': int(np.sum((degrees > 2) & (degrees % 2 == 0))),
        'odd_edges': odd_edges,
        'histogram': histogram,
    }


def check_even_degree(uE2E: List[List[int]], uE: np.ndarray = None) -> None:
    """
    Fail fast when any unique edge has an odd number of incident faces.

    Such a mesh has a boundary (degree 1) or an odd junction, does not
    represent a valid volume, and winding numbers cannot be propagated.

    Raises:
        InvalidTopologyError: on the first odd-degree edge
    """
    result = edge_degree_histogram(uE2E)
    if not result['valid']:
        u = result['odd_edges'][0]
        where = f" ({int(uE[u, 0])}, {int(uE[u, 1])})" if uE is not None else ""
        raise InvalidTopologyError(
            f"Input mesh contains an odd number of faces sharing edge {u}{where}: "
            f"{len(uE2E[u])} faces. {len(result['odd_edges'])} odd edges in total. "
            f"The input does not represent a valid volume and winding numbers "
            f"cannot be propagated. Histogram: {result['histogram']}"
        )


def is_positively_oriented(face, s: int, d: int) -> bool:
    """
    True if face traverses d → s, False if it traverses s → d.

    Raises:
        ValueError: if (s, d) is not an edge of face
    """
    a, b, c = int(face[0]), int(face[1]), int(face[2])
    if (a, b) == (d, s) or (b, c) == (d, s) or (c, a) == (d, s):
        return True
    if (a, b) == (s, d) or (b, c) == (s, d) or (c, a) == (s, d):
        return False
    raise ValueError(f"Edge ({s},{d}) does not belong to face {list(face)}")


def signed_face_index(F: np.ndarray, fi: int, s: int, d: int) -> int:
    """Signed index ±(fi + 1): positive when face fi traverses d → s."""
    return (fi + 1) * (1 if is_positively_oriented(F[fi], s, d) else -1)


def is_orientable(F: np.ndarray, uE: np.ndarray, uE2E: List[List[int]]) -> bool:
    """
    Check that every unique edge is traversed equally often in each direction.

    A consistently oriented closed surface (or union of them) satisfies this
    at every edge. Failure means some face is flipped relative to its
    neighbours.
    """
    F = np.asarray(F)
    m = len(F)
    for u, half_edges in enumerate(uE2E):
        s, d = int(uE[u, 0]), int(uE[u, 1])
        count = 0
        for ei in half_edges:
            count += -1 if is_positively_oriented(F[ei % m], s, d) else 1
        if count != 0:
            return False
    return True


def _face_graph(m: int, uE2E: List[List[int]], manifold_only: bool):
    """Sparse face adjacency: consecutive half-edges of one unique edge are linked."""
    rows, cols = [], []
    for half_edges in uE2E:
        if manifold_only and len(half_edges) != 2:
            continue
        for a, b in zip(half_edges[:-1], half_edges[1:]):
            rows.append(a % m)
            cols.append(b % m)
    rows = np.asarray(rows, dtype=np.int64)
    cols = np.asarray(cols, dtype=np.int64)
    data = np.ones(len(rows), dtype=np.int8)
    return coo_matrix((data, (rows, cols)), shape=(m, m)).tocsr()


def facet_components(F: np.ndarray, uE2E: List[List[int]]) -> Tuple[int, np.ndarray]:
    """
    Label faces by connected component (adjacency through any shared edge).

    Returns:
        n_components: number of components
        C: (m,) component index per face
    """
    m = len(F)
    if m == 0:
        return 0, np.zeros(0, dtype=np.int64)
    graph = _face_graph(m, uE2E, manifold_only=False)
    n_components, C = connected_components(graph, directed=False)
    return int(n_components), C.astype(np.int64)


def extract_manifold_patches(F: np.ndarray, uE2E: List[List[int]]) -> Tuple[int, np.ndarray]:
    """
    Group faces into maximal sets connected through manifold edges only.

    Returns:
        n_patches: number of patches
        P: (m,) patch index per face
    """
    m = len(F)
    if m == 0:
        return 0, np.zeros(0, dtype=np.int64)
    graph = _face_graph(m, uE2E, manifold_only=True)
    n_patches, P = connected_components(graph, directed=False)
    return int(n_patches), P.astype(np.int64)


def extract_non_manifold_edge_curves(uE: np.ndarray, uE2E: List[List[int]]) -> List[List[int]]:
    """
    Chain non-manifold unique edges into intersection curves.

    A curve continues through a vertex only when exactly two non-manifold
    edges meet there; closed loops are returned once, starting anywhere.

    Args:
        uE: (n_uE, 2) unique edges
        uE2E: half-edges per unique edge

    Returns:
        list of curves, each a list of unique edge indices in chain order
    """
    nm_edges = [u for u, g in enumerate(uE2E) if len(g) > 2]

    vertex_edges = {}
    for u in nm_edges:
        for v in (int(uE[u, 0]), int(uE[u, 1])):
            vertex_edges.setdefault(v, []).append(u)

    def other_end(u, v):
        s, d = int(uE[u, 0]), int(uE[u, 1])
        return d if v == s else s

    visited = set()
    curves = []
    for u in nm_edges:
        if u in visited:
            continue
        visited.add(u)
        curve = deque([u])
        for v, push in ((int(uE[u, 1]), curve.append), (int(uE[u, 0]), curve.appendleft)):
            prev = u
            while len(vertex_edges[v]) == 2:
                a, b = vertex_edges[v]
                nxt = b if a == prev else a
                if nxt in visited:
                    break
                visited.add(nxt)
                push(nxt)
                v = other_end(nxt, v)
                prev = nxt
        curves.append(list(curve))

    return curves


def patch_labels(P: np.ndarray, labels: np.ndarray, n_patches: int) -> np.ndarray:
    """
    Per-patch label, requiring every face of a patch to share one label.

    Raises:
        InvalidTopologyError: if a patch mixes labels
    """
    P = np.asarray(P)
    labels = np.asarray(labels)
    result = np.full(n_patches, -1, dtype=np.int64)
    for fi in range(len(P)):
        p = P[fi]
        if result[p] == -1:
            result[p] = labels[fi]
        elif result[p] != labels[fi]:
            raise InvalidTopologyError(
                f"Patch {p} mixes labels {result[p]} and {labels[fi]} (face {fi}). "
                f"Faces of different input solids must meet only at non-manifold edges."
            )
    if np.any(result < 0):
        raise InvalidTopologyError(f"Patch {int(np.where(result < 0)[0][0])} has no faces")
    return result


# =============================================================================
# CONTRACT-AWARE WRAPPER
# =============================================================================

def build_topology_from_arrangement(arr: dict) -> dict:
    """
    Build the full combinatorial decomposition of an arrangement.

    Args:
        arr: Contract-compliant arrangement dict with F and labels

    Returns:
        dict with:
            uE, uE2E: unique edges and their half-edges
            n_patches, P: manifold patches
            patch_labels: label per patch
            curves: intersection curves

    Raises:
        InvalidTopologyError: odd-degree edge or mixed-label patch
    """
    F = arr['F']
    _, uE, _, uE2E = unique_edge_map(F)
    check_even_degree(uE2E, uE)

    n_patches, P = extract_manifold_patches(F, uE2E)
    labels_per_patch = patch_labels(P, arr['labels'], n_patches)
    curves = extract_non_manifold_edge_curves(uE, uE2E)

    logger.debug("%s: %d faces, %d unique edges, %d patches, %d curves",
                 arr.get('name', 'arrangement'), len(F), len(uE), n_patches, len(curves))

    return {
        'uE': uE,
        'uE2E': uE2E,
        'n_patches': n_patches,
        'P': P,
        'patch_labels': labels_per_patch,
        'curves': curves,
    }
