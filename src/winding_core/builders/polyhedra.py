"""
Closed Triangulated Polyhedra and Test Arrangements
===================================================

Convex solids with outward-oriented triangles, and arrangements built
from them for the propagation tests.

SOLIDS (V, F):
    - Box (V=8, F=12)
    - Tetrahedron (V=4, F=4)
    - Octahedron (V=6, F=8)
    - Icosahedron (V=12, F=20)

ARRANGEMENTS (contract dicts, see spec/structures.py):
    - nested boxes / icosahedra       two components, one inside the other
    - disjoint boxes                  two components side by side
    - edge-touching boxes             two labels meeting along one edge
    - flipped tetrahedra              two labels, one face flipped
    - edge wedges                     three solids around one degree-6 edge
    - nested wedges                   one solid inside another, sharing an edge

Parts are merged by vertex coordinates, so solids that touch share their
vertices and edges.
"""

import numpy as np
from typing import Tuple, List

from scipy.spatial import ConvexHull

from ..spec.constants import VERTEX_ROUND
from ..spec.structures import create_arrangement


def orient_outward(V: np.ndarray, F: np.ndarray, center=None) -> np.ndarray:
    """
    Flip faces of a star-shaped solid so that normals point away from center.

    Args:
        V: (n, 3) vertices
        F: (m, 3) faces
        center: interior point (default: vertex centroid)

    Returns:
        (m, 3) reoriented faces
    """
    V = np.asarray(V, dtype=float)
    F = np.array(F, dtype=np.int64)
    if center is None:
        center = V.mean(axis=0)
    a, b, c = V[F[:, 0]], V[F[:, 1]], V[F[:, 2]]
    normals = np.cross(b - a, c - a)
    outward = np.einsum('ij,ij->i', normals, (a + b + c) / 3.0 - center)
    inward = outward < 0
    F[inward] = F[inward][:, [0, 2, 1]]
    return F


def _hull(points) -> Tuple[np.ndarray, np.ndarray]:
    """Triangulated convex hull of simplicial point sets."""
    V = np.asarray(points, dtype=float)
    hull = ConvexHull(V)
    return V, orient_outward(V, hull.simplices)


def build_box(lo=(0.0, 0.0, 0.0), hi=(1.0, 1.0, 1.0)) -> Tuple[np.ndarray, np.ndarray]:
    """
    Build an axis-aligned box.

    Corner index = 4·ix + 2·iy + iz. Each square side is split along the
    diagonal through its lowest-index corner.

    Returns:
        V: (8, 3), F: (12, 3)
    """
    lo = np.asarray(lo, dtype=float)
    hi = np.asarray(hi, dtype=float)
    V = np.array([[(lo, hi)[ix][0], (lo, hi)[iy][1], (lo, hi)[iz][2]]
                  for ix in (0, 1) for iy in (0, 1) for iz in (0, 1)])

    quads = [
        [0, 1, 3, 2], [4, 5, 7, 6],   # x = lo, hi
        [0, 1, 5, 4], [2, 3, 7, 6],   # y = lo, hi
        [0, 2, 6, 4], [1, 3, 7, 5],   # z = lo, hi
    ]
    F = []
    for a, b, c, d in quads:
        F.append([a, b, c])
        F.append([a, c, d])
    return V, orient_outward(V, F)


def build_tetrahedron(points=None) -> Tuple[np.ndarray, np.ndarray]:
    """
    Build a tetrahedron on 4 points (default: regular, centered at origin).

    Returns:
        V: (4, 3), F: (4, 3)
    """
    if points is None:
        points = [(1, 1, 1), (1, -1, -1), (-1, 1, -1), (-1, -1, 1)]
    V = np.asarray(points, dtype=float)
    if V.shape != (4, 3):
        raise ValueError(f"Tetrahedron needs 4 points in 3D, got shape {V.shape}")
    F = [[0, 1, 2], [0, 1, 3], [0, 2, 3], [1, 2, 3]]
    return V, orient_outward(V, F)


def build_octahedron(scale: float = 1.0, center=(0.0, 0.0, 0.0)) -> Tuple[np.ndarray, np.ndarray]:
    """Regular octahedron with vertices at center ± scale·e_i."""
    points = []
    for axis in range(3):
        for sign in (-1, 1):
            p = np.zeros(3)
            p[axis] = sign * scale
            points.append(p)
    return _hull(np.array(points) + np.asarray(center, dtype=float))


def build_icosahedron(scale: float = 1.0, center=(0.0, 0.0, 0.0)) -> Tuple[np.ndarray, np.ndarray]:
    """Regular icosahedron: cyclic permutations of (0, ±1, ±φ), times scale."""
    phi = (1 + np.sqrt(5)) / 2
    points = []
    for s1 in (-1, 1):
        for s2 in (-1, 1):
            points.append((0, s1, s2 * phi))
            points.append((s1, s2 * phi, 0))
            points.append((s2 * phi, 0, s1))
    return _hull(np.array(points, dtype=float) * scale + np.asarray(center, dtype=float))


# =============================================================================
# MERGING
# =============================================================================

def merge_parts(parts: List[Tuple[np.ndarray, np.ndarray, int]],
                name: str = "merged") -> dict:
    """
    Merge solids into one arrangement, identifying coincident vertices.

    Args:
        parts: list of (V, F, label)
        name: arrangement name

    Returns:
        arrangement dict with V, F, labels
    """
    v_to_idx = {}
    vertices, faces, labels = [], [], []
    for V, F, label in parts:
        local = []
        for v in np.asarray(V, dtype=float):
            key = tuple(round(float(x), VERTEX_ROUND) for x in v)
            if key not in v_to_idx:
                v_to_idx[key] = len(vertices)
                vertices.append(v)
            local.append(v_to_idx[key])
        local = np.asarray(local, dtype=np.int64)
        faces.append(local[np.asarray(F, dtype=np.int64)])
        labels.append(np.full(len(F), label, dtype=np.int64))

    return create_arrangement(np.array(vertices), np.concatenate(faces),
                              np.concatenate(labels), name=name)


# =============================================================================
# TEST ARRANGEMENTS
# =============================================================================

def build_nested_boxes(inner_label: int = 0) -> dict:
    """Box [-1, 1]³ strictly inside box [-2, 2]³ (label 0)."""
    outer = build_box((-2, -2, -2), (2, 2, 2))
    inner = build_box((-1, -1, -1), (1, 1, 1))
    return merge_parts([(*outer, 0), (*inner, inner_label)], name="nested_boxes")


def build_nested_icosahedra(inner_label: int = 0) -> dict:
    """Icosahedron of scale 0.5 strictly inside one of scale 2 (label 0)."""
    outer = build_icosahedron(scale=2.0)
    inner = build_icosahedron(scale=0.5, center=(0.1, -0.05, 0.02))
    return merge_parts([(*outer, 0), (*inner, inner_label)], name="nested_icosahedra")


def build_disjoint_boxes() -> dict:
    """Two unit boxes side by side with a gap, labels 0 and 1."""
    a = build_box((0, 0, 0), (1, 1, 1))
    b = build_box((2, 0, 0), (3, 1, 1))
    return merge_parts([(*a, 0), (*b, 1)], name="disjoint_boxes")


def build_edge_touching_boxes(second_label: int = 1) -> dict:
    """
    Box [0,1]³ (label 0) and box [1,2]×[1,2]×[0,1] (label second_label).

    They share only the vertical edge (1,1,0)-(1,1,1), a non-manifold edge
    of degree 4 and the single intersection curve of the arrangement.
    """
    a = build_box((0, 0, 0), (1, 1, 1))
    b = build_box((1, 1, 0), (2, 2, 1))
    return merge_parts([(*a, 0), (*b, second_label)], name="edge_touching_boxes")


def build_flipped_tetrahedra() -> dict:
    """
    Two tetrahedra sharing edge p=(0,0,0), q=(0,0,1), labels 0 and 1.

    One face of the second tetrahedron at the shared edge is flipped, so
    label 1 no longer bounds a volume: the shared edge still has degree 4,
    but going once around it cannot return to the starting winding vector.
    """
    p, q = (0, 0, 0), (0, 0, 1)
    Va, Fa = build_tetrahedron([p, q, (1, 0, 0.5), (0, 1, 0.5)])
    Vb, Fb = build_tetrahedron([p, q, (-1, 0, 0.5), (0, -1, 0.5)])

    # Flip the face through p, q and (-1, 0, 0.5)
    flip = np.where(np.all(np.isin(Fb, [0, 1, 2]), axis=1))[0]
    Fb = Fb.copy()
    Fb[flip] = Fb[flip][:, [0, 2, 1]]

    return merge_parts([(Va, Fa, 0), (Vb, Fb, 1)], name="flipped_tetrahedra")



def _edge_wedge(radius: float, start_deg: float, stop_deg: float) -> Tuple[np.ndarray, np.ndarray]:
    """Tetrahedron on edge p=(0,0,0), q=(0,0,1) spanning [start, stop] degrees about z."""
    apexes = [(radius * np.cos(np.radians(t)), radius * np.sin(np.radians(t)), 0.5)
              for t in (start_deg, stop_deg)]
    return build_tetrahedron([(0, 0, 0), (0, 0, 1), *apexes])


def build_edge_wedges(labels=(0, 1, 2)) -> dict:
    """
    Three tetrahedra around the edge p=(0,0,0), q=(0,0,1).

    They span 0-100, 120-220 and 240-340 degrees about z, so pq is a
    non-manifold edge of degree 6 and the only intersection curve.
    """
    spans = [(0, 100), (120, 220), (240, 340)]
    parts = [(*_edge_wedge(1.0, *span), label) for span, label in zip(spans, labels)]
    return merge_parts(parts, name="edge_wedges")


def build_nested_wedges(inner_label: int = 0) -> dict:
    """
    Tetrahedron of radius 1 spanning 30-60 degrees inside one of radius 2
    spanning 0-90 degrees (label 0).

    Both contain the edge p=(0,0,0), q=(0,0,1); the inner apexes lie
    strictly inside the outer solid. The arrangement is one facet
    component, so the inner solid is only reached across pq.
    """
    outer = _edge_wedge(2.0, 0, 90)
    inner = _edge_wedge(1.0, 30, 60)
    return merge_parts([(*outer, 0), (*inner, inner_label)], name="nested_wedges")


# Self-test
if __name__ == "__main__":
    print("=" * 60)
    print("POLYHEDRA CONSTRUCTION")
    print("=" * 60)

    for name, builder in [("Box", build_box),
                          ("Tetrahedron", build_tetrahedron),
                          ("Octahedron", build_octahedron),
                          ("Icosahedron", build_icosahedron)]:
        V, F = builder()
        chi = len(V) - 3 * len(F) // 2 + len(F)
        print(f"\n{name}: V={len(V)}, F={len(F)}, χ={chi}")
